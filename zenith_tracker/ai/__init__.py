import json
import os
import time
import logging
import threading
import urllib.request
from dataclasses import dataclass
from typing import Callable, Iterator, List, Optional, Protocol

from huggingface_hub import InferenceClient

from zenith_tracker.ai.intents import (
    DEFAULT_CURRENCY,
    MODEL_NOT_AVAILABLE_MESSAGE,
    NO_DATA_MESSAGE,
    classify_intent,
    contains_invented_arithmetic,
    format_amount,
    is_small_talk,
    pick_small_talk_reply,
)
from zenith_tracker.ai.prompts import build_system_prompt, build_tip_prompt, build_user_prompt
from zenith_tracker.ai.streaming import (
    DEFAULT_YIELD_EVERY,
    Generation,
    GenerationCancelled,
    YieldingStream,
)
from zenith_tracker.core.models import Snapshot

# -----------------------------------------------------------------------------
# Configure basic debug logging (caller can override)

# -----------------------------------------------------------------------------
logging.basicConfig(level=os.getenv("ZENITH_LOG_LEVEL", "INFO").upper())
logger = logging.getLogger(__name__)

_OLLAMA_URL = "http://localhost:11434/api/chat"
_OPENAI_URL = "https://api.openai.com/v1/chat/completions"


class LLMProvider(Protocol):
    """A minimal protocol all concrete providers must implement."""

    def stream(self, messages: List[dict], **options) -> Iterator[str]:
        """Yield reply fragments for a list-of-dicts chat history."""


@dataclass
class LLMClient:
    """Simple client that delegates chat requests to an LLM provider."""
    provider: LLMProvider | None = None

    def __post_init__(self) -> None:
        if self.provider is None:
            self.provider = get_provider_from_env()

    def generate_stream(self, prompt: str, system_prompt: str | None = None, **options) -> Generation:
        messages = []
        if system_prompt:
            messages.append({"role": "system", "content": system_prompt})
        messages.append({"role": "user", "content": prompt})
        return Generation(self.provider.stream(messages, **options))


# -----------------------------------------------------------------------------
# Hugging Face Inference API provider
# -----------------------------------------------------------------------------

@dataclass
class HuggingFaceProvider:
    model: str
    token: str | None = None

    def __post_init__(self) -> None:
        self._client = InferenceClient(provider="cerebras", api_key=self.token)

    def stream(self, messages: List[dict], max_tokens=None, temperature=None, top_p=None) -> Iterator[str]:
        chunks = self._client.chat_completion(
            messages=messages,
            model=self.model,
            stream=True,
            max_tokens=max_tokens,
            temperature=temperature,
            top_p=top_p,
        )
        for chunk in chunks:
            if not chunk.choices:
                continue
            content = chunk.choices[0].delta.content
            if content:
                yield content


# -----------------------------------------------------------------------------
# OpenAI Chat Completions provider (server-sent events)
# -----------------------------------------------------------------------------

@dataclass
class OpenAIProvider:
    model: str
    api_key: str
    url: str = _OPENAI_URL

    def stream(self, messages: List[dict], max_tokens=None, temperature=None, top_p=None) -> Iterator[str]:
        payload = {"model": self.model, "messages": messages, "stream": True}
        for name, value in (("max_tokens", max_tokens), ("temperature", temperature), ("top_p", top_p)):
            if value is not None:
                payload[name] = value
        data = json.dumps(payload).encode()
        req = urllib.request.Request(self.url, data=data, method="POST")
        req.add_header("Content-Type", "application/json")
        req.add_header("Authorization", f"Bearer {self.api_key}")
        with urllib.request.urlopen(req) as resp:
            for raw in resp:
                line = raw.decode().strip()
                if not line.startswith("data:"):
                    continue
                body = line[5:].strip()
                if body == "[DONE]":
                    break
                choices = json.loads(body).get("choices") or []
                if not choices:
                    continue
                content = (choices[0].get("delta") or {}).get("content")
                if content:
                    yield content


# -----------------------------------------------------------------------------
# Ollama provider with robust parsing and debug logging
# -----------------------------------------------------------------------------

@dataclass
class OllamaProvider:
    model: str
    url: str = _OLLAMA_URL

    def _post_stream(self, payload: dict) -> Iterator[dict]:
        """Low-level helper: POST JSON and yield each line-delimited JSON reply."""
        data = json.dumps(payload).encode()
        logger.debug("Ollama ▶ POST %s – payload: %s", self.url, payload)
        req = urllib.request.Request(self.url, data=data, method="POST")
        req.add_header("Content-Type", "application/json")

        with urllib.request.urlopen(req) as resp:
            for raw in resp:
                line = raw.decode().strip()
                if not line:
                    continue
                logger.debug("Ollama ◀ %s", line)
                yield json.loads(line)

    def stream(self, messages: List[dict], max_tokens=None, temperature=None, top_p=None) -> Iterator[str]:
        options = {}
        if max_tokens is not None:
            options["num_predict"] = max_tokens
        if temperature is not None:
            options["temperature"] = temperature
        if top_p is not None:
            options["top_p"] = top_p
        payload = {"model": self.model, "messages": messages, "stream": True, "options": options}

        for chunk in self._post_stream(payload):
            # Each line is {'message': {'role': 'assistant', 'content': str}, 'done': bool};
            # older servers send 'message' as a bare string.
            msg = chunk.get("message", "")
            if isinstance(msg, dict):
                msg = msg.get("content", "")
            if not isinstance(msg, str):
                raise RuntimeError(f"Unexpected Ollama response format: {chunk}")
            if msg:
                yield msg
            if chunk.get("done"):
                break


# -----------------------------------------------------------------------------
# Helper utilities
# -----------------------------------------------------------------------------

def get_provider_from_env() -> LLMProvider:
    provider = os.environ.get("ZENITH_LLM_PROVIDER", "huggingface").lower()

    if provider == "openai":
        api_key = os.environ.get("OPENAI_API_KEY")
        if not api_key:
            raise RuntimeError("OPENAI_API_KEY not set")
        model = os.environ.get("ZENITH_LLM_MODEL", "gpt-4o-mini")
        return OpenAIProvider(model=model, api_key=api_key)

    if provider == "ollama":
        model = os.environ.get("ZENITH_LLM_MODEL", "phi3:mini")
        url = os.environ.get("OLLAMA_URL", _OLLAMA_URL)
        return OllamaProvider(model=model, url=url)

    # Default → Hugging Face
    token = os.environ.get("HF_API_TOKEN") or os.environ.get("HF_TOKEN")
    if not token:
        raise RuntimeError("HF_API_TOKEN not set")
    model = os.environ.get("ZENITH_LLM_MODEL", "Qwen/Qwen3-32B")
    return HuggingFaceProvider(model=model, token=token)


# -----------------------------------------------------------------------------
# Coach: grounded question answering over the snapshot
# -----------------------------------------------------------------------------

def _summary_sentence(snapshot: Snapshot, currency: str, with_average: bool = False) -> str:
    last30 = snapshot.last_30_days
    text = (
        f"💰 Your total spending in the last 30 days is {currency}{format_amount(last30.total)} "
        f"across {last30.count} transactions"
    )
    if with_average:
        text += f", averaging {currency}{format_amount(last30.avg)} each"
    return text + "."


class FinanceCoach:
    """Answers money questions from verified snapshot figures.

    The language model only phrases the answer: the numbers it sees are
    precomputed, a matching rule injects a ``DIRECT ANSWER`` line, and replies
    that do their own currency arithmetic are replaced with a fact sentence.
    """

    def __init__(
        self,
        store,
        cache,
        client: LLMClient | None = None,
        model_available: Callable[[], bool] | None = None,
        currency: str = DEFAULT_CURRENCY,
        max_tokens: int = 150,
        temperature: float = 0.1,
        top_p: float = 0.9,
        yield_every: int = DEFAULT_YIELD_EVERY,
        recent_transactions: int = 10,
        pause: Callable[[], None] | None = None,
    ):
        self.store = store
        self.cache = cache
        self.client = client
        self._model_available = model_available or (lambda: self.client is not None)
        self.currency = currency
        self.max_tokens = max_tokens
        self.temperature = temperature
        self.top_p = top_p
        self.yield_every = yield_every
        self.recent_transactions = recent_transactions
        self._pause = pause or (lambda: time.sleep(0))

    def is_model_loaded(self) -> bool:
        try:
            return bool(self._model_available())
        except Exception:
            logger.warning("Model availability check failed", exc_info=True)
            return False

    def refresh_data(self) -> None:
        """Drop the cached snapshot after the store changed."""
        self.cache.invalidate()

    def get_advice(
        self,
        question: str,
        on_token: Callable[[str], None] | None = None,
        cancel: threading.Event | None = None,
    ) -> str:
        if not self.is_model_loaded():
            return _emit(MODEL_NOT_AVAILABLE_MESSAGE, on_token)

        if is_small_talk(question):
            return _emit(pick_small_talk_reply(), on_token)

        try:
            self._pause()
            snapshot = self.cache.get_snapshot()
            if snapshot.transaction_count == 0:
                return _emit(NO_DATA_MESSAGE, on_token)

            recent = self.store.get_all()[: self.recent_transactions]
            answer = classify_intent(question, snapshot, self.currency)
            fact = answer.text if answer else None
            if answer:
                logger.debug("Injecting %s fact", answer.intent.value)

            prompt = build_user_prompt(question, snapshot, recent, fact, self.currency)
            self._pause()
            generation = self.client.generate_stream(
                prompt,
                build_system_prompt(self.currency),
                max_tokens=self.max_tokens,
                temperature=self.temperature,
                top_p=self.top_p,
            )
            try:
                self._consume(generation, on_token, cancel)
            except GenerationCancelled:
                logger.info("Advice stream cancelled; returning fact fallback")
                if fact:
                    return fact.removeprefix("DIRECT ANSWER: ")
                return _summary_sentence(snapshot, self.currency)

            cleaned = generation.result.strip()
            if not cleaned:
                return _summary_sentence(snapshot, self.currency)

            if contains_invented_arithmetic(cleaned, self.currency):
                logger.warning("Discarding generated reply with inline arithmetic: %r", cleaned)
                return _summary_sentence(snapshot, self.currency, with_average=True)

            return cleaned

        except Exception as exc:
            logger.error("Error in get_advice: %s", exc, exc_info=True)
            return f"⚠️ AI Error: {exc}. Please try again."

    def get_tip(self) -> str:
        if not self.is_model_loaded():
            return "💡 Download the model to get personalized tips!"

        try:
            self._pause()
            snapshot = self.cache.get_snapshot()
            if snapshot.transaction_count == 0:
                return "💡 Start logging expenses to receive personalized tips."

            generation = self.client.generate_stream(
                build_tip_prompt(snapshot, self.currency),
                max_tokens=60,
                temperature=0.2,
            )
            self._consume(generation)
            trimmed = generation.result.strip()
            if trimmed:
                return trimmed
            top = snapshot.categories[0] if snapshot.categories else None
            name = top.category.value if top else "unknown"
            amount = format_amount(top.amount) if top else "0"
            return (
                f"💡 Your top spending is {name} at {self.currency}{amount}. "
                "Consider setting a weekly budget."
            )
        except Exception as exc:
            logger.error("Error in get_tip: %s", exc, exc_info=True)
            return "💡 Keep tracking your expenses consistently for better insights."

    def _consume(self, generation: Generation, on_token=None, cancel=None) -> None:
        stream = YieldingStream(generation, every=self.yield_every, pause=self._pause, cancel=cancel)
        for token in stream:
            if on_token:
                on_token(token)


def _emit(message: str, on_token: Callable[[str], None] | None) -> str:
    if on_token:
        on_token(message)
    return message
