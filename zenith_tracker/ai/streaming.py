# zenith_tracker/ai/streaming.py
from __future__ import annotations

import threading
import time
from typing import Callable, Iterable, Iterator, List, Optional

DEFAULT_YIELD_EVERY = 8


class Generation:
    """Lazy token sequence from a provider.

    Iterate to receive tokens as they arrive; once the sequence is exhausted
    ``result`` holds the assembled text.
    """

    def __init__(self, tokens: Iterable[str]):
        self._tokens = iter(tokens)
        self._parts: List[str] = []
        self._done = False

    def __iter__(self) -> Iterator[str]:
        return self

    def __next__(self) -> str:
        try:
            token = next(self._tokens)
        except StopIteration:
            self._done = True
            raise
        self._parts.append(token)
        return token

    @property
    def done(self) -> bool:
        return self._done

    @property
    def result(self) -> str:
        if not self._done:
            raise RuntimeError("Generation has not finished streaming")
        return "".join(self._parts)

    def close(self) -> None:
        close = getattr(self._tokens, "close", None)
        if close is not None:
            close()


class GenerationCancelled(Exception):
    """The consumer asked the stream to stop before it finished."""


class YieldingStream:
    """Wrap a token iterator, handing control back every ``every`` tokens.

    ``pause`` runs after each batch (by default ``time.sleep(0)``, which lets
    other threads run). Setting ``cancel`` stops the stream at the next token
    with :class:`GenerationCancelled` and closes the underlying generation.
    """

    def __init__(
        self,
        tokens: Iterable[str],
        every: int = DEFAULT_YIELD_EVERY,
        pause: Optional[Callable[[], None]] = None,
        cancel: Optional[threading.Event] = None,
    ):
        if every < 1:
            raise ValueError("every must be at least 1")
        self._tokens = tokens
        self._iter = iter(tokens)
        self.every = every
        self._pause = pause or (lambda: time.sleep(0))
        self._cancel = cancel
        self._counter = 0

    def __iter__(self) -> Iterator[str]:
        return self

    def __next__(self) -> str:
        if self._cancel is not None and self._cancel.is_set():
            self.close()
            raise GenerationCancelled()
        token = next(self._iter)
        self._counter += 1
        if self._counter >= self.every:
            self._counter = 0
            self._pause()
        return token

    def close(self) -> None:
        close = getattr(self._tokens, "close", None)
        if close is not None:
            close()
