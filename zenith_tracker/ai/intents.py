# zenith_tracker/ai/intents.py
"""Deterministic answers to common money questions.

Questions are matched against an ordered list of keyword rules. The first
matching rule wins, so overlapping phrasings resolve by position in
``_RULES`` rather than by how specific they are. Every figure in a fact
string is read from the :class:`Snapshot`; nothing is recomputed here.
"""
from __future__ import annotations

import random
import re
from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional, Sequence

from zenith_tracker.core.models import Snapshot

DEFAULT_CURRENCY = "₹"
LISTING_LIMIT = 5

NO_DATA_MESSAGE = (
    "📝 No expense data yet. Add some transactions first to get personalized insights!"
)
MODEL_NOT_AVAILABLE_MESSAGE = "❌ Model not loaded! Please download the LLM model first."

SMALL_TALK_PATTERNS = [
    re.compile(p, re.IGNORECASE)
    for p in (
        r"^h+i+\s*$",
        r"^h+e+l+o+\s*$",
        r"^hey\s*$",
        r"^good\s*(morning|evening|afternoon|night)",
        r"^thanks?\s*(you)?\s*$",
        r"^ok\s*$",
        r"^okay\s*$",
        r"^bye\s*$",
        r"^how are you",
        r"^what('s| is) up",
        r"^sup\s*$",
        r"^yo\s*$",
    )
]

SMALL_TALK_REPLIES = (
    "Hey! 👋 Ask me anything about your spending, like totals, recurring purchases, or category breakdowns.",
    "Hi there! I'm your financial coach. Ask me about your expenses and I'll give precise insights.",
    "Hello! 💰 Try asking: 'What did I spend this month?' or 'Which category costs most?'",
)


def is_small_talk(text: str) -> bool:
    stripped = (text or "").strip()
    return any(p.match(stripped) for p in SMALL_TALK_PATTERNS)


def pick_small_talk_reply(rng: random.Random = None) -> str:
    return (rng or random).choice(SMALL_TALK_REPLIES)


# -----------------------------------------------------------------------------
# Formatting helpers
# -----------------------------------------------------------------------------

def format_amount(value: float) -> str:
    """Render a snapshot figure without trailing zeros (``1000``, ``12.5``)."""
    text = f"{value:.2f}"
    return text.rstrip("0").rstrip(".") if "." in text else text


def category_lines(snapshot: Snapshot, currency: str = DEFAULT_CURRENCY) -> str:
    if not snapshot.categories:
        return "None recorded"
    return "\n".join(
        f"  • {c.category.value}: {currency}{format_amount(c.amount)} ({c.count} transactions)"
        for c in snapshot.categories[:LISTING_LIMIT]
    )


def recurring_lines(snapshot: Snapshot, currency: str = DEFAULT_CURRENCY) -> str:
    if not snapshot.recurring:
        return "No recurring purchases detected"
    return "\n".join(
        f'  • "{r.name}" [{r.category.value}] - {r.count}x, {currency}{format_amount(r.total)} total'
        for r in snapshot.recurring[:LISTING_LIMIT]
    )


# -----------------------------------------------------------------------------
# Intent rules
# -----------------------------------------------------------------------------

class Intent(str, Enum):
    TOTAL_WITH_SCOPE = "total_with_scope"
    TOTAL = "total"
    RECURRING = "recurring"
    AVERAGE = "average"
    CATEGORIES = "categories"
    COUNT = "count"
    CURRENT_MONTH = "current_month"


@dataclass(frozen=True)
class DirectAnswer:
    intent: Intent
    text: str


_SPEND_WORDS = ("total", "spent", "spend", "how much")
_SCOPE_WORDS = ("month", "30", "last", "overall", "this")
_RECURRING_WORDS = ("recurring", "repeat", "regular", "subscription")
_AVERAGE_WORDS = ("average", "avg", "mean")
_CATEGORY_WORDS = ("categor", "most", "top", "breakdown", "where")
_COUNT_NOUNS = ("transaction", "purchase", "expense")
_MONTH_WORDS = ("this month", "current month")


def _has_any(q: str, words: Sequence[str]) -> bool:
    return any(w in q for w in words)


@dataclass(frozen=True)
class _Rule:
    intent: Intent
    matches: Callable[[str], bool]
    render: Callable[[Snapshot, str], str]


def _render_recurring(s: Snapshot, cur: str) -> str:
    if not s.recurring:
        return "DIRECT ANSWER: No recurring purchases detected in the last 90 days."
    return f"DIRECT ANSWER: Recurring purchases:\n{recurring_lines(s, cur)}"


_RULES: List[_Rule] = [
    _Rule(
        Intent.TOTAL_WITH_SCOPE,
        lambda q: _has_any(q, _SPEND_WORDS) and _has_any(q, _SCOPE_WORDS),
        lambda s, cur: (
            f"DIRECT ANSWER: Total spending in the last 30 days is exactly "
            f"{cur}{format_amount(s.last_30_days.total)} across {s.last_30_days.count} transactions."
        ),
    ),
    _Rule(
        Intent.TOTAL,
        lambda q: _has_any(q, _SPEND_WORDS),
        lambda s, cur: (
            f"DIRECT ANSWER: Total spending in the last 30 days is "
            f"{cur}{format_amount(s.last_30_days.total)}."
        ),
    ),
    _Rule(Intent.RECURRING, lambda q: _has_any(q, _RECURRING_WORDS), _render_recurring),
    _Rule(
        Intent.AVERAGE,
        lambda q: _has_any(q, _AVERAGE_WORDS),
        lambda s, cur: (
            f"DIRECT ANSWER: Average spending per transaction is "
            f"{cur}{format_amount(s.last_30_days.avg)}."
        ),
    ),
    _Rule(
        Intent.CATEGORIES,
        lambda q: _has_any(q, _CATEGORY_WORDS),
        lambda s, cur: f"DIRECT ANSWER: Spending by category:\n{category_lines(s, cur)}",
    ),
    _Rule(
        Intent.COUNT,
        lambda q: "how many" in q and _has_any(q, _COUNT_NOUNS),
        lambda s, cur: (
            f"DIRECT ANSWER: You have {s.last_30_days.count} transactions in the last 30 days."
        ),
    ),
    _Rule(
        Intent.CURRENT_MONTH,
        lambda q: _has_any(q, _MONTH_WORDS),
        lambda s, cur: (
            f"DIRECT ANSWER: Spending this calendar month is "
            f"{cur}{format_amount(s.monthly_total)}."
        ),
    ),
]


def classify_intent(
    question: str,
    snapshot: Snapshot,
    currency: str = DEFAULT_CURRENCY,
) -> Optional[DirectAnswer]:
    """Return the fact for the first matching rule, or ``None``."""
    q = (question or "").lower()
    for rule in _RULES:
        if rule.matches(q):
            return DirectAnswer(rule.intent, rule.render(snapshot, currency))
    return None


def resolve(
    question: str,
    get_snapshot: Callable[[], Snapshot],
    currency: str = DEFAULT_CURRENCY,
    rng: random.Random = None,
) -> Optional[str]:
    """Answer without a language model when possible.

    Small talk is answered before ``get_snapshot`` is called. An empty
    snapshot yields :data:`NO_DATA_MESSAGE`. Otherwise the direct answer text
    is returned, or ``None`` when no rule matched.
    """
    if is_small_talk(question):
        return pick_small_talk_reply(rng)
    snapshot = get_snapshot()
    if snapshot.transaction_count == 0:
        return NO_DATA_MESSAGE
    answer = classify_intent(question, snapshot, currency)
    return answer.text if answer else None


# -----------------------------------------------------------------------------
# Post-generation guard
# -----------------------------------------------------------------------------

def _arithmetic_pattern(currency: str) -> re.Pattern:
    cur = re.escape(currency)
    return re.compile(
        rf"{cur}[\d,]+\s*[×x*+\-÷/]\s*\d+\s*[=≈]\s*{cur}[\d,]+",
        re.IGNORECASE,
    )


def contains_invented_arithmetic(text: str, currency: str = DEFAULT_CURRENCY) -> bool:
    """True for generated text such as ``₹500 x 3 = ₹1500``."""
    return bool(_arithmetic_pattern(currency).search(text or ""))
