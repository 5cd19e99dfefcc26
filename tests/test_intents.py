import random

import pytest

from zenith_tracker.ai.intents import (
    NO_DATA_MESSAGE,
    SMALL_TALK_REPLIES,
    DirectAnswer,
    Intent,
    classify_intent,
    contains_invented_arithmetic,
    format_amount,
    is_small_talk,
    pick_small_talk_reply,
    resolve,
)
from zenith_tracker.core.models import (
    Category,
    CategoryTotal,
    RecurringGroup,
    Snapshot,
    Summary,
)


def _snapshot(recurring=(), categories=None, count=5):
    if categories is None:
        categories = (
            CategoryTotal(Category.FOOD, 600.0, 3),
            CategoryTotal(Category.TRANSPORT, 400.0, 2),
        )
    return Snapshot(
        last_30_days=Summary(total=1000.0, count=count, avg=200.0),
        monthly_total=1500.0,
        categories=tuple(categories),
        recurring=tuple(recurring),
        transaction_count=count,
    )


@pytest.mark.parametrize(
    "text",
    ["hi", "HI", "  Hello  ", "hiii", "hey", "thanks", "thank you", "Good morning!",
     "ok", "okay", "bye", "How are you doing?", "what's up", "What is up", "sup", "yo"],
)
def test_small_talk_detected(text):
    assert is_small_talk(text)


@pytest.mark.parametrize(
    "text",
    ["hi, how much did I spend?", "hello world", "okay so what's my total", "", "thanks for the breakdown of food"],
)
def test_questions_are_not_small_talk(text):
    assert not is_small_talk(text)


def test_small_talk_reply_is_canned():
    assert pick_small_talk_reply(random.Random(3)) in SMALL_TALK_REPLIES


def test_total_with_scope_beats_this_month_wording():
    answer = classify_intent("What's my total spending this month?", _snapshot())
    assert answer.intent is Intent.TOTAL_WITH_SCOPE
    assert answer.text == (
        "DIRECT ANSWER: Total spending in the last 30 days is exactly ₹1000 across 5 transactions."
    )
    assert "1500" not in answer.text


def test_spend_without_scope_gives_bare_total():
    answer = classify_intent("How much did I spend on food?", _snapshot())
    assert answer == DirectAnswer(Intent.TOTAL, "DIRECT ANSWER: Total spending in the last 30 days is ₹1000.")


def test_total_by_category_resolves_by_priority():
    answer = classify_intent("what's my total spending by category", _snapshot())
    assert answer.intent is Intent.TOTAL


def test_recurring_facts():
    none = classify_intent("Any subscriptions?", _snapshot())
    assert none.intent is Intent.RECURRING
    assert none.text == "DIRECT ANSWER: No recurring purchases detected in the last 90 days."

    snap = _snapshot(recurring=[RecurringGroup("starbucks", Category.FOOD, 2, 420.0, 210.0)])
    some = classify_intent("show recurring purchases", snap)
    assert some.text == 'DIRECT ANSWER: Recurring purchases:\n  • "starbucks" [Food] - 2x, ₹420 total'


def test_average_fact():
    answer = classify_intent("What is my average purchase?", _snapshot())
    assert answer.intent is Intent.AVERAGE
    assert answer.text.endswith("₹200.")


def test_category_fact_lists_top_five():
    cats = [CategoryTotal(c, 100.0 - i * 10, 1) for i, c in enumerate(list(Category)[:6])]
    answer = classify_intent("Which category costs the most?", _snapshot(categories=cats))
    assert answer.intent is Intent.CATEGORIES
    lines = answer.text.splitlines()
    assert lines[0] == "DIRECT ANSWER: Spending by category:"
    assert lines[1] == "  • Food: ₹100 (1 transactions)"
    assert len(lines) == 6


def test_count_fact():
    answer = classify_intent("How many transactions do I have?", _snapshot())
    assert answer == DirectAnswer(Intent.COUNT, "DIRECT ANSWER: You have 5 transactions in the last 30 days.")


def test_current_month_fact():
    answer = classify_intent("Anything new for this month?", _snapshot())
    assert answer == DirectAnswer(Intent.CURRENT_MONTH, "DIRECT ANSWER: Spending this calendar month is ₹1500.")


def test_unmatched_question_injects_nothing():
    assert classify_intent("Should I buy a car?", _snapshot()) is None


def test_currency_symbol_is_configurable():
    answer = classify_intent("how much overall", _snapshot(), currency="$")
    assert "$1000" in answer.text


def test_resolve_small_talk_skips_snapshot():
    def explode():
        raise AssertionError("snapshot should not be built for small talk")

    assert resolve("hi", explode) in SMALL_TALK_REPLIES


def test_resolve_empty_data_and_direct_answers():
    empty = _snapshot(categories=(), count=0)
    assert resolve("how much did I spend?", lambda: empty) == NO_DATA_MESSAGE
    assert resolve("average?", lambda: _snapshot()).startswith("DIRECT ANSWER")
    assert resolve("Should I buy a car?", lambda: _snapshot()) is None


@pytest.mark.parametrize(
    "text,currency,expected",
    [
        ("That's ₹500 x 3 = ₹1500 per quarter.", "₹", True),
        ("₹1,200 + 300 = ₹1,500", "₹", True),
        ("₹100 × 2 ≈ ₹200", "₹", True),
        ("You spent ₹1500 this month.", "₹", False),
        ("$500 * 3 = $1500", "$", True),
        ("Spent 500 x 3 = 1500", "₹", False),
    ],
)
def test_invented_arithmetic_guard(text, currency, expected):
    assert contains_invented_arithmetic(text, currency) is expected


def test_format_amount():
    assert format_amount(1000.0) == "1000"
    assert format_amount(12.5) == "12.5"
    assert format_amount(60.25) == "60.25"
    assert format_amount(0.0) == "0"
