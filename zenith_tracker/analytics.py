# zenith_tracker/analytics.py
"""Rolling-window aggregates over the full transaction set.

Every function walks the whole collection it is given; there is no index.
Callers that ask repeatedly should go through
:class:`zenith_tracker.cache.SnapshotCache`.
"""
from __future__ import annotations

from datetime import date, timedelta
from decimal import Decimal
from typing import Dict, Iterable, List, Optional, Sequence

from zenith_tracker.core.models import (
    CategoryTotal,
    HealthScore,
    Snapshot,
    Summary,
    Transaction,
    round_money,
    to_decimal,
)
from zenith_tracker.recurring import get_recurring

SUMMARY_WINDOW_DAYS = 30

HIGH_SPEND = 50000
ELEVATED_SPEND = 30000
MANY_PURCHASES = 60
DOMINANT_SHARE = 0.9
HEAVY_SHARE = 0.7


def in_window(tx: Transaction, today: date, days: int) -> bool:
    """True when ``tx.date`` is on or after ``today - days``."""
    return tx.date >= today - timedelta(days=days)


def get_summary(
    transactions: Iterable[Transaction],
    today: Optional[date] = None,
    days: int = SUMMARY_WINDOW_DAYS,
) -> Summary:
    """Total, count and average spend over the trailing window."""
    today = today or date.today()
    total = Decimal(0)
    count = 0
    for tx in transactions:
        if in_window(tx, today, days):
            total += to_decimal(tx.amount)
            count += 1
    avg = total / count if count else Decimal(0)
    return Summary(total=round_money(total), count=count, avg=round_money(avg))


def get_categories(
    transactions: Iterable[Transaction],
    today: Optional[date] = None,
    days: int = SUMMARY_WINDOW_DAYS,
) -> List[CategoryTotal]:
    """Spend per category over the trailing window, largest first.

    Categories without a matching transaction are left out. Equal amounts
    keep the order in which the categories were first seen.
    """
    today = today or date.today()
    totals: Dict = {}
    counts: Dict = {}
    for tx in transactions:
        if not in_window(tx, today, days):
            continue
        totals[tx.category] = totals.get(tx.category, Decimal(0)) + to_decimal(tx.amount)
        counts[tx.category] = counts.get(tx.category, 0) + 1
    rows = [
        CategoryTotal(category=cat, amount=round_money(amount), count=counts[cat])
        for cat, amount in totals.items()
    ]
    # sorted() is stable, ties stay in first-seen order
    return sorted(rows, key=lambda row: row.amount, reverse=True)


def get_current_month_total(
    transactions: Iterable[Transaction],
    today: Optional[date] = None,
) -> float:
    today = today or date.today()
    total = sum(
        (
            to_decimal(tx.amount)
            for tx in transactions
            if tx.date.year == today.year and tx.date.month == today.month
        ),
        Decimal(0),
    )
    return round_money(total)


def build_snapshot(
    transactions: Iterable[Transaction],
    today: Optional[date] = None,
) -> Snapshot:
    """Bundle every aggregate used to ground question answering."""
    txs = list(transactions)
    today = today or date.today()
    return Snapshot(
        last_30_days=get_summary(txs, today),
        monthly_total=get_current_month_total(txs, today),
        categories=tuple(get_categories(txs, today)),
        recurring=tuple(get_recurring(txs, today)),
        transaction_count=len(txs),
    )


def _health_label(score: int) -> str:
    if score >= 80:
        return "Excellent"
    if score >= 60:
        return "Good"
    if score >= 40:
        return "Needs Work"
    return "At Risk"


def get_health(
    summary: Summary,
    categories: Sequence[CategoryTotal],
    currency: str = "₹",
) -> HealthScore:
    """Score the trailing window from 100 down.

    Penalties: total above 50000 (-30) or 30000 (-15), more than 60
    purchases (-10), top category above 90% (-20) or 70% (-10) of the total.
    Bonuses of 5 each for at least 5 purchases and at least 4 categories,
    never past 100. Thresholds are strict, so a value equal to one does not
    trigger it.
    """
    score = 100
    tips = []
    if summary.total > HIGH_SPEND:
        score -= 30
        tips.append(f"Monthly spending is very high (>{currency}50,000)")
    elif summary.total > ELEVATED_SPEND:
        score -= 15
        tips.append(f"Consider reducing spending below {currency}30,000/month")
    if summary.count > MANY_PURCHASES:
        score -= 10
        tips.append("Too many small purchases")
    if categories:
        top = categories[0]
        share = top.amount / max(summary.total, 1)
        if share > DOMINANT_SHARE:
            score -= 20
            tips.append(f"{top.category.value} takes 90%+ of budget")
        elif share > HEAVY_SHARE:
            score -= 10
            tips.append(f"{top.category.value} takes 70%+ of budget")
    if summary.count >= 5:
        score = min(score + 5, 100)
    if len(categories) >= 4:
        score = min(score + 5, 100)
    score = max(0, min(100, score))
    if not tips:
        tips.append(
            "Your finances look healthy! 🎉" if score >= 80 else "Keep logging to improve your score"
        )
    return HealthScore(score=score, label=_health_label(score), tips=tuple(tips))
