# zenith_tracker/ai/prompts.py
from __future__ import annotations

from typing import List, Optional, Sequence

from zenith_tracker.ai.intents import (
    DEFAULT_CURRENCY,
    category_lines,
    format_amount,
    recurring_lines,
)
from zenith_tracker.core.models import Snapshot, Transaction


def build_system_prompt(currency: str = DEFAULT_CURRENCY) -> str:
    return (
        "You are FinAI, a precise financial assistant.\n"
        "RULES:\n"
        "1. NEVER perform arithmetic - use only the pre-calculated numbers provided\n"
        "2. If a DIRECT ANSWER is provided, use those exact figures\n"
        "3. Keep responses concise (2-3 sentences max)\n"
        f"4. Use the {currency} symbol for amounts\n"
        "5. Be helpful and actionable with advice"
    )


def _tx_to_line(index: int, tx: Transaction, currency: str) -> str:
    at_vendor = f" at {tx.vendor}" if tx.vendor else ""
    return f"{index}. {tx.item}{at_vendor} [{tx.category.value}]: {currency}{format_amount(tx.amount)}"


def build_user_prompt(
    question: str,
    snapshot: Snapshot,
    recent: Sequence[Transaction],
    injected_fact: Optional[str] = None,
    currency: str = DEFAULT_CURRENCY,
) -> str:
    last30 = snapshot.last_30_days
    txn_lines = "\n".join(_tx_to_line(i, tx, currency) for i, tx in enumerate(recent, 1))
    lines: List[str] = [
        "📊 YOUR FINANCIAL DATA (Verified):",
        "━━━━━━━━━━━━━━━━━━━━━━━━━━━━",
        (
            f"📅 Last 30 Days: {currency}{format_amount(last30.total)} | "
            f"{last30.count} transactions | Avg: {currency}{format_amount(last30.avg)}"
        ),
        f"📆 This Month: {currency}{format_amount(snapshot.monthly_total)}",
        "",
        "🛒 Recent Transactions:",
        txn_lines,
        "",
        "📁 By Category:",
        category_lines(snapshot, currency),
        "",
        "🔄 Recurring:",
        recurring_lines(snapshot, currency),
        "━━━━━━━━━━━━━━━━━━━━━━━━━━━━",
    ]
    if injected_fact:
        lines.append(f"⚡ {injected_fact}")
    lines += [
        f'❓ Question: "{question}"',
        "",
        "💡 Provide a helpful, concise answer based on the data above.",
    ]
    return "\n".join(lines)


def build_tip_prompt(snapshot: Snapshot, currency: str = DEFAULT_CURRENCY) -> str:
    top = snapshot.categories[0] if snapshot.categories else None
    top_name = top.category.value if top else "N/A"
    top_amount = format_amount(top.amount) if top else "0"
    return (
        "You are a financial advisor. Based on this data:\n"
        f"- Total spending last 30 days: {currency}{format_amount(snapshot.last_30_days.total)}\n"
        f"- Top category: {top_name} at {currency}{top_amount}\n\n"
        f"Give ONE short, actionable money-saving tip. Be specific with amounts. Use the {currency} symbol."
    )
