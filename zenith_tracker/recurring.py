# zenith_tracker/recurring.py
from __future__ import annotations

import json
import logging
import math
import uuid
from dataclasses import asdict, dataclass, field
from datetime import date, timedelta
from decimal import Decimal
from enum import Enum
from typing import Dict, Iterable, List, Optional

from zenith_tracker.core.models import (
    RecurringGroup,
    Transaction,
    round_money,
    to_decimal,
)
from zenith_tracker.storage.base import StorageError

logger = logging.getLogger(__name__)

RECURRING_WINDOW_DAYS = 90
MIN_OCCURRENCES = 2
BILLS_KEY = "zenith-manual-bills"


def recurrence_key(tx: Transaction) -> str:
    """Identity used to spot repeat purchases.

    Vendor wins over item, item over category, so one vendor seen under two
    categories still forms a single group.
    """
    vendor = (tx.vendor or "").strip()
    item = (tx.item or "").strip()
    if vendor:
        return vendor.lower()
    if item:
        return item.lower()
    return tx.category.value.lower()


def get_recurring(
    transactions: Iterable[Transaction],
    today: Optional[date] = None,
    window_days: int = RECURRING_WINDOW_DAYS,
    min_count: int = MIN_OCCURRENCES,
) -> List[RecurringGroup]:
    """Groups of repeat purchases in the trailing window, most frequent first."""
    today = today or date.today()
    cutoff = today - timedelta(days=window_days)
    by_key: Dict[str, List[Transaction]] = {}
    for tx in transactions:
        if tx.date >= cutoff:
            by_key.setdefault(recurrence_key(tx), []).append(tx)

    groups = []
    for key, members in by_key.items():
        if len(members) < min_count:
            continue
        total = sum((to_decimal(t.amount) for t in members), Decimal(0))
        groups.append(
            RecurringGroup(
                name=key,
                category=members[0].category,
                count=len(members),
                total=round_money(total),
                avg=round_money(total / len(members)),
            )
        )
    return sorted(groups, key=lambda g: g.count, reverse=True)


# -----------------------------------------------------------------------------
# Manually entered bills
# -----------------------------------------------------------------------------

class BillCycle(str, Enum):
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"


_WEEKS_PER_MONTH = Decimal("4.33")


def to_monthly(amount: float, cycle) -> float:
    """Monthly equivalent of a bill charged every ``cycle``."""
    cycle = BillCycle(cycle)
    value = to_decimal(amount)
    if cycle is BillCycle.WEEKLY:
        value *= _WEEKS_PER_MONTH
    elif cycle is BillCycle.YEARLY:
        value /= 12
    return round_money(value)


@dataclass(frozen=True)
class ManualBill:
    name: str
    amount: float
    cycle: BillCycle = BillCycle.MONTHLY
    category: str = "Other"
    id: str = field(default_factory=lambda: uuid.uuid4().hex[:12])

    def __post_init__(self) -> None:
        name = (self.name or "").strip()
        if not name:
            raise ValueError("Bill name must not be empty")
        object.__setattr__(self, "name", name)
        amount = float(self.amount)
        if not (math.isfinite(amount) and amount > 0):
            raise ValueError(f"Bill amount must be a finite number greater than 0, got {self.amount!r}")
        object.__setattr__(self, "amount", amount)
        object.__setattr__(self, "cycle", BillCycle(self.cycle))

    @property
    def monthly(self) -> float:
        return to_monthly(self.amount, self.cycle)

    def to_dict(self) -> dict:
        data = asdict(self)
        data["cycle"] = self.cycle.value
        return data


class BillBook:
    """Bills the user enters by hand, kept next to the transactions."""

    def __init__(self, storage, key: str = BILLS_KEY):
        self._storage = storage
        self._key = key
        self._bills: List[ManualBill] = []

    def initialize(self) -> None:
        try:
            raw = self._storage.load(self._key)
            data = json.loads(raw) if raw else []
            self._bills = [ManualBill(**entry) for entry in data]
        except (StorageError, ValueError, TypeError, KeyError) as exc:
            logger.warning("Could not read saved bills, starting empty: %s", exc)
            self._bills = []

    def list(self) -> List[ManualBill]:
        return list(self._bills)

    def add(self, name: str, amount: float, cycle="monthly", category: str = "Other") -> ManualBill:
        bill = ManualBill(name=name, amount=amount, cycle=cycle, category=category)
        self._persist(self._bills + [bill])
        return bill

    def remove(self, bill_id: str) -> None:
        self._persist([b for b in self._bills if b.id != bill_id])

    def clear(self) -> None:
        self._storage.delete(self._key)
        self._bills = []

    def _persist(self, bills: List[ManualBill]) -> None:
        payload = json.dumps([b.to_dict() for b in bills])
        self._storage.save(self._key, payload)
        self._bills = bills


def monthly_commitment(
    bills: Iterable[ManualBill],
    detected: Iterable[RecurringGroup] = (),
) -> float:
    """Monthly cost of manual bills plus the average of each detected group."""
    total = sum((to_decimal(b.monthly) for b in bills), Decimal(0))
    total += sum((to_decimal(g.avg) for g in detected), Decimal(0))
    return round_money(total)
