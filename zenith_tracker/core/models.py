# zenith_tracker/core/models.py
from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from typing import Any, Dict, Optional, Tuple

_CENT = Decimal("0.01")


class Category(str, Enum):
    FOOD = "Food"
    TRANSPORT = "Transport"
    ENTERTAINMENT = "Entertainment"
    HEALTH = "Health"
    SHOPPING = "Shopping"
    UTILITIES = "Utilities"
    EDUCATION = "Education"
    OTHER = "Other"

    def __str__(self) -> str:
        return self.value


def to_decimal(value) -> Decimal:
    """Exact decimal form of a stored amount (floats go through ``str``)."""
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def round_money(value) -> float:
    """Round to two decimals, halves away from zero."""
    return float(to_decimal(value).quantize(_CENT, rounding=ROUND_HALF_UP))


def parse_date(value) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        return datetime.fromisoformat(value.strip()).date()
    raise ValueError(f"Unrecognized date: {value!r}")


def _parse_timestamp(value) -> datetime:
    if isinstance(value, datetime):
        return value
    if isinstance(value, str):
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        return datetime.fromisoformat(text)
    raise ValueError(f"Unrecognized timestamp: {value!r}")


@dataclass(frozen=True)
class Transaction:
    id: int
    amount: float
    category: Category
    item: str
    vendor: Optional[str] = None
    date: date = field(default_factory=date.today)
    created_at: datetime = field(default_factory=datetime.now)

    def __post_init__(self) -> None:
        # Frozen dataclass: normalise through object.__setattr__.
        try:
            amount = float(self.amount)
        except (TypeError, ValueError):
            raise ValueError(f"Invalid amount: {self.amount!r}") from None
        if not (math.isfinite(amount) and amount > 0):
            raise ValueError(f"Amount must be a finite number greater than 0, got {self.amount!r}")
        object.__setattr__(self, "amount", amount)

        try:
            category = Category(self.category)
        except ValueError:
            raise ValueError(f"Unknown category: {self.category!r}") from None
        object.__setattr__(self, "category", category)

        item = (self.item or "").strip()
        if not item:
            raise ValueError("Transaction item must not be empty")
        object.__setattr__(self, "item", item)

        vendor = (self.vendor or "").strip()
        object.__setattr__(self, "vendor", vendor or None)

        object.__setattr__(self, "date", parse_date(self.date))
        object.__setattr__(self, "created_at", _parse_timestamp(self.created_at))

    def to_dict(self) -> Dict[str, Any]:
        """Record shape written by the store."""
        return {
            "id": self.id,
            "amount": self.amount,
            "category": self.category.value,
            "item": self.item,
            "vendor": self.vendor,
            "date": self.date.isoformat(),
            "createdAt": self.created_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Transaction":
        return cls(
            id=int(data["id"]),
            amount=data["amount"],
            category=data["category"],
            item=data["item"],
            vendor=data.get("vendor"),
            date=data["date"],
            created_at=data["createdAt"],
        )


@dataclass(frozen=True)
class Summary:
    total: float
    count: int
    avg: float

    def to_dict(self) -> Dict[str, Any]:
        return {"total": self.total, "count": self.count, "avg": self.avg}


@dataclass(frozen=True)
class CategoryTotal:
    category: Category
    amount: float
    count: int

    def to_dict(self) -> Dict[str, Any]:
        return {"category": self.category.value, "amount": self.amount, "count": self.count}


@dataclass(frozen=True)
class RecurringGroup:
    """Two or more purchases sharing a normalized vendor/item/category key.

    ``category`` is taken from the first member; a vendor seen under several
    categories still yields a single group.
    """

    name: str
    category: Category
    count: int
    total: float
    avg: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "category": self.category.value,
            "count": self.count,
            "total": self.total,
            "avg": self.avg,
        }


@dataclass(frozen=True)
class Snapshot:
    last_30_days: Summary
    monthly_total: float
    categories: Tuple[CategoryTotal, ...]
    recurring: Tuple[RecurringGroup, ...]
    transaction_count: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "last30Days": self.last_30_days.to_dict(),
            "monthlyTotal": self.monthly_total,
            "categories": [c.to_dict() for c in self.categories],
            "recurring": [r.to_dict() for r in self.recurring],
            "transactionCount": self.transaction_count,
        }


@dataclass(frozen=True)
class HealthScore:
    """0-100 rating of the last 30 days with the reasons behind it."""

    score: int
    label: str
    tips: Tuple[str, ...]

    def to_dict(self) -> Dict[str, Any]:
        return {"score": self.score, "label": self.label, "tips": list(self.tips)}
