# zenith_tracker/store.py
from __future__ import annotations

import dataclasses
import json
import logging
import threading
from datetime import date, datetime
from typing import Callable, List, Optional, Tuple

from zenith_tracker.analytics import build_snapshot
from zenith_tracker.core.models import Snapshot, Transaction
from zenith_tracker.storage.base import BaseStorage, StorageError

logger = logging.getLogger(__name__)

TRANSACTIONS_KEY = "zenith-txns"

_IMMUTABLE_FIELDS = {"id", "created_at"}
_MUTABLE_FIELDS = {
    f.name for f in dataclasses.fields(Transaction) if f.name not in _IMMUTABLE_FIELDS
}


class TransactionStore:
    """Ordered collection of expenses with write-through persistence.

    Every mutation serializes the whole collection and hands it to the
    storage backend; the in-memory list only changes once ``save`` returned.
    """

    def __init__(
        self,
        storage: BaseStorage,
        key: str = TRANSACTIONS_KEY,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self._storage = storage
        self._key = key
        self._clock = clock
        self._txns: List[Transaction] = []
        self._next_id = 1
        self._lock = threading.RLock()

    # ------------------------------------------------------------------
    # lifecycle
    # ------------------------------------------------------------------

    def initialize(self) -> None:
        """Load the saved collection, falling back to an empty store."""
        with self._lock:
            try:
                raw = self._storage.load(self._key)
                records = json.loads(raw) if raw else []
                if not isinstance(records, list):
                    raise ValueError("persisted transactions must be a list")
                txns = [Transaction.from_dict(r) for r in records]
            except (StorageError, ValueError, TypeError, KeyError, AttributeError) as exc:
                logger.warning("Could not load saved transactions, starting empty: %s", exc)
                self._txns = []
                self._next_id = 1
                return
            self._txns = txns
            self._next_id = max((t.id for t in txns), default=0) + 1
            logger.debug("Loaded %d transaction(s)", len(txns))

    def close(self) -> None:
        self._storage.close()

    def clear(self) -> None:
        """Forget every transaction, including the persisted copy."""
        with self._lock:
            self._storage.delete(self._key)
            self.initialize()

    # ------------------------------------------------------------------
    # mutations
    # ------------------------------------------------------------------

    def add(
        self,
        amount: float,
        category,
        item: str,
        vendor: Optional[str] = None,
        date: Optional[date] = None,
    ) -> None:
        with self._lock:
            now = self._clock()
            tx = Transaction(
                id=self._next_id,
                amount=amount,
                category=category,
                item=item,
                vendor=vendor,
                date=date or now.date(),
                created_at=now,
            )
            self._commit(self._txns + [tx])
            self._next_id += 1

    def update(self, tx_id: int, **changes) -> None:
        """Replace fields of ``tx_id``; unknown ids are ignored."""
        unknown = set(changes) - _MUTABLE_FIELDS - _IMMUTABLE_FIELDS
        if unknown:
            raise TypeError(f"Unknown transaction field(s): {', '.join(sorted(unknown))}")
        changes = {k: v for k, v in changes.items() if k in _MUTABLE_FIELDS}
        with self._lock:
            idx = next((i for i, t in enumerate(self._txns) if t.id == tx_id), None)
            if idx is None:
                return
            updated = dataclasses.replace(self._txns[idx], **changes)
            txns = list(self._txns)
            txns[idx] = updated
            self._commit(txns)

    def remove(self, tx_id: int) -> None:
        with self._lock:
            self._commit([t for t in self._txns if t.id != tx_id])

    # ------------------------------------------------------------------
    # reads
    # ------------------------------------------------------------------

    def get_all(self) -> List[Transaction]:
        """Most recently added first (entry order, not ``date`` order)."""
        with self._lock:
            return list(reversed(self._txns))

    @property
    def transactions(self) -> Tuple[Transaction, ...]:
        """Insertion-ordered view used by the analytics."""
        with self._lock:
            return tuple(self._txns)

    def __len__(self) -> int:
        return len(self._txns)

    def get_ai_snapshot(self, today: Optional[date] = None) -> Snapshot:
        return build_snapshot(self.transactions, today or self._clock().date())

    # ------------------------------------------------------------------

    def _commit(self, txns: List[Transaction]) -> None:
        payload = json.dumps([t.to_dict() for t in txns], ensure_ascii=False)
        self._storage.save(self._key, payload)
        self._txns = txns
