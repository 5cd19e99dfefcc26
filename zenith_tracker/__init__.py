# zenith_tracker/__init__.py
from zenith_tracker.cache import SnapshotCache
from zenith_tracker.core.models import Category, Snapshot, Transaction
from zenith_tracker.store import TransactionStore

__all__ = ["Category", "Snapshot", "SnapshotCache", "Transaction", "TransactionStore"]
