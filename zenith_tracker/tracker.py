# zenith_tracker/tracker.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from zenith_tracker.cache import SnapshotCache
from zenith_tracker.recurring import BillBook
from zenith_tracker.storage import get_storage
from zenith_tracker.store import TransactionStore

logger = logging.getLogger(__name__)


@dataclass
class Tracker:
    """Store, snapshot cache and bill book sharing one storage backend."""

    store: TransactionStore
    cache: SnapshotCache
    bills: BillBook
    config: dict

    def changed(self) -> None:
        self.cache.invalidate()

    def coach(self, provider=None):
        """Build a :class:`FinanceCoach`; without a provider the model is unavailable."""
        from zenith_tracker.ai import FinanceCoach, LLMClient

        llm = self.config.get("llm", {})
        return FinanceCoach(
            self.store,
            self.cache,
            client=LLMClient(provider) if provider is not None else None,
            currency=self.config.get("currency_symbol", "₹"),
            max_tokens=llm.get("max_tokens", 150),
            temperature=llm.get("temperature", 0.1),
            top_p=llm.get("top_p", 0.9),
            yield_every=llm.get("yield_every", 8),
            recent_transactions=llm.get("recent_transactions", 10),
        )

    def close(self) -> None:
        self.store.close()


def open_tracker(config: dict, storage=None) -> Tracker:
    storage = storage or get_storage(config)
    storage_cfg = config.get("storage", {})
    store = TransactionStore(storage, key=storage_cfg.get("transactions_key", "zenith-txns"))
    store.initialize()
    bills = BillBook(storage, key=storage_cfg.get("bills_key", "zenith-manual-bills"))
    bills.initialize()
    cache = SnapshotCache(store, ttl=float(config.get("cache_ttl_seconds", 30)))
    return Tracker(store=store, cache=cache, bills=bills, config=config)


def load_provider() -> Optional[object]:
    """Provider from the environment, or ``None`` when it cannot be configured."""
    from zenith_tracker.ai import get_provider_from_env

    try:
        return get_provider_from_env()
    except RuntimeError as exc:
        logger.warning("No language model available: %s", exc)
        return None
