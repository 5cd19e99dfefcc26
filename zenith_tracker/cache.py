# zenith_tracker/cache.py
from __future__ import annotations

import logging
import threading
import time
from typing import Callable, Optional, Tuple

from zenith_tracker.core.models import Snapshot

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 30.0


class SnapshotCache:
    """Single-entry cache of the analytics snapshot.

    An entry is served verbatim while it is younger than ``ttl`` seconds.
    Mutations are not observed automatically; callers invalidate after
    changing the store, otherwise data may be up to ``ttl`` seconds stale.
    """

    def __init__(
        self,
        store,
        ttl: float = DEFAULT_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._store = store
        self.ttl = ttl
        self._clock = clock
        self._entry: Optional[Tuple[float, Snapshot]] = None
        self._lock = threading.Lock()

    def get_snapshot(self) -> Snapshot:
        with self._lock:
            now = self._clock()
            if self._entry is not None:
                stamp, snapshot = self._entry
                if now - stamp < self.ttl:
                    return snapshot
            snapshot = self._store.get_ai_snapshot()
            self._entry = (now, snapshot)
            logger.debug("Rebuilt snapshot over %d transaction(s)", snapshot.transaction_count)
            return snapshot

    def invalidate(self) -> None:
        with self._lock:
            self._entry = None
