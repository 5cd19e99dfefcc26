from datetime import datetime

import pytest

from zenith_tracker.storage.memory import MemoryStorage
from zenith_tracker.store import TransactionStore

NOW = datetime(2026, 3, 15, 10, 30)


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def storage():
    return MemoryStorage()


@pytest.fixture
def store(storage):
    s = TransactionStore(storage, clock=lambda: NOW)
    s.initialize()
    return s
