import json
from datetime import date

import pytest

from zenith_tracker.core.models import Category
from zenith_tracker.storage.json_file import JSONFileStorage
from zenith_tracker.storage.memory import MemoryStorage
from zenith_tracker.storage.sqlite import SQLiteStorage
from zenith_tracker.store import TRANSACTIONS_KEY, TransactionStore


class FailingStorage(MemoryStorage):
    def __init__(self):
        super().__init__()
        self.fail = False

    def save(self, key, payload):
        if self.fail:
            raise OSError("disk full")
        super().save(key, payload)


def _saved(storage):
    return json.loads(storage.load(TRANSACTIONS_KEY))


def test_add_assigns_ids_and_persists(store, storage, now):
    store.add(amount=200, category="Food", item="Coffee", vendor="Starbucks")
    store.add(amount=35.5, category=Category.TRANSPORT, item="Bus")

    ids = [t.id for t in store.transactions]
    assert ids == [1, 2]
    first = store.transactions[0]
    assert first.created_at == now
    assert first.date == now.date()

    records = _saved(storage)
    assert [r["item"] for r in records] == ["Coffee", "Bus"]
    assert records[0]["vendor"] == "Starbucks"
    assert records[1]["vendor"] is None


def test_add_returns_nothing(store):
    assert store.add(amount=1, category="Other", item="Gum") is None


def test_get_all_is_reverse_insertion_order(store):
    store.add(amount=10, category="Food", item="Today", date=date(2026, 3, 15))
    store.add(amount=20, category="Food", item="Backdated", date=date(2026, 1, 2))
    assert [t.item for t in store.get_all()] == ["Backdated", "Today"]


def test_ids_are_not_reused_within_a_session(store):
    for item in ("a", "b", "c"):
        store.add(amount=5, category="Other", item=item)
    store.remove(3)
    store.add(amount=5, category="Other", item="d")
    assert [t.id for t in store.transactions] == [1, 2, 4]


def test_initialize_resumes_id_counter(storage, now):
    first = TransactionStore(storage, clock=lambda: now)
    first.initialize()
    first.add(amount=5, category="Other", item="a")
    first.add(amount=5, category="Other", item="b")

    second = TransactionStore(storage, clock=lambda: now)
    second.initialize()
    assert len(second) == 2
    second.add(amount=5, category="Other", item="c")
    assert second.transactions[-1].id == 3


@pytest.mark.parametrize(
    "payload",
    [
        "not json",
        '{"id": 1}',
        '[{"id": 1, "amount": 5}]',
        '[{"id": 1, "amount": -5, "category": "Food", "item": "x", "date": "2026-01-01", "createdAt": "2026-01-01T00:00:00"}]',
    ],
)
def test_initialize_fails_open_on_corrupt_data(payload, now):
    storage = MemoryStorage({TRANSACTIONS_KEY: payload})
    store = TransactionStore(storage, clock=lambda: now)
    store.initialize()
    assert store.get_all() == []
    store.add(amount=5, category="Other", item="fresh")
    assert store.transactions[0].id == 1


def test_update_merges_fields_and_keeps_identity(store, storage):
    store.add(amount=100, category="Food", item="Pizza", vendor="Dominos")
    before = store.transactions[0]

    store.update(1, amount=120, vendor="", id=99, created_at=None)

    after = store.transactions[0]
    assert after.id == 1
    assert after.created_at == before.created_at
    assert after.amount == 120.0
    assert after.vendor is None
    assert after.item == "Pizza"
    assert _saved(storage)[0]["amount"] == 120.0


def test_update_unknown_id_is_noop(store, storage):
    store.add(amount=100, category="Food", item="Pizza")
    payload = storage.load(TRANSACTIONS_KEY)
    store.update(42, amount=1)
    assert storage.load(TRANSACTIONS_KEY) == payload
    assert store.transactions[0].amount == 100.0


def test_update_rejects_invalid_values_without_writing(store, storage):
    store.add(amount=100, category="Food", item="Pizza")
    payload = storage.load(TRANSACTIONS_KEY)
    with pytest.raises(ValueError):
        store.update(1, amount=0)
    with pytest.raises(TypeError):
        store.update(1, colour="red")
    assert storage.load(TRANSACTIONS_KEY) == payload


def test_remove_missing_id_is_noop(store):
    store.add(amount=100, category="Food", item="Pizza")
    store.remove(7)
    assert len(store) == 1
    store.remove(1)
    assert store.get_all() == []


def test_failed_save_leaves_store_unchanged(now):
    storage = FailingStorage()
    store = TransactionStore(storage, clock=lambda: now)
    store.initialize()
    store.add(amount=10, category="Food", item="Tea")

    storage.fail = True
    with pytest.raises(OSError):
        store.add(amount=20, category="Food", item="Cake")
    with pytest.raises(OSError):
        store.remove(1)
    assert [t.item for t in store.get_all()] == ["Tea"]

    storage.fail = False
    store.add(amount=20, category="Food", item="Cake")
    assert store.transactions[-1].id == 2


def test_clear_resets_everything(store, storage):
    store.add(amount=10, category="Food", item="Tea")
    store.clear()
    assert store.get_all() == []
    assert storage.load(TRANSACTIONS_KEY) is None
    store.add(amount=10, category="Food", item="Tea")
    assert store.transactions[0].id == 1


def test_empty_store_snapshot(store):
    snap = store.get_ai_snapshot()
    assert snap.transaction_count == 0
    assert snap.last_30_days.total == 0
    assert snap.categories == ()
    assert snap.recurring == ()


def test_initialize_fails_open_on_damaged_sqlite_file(tmp_path, now):
    db_path = tmp_path / "zenith.db"
    db_path.write_bytes(b"this is definitely not a sqlite database file" * 100)
    store = TransactionStore(SQLiteStorage(str(db_path)), clock=lambda: now)
    store.initialize()
    assert store.get_all() == []
    assert store.get_ai_snapshot(now.date()).transaction_count == 0


def test_initialize_fails_open_on_unreadable_json_file(tmp_path, now):
    (tmp_path / f"{TRANSACTIONS_KEY}.json").mkdir()
    store = TransactionStore(JSONFileStorage(tmp_path), clock=lambda: now)
    store.initialize()
    assert store.get_all() == []


def test_infinite_amount_is_rejected_and_never_persisted(store, storage, now):
    store.add(amount=10, category="Food", item="Tea")
    with pytest.raises(ValueError, match="finite"):
        store.add(amount=float("inf"), category="Food", item="Bad")
    assert len(_saved(storage)) == 1
    assert store.get_ai_snapshot(now.date()).last_30_days.total == 10


def test_persisted_infinity_fails_open(now):
    record = {
        "id": 1, "amount": float("inf"), "category": "Food", "item": "Bad",
        "date": "2026-03-01", "createdAt": "2026-03-01T00:00:00",
    }
    storage = MemoryStorage({TRANSACTIONS_KEY: json.dumps([record])})
    store = TransactionStore(storage, clock=lambda: now)
    store.initialize()
    assert store.get_all() == []
    assert store.get_ai_snapshot(now.date()).last_30_days.total == 0
