from datetime import date

import anyio
import pytest
import yaml

from zenith_tracker.config import load_config
from zenith_tracker.mcp_server import answer_question, get_recurring_purchases, get_snapshot
from zenith_tracker.tracker import open_tracker


def _setup(tmp_path):
    cfg_path = tmp_path / "config.yaml"
    cfg_path.write_text(
        yaml.safe_dump({"storage": {"backend": "json", "directory": str(tmp_path / "data")}}),
        encoding="utf-8",
    )
    tracker = open_tracker(load_config(cfg_path))
    today = date.today()
    tracker.store.add(amount=200, category="Food", item="Coffee", vendor="Starbucks", date=today)
    tracker.store.add(amount=220, category="Food", item="Coffee", vendor="Starbucks", date=today)
    tracker.close()
    return str(cfg_path)


def test_get_snapshot(tmp_path):
    cfg_path = _setup(tmp_path)
    snap = anyio.run(get_snapshot, cfg_path)
    assert snap["transactionCount"] == 2
    assert snap["last30Days"] == {"total": 420.0, "count": 2, "avg": 210.0}
    assert snap["categories"] == [{"category": "Food", "amount": 420.0, "count": 2}]


def test_get_recurring_purchases(tmp_path):
    cfg_path = _setup(tmp_path)
    groups = anyio.run(get_recurring_purchases, cfg_path)
    assert groups == [
        {"name": "starbucks", "category": "Food", "count": 2, "total": 420.0, "avg": 210.0}
    ]


def test_answer_question(tmp_path):
    cfg_path = _setup(tmp_path)
    answer = anyio.run(answer_question, "How many purchases did I make?", cfg_path)
    assert answer == "DIRECT ANSWER: You have 2 transactions in the last 30 days."
    assert anyio.run(answer_question, "Should I buy a car?", cfg_path) is None


def test_answer_question_rejects_blank(tmp_path):
    with pytest.raises(ValueError, match="question must not be empty"):
        anyio.run(answer_question, "   ", None)
