# zenith_tracker/config.py
from __future__ import annotations

import copy
import os
from pathlib import Path
from typing import Dict

import yaml

DEFAULT_CONFIG: Dict[str, object] = {
    "storage": {
        "backend": "json",
        "directory": "~/.zenith",
        "db_path": "~/.zenith/zenith.db",
        "transactions_key": "zenith-txns",
        "bills_key": "zenith-manual-bills",
    },
    "storage_backends": {
        "json": "zenith_tracker.storage.json_file.JSONFileStorage",
        "sqlite": "zenith_tracker.storage.sqlite.SQLiteStorage",
        "memory": "zenith_tracker.storage.memory.MemoryStorage",
    },
    "cache_ttl_seconds": 30,
    "currency_symbol": "₹",
    "llm": {
        "max_tokens": 150,
        "temperature": 0.1,
        "top_p": 0.9,
        "yield_every": 8,
        "recent_transactions": 10,
    },
}

CONFIG_PATH = Path(os.environ.get("ZENITH_CONFIG", "~/.zenith/config.yaml")).expanduser()


def _merge_defaults(current: Dict[str, object], defaults: Dict[str, object]) -> Dict[str, object]:
    """Merge missing default keys into the current config recursively."""
    merged = dict(current)
    for key, value in defaults.items():
        if key not in merged:
            merged[key] = value
        elif isinstance(value, dict) and isinstance(merged[key], dict):
            merged[key] = _merge_defaults(merged[key], value)
    return merged


def load_config(path: Path | str | None = None) -> Dict[str, object]:
    target = Path(path) if path else CONFIG_PATH
    if not target.exists():
        return copy.deepcopy(DEFAULT_CONFIG)
    with target.open("r", encoding="utf-8") as fp:
        data = yaml.safe_load(fp) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Config file {target} must contain a mapping")
    return _merge_defaults(data, copy.deepcopy(DEFAULT_CONFIG))


def save_config(config: Dict[str, object], path: Path | str | None = None) -> None:
    target = Path(path) if path else CONFIG_PATH
    target.parent.mkdir(parents=True, exist_ok=True)
    with target.open("w", encoding="utf-8") as fp:
        yaml.safe_dump(config, fp, sort_keys=False, allow_unicode=True)
