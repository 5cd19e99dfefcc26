# zenith_tracker/storage/json_file.py
from __future__ import annotations

import contextlib
import logging
import os
import re
from pathlib import Path

from zenith_tracker.storage.base import BaseStorage, StorageError

logger = logging.getLogger(__name__)

_KEY_RE = re.compile(r"^[A-Za-z0-9][A-Za-z0-9_.-]*$")


def _validate_key(key: str) -> str:
    """Keys become file names, so path separators and dot-files are refused."""
    if not _KEY_RE.fullmatch(key or ""):
        raise ValueError(f"Invalid storage key: {key!r}")
    return key


class JSONFileStorage(BaseStorage):
    """One ``<key>.json`` file per key under ``directory``.

    Writes target ``<key>.json.tmp`` first and are then moved into place with
    ``os.replace``.
    """

    def __init__(self, directory: str | os.PathLike):
        self.directory = Path(directory).expanduser()

    @classmethod
    def from_config(cls, storage_cfg: dict) -> "JSONFileStorage":
        return cls(storage_cfg.get("directory", "~/.zenith"))

    def _path(self, key: str) -> Path:
        return self.directory / f"{_validate_key(key)}.json"

    def load(self, key: str) -> str | None:
        path = self._path(key)
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except (OSError, UnicodeDecodeError) as exc:
            logger.error("Cannot read %s: %s", path, exc)
            raise StorageError(f"{path}: {exc}") from exc

    def save(self, key: str, payload: str) -> None:
        path = self._path(key)
        tmp = path.with_suffix(path.suffix + ".tmp")
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            tmp.write_text(payload, encoding="utf-8")
            os.replace(tmp, path)
        except OSError as exc:
            with contextlib.suppress(OSError):
                tmp.unlink()
            raise StorageError(f"{path}: {exc}") from exc
        logger.debug("Saved %d bytes to %s", len(payload), path)

    def delete(self, key: str) -> None:
        with contextlib.suppress(FileNotFoundError):
            self._path(key).unlink()
