# zenith_tracker/storage/memory.py
from zenith_tracker.storage.base import BaseStorage


class MemoryStorage(BaseStorage):
    def __init__(self, initial=None):
        self._data = dict(initial or {})

    def load(self, key):
        return self._data.get(key)

    def save(self, key, payload):
        self._data[key] = payload

    def delete(self, key):
        self._data.pop(key, None)

    @classmethod
    def from_config(cls, storage_cfg):
        return cls()
