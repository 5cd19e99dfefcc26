# zenith_tracker/storage/base.py
from abc import ABC, abstractmethod


class StorageError(Exception):
    """The storage medium itself could not be read or written."""


class BaseStorage(ABC):
    """Local key/value medium holding whole serialized collections.

    ``save`` must replace the previous value atomically: a reader sees either
    the old payload or the new one, never a mix. Backends report a damaged or
    unreadable medium as :class:`StorageError`.
    """

    @abstractmethod
    def load(self, key):
        """Return the payload stored under ``key`` or ``None`` when absent."""

    @abstractmethod
    def save(self, key, payload):
        """Replace the payload stored under ``key``."""

    @abstractmethod
    def delete(self, key):
        """Forget ``key``; missing keys are ignored."""

    def close(self):
        pass
