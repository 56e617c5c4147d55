"""An in-memory key-value store that is safe to share between threads."""

from __future__ import annotations

import threading


class NoSuchKey(KeyError):
    """Raised when a key is looked up that the store does not hold."""

    def __init__(self, message: str = "no such key") -> None:
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return self.message


class KeyValueStore:
    """A dictionary of string keys to string values guarded by a lock."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._items: dict[str, str] = {}

    def get(self, key: str) -> str:
        """Return the value stored under ``key``; raise NoSuchKey if there is none."""
        with self._lock:
            try:
                return self._items[key]
            except KeyError:
                raise NoSuchKey() from None

    def put(self, key: str, value: str) -> None:
        """Store ``value`` under ``key``, replacing any previous value."""
        with self._lock:
            self._items[key] = value

    def delete(self, key: str) -> None:
        """Remove ``key``; deleting an absent key does nothing."""
        with self._lock:
            self._items.pop(key, None)