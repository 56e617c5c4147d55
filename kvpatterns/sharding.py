"""A map split into independently locked shards."""

from __future__ import annotations

import hashlib
import threading
from dataclasses import dataclass, field
from typing import Any


@dataclass
class _Shard:
    lock: threading.Lock = field(default_factory=threading.Lock)
    items: dict[str, Any] = field(default_factory=dict)


class ShardedMap:
    """A thread-safe mapping whose keys are spread over several locked shards.

    The shard is chosen from one byte of the key's SHA-1, so at most 256
    shards are ever used.
    """

    def __init__(self, nshards: int) -> None:
        if nshards < 1:
            raise ValueError("a sharded map needs at least one shard")
        self._shards = tuple(_Shard() for _ in range(nshards))

    def shard_index(self, key: str) -> int:
        """Return the index of the shard that holds ``key``."""
        digest = hashlib.sha1(key.encode()).digest()
        return digest[17] % len(self._shards)

    def _shard(self, key: str) -> _Shard:
        return self._shards[self.shard_index(key)]

    def get(self, key: str) -> Any:
        """Return the value for ``key``, or None when it is absent."""
        shard = self._shard(key)
        with shard.lock:
            return shard.items.get(key)

    def set(self, key: str, value: Any) -> None:
        """Store ``value`` under ``key``."""
        shard = self._shard(key)
        with shard.lock:
            shard.items[key] = value

    def delete(self, key: str) -> None:
        """Remove ``key``; absent keys are ignored."""
        shard = self._shard(key)
        with shard.lock:
            shard.items.pop(key, None)

    def keys(self) -> list[str]:
        """Return every key in the map."""
        keys: list[str] = []
        for shard in self._shards:
            with shard.lock:
                keys.extend(shard.items)
        return keys