from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Any, Callable


@dataclass
class CacheEntry:
    key: str
    payload: Any
    timestamp: float


class MemoryCache:
    """Process-local TTL cache.

    Entries are never evicted: once stale they stay around so callers can fall
    back to them when a refresh fails. `clock` returns seconds and is injectable
    so tests can move time without sleeping.
    """

    def __init__(self, ttl: float = 60.0, clock: Callable[[], float] | None = None) -> None:
        self.ttl = float(ttl)
        self.clock = clock or time.monotonic
        self._entries: dict[str, CacheEntry] = {}

    def get_entry(self, key: str) -> CacheEntry | None:
        return self._entries.get(key)

    def is_fresh(self, entry: CacheEntry) -> bool:
        return self.clock() - entry.timestamp < self.ttl

    def get_json(self, key: str) -> Any | None:
        entry = self._entries.get(key)
        if entry is None or not self.is_fresh(entry):
            return None
        return entry.payload

    def set_json(self, key: str, value: Any) -> CacheEntry:
        entry = CacheEntry(key=key, payload=value, timestamp=self.clock())
        self._entries[key] = entry
        return entry

    def __contains__(self, key: str) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)
