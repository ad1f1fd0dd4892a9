"""
Benchmark text cache.

Keeps generated benchmark texts in memory so asking twice for the same
project description within the TTL does not call the text-generation
service again. One cache lives with each API client, so nothing is shared
between browser sessions.

Keys are the description trimmed and lower-cased. Entries expire lazily on
read; blank descriptions are never cached.
"""

import time
from threading import Lock
from typing import Callable, Optional

DEFAULT_TTL_SECONDS = 30 * 60  # 30 minutes


class BenchmarkCache:
    """In-memory TTL cache for benchmark texts."""

    def __init__(
        self,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: dict[str, dict] = {}  # key → {text, stored_at}
        self._lock = Lock()
        self._stats = {"hits": 0, "misses": 0}

    @staticmethod
    def make_key(description: str) -> str:
        return (description or "").strip().lower()

    def get(self, description: str) -> Optional[str]:
        """Return the cached text, or None on miss or expiry."""
        key = self.make_key(description)
        if not key:
            return None

        with self._lock:
            entry = self._entries.get(key)
            if entry and self._clock() - entry["stored_at"] < self.ttl_seconds:
                self._stats["hits"] += 1
                return entry["text"]
            elif entry:
                del self._entries[key]
            self._stats["misses"] += 1
            return None

    def put(self, description: str, text: str) -> None:
        key = self.make_key(description)
        if not key:
            return
        with self._lock:
            self._entries[key] = {"text": text, "stored_at": self._clock()}

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def get_stats(self) -> dict:
        with self._lock:
            return {**self._stats, "entries": len(self._entries), "ttl_seconds": self.ttl_seconds}

    def __len__(self) -> int:
        with self._lock:
            now = self._clock()
            return sum(
                1 for e in self._entries.values() if now - e["stored_at"] < self.ttl_seconds
            )
