from __future__ import annotations

import threading
import time
from typing import Callable

from keyserver.domain.entities import PendingRecord
from keyserver.domain.errors import NotFound
from keyserver.domain.ports.challenge_cache import ChallengeCachePort


class InMemoryChallengeCache(ChallengeCachePort):
    """
    Process-local challenge cache for tests and single-process deployments.

    Expired entries are reported as NotFound on read and dropped lazily.
    """

    def __init__(self, *, clock: Callable[[], float] = time.time) -> None:
        self._clock = clock
        self._lock = threading.Lock()
        self._entries: dict[str, tuple[PendingRecord, float]] = {}

    def _live(self, key: str) -> PendingRecord:
        # caller holds the lock
        entry = self._entries.get(key)
        if entry is None:
            raise NotFound()
        record, expires_at = entry
        if self._clock() >= expires_at:
            del self._entries[key]
            raise NotFound()
        return record

    async def set(self, key: str, record: PendingRecord, ttl_seconds: int) -> None:
        with self._lock:
            self._entries[key] = (record, self._clock() + ttl_seconds)

    async def get(self, key: str) -> PendingRecord:
        with self._lock:
            return self._live(key)

    async def delete(self, key: str) -> None:
        with self._lock:
            self._entries.pop(key, None)

    async def pop(self, key: str) -> PendingRecord:
        with self._lock:
            record = self._live(key)
            del self._entries[key]
            return record
