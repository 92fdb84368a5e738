from __future__ import annotations

from typing import Protocol

from keyserver.domain.entities import PendingRecord


class ChallengeCachePort(Protocol):
    async def set(self, key: str, record: PendingRecord, ttl_seconds: int) -> None:
        """Store/replace the record under key; it expires ttl_seconds from now."""

    async def get(self, key: str) -> PendingRecord:
        """
        Return the live record for key.
        Raise NotFound if it was never set, was removed, or has expired. Expiry
        is judged from the stored expiry timestamp, never from backend absence
        alone.
        """

    async def delete(self, key: str) -> None:
        """Remove the record. No error if it is already gone."""

    async def pop(self, key: str) -> PendingRecord:
        """
        Atomically read and remove the record (single-use consumption).
        Among concurrent callers for the same key at most one gets the record;
        the rest get NotFound, as do callers hitting an expired record.
        """
