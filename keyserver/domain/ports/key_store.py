from __future__ import annotations

from typing import Protocol

from keyserver.domain.entities import PublicKey


class KeyStorePort(Protocol):
    """
    Durable registration sets: email digest -> set of public keys.

    Implementations must not lose updates or create duplicates under
    concurrent put/delete for the same digest, including across processes.
    Durable backends use native atomic set add/remove, never read-modify-write.
    """

    async def get(self, email_digest: bytes) -> set[PublicKey]:
        """Return the registration set. Unknown digests yield an empty set."""

    async def put(self, email_digest: bytes, public_key: PublicKey) -> None:
        """Add public_key. Adding a key that is already present is a no-op."""

    async def delete(self, email_digest: bytes, public_key: PublicKey) -> None:
        """Remove public_key. Removing an absent key is a no-op."""
