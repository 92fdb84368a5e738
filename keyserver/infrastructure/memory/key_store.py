from __future__ import annotations

import threading
from collections import defaultdict

from keyserver.domain.entities import PublicKey
from keyserver.domain.ports.key_store import KeyStorePort


class InMemoryKeyStore(KeyStorePort):
    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._keys: defaultdict[bytes, set[PublicKey]] = defaultdict(set)

    async def get(self, email_digest: bytes) -> set[PublicKey]:
        with self._lock:
            # copy, so callers never see later mutations
            return set(self._keys.get(email_digest, ()))

    async def put(self, email_digest: bytes, public_key: PublicKey) -> None:
        with self._lock:
            self._keys[email_digest].add(public_key)

    async def delete(self, email_digest: bytes, public_key: PublicKey) -> None:
        with self._lock:
            keys = self._keys.get(email_digest)
            if keys is not None:
                keys.discard(public_key)
