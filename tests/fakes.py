from __future__ import annotations

from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PrivateKey
from cryptography.hazmat.primitives.serialization import Encoding, PublicFormat

from keyserver.domain.entities import KeyType, PendingRecord, PublicKey
from keyserver.domain.errors import DeliveryFailed
from keyserver.infrastructure.memory.challenge_cache import InMemoryChallengeCache
from keyserver.infrastructure.memory.key_store import InMemoryKeyStore

TTL = 60


class FakeClock:
    """Manually advanced stand-in for time.time."""

    def __init__(self, now: float = 1_700_000_000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def make_keypair() -> tuple[Ed25519PrivateKey, PublicKey]:
    private = Ed25519PrivateKey.generate()
    line = private.public_key().public_bytes(Encoding.OpenSSH, PublicFormat.OpenSSH)
    return private, PublicKey(type=KeyType.SSH_ED25519, key=line)


class SpyCache(InMemoryChallengeCache):
    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self.calls: list[tuple[str, str]] = []

    async def set(self, key: str, record: PendingRecord, ttl_seconds: int) -> None:
        self.calls.append(("set", key))
        await super().set(key, record, ttl_seconds)

    async def get(self, key: str) -> PendingRecord:
        self.calls.append(("get", key))
        return await super().get(key)

    async def delete(self, key: str) -> None:
        self.calls.append(("delete", key))
        await super().delete(key)

    async def pop(self, key: str) -> PendingRecord:
        self.calls.append(("pop", key))
        return await super().pop(key)


class SpyStore(InMemoryKeyStore):
    def __init__(self) -> None:
        super().__init__()
        self.calls: list[str] = []

    async def get(self, email_digest: bytes) -> set[PublicKey]:
        self.calls.append("get")
        return await super().get(email_digest)

    async def put(self, email_digest: bytes, public_key: PublicKey) -> None:
        self.calls.append("put")
        await super().put(email_digest, public_key)

    async def delete(self, email_digest: bytes, public_key: PublicKey) -> None:
        self.calls.append("delete")
        await super().delete(email_digest, public_key)


class FakeErroredCache(InMemoryChallengeCache):
    async def set(self, key: str, record: PendingRecord, ttl_seconds: int) -> None:
        raise RuntimeError("Redis down")

    async def pop(self, key: str) -> PendingRecord:
        raise RuntimeError("Redis down")


class FakeErroredStore(InMemoryKeyStore):
    async def get(self, email_digest: bytes) -> set[PublicKey]:
        raise ConnectionError("store down")

    async def put(self, email_digest: bytes, public_key: PublicKey) -> None:
        raise ConnectionError("store down")


class FakeNotifier:
    def __init__(self) -> None:
        self.challenges: list[tuple[str, str]] = []
        self.tokens: list[tuple[str, str]] = []

    async def send_challenge(self, email: str, challenge: str) -> None:
        self.challenges.append((email, challenge))

    async def send_token(self, email: str, token: str) -> None:
        self.tokens.append((email, token))


class FakeFailingNotifier(FakeNotifier):
    async def send_challenge(self, email: str, challenge: str) -> None:
        raise DeliveryFailed("relay down")

    async def send_token(self, email: str, token: str) -> None:
        raise DeliveryFailed("relay down")


class FakeEmailOK:
    def __init__(self) -> None:
        self.calls: list[dict[str, str]] = []

    async def send(self, *, to: str, subject: str, body: str) -> None:
        self.calls.append({"to": to, "subject": subject, "body": body})


class FakeEmailDown:
    async def send(self, *, to: str, subject: str, body: str) -> None:
        raise RuntimeError("SMTP responded 503: unavailable")
