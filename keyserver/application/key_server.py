from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Callable, Iterator

import keyserver.domain.services as domain_services
from keyserver.domain.entities import PendingRecord, PublicKey
from keyserver.domain.errors import DomainError, InternalError, NotFound, VerifyFailed
from keyserver.domain.ports.challenge_cache import ChallengeCachePort
from keyserver.domain.ports.digester import DigesterPort
from keyserver.domain.ports.key_store import KeyStorePort
from keyserver.domain.ports.signature_verifier import SignatureVerifierPort
from keyserver.domain.verifiers import KeyTypeVerifier

logger = logging.getLogger("keyserver.application.key_server")

DEFAULT_TTL_SECONDS = 15 * 60


class KeyServer:
    """
    Registration and revocation of public keys against email identities.

    Registration:  begin_put(email) -> challenge (emailed to the owner)
                   commit_put(challenge, signature, public_key)
    Revocation:    begin_delete(email, public_key) -> token (emailed)
                   commit_delete(token)

    Every pending challenge/token is consumed by the first commit that finds
    it, whether the commit then succeeds or fails signature verification.

    The instance holds no mutable state; all shared state lives in the cache
    and store, which handle their own concurrency.
    """

    def __init__(
        self,
        *,
        digester: DigesterPort,
        cache: ChallengeCachePort,
        store: KeyStorePort,
        verifier: SignatureVerifierPort | None = None,
        ttl_seconds: int = DEFAULT_TTL_SECONDS,
        token_factory: Callable[[], str] | None = None,
        log: logging.Logger | None = None,
    ) -> None:
        self._digester = digester
        self._cache = cache
        self._store = store
        self._log = log or logger
        self._verifier = verifier or KeyTypeVerifier(log=self._log)
        self._ttl_seconds = ttl_seconds
        self._token_factory = token_factory or domain_services.new_token

    @contextmanager
    def _backend(
        self, operation: str, email_digest: bytes | None = None
    ) -> Iterator[None]:
        """Log unexpected failures once and re-raise them as InternalError."""
        try:
            yield
        except DomainError:
            raise
        except Exception as e:
            extra = {"operation": operation}
            if email_digest is not None:
                extra["digest"] = email_digest.hex()[:12]
            self._log.exception("%s failed", operation, extra=extra)
            raise InternalError() from e

    def _digest(self, email: str) -> bytes:
        return self._digester.of(domain_services.validate_email(email))

    def _new_token(self, operation: str) -> str:
        with self._backend(f"{operation}.token"):
            return self._token_factory()

    async def get_keys(self, email: str) -> list[PublicKey]:
        digest = self._digest(email)
        with self._backend("get_keys.store_get", digest):
            keys = await self._store.get(digest)
        return sorted(keys, key=PublicKey.sort_key)

    async def begin_put(self, email: str) -> str:
        digest = self._digest(email)
        challenge = self._new_token("begin_put")
        with self._backend("begin_put.cache_set", digest):
            await self._cache.set(challenge, PendingRecord(digest), self._ttl_seconds)
        self._log.info("challenge issued", extra={"digest": digest.hex()[:12]})
        return challenge

    async def commit_put(
        self, challenge: str, signature: bytes, public_key: PublicKey
    ) -> None:
        with self._backend("commit_put.cache_pop"):
            record = await self._cache.pop(challenge)
        if record.public_key is not None:
            # a deletion token presented as a registration challenge
            raise NotFound()

        message = challenge.encode("ascii")
        if not self._verifier.verify(public_key, signature, message):
            self._log.info(
                "challenge signature rejected",
                extra={"digest": record.email_digest.hex()[:12]},
            )
            raise VerifyFailed()

        with self._backend("commit_put.store_put", record.email_digest):
            await self._store.put(record.email_digest, public_key)
        self._log.info(
            "public key registered", extra={"digest": record.email_digest.hex()[:12]}
        )

    async def begin_delete(self, email: str, public_key: PublicKey) -> str:
        digest = self._digest(email)
        token = self._new_token("begin_delete")
        with self._backend("begin_delete.cache_set", digest):
            await self._cache.set(
                token, PendingRecord(digest, public_key), self._ttl_seconds
            )
        self._log.info("deletion token issued", extra={"digest": digest.hex()[:12]})
        return token

    async def commit_delete(self, token: str) -> None:
        with self._backend("commit_delete.cache_pop"):
            record = await self._cache.pop(token)
        if record.public_key is None:
            # a registration challenge presented as a deletion token
            raise NotFound()

        with self._backend("commit_delete.store_delete", record.email_digest):
            await self._store.delete(record.email_digest, record.public_key)
        self._log.info(
            "public key deleted", extra={"digest": record.email_digest.hex()[:12]}
        )
