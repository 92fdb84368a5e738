"""Signature verification, dispatched on the public key's type tag."""

from __future__ import annotations

import logging
from typing import Mapping

from cryptography.exceptions import InvalidSignature, UnsupportedAlgorithm
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PublicKey

from keyserver.domain.entities import KeyType, PublicKey
from keyserver.domain.ports.signature_verifier import SignatureVerifierPort

logger = logging.getLogger("keyserver.domain.verifiers")

ED25519_SIGNATURE_SIZE = 64


class SshEd25519Verifier(SignatureVerifierPort):
    """Ed25519 keys in OpenSSH authorized_keys format."""

    def __init__(self, log: logging.Logger | None = None) -> None:
        self._log = log or logger

    def _load(self, public_key: PublicKey) -> Ed25519PublicKey | None:
        try:
            loaded = serialization.load_ssh_public_key(public_key.key.strip())
        except (ValueError, UnsupportedAlgorithm) as e:
            self._log.info("unparseable ssh public key", extra={"error": str(e)})
            return None
        if not isinstance(loaded, Ed25519PublicKey):
            self._log.info(
                "ssh public key is not ed25519",
                extra={"key_class": type(loaded).__name__},
            )
            return None
        return loaded

    def verify(self, public_key: PublicKey, signature: bytes, message: bytes) -> bool:
        if public_key.type != KeyType.SSH_ED25519:
            return False
        if len(signature) != ED25519_SIGNATURE_SIZE:
            self._log.info(
                "bad ed25519 signature length", extra={"length": len(signature)}
            )
            return False
        key = self._load(public_key)
        if key is None:
            return False
        try:
            # message is the raw challenge, never a hash of it
            key.verify(signature, message)
        except InvalidSignature:
            self._log.info("ed25519 signature mismatch")
            return False
        return True


class KeyTypeVerifier(SignatureVerifierPort):
    """
    Picks a verifier by public_key.type.

    The type tag comes from request bodies and persisted records, so an
    unregistered tag is a plain rejection rather than an exception.
    """

    def __init__(
        self,
        verifiers: Mapping[KeyType, SignatureVerifierPort] | None = None,
        log: logging.Logger | None = None,
    ) -> None:
        self._log = log or logger
        if verifiers is None:
            verifiers = {KeyType.SSH_ED25519: SshEd25519Verifier(self._log)}
        self._verifiers = dict(verifiers)

    def verify(self, public_key: PublicKey, signature: bytes, message: bytes) -> bool:
        verifier = self._verifiers.get(public_key.type)
        if verifier is None:
            self._log.warning(
                "no verifier for key type", extra={"key_type": int(public_key.type)}
            )
            return False
        return verifier.verify(public_key, signature, message)
