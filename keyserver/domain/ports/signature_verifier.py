from typing import Protocol

from keyserver.domain.entities import PublicKey


class SignatureVerifierPort(Protocol):
    def verify(self, public_key: PublicKey, signature: bytes, message: bytes) -> bool:
        """True only if signature is valid for message under public_key."""
