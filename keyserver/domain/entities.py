from __future__ import annotations

import base64
from dataclasses import dataclass
from enum import IntEnum
from typing import Any


class KeyType(IntEnum):
    SSH_ED25519 = 0


# type tags are persisted in a signed 16-bit column
MAX_KEY_TYPE = 2**15 - 1


def key_type_of(value: int) -> KeyType | int:
    """Known tags become KeyType members; unknown ones stay plain ints."""
    try:
        return KeyType(value)
    except ValueError:
        return int(value)


@dataclass(frozen=True)
class PublicKey:
    # For SSH_ED25519, key is an OpenSSH authorized_keys line
    # ("ssh-ed25519 AAAA... [comment]").
    type: KeyType | int
    key: bytes

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": int(self.type),
            "key": base64.b64encode(self.key).decode("ascii"),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "PublicKey":
        return cls(
            type=key_type_of(int(data["type"])),
            key=base64.b64decode(data["key"]),
        )

    def sort_key(self) -> tuple[int, bytes]:
        return int(self.type), self.key


@dataclass(frozen=True)
class PendingRecord:
    """What a challenge or token is bound to while it waits in the cache."""

    email_digest: bytes
    public_key: PublicKey | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "email_digest": base64.b64encode(self.email_digest).decode("ascii"),
            "public_key": self.public_key.to_dict() if self.public_key else None,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "PendingRecord":
        public_key = data.get("public_key")
        return cls(
            email_digest=base64.b64decode(data["email_digest"]),
            public_key=PublicKey.from_dict(public_key) if public_key else None,
        )
