from typing import Literal

from pydantic import BaseModel, Field

from keyserver.domain.entities import PublicKey


class PublicKeyOut(BaseModel):
    type: int = Field(..., description="Key type tag")
    key: str = Field(..., description="Public key, OpenSSH authorized_keys line")

    @classmethod
    def from_domain(cls, public_key: PublicKey) -> "PublicKeyOut":
        return cls(
            type=int(public_key.type),
            key=public_key.key.decode("utf-8", errors="replace"),
        )


class AcceptedOut(BaseModel):
    status: Literal["accepted"] = "accepted"


class OkOut(BaseModel):
    status: Literal["ok"] = "ok"


class ErrorOut(BaseModel):
    detail: str
