import base64

from pydantic import BaseModel, Field

from keyserver.domain.entities import MAX_KEY_TYPE, KeyType, PublicKey, key_type_of


class PublicKeyIn(BaseModel):
    type: int = Field(
        int(KeyType.SSH_ED25519),
        ge=0,
        le=MAX_KEY_TYPE,
        description="Key type tag (0 = ssh-ed25519)",
    )
    key: str = Field(
        ..., description="Public key, OpenSSH authorized_keys line", max_length=8192
    )

    def to_domain(self) -> PublicKey:
        return PublicKey(type=key_type_of(self.type), key=self.key.encode("utf-8"))


# email is a plain str here: syntax is checked by the key server, so a bad
# address gets the same InvalidEmail answer whatever the transport.
class EmailIn(BaseModel):
    email: str = Field(..., description="Identity email address", max_length=320)


class BeginDeleteIn(EmailIn):
    publickey: PublicKeyIn


class CommitPutIn(BaseModel):
    challenge: str = Field(..., description="Challenge received by email")
    signature: str = Field(
        ..., description="Base64 signature over the challenge string's bytes"
    )
    publickey: PublicKeyIn

    def signature_bytes(self) -> bytes:
        return base64.b64decode(self.signature, validate=True)
