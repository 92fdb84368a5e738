from __future__ import annotations

import hashlib
import hmac
import secrets

import email_validator

from keyserver.domain.errors import InvalidEmail

TOKEN_BYTES = 32


def new_token() -> str:
    """256 random bits from the OS CSPRNG, URL-safe base64 without padding."""
    return secrets.token_urlsafe(TOKEN_BYTES)


def new_challenge() -> str:
    return new_token()


def validate_email(email: str) -> str:
    """
    Syntactic check only; deliverability (DNS) is never consulted.

    Returns the normalized address: surrounding whitespace dropped, domain
    lowercased (and IDNA-normalized). The local part keeps its case, since
    mailboxes may distinguish it. Raises InvalidEmail.
    """
    if not isinstance(email, str) or not email.strip():
        raise InvalidEmail()
    try:
        info = email_validator.validate_email(
            email.strip(), check_deliverability=False
        )
    except email_validator.EmailNotValidError as e:
        raise InvalidEmail(str(e)) from e
    return info.normalized


class Digester:
    """
    Salted one-way mapping from an email address to an opaque identity key.
    digest = HMAC-SHA256(salt, email)

    The address is hashed as given; callers pass the output of validate_email.
    """

    def __init__(self, salt: bytes) -> None:
        self._salt = salt

    def of(self, email: str) -> bytes:
        data = email.encode("utf-8", errors="surrogatepass")
        return hmac.new(self._salt, data, hashlib.sha256).digest()
