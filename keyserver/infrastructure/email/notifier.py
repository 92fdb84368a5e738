from __future__ import annotations

import logging
from urllib.parse import quote

from keyserver.domain.errors import DeliveryFailed
from keyserver.domain.ports.email_port import EmailPort
from keyserver.domain.ports.notifier import NotifierPort

logger = logging.getLogger("keyserver.infrastructure.email.notifier")

CHALLENGE_SUBJECT = "Confirm your public key registration"
CHALLENGE_BODY = """\
Someone asked to register a public key for {email}.

To finish, sign the challenge below with the private key you want to register
and submit the challenge, the signature and the public key to commitPut.

    {challenge}

If this was not you, ignore this message. The challenge expires on its own.
"""

TOKEN_SUBJECT = "Confirm your public key removal"
TOKEN_BODY = """\
Someone asked to remove a public key registered for {email}.

Open this link to confirm:

    {link}

If this was not you, ignore this message. The link expires on its own.
"""


class EmailNotifier(NotifierPort):
    """
    Renders challenge/token messages and sends them through an EmailPort.

    Deletion links point at {public_base_url}/v1/commitDelete?token=...
    """

    def __init__(self, email: EmailPort, *, public_base_url: str) -> None:
        self._email = email
        self._base_url = public_base_url.rstrip("/")

    def deletion_link(self, token: str) -> str:
        return f"{self._base_url}/v1/commitDelete?token={quote(token, safe='')}"

    async def _send(self, to: str, subject: str, body: str) -> None:
        try:
            await self._email.send(to=to, subject=subject, body=body)
        except RuntimeError as e:
            raise DeliveryFailed(str(e)) from e

    async def send_challenge(self, email: str, challenge: str) -> None:
        body = CHALLENGE_BODY.format(email=email, challenge=challenge)
        await self._send(email, CHALLENGE_SUBJECT, body)

    async def send_token(self, email: str, token: str) -> None:
        body = TOKEN_BODY.format(email=email, link=self.deletion_link(token))
        await self._send(email, TOKEN_SUBJECT, body)


def _redact(email: str) -> str:
    _, _, domain = email.rpartition("@")
    return f"***@{domain}"


class LoggingNotifier(NotifierPort):
    """Logs every send (recipient redacted, no secrets) and forwards it."""

    def __init__(self, inner: NotifierPort, log: logging.Logger | None = None) -> None:
        self._inner = inner
        self._log = log or logger

    async def send_challenge(self, email: str, challenge: str) -> None:
        self._log.info("sending challenge", extra={"to": _redact(email)})
        try:
            await self._inner.send_challenge(email, challenge)
        except DeliveryFailed:
            self._log.warning("challenge delivery failed", extra={"to": _redact(email)})
            raise

    async def send_token(self, email: str, token: str) -> None:
        self._log.info("sending deletion token", extra={"to": _redact(email)})
        try:
            await self._inner.send_token(email, token)
        except DeliveryFailed:
            self._log.warning("token delivery failed", extra={"to": _redact(email)})
            raise
