from __future__ import annotations

from typing import Protocol


class NotifierPort(Protocol):
    async def send_challenge(self, email: str, challenge: str) -> None:
        """
        Deliver a registration challenge. The recipient signs it with the
        private key being registered and calls commitPut.
        """

    async def send_token(self, email: str, token: str) -> None:
        """
        Deliver a deletion token. The recipient confirms by calling
        commitDelete with it (usually by opening a link).
        """
