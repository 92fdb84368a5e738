from __future__ import annotations

from typing import Optional

import httpx

from keyserver.domain.ports.email_port import EmailPort


class HttpSmtpEmailAdapter(EmailPort):
    """Posts {to, subject, body} as JSON to an HTTP-to-SMTP relay."""

    def __init__(
        self,
        base_url: str,
        *,
        client: Optional[httpx.AsyncClient] = None,
        timeout: float = 5.0,
        send_path: str = "/send",
    ) -> None:
        self._url = base_url.rstrip("/") + "/" + send_path.lstrip("/")
        self._owns_client: bool = client is None
        self._client: httpx.AsyncClient = client or httpx.AsyncClient(timeout=timeout)

    async def send(self, *, to: str, subject: str, body: str) -> None:
        try:
            resp = await self._client.post(
                self._url, json={"to": to, "subject": subject, "body": body}
            )
        except httpx.HTTPError as e:
            raise RuntimeError(f"SMTP HTTP error: {e}") from e
        if resp.is_error:
            raise RuntimeError(f"SMTP responded {resp.status_code}: {resp.text[:200]}")

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()
