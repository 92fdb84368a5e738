"""
Async client for the keyserver's own HTTP API.

Error responses are turned back into the domain errors the server raised, so
callers handle InvalidEmail / VerifyFailed / NotFound / DeliveryFailed the same
way whether they talk to a KeyServer in-process or over HTTP.
"""

from __future__ import annotations

import base64
from typing import Mapping, Optional

import httpx
from pydantic import ValidationError

from keyserver.domain.entities import PublicKey, key_type_of
from keyserver.domain.errors import (
    DeliveryFailed,
    DomainError,
    InternalError,
    InvalidEmail,
    NotFound,
    VerifyFailed,
)
from keyserver.schemas.responses import ErrorOut, PublicKeyOut

# (status code, detail) as written by the server's exception handlers
_ERRORS: dict[tuple[int, str], type[DomainError]] = {
    (400, "invalid email"): InvalidEmail,
    (400, "verify failed"): VerifyFailed,
    (404, "not found"): NotFound,
    (502, "email delivery failed"): DeliveryFailed,
    (500, "internal error"): InternalError,
}


class KeyServerClientError(RuntimeError):
    """Transport failure or a response the client cannot map to a domain error."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


def _publickey_json(public_key: PublicKey) -> dict:
    return {"type": int(public_key.type), "key": public_key.key.decode("utf-8")}


class KeyServerClient:
    """
    Redirects are never followed: open() needs the 302's Location header.
    Pass `client` to share an AsyncClient; otherwise one is created and owned.
    """

    def __init__(
        self,
        base_url: str,
        *,
        client: Optional[httpx.AsyncClient] = None,
        timeout: float = 10.0,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._owns_client: bool = client is None
        self._client: httpx.AsyncClient = client or httpx.AsyncClient(
            timeout=timeout, follow_redirects=False
        )

    def _url(self, path: str) -> str:
        return self._base_url + "/" + path.lstrip("/")

    async def _request(self, method: str, path: str, **kwargs) -> httpx.Response:
        try:
            resp = await self._client.request(
                method, self._url(path), follow_redirects=False, **kwargs
            )
        except httpx.HTTPError as e:
            raise KeyServerClientError(f"keyserver HTTP error: {e}") from e
        if resp.is_error:
            self._raise_for(resp)
        return resp

    @staticmethod
    def _raise_for(resp: httpx.Response) -> None:
        try:
            detail = ErrorOut.model_validate(resp.json()).detail
        except (ValueError, ValidationError):
            detail = None
        error = _ERRORS.get((resp.status_code, detail))
        if error is not None:
            raise error()
        if resp.status_code == 404:
            raise NotFound()
        raise KeyServerClientError(
            f"keyserver responded {resp.status_code}: {resp.text[:200]}",
            status_code=resp.status_code,
        )

    async def get_keys(self, email: str) -> list[PublicKey]:
        resp = await self._request("POST", "/v1/getKeys", json={"email": email})
        try:
            keys = [PublicKeyOut.model_validate(item) for item in resp.json()]
        except (ValueError, TypeError, ValidationError) as e:
            raise KeyServerClientError(f"unexpected getKeys body: {e}") from e
        return [
            PublicKey(type=key_type_of(k.type), key=k.key.encode("utf-8"))
            for k in keys
        ]

    async def begin_put(self, email: str) -> None:
        """The challenge goes to the inbox, never back to the caller."""
        await self._request("POST", "/v1/beginPut", json={"email": email})

    async def commit_put(
        self, challenge: str, signature: bytes, public_key: PublicKey
    ) -> None:
        await self._request(
            "POST",
            "/v1/commitPut",
            json={
                "challenge": challenge,
                "signature": base64.b64encode(signature).decode("ascii"),
                "publickey": _publickey_json(public_key),
            },
        )

    async def begin_delete(self, email: str, public_key: PublicKey) -> None:
        await self._request(
            "POST",
            "/v1/beginDelete",
            json={"email": email, "publickey": _publickey_json(public_key)},
        )

    async def commit_delete(self, token: str) -> None:
        await self._request("GET", "/v1/commitDelete", params={"token": token})

    async def open(self, query: Mapping[str, str]) -> str:
        """Returns where /open redirects to for the given query."""
        resp = await self._request("GET", "/open", params=dict(query))
        location = resp.headers.get("location")
        if resp.status_code != 302 or not location:
            raise KeyServerClientError(
                f"expected a redirect from /open, got {resp.status_code}",
                status_code=resp.status_code,
            )
        return location

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()
