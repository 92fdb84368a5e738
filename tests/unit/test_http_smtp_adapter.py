import json

import httpx
import pytest

from keyserver.infrastructure.email.http_smtp_adapter import HttpSmtpEmailAdapter


def make_adapter(handler) -> tuple[HttpSmtpEmailAdapter, httpx.AsyncClient]:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    adapter = HttpSmtpEmailAdapter(
        base_url="http://smtp-mock:8025/", client=client, send_path="send"
    )
    return adapter, client


@pytest.mark.asyncio
async def test_send_posts_json_payload():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["json"] = json.loads(request.content.decode("utf-8"))
        return httpx.Response(202, text="Accepted")

    adapter, client = make_adapter(handler)
    await adapter.send(to="a@example.com", subject="Hi", body="Hello")

    assert seen["url"] == "http://smtp-mock:8025/send"
    assert seen["json"] == {"to": "a@example.com", "subject": "Hi", "body": "Hello"}
    await client.aclose()


@pytest.mark.asyncio
async def test_non_2xx_raises_runtimeerror():
    adapter, client = make_adapter(lambda _: httpx.Response(422, text="nope"))

    with pytest.raises(RuntimeError) as ei:
        await adapter.send(to="x@example.com", subject="S", body="B")

    assert "SMTP responded 422" in str(ei.value)
    assert "nope" in str(ei.value)
    await client.aclose()


@pytest.mark.asyncio
async def test_network_error_is_wrapped_as_runtimeerror():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("boom", request=request)

    adapter, client = make_adapter(handler)
    with pytest.raises(RuntimeError, match="SMTP HTTP error:"):
        await adapter.send(to="x@example.com", subject="S", body="B")
    await client.aclose()


@pytest.mark.asyncio
async def test_aclose_closes_owned_client_only():
    owned = HttpSmtpEmailAdapter(base_url="http://smtp-mock:8025")
    await owned.aclose()
    assert owned._client.is_closed  # type: ignore[attr-defined]

    adapter, shared = make_adapter(lambda _: httpx.Response(200))
    await adapter.aclose()
    assert shared.is_closed is False
    await shared.aclose()
