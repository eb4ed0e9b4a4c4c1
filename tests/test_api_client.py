import json

import httpx
import pytest

from meli_bot.api.client import MeliAPIClient
from meli_bot.core.errors import AuthExchangeFailed, DispatchFailed, UpstreamFetchFailed
from meli_bot.models.order import OutboundMessage


def make_client(handler) -> MeliAPIClient:
    return MeliAPIClient(
        app_id="test-app",
        client_secret="test-secret",
        redirect_uri="https://bot.example.com/callback",
        api_base_url="https://api.mercadolibre.test",
        timeout=1.0,
        transport=httpx.MockTransport(handler),
    )


def raise_timeout(request: httpx.Request) -> httpx.Response:
    raise httpx.ReadTimeout("too slow", request=request)


def test_authorization_url_is_deterministic() -> None:
    client = make_client(lambda request: httpx.Response(200))

    assert client.authorization_url() == client.authorization_url()
    assert client.authorization_url() == (
        "https://auth.mercadolivre.com.br/authorization?response_type=code"
        "&client_id=test-app&redirect_uri=https%3A%2F%2Fbot.example.com%2Fcallback"
    )


@pytest.mark.asyncio
async def test_order_fetch_timeout_is_upstream_fetch_failed() -> None:
    client = make_client(raise_timeout)

    with pytest.raises(UpstreamFetchFailed):
        await client.get_resource("/orders/1", "token")

    await client.close()


@pytest.mark.asyncio
async def test_non_json_order_body_is_upstream_fetch_failed() -> None:
    client = make_client(lambda request: httpx.Response(200, text="<html>maintenance</html>"))

    with pytest.raises(UpstreamFetchFailed) as exc_info:
        await client.get_resource("/orders/1", "token")

    assert "maintenance" in exc_info.value.detail
    await client.close()


@pytest.mark.asyncio
async def test_message_timeout_is_dispatch_failed() -> None:
    client = make_client(raise_timeout)
    message = OutboundMessage(seller_id=999, buyer_id=111, text="Olá")

    with pytest.raises(DispatchFailed):
        await client.send_message(2000001, message, "token")

    await client.close()


@pytest.mark.asyncio
async def test_message_is_posted_as_post_sale_with_wire_payload() -> None:
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(201, json={"id": "msg-1"})

    client = make_client(handler)
    message = OutboundMessage(seller_id=999, buyer_id=111, text="Olá")

    result = await client.send_message(2000001, message, "token")

    assert result == {"id": "msg-1"}
    (request,) = seen
    assert request.url.params["tag"] == "post_sale"
    assert json.loads(request.content) == {"from": {"user_id": 999}, "to": {"user_id": 111}, "text": "Olá"}
    await client.close()


@pytest.mark.asyncio
async def test_code_exchange_network_error_is_auth_exchange_failed() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    client = make_client(handler)

    with pytest.raises(AuthExchangeFailed):
        await client.exchange_code("TG-code")

    await client.close()
