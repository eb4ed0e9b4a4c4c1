"""Pytest configuration shared across the suite."""

import asyncio
import os
import tempfile
from typing import Callable, Dict, List, Optional
from urllib.parse import parse_qs

# Keep log files out of the working tree; must run before meli_bot is imported
os.environ.setdefault("LOG_DIR", tempfile.mkdtemp(prefix="meli_bot_logs_"))

import httpx
import pytest
import pytest_asyncio

from meli_bot.config.constants import CREDENTIAL_KEY
from meli_bot.config.settings import Settings
from meli_bot.db import init_db
from meli_bot.models.credential import Credential
from meli_bot.server.app import build_services

API_BASE = "https://api.mercadolibre.test"
AUTH_BASE = "https://auth.mercadolivre.test"

T0 = 1_700_000_000_000
SIX_HOURS = 21600


class FakeClock:
    """Settable epoch-millisecond clock."""

    def __init__(self, now: int = T0):
        self.now = now

    def __call__(self) -> int:
        return self.now


class FakeMarketplace:
    """In-process stand-in for the Mercado Livre token, orders and messaging APIs."""

    def __init__(self) -> None:
        self.requests: List[httpx.Request] = []
        self.token_responses: List[object] = []
        self.orders: Dict[str, object] = {}
        self.message_response: object = httpx.Response(200, json={"id": "msg-1"})
        self.token_delay = 0.0
        self.order_gate: Optional[asyncio.Event] = None
        self.transport = httpx.MockTransport(self.handle)

    async def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path

        if path == "/oauth/token":
            if self.token_delay:
                await asyncio.sleep(self.token_delay)
            if not self.token_responses:
                return httpx.Response(400, json={"error": "invalid_grant"})
            return self._resolve(self.token_responses.pop(0))

        if path.startswith("/messages/packs/"):
            return self._resolve(self.message_response)

        if path in self.orders:
            if self.order_gate is not None:
                await self.order_gate.wait()
            return self._resolve(self.orders[path])

        return httpx.Response(404, json={"message": "resource not found"})

    @staticmethod
    def _resolve(value: object) -> httpx.Response:
        if isinstance(value, Exception):
            raise value
        if isinstance(value, httpx.Response):
            return value
        return httpx.Response(200, json=value)

    def calls(self, prefix: str) -> List[httpx.Request]:
        return [r for r in self.requests if r.url.path.startswith(prefix)]

    def token_calls(self) -> List[httpx.Request]:
        return self.calls("/oauth/token")

    def message_calls(self) -> List[httpx.Request]:
        return self.calls("/messages/packs/")

    @staticmethod
    def form(request: httpx.Request) -> Dict[str, str]:
        return {k: v[0] for k, v in parse_qs(request.content.decode()).items()}


def token_body(
    access_token: str = "APP_USR-new-access",
    refresh_token: str = "TG-new-refresh",
    expires_in: int = SIX_HOURS,
) -> dict:
    return {
        "access_token": access_token,
        "token_type": "Bearer",
        "expires_in": expires_in,
        "scope": "offline_access read write",
        "user_id": 999,
        "refresh_token": refresh_token,
    }


def order_body(
    order_id: int = 2000001,
    status: str = "paid",
    catalog_id: str = "MLBU1425061106",
    title: str = "Refrigerista Pro",
    pack_id: Optional[int] = None,
) -> dict:
    return {
        "id": order_id,
        "status": status,
        "pack_id": pack_id,
        "buyer": {"id": 111, "nickname": "COMPRADOR"},
        "seller": {"id": 999},
        "order_items": [
            {
                "item": {"id": catalog_id, "title": title},
                "quantity": 1,
                "unit_price": 49.9,
            }
        ],
        "total_amount": 49.9,
        "currency_id": "BRL",
    }


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def marketplace() -> FakeMarketplace:
    return FakeMarketplace()


@pytest.fixture
def config(tmp_path) -> Settings:
    return Settings(
        ml_app_id="test-app",
        ml_client_secret="test-secret",
        ml_redirect_uri="https://bot.example.com/callback",
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'bot.db'}",
        api_base_url=API_BASE,
        auth_base_url=AUTH_BASE,
        http_timeout_seconds=2.0,
        _env_file=None,
    )


@pytest_asyncio.fixture
async def services(config, marketplace, clock):
    services = build_services(config, transport=marketplace.transport)
    services.token_manager.clock = clock
    await init_db(services.engine)
    yield services
    await services.close()


@pytest.fixture
def store_credential(services, clock) -> Callable:
    """Write a credential straight into the store, bypassing the manager."""

    async def _store(
        access_token: str = "APP_USR-old-access",
        refresh_token: str = "TG-old-refresh",
        expires_in: int = SIX_HOURS,
        issued_at_ms: Optional[int] = None,
    ) -> Credential:
        credential = Credential(
            access_token=access_token,
            refresh_token=refresh_token,
            expires_in=expires_in,
            issued_at_ms=clock.now if issued_at_ms is None else issued_at_ms,
        )
        await services.token_manager.repository.upsert(CREDENTIAL_KEY, credential)
        return credential

    return _store
