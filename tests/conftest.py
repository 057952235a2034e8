import json
from typing import Any

import httpx
import pytest
import pytest_asyncio

from listbot.api.deps import build_services
from listbot.core.config import Settings
from listbot.main import create_app


BOT_TOKEN = "123456:TEST-token"
CHANNEL_ID = "@test_channel"
BACKEND_URL = "https://backend.example.com/api"
MINI_APP_URL = "https://app.example.com"


def _message(message_id: int, chat_id: Any = -100) -> dict:
    return {"message_id": message_id, "chat": {"id": chat_id, "type": "channel"}, "date": 1700000000}


class FakeUpstream:
    """
    Stands in for both the Bot API and the listings backend behind one
    httpx.MockTransport. Records every Bot API call as (method, json body).
    """

    def __init__(self) -> None:
        self.calls: list[tuple[str, dict]] = []
        self.responses: dict[str, Any] = {}
        self.listings: dict[str, Any] = {}
        self.backend_error: Exception | None = None
        self.backend_requests: list[str] = []
        self._next_id = 100

    def methods(self) -> list[str]:
        return [m for m, _ in self.calls]

    def bodies(self, method: str) -> list[dict]:
        return [b for m, b in self.calls if m == method]

    def _default(self, method: str, body: dict) -> dict:
        if method in ("sendMessage", "sendPhoto"):
            self._next_id += 1
            return {"ok": True, "result": _message(self._next_id, body.get("chat_id"))}
        if method == "sendMediaGroup":
            out = []
            for _ in body.get("media", []):
                self._next_id += 1
                out.append(_message(self._next_id, body.get("chat_id")))
            return {"ok": True, "result": out}
        if method == "getMe":
            return {"ok": True, "result": {"id": 123456, "is_bot": True, "first_name": "Mela", "username": "mela_bot"}}
        return {"ok": True, "result": True}

    def handler(self, request: httpx.Request) -> httpx.Response:
        if request.url.host == "api.telegram.org":
            method = request.url.path.rsplit("/", 1)[-1]
            body = json.loads(request.content or b"{}")
            self.calls.append((method, body))
            resp = self.responses.get(method)
            if isinstance(resp, Exception):
                raise resp
            if resp is None:
                resp = self._default(method, body)
            return httpx.Response(200 if resp.get("ok") else resp.get("error_code", 400), json=resp)

        if request.url.host == "backend.example.com":
            self.backend_requests.append(request.url.path)
            if self.backend_error is not None:
                raise self.backend_error
            listing_id = request.url.path.rstrip("/").rsplit("/", 1)[-1]
            if listing_id not in self.listings:
                return httpx.Response(404, json={"detail": "Not found."})
            return httpx.Response(200, json=self.listings[listing_id])

        return httpx.Response(404, text="unexpected host")


def make_settings(**overrides: Any) -> Settings:
    values: dict[str, Any] = {
        "telegram_bot_token": BOT_TOKEN,
        "telegram_channel_id": CHANNEL_ID,
        "backend_api_url": BACKEND_URL,
        "mini_app_url": MINI_APP_URL,
        "telegram_webhook_secret": "",
        "telemetry_enabled": False,
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


@pytest.fixture
def upstream() -> FakeUpstream:
    return FakeUpstream()


@pytest.fixture
def settings() -> Settings:
    return make_settings()


@pytest_asyncio.fixture
async def services(settings, upstream):
    svc = build_services(settings, transport=httpx.MockTransport(upstream.handler))
    yield svc
    await svc.aclose()


@pytest_asyncio.fixture
async def client(settings, services):
    app = create_app(settings, services=services)
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
def listing_payload() -> dict:
    return {
        "id": 42,
        "property_type": "apartment",
        "property_type_other": None,
        "description": "Nice flat",
        "location": "Bole",
        "bedrooms": 2,
        "bathrooms": 1,
        "amenities": ["water", "internet"],
        "photos": [],
        "monthly_rent": "1500",
        "currency": "USD",
        "initial_deposit": None,
        "negotiable": True,
        "phone_number": "+251911000000",
    }
