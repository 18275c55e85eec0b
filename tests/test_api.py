from __future__ import annotations

import random
from types import SimpleNamespace

from fastapi.testclient import TestClient

from app.core.cache import MemoryCache
from app.core.config import Settings
from app.core.container import ServiceHub
from app.core.http import ResilientHTTPClient
from app.main import app, build_hub
from app.services.chat_engine import ChatEngine
from app.services.knowledge import KnowledgeIndex
from app.services.responders import Responders


def _client(market) -> TestClient:
    responders = Responders(market, KnowledgeIndex(), rng=random.Random(1))
    # lifespan is skipped: no context manager, so no network or Telegram setup
    app.state.hub = SimpleNamespace(engine=ChatEngine(responders))
    app.state.settings = Settings()
    app.state.bot = None
    return TestClient(app)


def test_health(market) -> None:
    assert _client(market).get("/health").json() == {"status": "ok"}


def test_chat_returns_reply_and_intent(market) -> None:
    resp = _client(market).post("/chat", json={"message": "compare btc vs eth"})
    assert resp.status_code == 200
    body = resp.json()
    assert body["intent"] == "compare"
    assert "Ethereum is outperforming Bitcoin today." in body["reply"]


def test_chat_empty_message(market) -> None:
    body = _client(market).post("/chat", json={"message": "  "}).json()
    assert body["reply"].startswith("Go ahead, ask me something about crypto!")


def test_chat_rejects_bad_payload(market) -> None:
    assert _client(market).post("/chat", json={"message": 42}).status_code == 422


def test_webhook_disabled_without_bot(market) -> None:
    assert _client(market).post("/telegram/webhook", json={}).status_code == 400


def test_settings_demo_key_header() -> None:
    settings = Settings(COINGECKO_API_KEY="demo-key")
    assert settings.coingecko_headers() == {"x-cg-demo-api-key": "demo-key"}


def test_build_hub_wires_services_without_telegram() -> None:
    hub = build_hub(Settings(), ResilientHTTPClient(), MemoryCache())
    assert hub.bot is None
    assert hub.responders.market is hub.market
    assert set(ServiceHub.__dataclass_fields__) == {
        "settings",
        "http",
        "cache",
        "market",
        "knowledge",
        "responders",
        "engine",
        "bot",
    }
    assert not hasattr(hub.market, "fetch_count")
