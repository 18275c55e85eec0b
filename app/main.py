from __future__ import annotations

import asyncio
import contextlib
import logging
import random
from contextlib import asynccontextmanager

from aiogram import Bot, Dispatcher
from aiogram.types import BotCommand, Update
from fastapi import FastAPI, HTTPException, Request
from pydantic import BaseModel, Field

from app.adapters.coingecko import CoinGeckoAdapter
from app.bot.handlers import init_handlers, router
from app.core.cache import MemoryCache
from app.core.config import Settings, get_settings
from app.core.container import ServiceHub
from app.core.http import ResilientHTTPClient
from app.core.logging import setup_logging
from app.services.chat_engine import ChatEngine
from app.services.knowledge import KnowledgeIndex
from app.services.responders import Responders

logger = logging.getLogger(__name__)


class ChatRequest(BaseModel):
    message: str = Field(default="", max_length=2000)


class ChatResponse(BaseModel):
    reply: str
    intent: str


async def _sync_bot_commands(bot: Bot) -> None:
    command_specs = [
        ("help", "Show examples + what I can do"),
        ("start", "Start the bot / show quick intro"),
    ]
    await bot.set_my_commands([BotCommand(command=c, description=d) for c, d in command_specs])


def build_hub(settings: Settings, http: ResilientHTTPClient, cache: MemoryCache, bot: Bot | None = None) -> ServiceHub:
    market = CoinGeckoAdapter(
        http=http,
        cache=cache,
        base_url=settings.coingecko_base_url,
        currency=settings.vs_currency,
        market_snapshot_size=settings.market_snapshot_size,
        compare_snapshot_size=settings.compare_snapshot_size,
    )
    knowledge = KnowledgeIndex()
    responders = Responders(
        market,
        knowledge,
        currency=settings.vs_currency,
        alias_match_mode=settings.alias_match_mode,
        gainers_count=settings.gainers_count,
        trending_limit=settings.trending_limit,
        rng=random.Random(settings.random_seed),
    )
    return ServiceHub(
        settings=settings,
        http=http,
        cache=cache,
        market=market,
        knowledge=knowledge,
        responders=responders,
        engine=ChatEngine(responders),
        bot=bot,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    setup_logging(settings.log_level)

    cache = MemoryCache(ttl=settings.cache_ttl_sec)
    http = ResilientHTTPClient(
        timeout=settings.http_timeout_sec,
        retries=settings.http_retries,
        headers=settings.coingecko_headers(),
    )

    bot = Bot(token=settings.telegram_bot_token) if settings.telegram_bot_token else None
    dp = Dispatcher()
    hub = build_hub(settings, http, cache, bot)

    polling_task = None
    if bot is not None:
        try:
            await _sync_bot_commands(bot)
        except Exception as exc:  # noqa: BLE001
            logger.warning("set_bot_commands_failed", extra={"event": "set_bot_commands_failed", "error": str(exc)})
        init_handlers(hub)
        dp.include_router(router)

        if settings.telegram_use_webhook:
            webhook_url = settings.telegram_webhook_url.rstrip("/") + settings.telegram_webhook_path
            try:
                await bot.set_webhook(webhook_url, secret_token=settings.telegram_webhook_secret or None)
                logger.info("webhook_configured", extra={"event": "webhook", "url": webhook_url})
            except Exception as exc:  # noqa: BLE001
                logger.exception(
                    "webhook_configure_failed",
                    extra={"event": "webhook_error", "url": webhook_url, "error": str(exc)},
                )
        else:
            polling_task = asyncio.create_task(dp.start_polling(bot, allowed_updates=dp.resolve_used_update_types()))
    else:
        logger.info("telegram_disabled", extra={"event": "telegram_disabled"})

    app.state.settings = settings
    app.state.hub = hub
    app.state.dp = dp
    app.state.bot = bot
    app.state.polling_task = polling_task

    try:
        yield
    finally:
        if polling_task:
            polling_task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await polling_task
        if bot is not None:
            await bot.session.close()
        await http.close()


def create_app() -> FastAPI:
    settings = get_settings()
    app = FastAPI(title="CryptoChat", version="1.0.0", lifespan=lifespan)

    @app.get("/health")
    async def health() -> dict:
        return {"status": "ok"}

    @app.post("/chat", response_model=ChatResponse)
    async def chat(payload: ChatRequest) -> ChatResponse:
        result = await app.state.hub.engine.respond(payload.message)
        return ChatResponse(reply=result.reply, intent=result.intent.value)

    @app.post(settings.telegram_webhook_path)
    async def telegram_webhook(req: Request) -> dict:
        app_settings = app.state.settings
        if not app_settings.telegram_use_webhook or app.state.bot is None:
            raise HTTPException(status_code=400, detail="Webhook mode disabled")

        if app_settings.telegram_webhook_secret:
            secret = req.headers.get("X-Telegram-Bot-Api-Secret-Token", "")
            if secret != app_settings.telegram_webhook_secret:
                raise HTTPException(status_code=403, detail="Invalid secret")

        payload = await req.json()
        update = Update.model_validate(payload)
        await app.state.dp.feed_update(app.state.bot, update)
        return {"ok": True}

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run("app.main:app", host=settings.host, port=settings.port, reload=False)
