from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Awaitable, Callable

from app.adapters.symbols import is_known_alias
from app.bot import templates
from app.core.entities import extract_coin_from_sentence, extract_coin_name
from app.core.nlu import INTENT_TABLE, Intent, IntentRule, classify
from app.services.responders import Responders

logger = logging.getLogger(__name__)

Handler = Callable[[str], Awaitable[str]]


@dataclass
class ChatReply:
    reply: str
    intent: Intent
    latency_ms: int = 0


class ChatEngine:
    """Stateless dispatcher: classify, route to a responder, never raise."""

    def __init__(self, responders: Responders, table: tuple[IntentRule, ...] = INTENT_TABLE) -> None:
        self.responders = responders
        self.table = table
        r = responders
        self._handlers: dict[Intent, Handler] = {
            Intent.GREETING: r.greeting,
            Intent.HELP: r.help,
            Intent.MARKET_OVERVIEW: r.market_overview,
            Intent.PRICE_CHECK: r.price_check,
            Intent.TOP_GAINERS: r.top_gainers,
            Intent.TOP_LOSERS: r.top_losers,
            Intent.TRENDING: r.trending,
            Intent.COMPARE: r.compare,
            Intent.COIN_INFO: r.coin_info,
            Intent.REPORT: r.report,
            Intent.DOMINANCE: r.dominance,
            Intent.INVESTMENT: r.investment,
            Intent.PREDICTION: r.prediction,
            Intent.BEST_COIN: r.best_coin,
            Intent.EDUCATION: self._education,
            Intent.UNKNOWN: self._fallback,
        }

    async def _education(self, raw: str) -> str:
        answer = self.responders.education(raw)
        if answer is not None:
            return answer
        return await self.responders.coin_info(raw)

    async def _fallback(self, raw: str) -> str:
        answer = self.responders.education(raw)
        if answer is not None:
            return answer

        name = extract_coin_name(raw)
        if name and is_known_alias(name):
            return await self.responders.price_check(raw)

        mentioned = extract_coin_from_sentence(raw, self.responders.alias_match_mode)
        if mentioned and is_known_alias(mentioned):
            return await self.responders.investment(raw)

        return await self.responders.unknown(raw)

    async def respond(self, message: str | None) -> ChatReply:
        if not message or not message.strip():
            return ChatReply(templates.EMPTY_PROMPT, Intent.UNKNOWN)

        started = time.perf_counter()
        parsed = classify(message, self.table)
        handler = self._handlers.get(parsed.intent, self._fallback)
        try:
            reply = await handler(parsed.raw)
        except Exception:  # noqa: BLE001
            logger.exception("dispatch_failed", extra={"event": "dispatch_failed", "intent": parsed.intent.value})
            reply = templates.unknown_reply(self.responders.rng)

        latency_ms = int((time.perf_counter() - started) * 1000)
        logger.info(
            "message_processed",
            extra={"event": "message_processed", "intent": parsed.intent.value, "latency_ms": latency_ms},
        )
        return ChatReply(reply, parsed.intent, latency_ms)

    async def process_message(self, message: str | None) -> str:
        return (await self.respond(message)).reply
