from __future__ import annotations

import asyncio
import logging
import random
from typing import Awaitable, Callable

from app.adapters.coingecko import CoinGeckoAdapter
from app.adapters.symbols import is_known_alias, resolve_coin_id
from app.bot import templates
from app.core.entities import AliasMatchMode, extract_coin_from_sentence, extract_coin_name, extract_compare_coins
from app.core.errors import RateLimitedError
from app.services.knowledge import KnowledgeIndex

logger = logging.getLogger(__name__)

OVERVIEW_TOP_N = 10
BEST_COIN_N = 3

PRICE_PROMPT = "Which coin's price would you like to check? Try something like 'price of BTC' or 'ETH price'."
COIN_INFO_PROMPT = "Which coin would you like to know about?"
COMPARE_PROMPT = 'Try: "Compare BTC vs ETH" or "SOL vs AVAX"'


class Responders:
    """One coroutine per intent. Every public handler returns text and never raises."""

    def __init__(
        self,
        market: CoinGeckoAdapter,
        knowledge: KnowledgeIndex,
        currency: str = "inr",
        alias_match_mode: AliasMatchMode = "substring",
        gainers_count: int = 5,
        trending_limit: int = 7,
        rng: random.Random | None = None,
    ) -> None:
        self.market = market
        self.knowledge = knowledge
        self.currency = currency.lower()
        self.alias_match_mode = alias_match_mode
        self.gainers_count = gainers_count
        self.trending_limit = trending_limit
        self.rng = rng or random.Random()

    async def _guard(self, name: str, apology: str, fn: Callable[[], Awaitable[str]]) -> str:
        try:
            return await fn()
        except RateLimitedError as exc:
            logger.warning("handler_rate_limited", extra={"event": "handler_rate_limited", "handler": name, "url": exc.url})
            return templates.RATE_LIMITED
        except Exception:  # noqa: BLE001
            logger.exception("handler_failed", extra={"event": "handler_failed", "handler": name})
            return apology

    async def _search_candidate(self, query: str) -> dict | None:
        results = await self.market.search_coin(query)
        if not results:
            return None
        logger.info(
            "fuzzy_search_retry",
            extra={"event": "fuzzy_search_retry", "query": query, "candidate": results[0].get("id")},
        )
        return results[0]

    async def _quote_with_retry(self, name: str) -> tuple[str, dict] | None:
        """Simple-price quote for ``name``; one fuzzy search retry on a miss.

        Returns (display title, quote) or None.
        """
        coin_id = resolve_coin_id(name) or name
        data = await self.market.get_coin_price(coin_id, self.currency)
        quote = data.get(coin_id)
        if quote:
            return name.upper(), quote
        candidate = await self._search_candidate(name)
        if candidate is None:
            return None
        retry = await self.market.get_coin_price(candidate["id"], self.currency)
        quote = retry.get(candidate["id"])
        if not quote:
            return None
        return f"{candidate.get('name')} ({str(candidate.get('symbol') or '').upper()})", quote

    async def _details_with_retry(self, name: str) -> dict | None:
        coin_id = resolve_coin_id(name) or name
        details = await self.market.get_coin_details(coin_id)
        if details and details.get("market_data"):
            return details
        candidate = await self._search_candidate(name)
        if candidate is None:
            return None
        details = await self.market.get_coin_details(candidate["id"])
        if details and details.get("market_data"):
            return details
        return None

    # -- fixed replies ------------------------------------------------------

    async def greeting(self, message: str = "") -> str:
        return templates.greeting_reply(self.rng)

    async def help(self, message: str = "") -> str:
        return templates.help_text()

    async def unknown(self, message: str = "") -> str:
        return templates.unknown_reply(self.rng)

    # -- market data --------------------------------------------------------

    async def market_overview(self, message: str = "") -> str:
        async def run() -> str:
            stats, top = await asyncio.gather(
                self.market.get_global(),
                self.market.get_top_coins(self.currency, OVERVIEW_TOP_N),
            )
            return templates.market_overview_template(stats.to_dict(), top[:OVERVIEW_TOP_N], self.currency)

        return await self._guard("market_overview", "Couldn't fetch market data right now. Try again in a moment!", run)

    async def price_check(self, message: str) -> str:
        name = extract_coin_name(message)
        if not name:
            return PRICE_PROMPT

        async def run() -> str:
            found = await self._quote_with_retry(name)
            if found is None:
                return templates.not_found(name)
            title, quote = found
            return templates.price_template(title, quote, self.currency)

        return await self._guard("price_check", "Couldn't fetch the price right now. Please try again!", run)

    async def top_gainers(self, message: str = "") -> str:
        async def run() -> str:
            movers = await self.market.get_gainers_losers(self.currency, self.gainers_count)
            return templates.movers_template(movers["gainers"], self.currency)

        return await self._guard("top_gainers", "Couldn't fetch gainers right now. Try again in a moment!", run)

    async def top_losers(self, message: str = "") -> str:
        async def run() -> str:
            movers = await self.market.get_gainers_losers(self.currency, self.gainers_count)
            return templates.movers_template(movers["losers"], self.currency, losers=True)

        return await self._guard("top_losers", "Couldn't fetch losers right now. Try again in a moment!", run)

    async def trending(self, message: str = "") -> str:
        async def run() -> str:
            coins = await self.market.get_trending()
            return templates.trending_template([c.to_dict() for c in coins[: self.trending_limit]])

        return await self._guard("trending", "Couldn't fetch trending coins. Try again shortly!", run)

    async def compare(self, message: str) -> str:
        names = extract_compare_coins(message)
        if not names:
            return COMPARE_PROMPT
        name1, name2 = names

        async def locate(name: str) -> dict | None:
            candidate = await self._search_candidate(name)
            if candidate is None:
                return None
            return await self.market.find_in_snapshot(candidate["id"], self.currency)

        async def run() -> str:
            pair = await self.market.compare_coins(
                resolve_coin_id(name1) or name1, resolve_coin_id(name2) or name2, self.currency
            )
            coin1 = pair["coin1"] or await locate(name1)
            coin2 = pair["coin2"] or await locate(name2)
            if not coin1 and not coin2:
                return (
                    f"Couldn't find data for either {name1} or {name2}. "
                    "Make sure you're using the correct coin names."
                )
            if not coin1:
                return f"Couldn't find {name1}. Try the full name or symbol."
            if not coin2:
                return f"Couldn't find {name2}. Try the full name or symbol."
            return templates.compare_template(coin1, coin2, self.currency)

        return await self._guard("compare", "Couldn't compare those coins right now. Try again shortly!", run)

    async def coin_info(self, message: str) -> str:
        name = extract_coin_name(message)
        if not name:
            return COIN_INFO_PROMPT
        if not is_known_alias(name):
            matches = self.knowledge.search_education(name)
            if matches:
                return templates.education_template(matches[0])

        async def run() -> str:
            details = await self._details_with_retry(name)
            if details is None:
                return f'Couldn\'t find detailed info for "{name}". Try the full name or symbol!'
            return templates.coin_info_template(details, self.currency)

        return await self._guard("coin_info", f'Couldn\'t fetch info for "{name}". Try the exact coin name!', run)

    async def dominance(self, message: str = "") -> str:
        async def run() -> str:
            stats = await self.market.get_global()
            return templates.dominance_template(stats.to_dict())

        return await self._guard("dominance", "Couldn't fetch dominance data right now.", run)

    # -- advice-adjacent ----------------------------------------------------

    async def investment(self, message: str) -> str:
        name = extract_coin_from_sentence(message, self.alias_match_mode)
        if not name:
            return templates.investment_no_coin()

        async def run() -> str:
            found = await self._quote_with_retry(name)
            if found is None:
                return templates.not_found(
                    name, "**⚠️ Disclaimer:** I can show you data, but I can't predict future prices or profits."
                )
            title, quote = found
            return templates.investment_template(title, name, quote, self.currency)

        return await self._guard("investment", "Couldn't fetch that data right now. Try again in a moment!", run)

    async def prediction(self, message: str) -> str:
        name = extract_coin_from_sentence(message, self.alias_match_mode)
        if not name:
            return templates.prediction_no_coin()

        async def run() -> str:
            details = await self._details_with_retry(name)
            if details is None:
                return f'Couldn\'t find data for "{name}".\n\n🔮 Even if I could, price predictions are unreliable. Always DYOR!'
            return templates.prediction_template(details, self.currency)

        return await self._guard("prediction", "Couldn't fetch trend data right now. Try again shortly!", run)

    async def best_coin(self, message: str = "") -> str:
        async def run() -> str:
            trending, movers = await asyncio.gather(
                self.market.get_trending(),
                self.market.get_gainers_losers(self.currency, BEST_COIN_N),
            )
            return templates.best_coin_template([c.to_dict() for c in trending[:BEST_COIN_N]], movers["gainers"])

        return await self._guard("best_coin", "Couldn't fetch market data right now. Try again in a moment!", run)

    # -- knowledge ----------------------------------------------------------

    async def report(self, message: str) -> str:
        results = self.knowledge.search_reports(message)
        if not results:
            return templates.report_catalogue(list(self.knowledge.reports))
        return templates.report_template(results[0].report)

    def education(self, message: str) -> str | None:
        """Glossary answer, or None so the caller can fall through."""
        matches = self.knowledge.search_education(message)
        if not matches:
            return None
        return templates.education_template(matches[0])
