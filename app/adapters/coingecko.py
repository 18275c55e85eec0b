from __future__ import annotations

import asyncio
import logging
from dataclasses import asdict, dataclass
from typing import Any
from urllib.parse import quote

from app.core.cache import MemoryCache
from app.core.errors import MarketDataError, UpstreamError
from app.core.http import ResilientHTTPClient

logger = logging.getLogger(__name__)


@dataclass
class GlobalStats:
    total_market_cap: float | None
    total_volume: float | None
    market_cap_change_pct_24h: float | None
    btc_dominance: float | None
    eth_dominance: float | None
    active_cryptos: int | None

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class TrendingCoin:
    id: str
    name: str
    symbol: str
    market_cap_rank: int | None
    price_btc: float | None
    thumb: str | None

    def to_dict(self) -> dict:
        return asdict(self)


def change_24h(row: dict) -> float:
    return float(row.get("price_change_percentage_24h") or 0)


class CoinGeckoAdapter:
    """Every upstream query goes through one shared TTL cache.

    A fresh entry is served without a network call. When a refresh fails the
    last good payload is served regardless of age; only a cold key lets the
    error (RateLimitedError / UpstreamError) reach the caller.
    """

    def __init__(
        self,
        http: ResilientHTTPClient,
        cache: MemoryCache,
        base_url: str = "https://api.coingecko.com/api/v3",
        currency: str = "inr",
        market_snapshot_size: int = 100,
        compare_snapshot_size: int = 250,
    ) -> None:
        self.http = http
        self.cache = cache
        self.base_url = base_url.rstrip("/")
        self.currency = currency.lower()
        self.market_snapshot_size = int(market_snapshot_size)
        self.compare_snapshot_size = int(compare_snapshot_size)
        self._inflight: dict[str, asyncio.Future] = {}

    async def _fetch_and_store(self, key: str, url: str, params: dict[str, Any] | None) -> Any:
        data = await self.http.get_json(url, params=params)
        self.cache.set_json(key, data)
        return data

    def _release(self, key: str, task: asyncio.Future) -> None:
        if self._inflight.get(key) is task:
            self._inflight.pop(key, None)
        if not task.cancelled():
            # mark the exception retrieved even if every waiter went away
            task.exception()

    async def _cached_fetch(self, key: str, path: str, params: dict[str, Any] | None = None) -> Any:
        entry = self.cache.get_entry(key)
        if entry is not None and self.cache.is_fresh(entry):
            return entry.payload

        task = self._inflight.get(key)
        if task is None:
            task = asyncio.ensure_future(self._fetch_and_store(key, f"{self.base_url}{path}", params))
            self._inflight[key] = task
            task.add_done_callback(lambda t, k=key: self._release(k, t))

        try:
            # shielded: a caller that gives up does not abort the fetch or the cache write
            return await asyncio.shield(task)
        except MarketDataError as exc:
            stale = self.cache.get_entry(key)
            if stale is None:
                raise
            logger.warning(
                "stale_cache_fallback",
                extra={"event": "stale_cache_fallback", "key": key, "error_code": exc.code},
            )
            return stale.payload

    async def get_global(self) -> GlobalStats:
        data = await self._cached_fetch("cg:global", "/global")
        g = data.get("data") or {}
        caps = g.get("total_market_cap") or {}
        volumes = g.get("total_volume") or {}
        dominance = g.get("market_cap_percentage") or {}
        return GlobalStats(
            total_market_cap=caps.get(self.currency),
            total_volume=volumes.get(self.currency),
            market_cap_change_pct_24h=g.get("market_cap_change_percentage_24h_usd"),
            btc_dominance=dominance.get("btc"),
            eth_dominance=dominance.get("eth"),
            active_cryptos=g.get("active_cryptocurrencies"),
        )

    async def get_top_coins(self, currency: str | None = None, per_page: int = 50, page: int = 1) -> list[dict]:
        cur = (currency or self.currency).lower()
        return await self._cached_fetch(
            f"cg:markets:{cur}:{per_page}:{page}",
            "/coins/markets",
            {
                "vs_currency": cur,
                "order": "market_cap_desc",
                "per_page": per_page,
                "page": page,
                "sparkline": "false",
                "price_change_percentage": "1h,24h,7d",
            },
        )

    async def get_coin_price(self, coin_id: str, currency: str | None = None) -> dict:
        cur = (currency or self.currency).lower()
        return await self._cached_fetch(
            f"cg:price:{coin_id}:{cur}",
            "/simple/price",
            {
                "ids": coin_id,
                "vs_currencies": cur,
                "include_24hr_change": "true",
                "include_24hr_vol": "true",
                "include_market_cap": "true",
            },
        )

    async def get_coin_details(self, coin_id: str) -> dict | None:
        try:
            return await self._cached_fetch(
                f"cg:details:{coin_id}",
                f"/coins/{quote(coin_id, safe='')}",
                {
                    "localization": "false",
                    "tickers": "false",
                    "market_data": "true",
                    "community_data": "false",
                    "developer_data": "false",
                },
            )
        except UpstreamError as exc:
            if exc.status_code == 404:
                return None
            raise

    async def get_trending(self) -> list[TrendingCoin]:
        data = await self._cached_fetch("cg:trending", "/search/trending")
        out: list[TrendingCoin] = []
        for row in data.get("coins") or []:
            item = row.get("item") or {}
            out.append(
                TrendingCoin(
                    id=str(item.get("id", "")),
                    name=str(item.get("name", "")),
                    symbol=str(item.get("symbol", "")),
                    market_cap_rank=item.get("market_cap_rank"),
                    price_btc=item.get("price_btc"),
                    thumb=item.get("thumb"),
                )
            )
        return out

    async def search_coin(self, query: str) -> list[dict]:
        data = await self._cached_fetch(f"cg:search:{query.lower()}", "/search", {"query": query})
        return (data.get("coins") or [])[:5]

    async def get_gainers_losers(self, currency: str | None = None, count: int = 5) -> dict[str, list[dict]]:
        coins = await self.get_top_coins(currency, self.market_snapshot_size)
        ranked = sorted(coins, key=change_24h, reverse=True)
        return {
            "gainers": ranked[:count],
            "losers": list(reversed(ranked[-count:])) if count > 0 else [],
        }

    async def compare_coins(self, coin_id1: str, coin_id2: str, currency: str | None = None) -> dict[str, dict | None]:
        coins = await self.get_top_coins(currency, self.compare_snapshot_size)
        by_id = {c.get("id"): c for c in coins}
        return {"coin1": by_id.get(coin_id1), "coin2": by_id.get(coin_id2)}

    async def find_in_snapshot(self, coin_id: str, currency: str | None = None) -> dict | None:
        coins = await self.get_top_coins(currency, self.compare_snapshot_size)
        return next((c for c in coins if c.get("id") == coin_id), None)
