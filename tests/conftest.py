from __future__ import annotations

import pytest

from app.adapters.coingecko import GlobalStats, TrendingCoin


def _row(coin_id: str, name: str, symbol: str, change: float, rank: int) -> dict:
    return {
        "id": coin_id,
        "name": name,
        "symbol": symbol,
        "current_price": 1000.0 * rank,
        "price_change_percentage_24h": change,
        "market_cap": 1e12 / rank,
        "total_volume": 1e10 / rank,
        "market_cap_rank": rank,
    }


class FakeMarket:
    def __init__(self) -> None:
        self.fail: Exception | None = None
        self.rows = [
            _row("bitcoin", "Bitcoin", "btc", 2.0, 1),
            _row("ethereum", "Ethereum", "eth", 5.0, 2),
            _row("solana", "Solana", "sol", -4.0, 5),
        ]
        self.prices = {
            "bitcoin": {"inr": 5_500_000.0, "inr_24h_change": 2.0, "inr_market_cap": 1.1e14, "inr_24h_vol": 3.0e12},
            "solana": {"inr": 12_000.0, "inr_24h_change": 4.2, "inr_market_cap": 5.0e12, "inr_24h_vol": 2.0e11},
            "bonk-inu": {"inr": 0.0021, "inr_24h_change": -1.0, "inr_market_cap": 1.0e11, "inr_24h_vol": 9.0e9},
        }
        self.global_stats = GlobalStats(2.1e14, 8.0e12, 1.5, 58.0, 16.0, 12000)
        self.search = {"bonk": [{"id": "bonk-inu", "name": "Bonk", "symbol": "bonk"}]}
        self.details = {
            "cardano": {
                "name": "Cardano",
                "symbol": "ada",
                "market_cap_rank": 9,
                "description": {"en": "<p>Cardano is</p> a proof-of-stake chain."},
                "market_data": {
                    "current_price": {"inr": 55.0},
                    "price_change_percentage_24h": 1.0,
                    "price_change_percentage_7d": 2.0,
                    "price_change_percentage_30d": 3.0,
                    "market_cap": {"inr": 2.0e12},
                    "total_volume": {"inr": 4.0e10},
                    "circulating_supply": 35_000_000_000.0,
                    "max_supply": None,
                },
            }
        }

    def _check(self) -> None:
        if self.fail is not None:
            raise self.fail

    async def get_global(self) -> GlobalStats:
        self._check()
        return self.global_stats

    async def get_top_coins(self, currency=None, per_page=50, page=1) -> list[dict]:
        self._check()
        return self.rows[:per_page]

    async def get_coin_price(self, coin_id: str, currency=None) -> dict:
        self._check()
        return {coin_id: self.prices[coin_id]} if coin_id in self.prices else {}

    async def get_coin_details(self, coin_id: str):
        self._check()
        return self.details.get(coin_id)

    async def get_trending(self) -> list[TrendingCoin]:
        self._check()
        return [TrendingCoin("pepe", "Pepe", "PEPE", 30, None, None)]

    async def search_coin(self, query: str) -> list[dict]:
        self._check()
        return self.search.get(query, [])

    async def get_gainers_losers(self, currency=None, count: int = 5) -> dict:
        self._check()
        ranked = sorted(self.rows, key=lambda r: r["price_change_percentage_24h"], reverse=True)
        return {"gainers": ranked[:count], "losers": list(reversed(ranked[-count:]))}

    async def compare_coins(self, coin_id1: str, coin_id2: str, currency=None) -> dict:
        self._check()
        by_id = {r["id"]: r for r in self.rows}
        return {"coin1": by_id.get(coin_id1), "coin2": by_id.get(coin_id2)}

    async def find_in_snapshot(self, coin_id: str, currency=None):
        self._check()
        return next((r for r in self.rows if r["id"] == coin_id), None)


@pytest.fixture
def market() -> FakeMarket:
    return FakeMarket()
