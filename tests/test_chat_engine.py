from __future__ import annotations

import random

import pytest

from app.adapters.coingecko import GlobalStats
from app.bot import templates
from app.core.errors import RateLimitedError
from app.core.nlu import Intent
from app.services.chat_engine import ChatEngine
from app.services.knowledge import KnowledgeIndex
from app.services.responders import Responders


def _engine(market, seed: int = 7) -> ChatEngine:
    responders = Responders(market, KnowledgeIndex(), rng=random.Random(seed))
    return ChatEngine(responders)


@pytest.mark.asyncio
@pytest.mark.parametrize("text", ["", "   ", None])
async def test_empty_message_gets_prompt(market, text) -> None:
    assert await _engine(market).process_message(text) == templates.EMPTY_PROMPT


@pytest.mark.asyncio
async def test_greeting_is_seeded(market) -> None:
    first = await _engine(market, seed=3).process_message("hi")
    second = await _engine(market, seed=3).process_message("hi")
    assert first == second
    assert first in templates.GREETING_REPLIES


@pytest.mark.asyncio
async def test_compare_names_outperformer(market) -> None:
    result = await _engine(market).respond("compare btc and eth")
    assert result.intent == Intent.COMPARE
    assert "⚖️ **Bitcoin vs Ethereum**" in result.reply
    assert "Ethereum is outperforming Bitcoin today." in result.reply


@pytest.mark.asyncio
async def test_compare_equal_change_is_lockstep(market) -> None:
    market.rows[1]["price_change_percentage_24h"] = 2.0
    reply = await _engine(market).process_message("compare btc vs eth")
    assert "⚖️ Bitcoin and Ethereum are moving in lockstep today." in reply
    assert "outperforming" not in reply


@pytest.mark.asyncio
async def test_compare_reports_missing_coin(market) -> None:
    reply = await _engine(market).process_message("compare btc vs zzz")
    assert reply == "Couldn't find zzz. Try the full name or symbol."


@pytest.mark.asyncio
async def test_price_check_for_alias(market) -> None:
    reply = await _engine(market).process_message("price of btc")
    assert reply.startswith("**BTC**")
    assert "₹55.00L" in reply
    assert "+2.00%" in reply


@pytest.mark.asyncio
async def test_price_check_fuzzy_search_retry(market) -> None:
    reply = await _engine(market).process_message("price of bonk")
    assert reply.startswith("**Bonk (BONK)**")
    assert "₹0.002100" in reply


@pytest.mark.asyncio
async def test_price_check_not_found(market) -> None:
    reply = await _engine(market).process_message("price of zzzcoin")
    assert reply.startswith('Couldn\'t find "zzzcoin".')


@pytest.mark.asyncio
async def test_rate_limit_has_its_own_wording(market) -> None:
    market.fail = RateLimitedError("https://cg.test/simple/price")
    assert await _engine(market).process_message("price of btc") == templates.RATE_LIMITED


@pytest.mark.asyncio
async def test_other_failures_get_handler_apology(market) -> None:
    market.fail = RuntimeError("socket closed")
    assert await _engine(market).process_message("price of btc") == "Couldn't fetch the price right now. Please try again!"
    assert await _engine(market).process_message("top gainers today") == (
        "Couldn't fetch gainers right now. Try again in a moment!"
    )


@pytest.mark.asyncio
async def test_dispatch_never_raises(market) -> None:
    engine = _engine(market)

    async def boom(message: str) -> str:
        raise ValueError("handler bug")

    engine._handlers[Intent.GREETING] = boom
    reply = await engine.process_message("hello")
    assert reply.split("\n\n")[0] in templates.UNKNOWN_OPENERS


@pytest.mark.asyncio
async def test_unknown_uses_fixed_templates(market) -> None:
    result = await _engine(market).respond("qwxz fjfj kkk")
    assert result.intent == Intent.UNKNOWN
    assert result.reply.split("\n\n")[0] in templates.UNKNOWN_OPENERS
    assert "type **help**" in result.reply


@pytest.mark.asyncio
async def test_unknown_with_bare_coin_name_checks_price(market) -> None:
    result = await _engine(market).respond("bitcoin")
    assert result.intent == Intent.UNKNOWN
    assert result.reply.startswith("**BITCOIN**")


@pytest.mark.asyncio
async def test_unknown_mentioning_coin_becomes_investment(market) -> None:
    reply = await _engine(market).process_message("sol looks strong")
    assert "here's what **SOL** looks like right now" in reply
    assert "slight" not in reply
    assert "strong bullish momentum" in reply


@pytest.mark.asyncio
async def test_education_definition(market) -> None:
    reply = await _engine(market).process_message("what is staking")
    assert reply.startswith("📖 **Staking**")


@pytest.mark.asyncio
async def test_generic_education_row_answers_from_glossary(market) -> None:
    result = await _engine(market).respond("what does defi mean")
    assert result.intent == Intent.EDUCATION
    assert result.reply.startswith("📖 **DeFi (Decentralized Finance)**")


@pytest.mark.asyncio
async def test_education_without_glossary_hit_falls_through_to_coin_info(market) -> None:
    reply = await _engine(market).process_message("what does zork mean")
    assert reply == 'Couldn\'t find detailed info for "zork mean". Try the full name or symbol!'


@pytest.mark.asyncio
async def test_coin_info_details(market) -> None:
    reply = await _engine(market).process_message("tell me about cardano")
    assert reply.startswith("**Cardano (ADA)**")
    assert "📦 Circulating: 35,000,000,000" in reply
    assert "🔒 Max Supply: ∞" in reply
    assert "📝 Cardano is a proof-of-stake chain...." in reply


@pytest.mark.asyncio
async def test_gainers_and_losers(market) -> None:
    engine = _engine(market)
    gainers = await engine.process_message("top gainers today")
    losers = await engine.process_message("top losers today")
    assert gainers.index("Ethereum") < gainers.index("Bitcoin") < gainers.index("Solana")
    assert losers.index("Solana") < losers.index("Bitcoin") < losers.index("Ethereum")


@pytest.mark.asyncio
async def test_dominance_and_overview(market) -> None:
    engine = _engine(market)
    dominance = await engine.process_message("btc dominance")
    assert "₿ Bitcoin: **58.0%**" in dominance
    assert "BTC dominance is high" in dominance
    overview = await engine.process_message("how's the market today?")
    assert overview.startswith("The market is **green 🟢** today.")
    assert "Biggest mover in top 3:** Ethereum" in overview


@pytest.mark.asyncio
async def test_missing_dominance_is_reported_as_unavailable(market) -> None:
    market.global_stats = GlobalStats(2.1e14, 8.0e12, 1.5, None, None, 12000)
    reply = await _engine(market).process_message("btc dominance")
    assert "₿ Bitcoin: **N/A**" in reply
    assert "🪙 Others: **N/A**" in reply
    assert "100.0%" not in reply
    assert "alt season" not in reply
    assert reply.endswith("BTC dominance data is unavailable right now, so there is no market-structure read.")


@pytest.mark.asyncio
async def test_reports(market) -> None:
    engine = _engine(market)
    hit = await engine.process_message("latest report on whale activity")
    assert hit.startswith("📑 **Week On-Chain #2 2026** (🆓 Free)")
    catalogue = await engine.process_message("blog")
    assert catalogue.startswith("Here are the available reports:")


@pytest.mark.asyncio
async def test_best_coin_and_prediction_without_coin(market) -> None:
    engine = _engine(market)
    best = await engine.process_message("best coin to buy")
    assert "**Pepe** (PEPE): Rank #30" in best
    assert "**Ethereum** (ETH): +5.00%" in best
    prediction = await engine.process_message("will it moon")
    assert prediction == templates.prediction_no_coin()


def test_threshold_labels() -> None:
    assert templates.momentum_label(4) == "strong bullish momentum"
    assert templates.momentum_label(1) == "slight positive movement"
    assert templates.momentum_label(0) == "slight negative movement"
    assert templates.momentum_label(-3) == "strong bearish pressure"
    assert "high" in templates.dominance_verdict(60)
    assert "low" in templates.dominance_verdict(40)
    assert "moderate" in templates.dominance_verdict(50)
    assert templates.dominance_verdict(None).startswith("BTC dominance data is unavailable")


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("changes", "label"),
    [
        ((1.0, 2.0, 3.0), "🟢 All timeframes are positive"),
        ((-1.0, -2.0, -3.0), "🔴 All timeframes are negative"),
        ((1.0, -2.0, 3.0), "🟡 Mixed signals across timeframes"),
    ],
)
async def test_prediction_reports_trend_direction(market, changes, label) -> None:
    md = market.details["cardano"]["market_data"]
    md["price_change_percentage_24h"], md["price_change_percentage_7d"], md["price_change_percentage_30d"] = changes
    result = await _engine(market).respond("will cardano go up")
    assert result.intent == Intent.PREDICTION
    assert result.reply.startswith("I can't predict where **Cardano** will go")
    assert f"📆 **30d:** {'+3.00%' if changes[2] > 0 else '-3.00%'}" in result.reply
    assert label in result.reply
    assert "This is data, not a forecast!" in result.reply


def test_trend_summary_needs_every_timeframe_to_agree() -> None:
    assert templates.trend_summary(1, 1, 1).startswith("🟢")
    assert templates.trend_summary(-1, -1, -1).startswith("🔴")
    assert templates.trend_summary(1, 1, 0).startswith("🟡")
    assert templates.trend_summary(0, 0, 0).startswith("🟡")
