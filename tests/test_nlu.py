from __future__ import annotations

import pytest

from app.core.nlu import INTENT_TABLE, Intent, build_intent_table, classify, parse_message


@pytest.mark.parametrize(
    "text,expected_intent",
    [
        ("hi", Intent.GREETING),
        ("Hello there", Intent.GREETING),
        ("good morning", Intent.GREETING),
        ("help", Intent.HELP),
        ("How's the market today?", Intent.MARKET_OVERVIEW),
        ("price of bitcoin", Intent.PRICE_CHECK),
        ("ETH", Intent.PRICE_CHECK),
        ("top gainers today", Intent.TOP_GAINERS),
        ("which coin pumped", Intent.TOP_GAINERS),
        ("top losers today", Intent.TOP_LOSERS),
        ("who dumped today", Intent.TOP_LOSERS),
        ("what's trending?", Intent.TRENDING),
        ("compare btc vs eth", Intent.COMPARE),
        ("ETH vs SOL", Intent.COMPARE),
        ("what is staking", Intent.EDUCATION),
        ("explain staking", Intent.EDUCATION),
        ("what is a whale", Intent.EDUCATION),
        ("what are nfts", Intent.EDUCATION),
        ("what does defi mean", Intent.EDUCATION),
        ("what is cardano", Intent.COIN_INFO),
        ("tell me about cardano", Intent.COIN_INFO),
        ("latest report", Intent.REPORT),
        ("btc dominance", Intent.DOMINANCE),
        ("should i buy eth?", Intent.INVESTMENT),
        ("should i invest in solana", Intent.INVESTMENT),
        ("will solana go up", Intent.PREDICTION),
        ("eth outlook", Intent.PREDICTION),
        ("best coin to buy", Intent.BEST_COIN),
        ("recommend a coin", Intent.BEST_COIN),
        ("qwxz fjfj kkk", Intent.UNKNOWN),
    ],
)
def test_parse_message_intents(text: str, expected_intent: Intent) -> None:
    assert parse_message(text).intent == expected_intent


def test_greeting_needs_whole_word() -> None:
    assert parse_message("history of bitcoin").intent != Intent.GREETING


def test_classify_normalizes_and_keeps_match() -> None:
    parsed = classify("  PRICE of BTC  ")
    assert parsed.raw == "price of btc"
    assert parsed.match is not None


def test_first_row_wins_on_overlap() -> None:
    # "market cap" is both a glossary term and a market overview phrase
    assert parse_message("market cap today").intent == Intent.MARKET_OVERVIEW


def test_glossary_definition_row_sits_before_coin_info() -> None:
    intents = [rule.intent for rule in INTENT_TABLE]
    coin_info_idx = intents.index(Intent.COIN_INFO)
    assert intents[coin_info_idx - 1] == Intent.EDUCATION
    assert intents[-1] == Intent.EDUCATION


def test_custom_glossary_table() -> None:
    table = build_intent_table(["rug pull"])
    assert classify("what is a rug pull", table).intent == Intent.EDUCATION
    assert classify("what is staking", table).intent == Intent.COIN_INFO
