from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Iterable

from app.core.knowledge_data import EDUCATION


class Intent(str, Enum):
    GREETING = "greeting"
    HELP = "help"
    MARKET_OVERVIEW = "market_overview"
    PRICE_CHECK = "price_check"
    TOP_GAINERS = "top_gainers"
    TOP_LOSERS = "top_losers"
    TRENDING = "trending"
    COMPARE = "compare"
    COIN_INFO = "coin_info"
    REPORT = "report"
    DOMINANCE = "dominance"
    INVESTMENT = "investment"
    PREDICTION = "prediction"
    BEST_COIN = "best_coin"
    EDUCATION = "education"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class IntentRule:
    intent: Intent
    patterns: tuple[re.Pattern[str], ...]


@dataclass
class ParsedMessage:
    intent: Intent
    raw: str
    match: re.Match[str] | None = None


def _rule(intent: Intent, *patterns: str) -> IntentRule:
    return IntentRule(intent, tuple(re.compile(p, re.IGNORECASE) for p in patterns))


def _glossary_definition_rule(terms: Iterable[str]) -> IntentRule:
    alternatives = sorted(
        (r"\s+".join(re.escape(word) for word in term.split()) for term in terms),
        key=len,
        reverse=True,
    )
    return _rule(
        Intent.EDUCATION,
        r"\b(?:what\s*(?:is|are)|explain|meaning\s*of|define|eli5)\s+(?:an?\s+|the\s+)?"
        rf"(?:{'|'.join(alternatives)})s?\b",
    )


PRICE_TICKERS = "btc|eth|sol|bnb|xrp|ada|doge|dot|matic|avax|link|shib|ltc|uni|atom|pepe|ton|trx|sui|near|apt|arb|op"


def build_intent_table(glossary_terms: Iterable[str]) -> tuple[IntentRule, ...]:
    """Ordered priority list: the first row with a matching pattern decides the intent.

    Education appears twice. Definitions of glossary terms ("what is staking")
    must beat the broader coin_info row, so that row sits just above coin_info;
    the generic definition row keeps its low priority at the end.
    """
    return (
        _rule(
            Intent.GREETING,
            r"^(hi|hello|hey|howdy|sup|yo|hola|good\s*(morning|evening|afternoon|night)|namaste)\b",
        ),
        _rule(Intent.HELP, r"\b(help|what can you do|commands|features|menu|options)\b"),
        _rule(
            Intent.MARKET_OVERVIEW,
            r"\b(market|overall)\s*(overview|summary|status|update|today|now|doing|look)",
            r"\bhow('?s| is| are)\s*(the )?(market|crypto|things)",
            r"\b(green|red)\s*day",
            r"\bmarket\s*(cap|sentiment|mood)",
            r"\bwhat'?s\s*(happening|going on|up)\s*(in|with)?\s*(the )?(market|crypto)",
        ),
        _rule(
            Intent.PRICE_CHECK,
            r"\b(price|cost|value|rate|worth)\s*(of|for)?\s+(\w[\w\s]*)",
            r"\bhow\s*much\s*(is|does|for)\s+(\w[\w\s]*)",
            r"\b(\w+)\s*(price|cost|value|rate|kya hai|kitna)",
            rf"^({PRICE_TICKERS})\s*\??$",
        ),
        _rule(
            Intent.TOP_GAINERS,
            r"\b(top|best|biggest|highest)\s*(gainer|winner|performer|pump)",
            r"\bwho\s*(gained|pumped|went up|mooned|rallied)",
            r"\bgain(ed|ing|s)?\s*(the )?(most|highest|biggest)",
            r"\bwhich\s*(coin|crypto)\s*(gained|pumped|up|rallied)",
            r"\bpump(ed|ing)?\s*(the most|today|hard)",
        ),
        _rule(
            Intent.TOP_LOSERS,
            r"\b(top|worst|biggest|highest)\s*(loser|dump|decline|drop|crash)",
            r"\bwho\s*(lost|dumped|dropped|crashed|went down|tanked)",
            r"\blos(t|ing|e|es)\s*(the )?(most|highest|biggest)",
            r"\bwhich\s*(coin|crypto)\s*(lost|dumped|dropped|crashed|tanked)",
            r"\bdump(ed|ing)?\s*(the most|today|hard)",
        ),
        _rule(
            Intent.TRENDING,
            r"\b(trending|hot|popular|buzzing|viral|hype)",
            r"\bwhat'?s\s*(trending|hot|popular)",
            r"\btrend(s|ing)?\s*(today|now|right now|coins?)",
        ),
        _rule(
            Intent.COMPARE,
            r"\bcompare\s+(\w+)\s*(and|vs|versus|with|or|&)\s*(\w+)",
            r"\b(\w+)\s+(vs|versus|compared to)\b\.?\s*(\w+)",
        ),
        _glossary_definition_rule(glossary_terms),
        _rule(
            Intent.COIN_INFO,
            r"\b(tell|info|about|details|what is|what'?s|explain)\s*(me )?(about )?\s*(\w[\w\s]*)",
            r"\bwhat\s*(is|are)\s+(\w[\w\s]*)",
        ),
        _rule(
            Intent.REPORT,
            r"\b(report|analysis|vector|on-?chain|week\s*on|blog|research|article)\b",
            r"\blatest\s*(report|analysis|research)",
            r"\bwhat\s*(did|does|do)\s*(the )?(report|analysis|vector|blog)",
        ),
        _rule(Intent.DOMINANCE, r"\b(btc|bitcoin|eth|ethereum)?\s*dominance"),
        _rule(
            Intent.INVESTMENT,
            r"\b(should\s*i|is\s*it\s*(good|wise|safe|smart|right)\s*to)\s*(buy|sell|invest|hold|trade|put money)",
            r"\b(invest|put money|put ₹|put rs|put \$)\s*(in|into|on)\s+",
            r"\b(profit|loss|return|gain|earn|make money|lose money)\s*(if|when|from|on|by)\s*(i )?(invest|buy|sell|hold|put)",
            r"\bhow\s*much\s*(profit|loss|return|gain|money|will i)\s*(will|can|do|if|from|on)",
            r"\b(will|can|could)\s*(i )?(make|earn|gain|lose|get)\s*(money|profit|return|₹|\$|rs)",
            r"\b(good|best|right|safe|wise)\s*(time|moment|opportunity)\s*to\s*(buy|sell|invest|enter|exit)",
            r"\bworth\s*(buying|selling|investing|holding)",
            r"\b(buy|sell|hold)\s*(or\s*(buy|sell|hold))?\s*\?",
        ),
        _rule(
            Intent.PREDICTION,
            r"\b(will|can|could|shall)\s+(\w+)\s*(go|reach|hit|cross|touch|pump|dump|crash|moon|rise|fall|drop)",
            r"\b(\w+)\s*(price\s*)?(prediction|forecast|target|potential|future|outlook)",
            r"\b(where|what)\s*(will|would|could)\s+(\w+)\s*(be|go|reach|price)",
            r"\bwhen\s*(will|would|could)\s+(\w+)\s*(reach|hit|cross|touch|go to|moon)",
            r"\b(moon|lambo|100x|10x|1000x)\b",
        ),
        _rule(
            Intent.BEST_COIN,
            r"\b(best|top|good|safest|most promising)\s*(coin|crypto|token|investment)\s*(to\s*(buy|invest|hold))?",
            r"\bwhich\s*(coin|crypto|token)\s*(should|to|can|do)\s*(i )?(buy|invest|hold|pick)",
            r"\bwhat\s*(should|to|can)\s*(i )?(buy|invest in|hold|pick)",
            r"\brecommend\s*(a )?(coin|crypto|token|investment)",
            r"\bsuggest\s*(a )?(coin|crypto|token)",
        ),
        _rule(Intent.EDUCATION, r"\b(what\s*(is|are|does)|explain|meaning\s*of|define|eli5)\s+(.+)"),
    )


INTENT_TABLE = build_intent_table(EDUCATION.keys())


def normalize_message(text: str) -> str:
    return str(text or "").strip().lower()


def classify(text: str, table: Iterable[IntentRule] = INTENT_TABLE) -> ParsedMessage:
    msg = normalize_message(text)
    for rule in table:
        for pattern in rule.patterns:
            match = pattern.search(msg)
            if match:
                return ParsedMessage(rule.intent, msg, match)
    return ParsedMessage(Intent.UNKNOWN, msg)


def parse_message(text: str) -> ParsedMessage:
    return classify(text)
