from __future__ import annotations

import re
from typing import Literal

from app.adapters.symbols import KNOWN_COINS

AliasMatchMode = Literal["substring", "word"]

MAX_COIN_NAME_LEN = 29
MAX_SENTENCE_COIN_LEN = 24

CONTRACTION_RE = re.compile(r"'s\b")
COIN_NAME_FILLER_RE = re.compile(
    r"\b("
    r"what|is|are|the|a|an|price|prices|of|for|in|how|much|does|cost|value|rate|worth|"
    r"tell|me|about|info|details|explain|coin|crypto|token|check|get|show|current|"
    r"today|now|right|please|can|you|kya|hai|kitna|inr|usd"
    r")\b"
)
SENTENCE_FILLER_RE = re.compile(
    r"\b("
    r"should|would|could|will|can|do|did|does|is|are|was|were|i|we|you|they|it|if|the|a|an|"
    r"in|on|at|to|of|for|and|or|but|how|much|many|what|when|where|which|who|why|not|no|yes|"
    r"my|this|that|right now|right|now|today|tomorrow|currently|invest|investment|investing|"
    r"buy|buying|sell|selling|hold|holding|trade|trading|put|money|profit|loss|return|gain|"
    r"earn|make|lose|get|good|bad|best|worst|safe|wise|smart|time|moment|go up|go down|"
    r"reach|hit|cross|moon|pump|dump|crash|rise|fall|drop|price|prediction|forecast|target|"
    r"worth|think|believe|suggest|recommend"
    r")\b"
)
PUNCT_RE = re.compile(r"[?.!,]")
SENTENCE_PUNCT_RE = re.compile(r"[?.!,₹$]")
WS_RE = re.compile(r"\s+")
COMPARE_EXTRACT_PATTERNS = (
    re.compile(r"compare\s+(\w+)\s*(?:and|vs|versus|with|or|&)\s*(\w+)", re.IGNORECASE),
    re.compile(r"(\w+)\s*(?:vs|versus|compared\s*to)\s*(\w+)", re.IGNORECASE),
)


def _squash(text: str) -> str:
    return WS_RE.sub(" ", text).strip()


def extract_coin_name(message: str) -> str | None:
    """Candidate coin from direct queries ("price of X", "X price", "tell me about X")."""
    msg = CONTRACTION_RE.sub(" is", message.lower().strip())
    cleaned = _squash(COIN_NAME_FILLER_RE.sub("", msg))
    cleaned = PUNCT_RE.sub("", cleaned).strip()
    if 0 < len(cleaned) <= MAX_COIN_NAME_LEN:
        return cleaned
    return None


def _contains_alias(msg: str, alias: str, mode: AliasMatchMode) -> bool:
    if mode == "word":
        return re.search(rf"\b{re.escape(alias)}\b", msg) is not None
    return alias in msg


def scan_known_coin(message: str, mode: AliasMatchMode = "substring") -> str | None:
    msg = message.lower().strip()
    for coin in KNOWN_COINS:
        if _contains_alias(msg, coin, mode):
            return coin
    return None


def extract_coin_from_sentence(message: str, mode: AliasMatchMode = "substring") -> str | None:
    """Candidate coin from free-form sentences ("should I invest in toncoin right now?").

    Known aliases are scanned first. In ``substring`` mode short tickers can hit
    inside unrelated words ("op" in "top"); ``word`` mode requires word boundaries.
    """
    found = scan_known_coin(message, mode)
    if found:
        return found

    msg = message.lower().strip()
    stripped = SENTENCE_PUNCT_RE.sub("", SENTENCE_FILLER_RE.sub("", msg))
    stripped = _squash(stripped)
    if 0 < len(stripped) <= MAX_SENTENCE_COIN_LEN:
        return stripped
    return None


def extract_compare_coins(message: str) -> list[str] | None:
    for pattern in COMPARE_EXTRACT_PATTERNS:
        match = pattern.search(message)
        if match:
            return [match.group(1).lower(), match.group(2).lower()]
    return None
