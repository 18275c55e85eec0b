from __future__ import annotations

COINGECKO_ALIASES: dict[str, str] = {
    "btc": "bitcoin",
    "bitcoin": "bitcoin",
    "eth": "ethereum",
    "ether": "ethereum",
    "ethereum": "ethereum",
    "sol": "solana",
    "solana": "solana",
    "bnb": "binancecoin",
    "binance": "binancecoin",
    "xrp": "ripple",
    "ripple": "ripple",
    "ada": "cardano",
    "cardano": "cardano",
    "doge": "dogecoin",
    "dogecoin": "dogecoin",
    "dot": "polkadot",
    "polkadot": "polkadot",
    "matic": "matic-network",
    "polygon": "matic-network",
    "avax": "avalanche-2",
    "avalanche": "avalanche-2",
    "link": "chainlink",
    "chainlink": "chainlink",
    "shib": "shiba-inu",
    "shiba inu": "shiba-inu",
    "shiba": "shiba-inu",
    "uni": "uniswap",
    "uniswap": "uniswap",
    "ltc": "litecoin",
    "litecoin": "litecoin",
    "atom": "cosmos",
    "cosmos": "cosmos",
    "near": "near",
    "near protocol": "near",
    "xlm": "stellar",
    "stellar": "stellar",
    "algo": "algorand",
    "algorand": "algorand",
    "apt": "aptos",
    "aptos": "aptos",
    "arb": "arbitrum",
    "arbitrum": "arbitrum",
    "op": "optimism",
    "optimism": "optimism",
    "sui": "sui",
    "ton": "the-open-network",
    "toncoin": "the-open-network",
    "usdt": "tether",
    "tether": "tether",
    "usdc": "usd-coin",
    "pepe": "pepe",
    "wif": "dogwifhat",
    "dogwifhat": "dogwifhat",
    "trx": "tron",
    "tron": "tron",
}

# Scan order for free-form sentences. Order matters: the first alias contained
# in the message wins, so full names sit ahead of their tickers.
KNOWN_COINS: tuple[str, ...] = (
    "bitcoin", "btc", "ethereum", "eth", "solana", "sol", "bnb", "binance",
    "xrp", "ripple", "cardano", "ada", "dogecoin", "doge", "polkadot", "dot",
    "polygon", "matic", "avalanche", "avax", "chainlink", "link", "shiba",
    "shib", "uniswap", "uni", "litecoin", "ltc", "cosmos", "atom", "near",
    "stellar", "xlm", "algorand", "algo", "aptos", "apt", "arbitrum", "arb",
    "optimism", "op", "sui", "ton", "toncoin", "tether", "usdt", "usdc",
    "pepe", "tron", "trx", "wif", "dogwifhat",
)


def _key(raw: str | None) -> str:
    return str(raw or "").strip().lower()


def resolve_coin_id(raw: str | None) -> str | None:
    """Best-effort canonical CoinGecko id. Unknown input comes back cleaned but unchanged."""
    key = _key(raw)
    if not key:
        return None
    return COINGECKO_ALIASES.get(key, key)


def is_known_alias(raw: str | None) -> bool:
    return _key(raw) in COINGECKO_ALIASES
