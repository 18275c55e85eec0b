from __future__ import annotations

import random
import re

from app.core.fmt import fmt_money, fmt_pct, fmt_supply
from app.core.knowledge_data import EducationEntry, ReportEntry

# ---------------------------------------------------------------------------
# Personality pools
# ---------------------------------------------------------------------------

GREETING_REPLIES = [
    "Hey! 👋 I'm CryptoBot, your on-chain companion. Ask me about prices, market trends, top gainers, or anything crypto!",
    "Hello! I can help you with crypto prices, market overviews, coin comparisons, and more. What do you want to know?",
    "Namaste! 🙏 Ready to talk crypto. Try asking me 'How's the market?' or 'What's the price of ETH?'",
]

UNKNOWN_OPENERS = [
    "I'm not sure I understood that. Here are some things you can try:",
    "Hmm, I didn't quite get that. Maybe try one of these:",
    "I'm best at crypto-related questions! Here are some ideas:",
]

UNKNOWN_SUGGESTIONS = [
    "How's the market today?",
    "Price of Bitcoin",
    "Top gainers today",
    "Compare ETH vs SOL",
    "What is DeFi?",
    "Latest report summary",
]

EMPTY_PROMPT = "Go ahead, ask me something about crypto! Type **help** to see what I can do."

RATE_LIMITED = "⏳ I'm getting rate-limited by the data provider. Please try again in a minute!"

DISCLAIMER = "**⚠️ Disclaimer:** I'm a data bot, not a financial advisor. Always do your own research (DYOR) before investing."

HTML_TAG_RE = re.compile(r"<[^>]*>")
DESCRIPTION_LIMIT = 300


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _pick(options: list[str], rng: random.Random | None = None) -> str:
    return (rng or random).choice(options)


def _sym(row: dict) -> str:
    return str(row.get("symbol") or "").upper()


def _rank(value: object) -> str:
    return f"#{value}" if value else "#N/A"


def _bullets(lines: list[str]) -> str:
    return "\n".join(f"• {line}" for line in lines)


def momentum_label(change: float | None) -> str:
    c = float(change or 0)
    if c > 3:
        return "strong bullish momentum"
    if c > 0:
        return "slight positive movement"
    if c > -3:
        return "slight negative movement"
    return "strong bearish pressure"


def dominance_verdict(btc_dominance: float | None) -> str:
    if btc_dominance is None:
        return "BTC dominance data is unavailable right now, so there is no market-structure read."
    d = float(btc_dominance)
    if d > 55:
        return "BTC dominance is high: money is concentrated in Bitcoin. Altcoins may underperform until dominance drops."
    if d < 45:
        return "BTC dominance is low, which could signal alt season! Altcoins might be gaining traction."
    return "BTC dominance is moderate: the market is relatively balanced between BTC and alts."


def trend_summary(change_24h: float, change_7d: float, change_30d: float) -> str:
    if change_24h > 0 and change_7d > 0 and change_30d > 0:
        return "🟢 All timeframes are positive: the trend has been consistently upward recently."
    if change_24h < 0 and change_7d < 0 and change_30d < 0:
        return "🔴 All timeframes are negative: the trend has been consistently downward recently."
    return "🟡 Mixed signals across timeframes, so the trend is uncertain."


def clean_description(raw: str | None) -> str:
    if not raw:
        return "No description available."
    return HTML_TAG_RE.sub("", raw)[:DESCRIPTION_LIMIT] + "..."


def _fmt_dom(value: float | None) -> str:
    return "N/A" if value is None else f"{float(value):.1f}%"


# ---------------------------------------------------------------------------
# Fixed texts
# ---------------------------------------------------------------------------

def greeting_reply(rng: random.Random | None = None) -> str:
    return _pick(GREETING_REPLIES, rng)


def help_text() -> str:
    return (
        "Here's what I can help you with:\n\n"
        "🔹 **Market Overview**: \"How's the market today?\"\n"
        "🔹 **Price Check**: \"What's the price of BTC?\"\n"
        "🔹 **Top Gainers**: \"Which coin gained the most?\"\n"
        "🔹 **Top Losers**: \"Who lost the most today?\"\n"
        "🔹 **Trending**: \"What's trending right now?\"\n"
        "🔹 **Compare**: \"Compare ETH vs SOL\"\n"
        "🔹 **Coin Info**: \"Tell me about Cardano\"\n"
        "🔹 **Reports**: \"What does the latest report say?\"\n"
        "🔹 **Dominance**: \"Bitcoin dominance\"\n"
        "🔹 **Learn**: \"What is DeFi?\" / \"Explain staking\"\n\n"
        "Just type naturally and I'll figure out what you mean!"
    )


def unknown_reply(rng: random.Random | None = None) -> str:
    opener = _pick(UNKNOWN_OPENERS, rng)
    suggestions = _bullets([f'"{s}"' for s in UNKNOWN_SUGGESTIONS])
    return f"{opener}\n\n{suggestions}\n\nOr type **help** to see all my capabilities!"


def not_found(name: str, extra: str = "") -> str:
    text = f'Couldn\'t find "{name}". Try the full name (e.g., "bitcoin") or symbol (e.g., "BTC").'
    return f"{text}\n\n{extra}" if extra else text


# ---------------------------------------------------------------------------
# Market templates
# ---------------------------------------------------------------------------

def market_overview_template(stats: dict, top: list[dict], currency: str) -> str:
    change = stats.get("market_cap_change_pct_24h")
    sentiment = "green 🟢" if float(change or 0) >= 0 else "red 🔴"
    btc = next((c for c in top if c.get("id") == "bitcoin"), None)
    eth = next((c for c in top if c.get("id") == "ethereum"), None)
    mover = max(top, key=lambda c: abs(float(c.get("price_change_percentage_24h") or 0)), default=None)

    lines = [
        f"The market is **{sentiment}** today.",
        "",
        f"📊 **Total Market Cap:** {fmt_money(stats.get('total_market_cap'), currency)} ({fmt_pct(change)} 24h)",
        f"₿ **BTC Dominance:** {_fmt_dom(stats.get('btc_dominance'))}",
    ]
    if btc or eth:
        lines.append("")
    for label, row in (("Bitcoin", btc), ("Ethereum", eth)):
        if row:
            lines.append(
                f"**{label}:** {fmt_money(row.get('current_price'), currency)} "
                f"({fmt_pct(row.get('price_change_percentage_24h'))})"
            )
    if mover:
        lines.append("")
        lines.append(
            f"🔥 **Biggest mover in top {len(top)}:** {mover.get('name')} "
            f"({fmt_pct(mover.get('price_change_percentage_24h'))})"
        )
    return "\n".join(lines)


def price_template(title: str, quote: dict, currency: str) -> str:
    cur = currency.lower()
    return (
        f"**{title}**\n"
        f"💰 Price: {fmt_money(quote.get(cur), cur)}\n"
        f"📈 24h Change: {fmt_pct(quote.get(f'{cur}_24h_change'))}\n"
        f"📊 Market Cap: {fmt_money(quote.get(f'{cur}_market_cap'), cur)}\n"
        f"💹 24h Volume: {fmt_money(quote.get(f'{cur}_24h_vol'), cur)}"
    )


def movers_template(rows: list[dict], currency: str, losers: bool = False) -> str:
    header = f"📉 **Top {len(rows)} Losers (24h):**" if losers else f"🚀 **Top {len(rows)} Gainers (24h):**"
    if not rows:
        return f"{header}\n\nNo market data available right now."
    lines = [
        f"{i}. **{row.get('name')}** ({_sym(row)}): {fmt_money(row.get('current_price'), currency)} "
        f"({fmt_pct(row.get('price_change_percentage_24h'))})"
        for i, row in enumerate(rows, start=1)
    ]
    return f"{header}\n\n" + "\n".join(lines)


def trending_template(coins: list[dict]) -> str:
    if not coins:
        return "No trending data available right now."
    lines = [
        f"{i}. **{c.get('name')}** ({_sym(c)}): Rank {_rank(c.get('market_cap_rank'))}"
        for i, c in enumerate(coins, start=1)
    ]
    return "🔥 **Trending Coins Right Now:**\n\n" + "\n".join(lines)


def outperforming_line(coin1: dict, coin2: dict) -> str:
    c1 = float(coin1.get("price_change_percentage_24h") or 0)
    c2 = float(coin2.get("price_change_percentage_24h") or 0)
    if c1 > c2:
        return f"📈 {coin1.get('name')} is outperforming {coin2.get('name')} today."
    if c2 > c1:
        return f"📈 {coin2.get('name')} is outperforming {coin1.get('name')} today."
    return f"⚖️ {coin1.get('name')} and {coin2.get('name')} are moving in lockstep today."


def compare_template(coin1: dict, coin2: dict, currency: str) -> str:
    def row(label: str, key: str, fmt) -> str:
        return f"| **{label}** | {fmt(coin1.get(key))} | {fmt(coin2.get(key))} |"

    money = lambda v: fmt_money(v, currency)  # noqa: E731
    table = "\n".join(
        [
            f"| | {_sym(coin1)} | {_sym(coin2)} |",
            "|---|---|---|",
            row("Price", "current_price", money),
            row("24h Change", "price_change_percentage_24h", fmt_pct),
            row("Market Cap", "market_cap", money),
            row("Volume", "total_volume", money),
            row("Rank", "market_cap_rank", _rank),
        ]
    )
    return f"⚖️ **{coin1.get('name')} vs {coin2.get('name')}**\n\n{table}\n\n{outperforming_line(coin1, coin2)}"


def coin_info_template(details: dict, currency: str) -> str:
    cur = currency.lower()
    md = details.get("market_data") or {}
    desc = clean_description((details.get("description") or {}).get("en"))
    return (
        f"**{details.get('name')} ({_sym(details)})**\n\n"
        f"💰 Price: {fmt_money((md.get('current_price') or {}).get(cur), cur)}\n"
        f"📈 24h: {fmt_pct(md.get('price_change_percentage_24h'))}\n"
        f"📅 7d: {fmt_pct(md.get('price_change_percentage_7d'))}\n"
        f"📊 Market Cap: {fmt_money((md.get('market_cap') or {}).get(cur), cur)} "
        f"(Rank {_rank(details.get('market_cap_rank'))})\n"
        f"💹 24h Volume: {fmt_money((md.get('total_volume') or {}).get(cur), cur)}\n"
        f"📦 Circulating: {fmt_supply(md.get('circulating_supply'))}\n"
        f"🔒 Max Supply: {fmt_supply(md.get('max_supply'), fallback='∞')}\n\n"
        f"📝 {desc}"
    )


def dominance_template(stats: dict) -> str:
    btc = stats.get("btc_dominance")
    eth = stats.get("eth_dominance")
    others = None if btc is None or eth is None else 100 - float(btc) - float(eth)
    return (
        "📊 **Market Dominance:**\n"
        f"₿ Bitcoin: **{_fmt_dom(btc)}**\n"
        f"Ξ Ethereum: **{_fmt_dom(eth)}**\n"
        f"🪙 Others: **{_fmt_dom(others)}**\n\n"
        f"{dominance_verdict(btc)}"
    )


# ---------------------------------------------------------------------------
# Advice-adjacent templates (data only, never a recommendation)
# ---------------------------------------------------------------------------

def investment_no_coin() -> str:
    return (
        "I can't predict profits or tell you what to invest in. No one can with certainty! 🎯\n\n"
        "But I **can** help you research. Try:\n"
        + _bullets(
            [
                '"Price of BTC": check current price and 24h trend',
                '"Compare ETH vs SOL": side-by-side comparison',
                '"Top gainers today": see what\'s performing well',
                '"What\'s trending?": see what the market is buzzing about',
            ]
        )
        + f"\n\n{DISCLAIMER}"
    )


def investment_template(name: str, coin_name: str, quote: dict, currency: str) -> str:
    cur = currency.lower()
    change = quote.get(f"{cur}_24h_change")
    trend = "up 📈" if float(change or 0) >= 0 else "down 📉"
    return (
        f"I can't predict future profits, but here's what **{name}** looks like right now:\n\n"
        f"💰 **Current Price:** {fmt_money(quote.get(cur), cur)}\n"
        f"📈 **24h Change:** {fmt_pct(change)} (trending {trend})\n"
        f"📊 **Market Cap:** {fmt_money(quote.get(f'{cur}_market_cap'), cur)}\n"
        f"💹 **24h Volume:** {fmt_money(quote.get(f'{cur}_24h_vol'), cur)}\n\n"
        f"📋 **Current Momentum:** {momentum_label(change)}\n\n"
        "**⚠️ Important:** Crypto is highly volatile. Past performance doesn't guarantee future returns. "
        "Never invest more than you can afford to lose. This is data, not financial advice, so always DYOR!\n\n"
        "Want deeper research? Try:\n"
        + _bullets([f'"Tell me about {coin_name}": detailed coin info', f'"Compare {coin_name} vs BTC": benchmark against Bitcoin'])
    )


def prediction_no_coin() -> str:
    return (
        "I can't predict future prices, and honestly no one reliably can! 🔮\n\n"
        "What I **can** do is show you current data to help you form your own view:\n"
        + _bullets(
            [
                '"Price of BTC": current price + 24h trend',
                '"Top gainers today": what\'s performing right now',
                '"Bitcoin dominance": market structure overview',
            ]
        )
        + "\n\n**⚠️ Be cautious** of anyone claiming to know exactly where a coin is going."
    )


def prediction_template(details: dict, currency: str) -> str:
    cur = currency.lower()
    md = details.get("market_data") or {}
    c24 = float(md.get("price_change_percentage_24h") or 0)
    c7 = float(md.get("price_change_percentage_7d") or 0)
    c30 = float(md.get("price_change_percentage_30d") or 0)
    return (
        f"I can't predict where **{details.get('name')}** will go, but here's the recent trend data:\n\n"
        f"💰 **Price:** {fmt_money((md.get('current_price') or {}).get(cur), cur)}\n"
        f"📈 **24h:** {fmt_pct(c24)}\n"
        f"📅 **7d:** {fmt_pct(c7)}\n"
        f"📆 **30d:** {fmt_pct(c30)}\n"
        f"📊 **Rank:** {_rank(details.get('market_cap_rank'))}\n\n"
        f"{trend_summary(c24, c7, c30)}\n\n"
        "**⚠️ Remember:** Past trends don't predict the future. Crypto is volatile and unpredictable. "
        "This is data, not a forecast!"
    )


def best_coin_template(trending: list[dict], gainers: list[dict]) -> str:
    trend_list = (
        "\n".join(
            f"{i}. **{c.get('name')}** ({_sym(c)}): Rank {_rank(c.get('market_cap_rank'))}"
            for i, c in enumerate(trending, start=1)
        )
        or "No trending data"
    )
    gainer_list = (
        "\n".join(
            f"{i}. **{c.get('name')}** ({_sym(c)}): {fmt_pct(c.get('price_change_percentage_24h'))}"
            for i, c in enumerate(gainers, start=1)
        )
        or "No gainer data"
    )
    return (
        "I can't recommend specific investments, but here's what the data shows right now:\n\n"
        f"🔥 **Trending Coins:**\n{trend_list}\n\n"
        f"🚀 **Today's Top Gainers:**\n{gainer_list}\n\n"
        "**⚠️ Important:** Trending or gaining doesn't mean \"best to buy.\" High performers today could drop "
        "tomorrow. Always:\n"
        + _bullets(
            [
                "Do your own research (DYOR)",
                "Never invest more than you can lose",
                "Consider the project's fundamentals, not just price",
            ]
        )
        + "\n\nWant to research a specific coin? Try \"Tell me about [coin name]\""
    )


# ---------------------------------------------------------------------------
# Knowledge templates
# ---------------------------------------------------------------------------

def education_template(entry: EducationEntry) -> str:
    return f"📖 **{entry.term}**\n\n{entry.answer}"


def report_template(report: ReportEntry) -> str:
    badge = "🔒 Premium" if report.is_premium else "🆓 Free"
    text = f"📑 **{report.title}** ({badge})\n\n{report.summary}"
    if report.is_premium:
        text += "\n\n_This is a premium report. Upgrade to access the full analysis._"
    return text


def report_catalogue(reports: list[ReportEntry]) -> str:
    lines = [
        f"📑 **{r.title}** ({'Premium' if r.is_premium else 'Free'}): {r.category.title()}, {r.date}"
        for r in reports
    ]
    return (
        "Here are the available reports:\n\n"
        + "\n".join(lines)
        + "\n\nAsk me something specific like \"What does the Bitcoin Vector say about momentum?\" "
        "or \"Summarize the on-chain report.\""
    )
