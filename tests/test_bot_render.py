from __future__ import annotations

import pytest

from app.bot import templates
from app.bot.handlers import TELEGRAM_MAX_LEN, _reply, render_chunks, to_telegram_html
from app.bot.keyboards import QUICK_ASKS, quick_ask_text


def test_bold_and_escaping() -> None:
    assert to_telegram_html("**Bitcoin** <3 & more") == "<b>Bitcoin</b> &lt;3 &amp; more"


def test_premium_note_is_italic() -> None:
    text = "_This is a premium report. Upgrade to access the full analysis._"
    assert to_telegram_html(text) == "<i>This is a premium report. Upgrade to access the full analysis.</i>"


def test_compare_table_becomes_pre_block() -> None:
    coin = {
        "name": "Bitcoin",
        "symbol": "btc",
        "current_price": 5_500_000.0,
        "price_change_percentage_24h": 1.0,
        "market_cap": 1.1e14,
        "total_volume": 3.0e12,
        "market_cap_rank": 1,
    }
    other = {**coin, "name": "Ethereum", "symbol": "eth", "price_change_percentage_24h": -1.0, "market_cap_rank": 2}
    rendered = to_telegram_html(templates.compare_template(coin, other, "inr"))
    assert "<pre>" in rendered
    assert "|---" not in rendered
    assert "Price" in rendered and "**" not in rendered
    assert "Bitcoin is outperforming Ethereum today." in rendered


def test_quick_ask_lookup() -> None:
    assert quick_ask_text("ask:0") == QUICK_ASKS[0][1]
    assert quick_ask_text("ask:99") is None
    assert quick_ask_text("ask:x") is None
    assert quick_ask_text("cmd:1") is None
    assert quick_ask_text(None) is None


class _Message:
    def __init__(self) -> None:
        self.sent: list[tuple[str, object]] = []

    async def answer(self, text: str, parse_mode=None, reply_markup=None) -> None:
        self.sent.append((text, reply_markup))


def test_short_reply_is_one_chunk() -> None:
    text = "**Bitcoin** is up & away"
    assert render_chunks(text) == [to_telegram_html(text)]


def test_long_reply_splits_without_breaking_tags() -> None:
    text = "\n".join(f"**Coin {i}** <rank> & change" for i in range(400))
    chunks = render_chunks(text)
    assert len(chunks) > 1
    for chunk in chunks:
        assert len(chunk) <= TELEGRAM_MAX_LEN
        assert chunk.count("<b>") == chunk.count("</b>")
    assert "".join(chunks).count("<b>") == 400


def test_long_table_keeps_pre_blocks_closed() -> None:
    rows = ["| Metric | Value |", "|---|---|"] + [f"| row {i} | {'&' * 40} |" for i in range(300)]
    chunks = render_chunks("\n".join(rows), limit=1000)
    assert len(chunks) > 1
    for chunk in chunks:
        assert len(chunk) <= 1000
        assert chunk.count("<pre>") == chunk.count("</pre>") == 1


def test_overlong_single_line_is_cut_before_escaping() -> None:
    chunks = render_chunks("&" * 10_000)
    assert all(len(chunk) <= TELEGRAM_MAX_LEN for chunk in chunks)
    assert sum(chunk.count("&amp;") for chunk in chunks) == 10_000


@pytest.mark.asyncio
async def test_menu_rides_on_last_chunk_only() -> None:
    message = _Message()
    await _reply(message, "\n".join(f"**line {i}**" for i in range(1000)), with_menu=True)
    assert len(message.sent) > 1
    assert all(markup is None for _, markup in message.sent[:-1])
    assert message.sent[-1][1] is not None
