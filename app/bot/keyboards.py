from __future__ import annotations

from aiogram.types import InlineKeyboardMarkup
from aiogram.utils.keyboard import InlineKeyboardBuilder

# (button label, message sent to the engine)
QUICK_ASKS: tuple[tuple[str, str], ...] = (
    ("Market", "how's the market today?"),
    ("Gainers", "top gainers today"),
    ("Losers", "top losers today"),
    ("Trending", "what's trending?"),
    ("Dominance", "btc dominance"),
    ("Reports", "latest report"),
)


def quick_ask_menu() -> InlineKeyboardMarkup:
    kb = InlineKeyboardBuilder()
    for idx, (label, _) in enumerate(QUICK_ASKS):
        kb.button(text=label, callback_data=f"ask:{idx}")
    kb.adjust(3, 3)
    return kb.as_markup()


def quick_ask_text(callback_data: str | None) -> str | None:
    """Engine prompt behind an ``ask:<n>`` button, or None for foreign/stale data."""
    if not callback_data or not callback_data.startswith("ask:"):
        return None
    try:
        idx = int(callback_data.split(":", 1)[1])
    except ValueError:
        return None
    if 0 <= idx < len(QUICK_ASKS):
        return QUICK_ASKS[idx][1]
    return None
