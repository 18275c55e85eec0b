from __future__ import annotations

import html
import logging
import re

from aiogram import F, Router
from aiogram.enums import ChatAction, ParseMode
from aiogram.filters import Command
from aiogram.types import CallbackQuery, Message

from app.bot.keyboards import quick_ask_menu, quick_ask_text
from app.bot.templates import greeting_reply, help_text
from app.core.container import ServiceHub

logger = logging.getLogger(__name__)

router = Router()

_hub: ServiceHub | None = None

BOLD_RE = re.compile(r"\*\*(.+?)\*\*")
ITALIC_RE = re.compile(r"(?<!\w)_(.+?)_(?!\w)")
TABLE_SEPARATOR_RE = re.compile(r"^\|[\s\-|]+\|$")
TELEGRAM_MAX_LEN = 4096


def init_handlers(hub: ServiceHub) -> None:
    global _hub
    _hub = hub


def _require_hub() -> ServiceHub:
    if _hub is None:
        raise RuntimeError("Handlers not initialized")
    return _hub


def _table_block(rows: list[str]) -> str:
    cells = [[c.strip() for c in row.strip().strip("|").split("|")] for row in rows]
    widths = [max(len(r[i]) if i < len(r) else 0 for r in cells) for i in range(max(len(r) for r in cells))]
    lines = ["  ".join(cell.ljust(widths[i]) for i, cell in enumerate(r)).rstrip() for r in cells]
    return "<pre>" + html.escape("\n".join(lines)) + "</pre>"


def to_telegram_html(text: str) -> str:
    """Render the engine's light markdown (``**bold**``, ``_italic_``, pipe tables) as Telegram HTML."""
    out: list[str] = []
    table: list[str] = []

    def flush() -> None:
        if table:
            out.append(_table_block(table))
            table.clear()

    for line in text.split("\n"):
        stripped = line.strip()
        if stripped.startswith("|") and stripped.endswith("|"):
            if not TABLE_SEPARATOR_RE.match(stripped):
                table.append(stripped.replace("**", ""))
            continue
        flush()
        escaped = html.escape(line, quote=False)
        escaped = BOLD_RE.sub(r"<b>\1</b>", escaped)
        escaped = ITALIC_RE.sub(r"<i>\1</i>", escaped)
        out.append(escaped)
    flush()
    return "\n".join(out)


def render_chunks(text: str, limit: int = TELEGRAM_MAX_LEN) -> list[str]:
    """Split a reply on line boundaries and render each piece, so every message stays under ``limit``.

    Each chunk is rendered on its own, which keeps ``<b>`` and ``<pre>`` tags balanced per message.
    Escaping can grow a line up to five times, so overlong lines are cut to ``limit // 5`` first.
    """
    piece = max(1, limit // 5)
    lines: list[str] = []
    for line in text.split("\n"):
        lines.extend(line[i : i + piece] for i in range(0, max(len(line), 1), piece))

    chunks: list[str] = []
    current: list[str] = []
    for line in lines:
        if current and len(to_telegram_html("\n".join([*current, line]))) > limit:
            chunks.append(to_telegram_html("\n".join(current)))
            current = []
        current.append(line)
    if current:
        chunks.append(to_telegram_html("\n".join(current)))
    return [chunk for chunk in chunks if chunk.strip()]


async def _reply(message: Message, text: str, with_menu: bool = False) -> None:
    chunks = render_chunks(text)
    for i, body in enumerate(chunks):
        last = i == len(chunks) - 1
        await message.answer(
            body,
            parse_mode=ParseMode.HTML,
            reply_markup=quick_ask_menu() if with_menu and last else None,
        )


@router.message(Command("start"))
async def start_cmd(message: Message) -> None:
    hub = _require_hub()
    await _reply(message, greeting_reply(hub.responders.rng), with_menu=True)


@router.message(Command("help"))
async def help_cmd(message: Message) -> None:
    await _reply(message, help_text(), with_menu=True)


@router.callback_query(F.data.startswith("ask:"))
async def quick_ask_callback(callback: CallbackQuery) -> None:
    prompt = quick_ask_text(callback.data)
    await callback.answer()
    if prompt is None or callback.message is None:
        return
    hub = _require_hub()
    reply = await hub.engine.process_message(prompt)
    await _reply(callback.message, reply)


@router.message(F.text)
async def route_text(message: Message) -> None:
    hub = _require_hub()
    try:
        await message.bot.send_chat_action(message.chat.id, ChatAction.TYPING)
    except Exception as exc:  # noqa: BLE001
        logger.warning("chat_action_failed", extra={"event": "chat_action_failed", "error": str(exc)})
    result = await hub.engine.respond(message.text)
    logger.info(
        "telegram_reply",
        extra={"event": "telegram_reply", "chat_id": message.chat.id, "intent": result.intent.value},
    )
    await _reply(message, result.reply)
