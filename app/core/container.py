from __future__ import annotations

from dataclasses import dataclass

from aiogram import Bot

from app.adapters.coingecko import CoinGeckoAdapter
from app.core.cache import MemoryCache
from app.core.config import Settings
from app.core.http import ResilientHTTPClient
from app.services.chat_engine import ChatEngine
from app.services.knowledge import KnowledgeIndex
from app.services.responders import Responders


@dataclass
class ServiceHub:
    settings: Settings
    http: ResilientHTTPClient
    cache: MemoryCache
    market: CoinGeckoAdapter
    knowledge: KnowledgeIndex
    responders: Responders
    engine: ChatEngine
    bot: Bot | None = None
