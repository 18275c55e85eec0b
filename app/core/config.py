from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    app_name: str = "cryptochat"
    env: str = "dev"
    log_level: str = "INFO"

    host: str = "0.0.0.0"
    port: int = 8000

    telegram_bot_token: str = Field(default="", alias="TELEGRAM_BOT_TOKEN")
    telegram_use_webhook: bool = False
    telegram_webhook_url: str = ""
    telegram_webhook_path: str = "/telegram/webhook"
    telegram_webhook_secret: str = ""

    coingecko_base_url: str = "https://api.coingecko.com/api/v3"
    # Free tier works without a key; a demo key only raises the rate ceiling.
    coingecko_api_key: str = Field(default="", alias="COINGECKO_API_KEY")
    vs_currency: Literal["inr", "usd"] = Field(default="inr", alias="VS_CURRENCY")

    cache_ttl_sec: float = Field(default=60.0, alias="CACHE_TTL_SEC")
    http_timeout_sec: float = Field(default=10.0, alias="HTTP_TIMEOUT_SEC")
    http_retries: int = Field(default=1, alias="HTTP_RETRIES")

    alias_match_mode: Literal["substring", "word"] = Field(default="substring", alias="ALIAS_MATCH_MODE")
    market_snapshot_size: int = Field(default=100, alias="MARKET_SNAPSHOT_SIZE")
    compare_snapshot_size: int = Field(default=250, alias="COMPARE_SNAPSHOT_SIZE")
    gainers_count: int = Field(default=5, alias="GAINERS_COUNT")
    trending_limit: int = Field(default=7, alias="TRENDING_LIMIT")
    random_seed: int | None = Field(default=None, alias="RANDOM_SEED")

    def coingecko_headers(self) -> dict[str, str]:
        if not self.coingecko_api_key:
            return {}
        return {"x-cg-demo-api-key": self.coingecko_api_key}


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
