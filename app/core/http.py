from __future__ import annotations

import asyncio
import logging
from typing import Any

import httpx

from app.core.errors import RateLimitedError, UpstreamError

logger = logging.getLogger(__name__)


class ResilientHTTPClient:
    def __init__(
        self,
        timeout: float = 10.0,
        retries: int = 1,
        backoff_sec: float = 0.5,
        headers: dict[str, str] | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.retries = max(0, int(retries))
        self.backoff_sec = max(0.0, float(backoff_sec))
        self._client = httpx.AsyncClient(
            timeout=httpx.Timeout(timeout),
            headers={"Accept": "application/json", **(headers or {})},
            transport=transport,
        )

    async def get_json(self, url: str, params: dict[str, Any] | None = None) -> Any:
        attempt = 0
        while True:
            try:
                resp = await self._client.get(url, params=params)
            except httpx.HTTPError as exc:
                if attempt < self.retries:
                    attempt += 1
                    logger.warning("http_retry", extra={"event": "http_retry", "url": url, "error": str(exc)})
                    await asyncio.sleep(self.backoff_sec * attempt)
                    continue
                raise UpstreamError(f"request failed: {exc}", url=url) from exc

            # 429 is never retried here; the caller decides whether a cached copy will do
            if resp.status_code == 429:
                raise RateLimitedError(url)
            if resp.status_code >= 500 and attempt < self.retries:
                attempt += 1
                logger.warning(
                    "http_retry",
                    extra={"event": "http_retry", "url": url, "status": resp.status_code},
                )
                await asyncio.sleep(self.backoff_sec * attempt)
                continue
            if resp.status_code >= 400:
                raise UpstreamError(f"API error: {resp.status_code}", status_code=resp.status_code, url=url)

            try:
                return resp.json()
            except ValueError as exc:
                raise UpstreamError("invalid JSON payload", status_code=resp.status_code, url=url) from exc

    async def close(self) -> None:
        await self._client.aclose()
