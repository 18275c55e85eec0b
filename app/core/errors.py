from __future__ import annotations


class MarketDataError(RuntimeError):
    code = "MARKET_DATA_ERROR"


class RateLimitedError(MarketDataError):
    """Upstream answered HTTP 429."""

    code = "RATE_LIMITED"

    def __init__(self, url: str = "") -> None:
        super().__init__(f"{self.code}: {url}" if url else self.code)
        self.url = url


class UpstreamError(MarketDataError):
    code = "UPSTREAM_FAILURE"

    def __init__(self, message: str, status_code: int | None = None, url: str = "") -> None:
        super().__init__(message)
        self.status_code = status_code
        self.url = url
