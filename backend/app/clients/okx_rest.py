"""OKX REST API client for fetching candle data."""

import asyncio
import logging
from decimal import Decimal
from typing import Any

import httpx
from pydantic import ValidationError

from core.models import Kline

logger = logging.getLogger(__name__)

# The candles endpoint returns at most this many rows per request
MAX_CANDLES = 300


class OkxApiError(Exception):
    """The OKX envelope reported a non-success code."""

    def __init__(self, code: str, msg: str = ""):
        self.code = code
        self.msg = msg
        super().__init__(msg or f"OKX request failed (code {code})")


class RateLimiter:
    """Simple rate limiter for API calls."""

    def __init__(self, calls_per_minute: int = 600):
        self.calls_per_minute = calls_per_minute
        self.interval = 60.0 / calls_per_minute
        self.last_call = 0.0
        self._lock = asyncio.Lock()

    async def acquire(self) -> None:
        """Wait if necessary to respect rate limit."""
        async with self._lock:
            now = asyncio.get_event_loop().time()
            wait_time = self.last_call + self.interval - now
            if wait_time > 0:
                await asyncio.sleep(wait_time)
            self.last_call = asyncio.get_event_loop().time()


class OkxRestClient:
    """OKX v5 public market-data client."""

    BASE_URL = "https://app.okx.com"

    def __init__(
        self,
        base_url: str = BASE_URL,
        timeout: float = 30.0,
        calls_per_minute: int = 600,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url
        self.timeout = timeout
        self.rate_limiter = RateLimiter(calls_per_minute)
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    async def _request(
        self, method: str, endpoint: str, params: dict[str, Any] | None = None
    ) -> Any:
        """Make an API request with rate limiting and unwrap the OKX envelope."""
        await self.rate_limiter.acquire()
        client = await self._get_client()
        response = await client.request(method, endpoint, params=params)
        response.raise_for_status()

        try:
            payload = response.json()
        except ValueError as e:
            raise OkxApiError("-1", f"Malformed response from {endpoint}: not JSON") from e
        if not isinstance(payload, dict):
            raise OkxApiError("-1", f"Malformed response from {endpoint}: expected an object")

        code = str(payload.get("code", ""))
        if code != "0":
            raise OkxApiError(code, payload.get("msg", ""))
        return payload.get("data", [])

    async def get_candles(
        self,
        inst_id: str,
        bar: str = "1H",
        limit: int = 100,
    ) -> list[Kline]:
        """
        Fetch the most recent candles for an instrument.

        Args:
            inst_id: Instrument (e.g., "BTC-USDT")
            bar: Candle period (e.g., "15m", "1H")
            limit: Number of candles, clamped to 1..300

        Returns:
            List of Kline objects, oldest first

        Raises:
            OkxApiError: The endpoint answered with a non-zero code or
                malformed data
            httpx.HTTPError: Transport failure or non-2xx status
        """
        params = {
            "instId": inst_id,
            "bar": bar,
            "limit": max(1, min(limit, MAX_CANDLES)),
        }

        data = await self._request("GET", "/api/v5/market/candles", params)

        # Rows: [ts, open, high, low, close, vol, volCcy, volCcyQuote, confirm], newest first
        try:
            klines = [
                Kline(
                    symbol=inst_id,
                    timeframe=bar,
                    timestamp=int(row[0]),
                    open=Decimal(row[1]),
                    high=Decimal(row[2]),
                    low=Decimal(row[3]),
                    close=Decimal(row[4]),
                    volume=Decimal(row[5]),
                )
                for row in data
            ]
        except (ValidationError, IndexError, TypeError, ValueError, ArithmeticError) as e:
            raise OkxApiError("-1", f"Malformed candle data for {inst_id} {bar}: {e}") from e
        klines.reverse()

        logger.debug("Fetched %d %s %s candles", len(klines), inst_id, bar)
        return klines
