"""Binance USD-M futures market data client via ccxt async.

Uses ccxt's implicit raw endpoints so the screener sees the exchange's
native rows (decimal strings) rather than ccxt's unified ticker shape.
"""

from collections.abc import Awaitable, Callable

import ccxt.async_support as ccxt_async
from ccxt.base.errors import BaseError as CcxtError

from screener.config import ExchangeSettings
from screener.exceptions import DataFetchError
from screener.exchange.client import MarketDataClient
from screener.logging import get_logger

logger = get_logger(__name__)


class BinanceFuturesClient(MarketDataClient):
    """Public-endpoint Binance futures client (no API keys needed)."""

    def __init__(self, settings: ExchangeSettings) -> None:
        self._settings = settings
        self._exchange = ccxt_async.binanceusdm(
            {
                "enableRateLimit": settings.enable_rate_limit,
                "timeout": settings.timeout_ms,
            }
        )

    @property
    def exchange(self) -> ccxt_async.binanceusdm:
        """Access the underlying ccxt exchange instance."""
        return self._exchange

    async def close(self) -> None:
        """Clean up ccxt async resources. CRITICAL: must be called to avoid resource leaks."""
        logger.info("closing_binance_connection")
        await self._exchange.close()
        logger.info("binance_connection_closed")

    async def fetch_ticker_24h(self) -> list[dict]:
        """GET /fapi/v1/ticker/24hr."""
        return await self._fetch("ticker", self._exchange.fapiPublicGetTicker24hr)

    async def fetch_funding_rates(self) -> list[dict]:
        """GET /fapi/v1/premiumIndex."""
        return await self._fetch("funding_rate", self._exchange.fapiPublicGetPremiumIndex)

    async def _fetch(
        self, feed: str, request: Callable[[], Awaitable[object]]
    ) -> list[dict]:
        """Run one raw request, translating ccxt failures to DataFetchError."""
        try:
            payload = await request()
        except CcxtError as e:
            logger.warning("feed_request_failed", feed=feed, error=str(e))
            raise DataFetchError(f"Binance {feed} request failed: {e}") from e

        if not isinstance(payload, list):
            raise DataFetchError(
                f"Binance {feed} request returned {type(payload).__name__}, expected list"
            )
        logger.debug("feed_fetched", feed=feed, rows=len(payload))
        return payload
