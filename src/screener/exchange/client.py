"""Abstract market data client interface.

Screening code depends only on this interface, keeping exchange-specific
endpoints and error types isolated in the concrete implementation.
"""

from abc import ABC, abstractmethod


class MarketDataClient(ABC):
    """Abstract base class for futures market data feeds."""

    @abstractmethod
    async def close(self) -> None:
        """Clean up resources (CRITICAL for ccxt async)."""
        ...

    @abstractmethod
    async def fetch_ticker_24h(self) -> list[dict]:
        """Fetch the 24h ticker row for every instrument.

        Each row exposes symbol, lastPrice, priceChangePercent, quoteVolume
        and openInterest as decimal-formatted strings.

        Raises:
            DataFetchError: The feed was unreachable or answered with an error.
        """
        ...

    @abstractmethod
    async def fetch_funding_rates(self) -> list[dict]:
        """Fetch the latest funding rate for every perpetual.

        Each row exposes symbol and lastFundingRate as decimal strings.

        Raises:
            DataFetchError: The feed was unreachable or answered with an error.
        """
        ...
