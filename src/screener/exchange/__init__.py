"""Exchange client layer -- Binance futures market data via ccxt."""

from screener.exchange.binance_client import BinanceFuturesClient
from screener.exchange.client import MarketDataClient

__all__ = ["BinanceFuturesClient", "MarketDataClient"]
