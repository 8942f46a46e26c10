"""Market data layer -- futures universe screening and trend classification."""

from screener.market_data.screener import MarketScreener, classify_trend

__all__ = ["MarketScreener", "classify_trend"]
