"""Market screener -- liquidity, volatility and funding-stability filter.

Fetches the 24h ticker feed and the funding-rate feed concurrently, derives
per-instrument volatility, filters and ranks survivors by quote volume.

Screen (all ANDed, defaults from ScreenerSettings):
  symbol ends with quote asset (USDT) and is not the reference symbol
  quote_volume > 10,000,000
  open_interest > 1,000,000
  volatility = |24h change %| >= 2
  |funding_rate| <= 0.001

A symbol absent from the funding feed is treated as funding rate 0.
"""

import asyncio
from collections.abc import Iterable
from decimal import Decimal

from screener.config import ScreenerSettings
from screener.exchange.client import MarketDataClient
from screener.logging import get_logger
from screener.models import (
    AnalyzedCandidate,
    MarketSnapshot,
    MarketTrend,
    TickerSnapshot,
    parse_decimal,
)

logger = get_logger(__name__)


def classify_trend(change_percent: Decimal, threshold: Decimal = Decimal("1")) -> MarketTrend:
    """Strict inequality on both sides: exactly +/-threshold is Neutral."""
    if change_percent > threshold:
        return MarketTrend.BULLISH
    if change_percent < -threshold:
        return MarketTrend.BEARISH
    return MarketTrend.NEUTRAL


def build_funding_lookup(rows: Iterable[dict]) -> dict[str, Decimal]:
    """Map symbol -> last funding rate."""
    lookup: dict[str, Decimal] = {}
    for row in rows:
        symbol = row.get("symbol")
        if not symbol:
            continue
        lookup[symbol] = parse_decimal(row.get("lastFundingRate"))
    return lookup


class MarketScreener:
    """Screens the futures universe down to a small ranked candidate set.

    Args:
        client: Market data feed client.
        settings: Screen thresholds and reference symbol.
    """

    def __init__(self, client: MarketDataClient, settings: ScreenerSettings) -> None:
        self._client = client
        self._settings = settings

    async def screen(self) -> MarketSnapshot:
        """Fetch both feeds and produce a MarketSnapshot.

        Raises:
            DataFetchError: Either feed failed. The sibling fetch is cancelled
                and no partial snapshot is produced.
        """
        ticker_rows, funding_rows = await self._fetch_feeds()
        tickers = [TickerSnapshot.from_raw(row) for row in ticker_rows]
        funding = build_funding_lookup(funding_rows)
        return self.analyze(tickers, funding)

    async def _fetch_feeds(self) -> tuple[list[dict], list[dict]]:
        ticker_task = asyncio.ensure_future(self._client.fetch_ticker_24h())
        funding_task = asyncio.ensure_future(self._client.fetch_funding_rates())
        try:
            ticker_rows, funding_rows = await asyncio.gather(ticker_task, funding_task)
        finally:
            for task in (ticker_task, funding_task):
                if not task.done():
                    task.cancel()
        return ticker_rows, funding_rows

    def analyze(
        self, tickers: list[TickerSnapshot], funding: dict[str, Decimal]
    ) -> MarketSnapshot:
        """Pure screening step over already-fetched feed data."""
        reference_symbol = self._settings.reference_symbol
        reference = next((t for t in tickers if t.symbol == reference_symbol), None)

        if reference is not None:
            trend = classify_trend(
                reference.price_change_percent, self._settings.trend_threshold
            )
            reference_price: Decimal | None = reference.last_price
            reference_change: Decimal | None = reference.price_change_percent
        else:
            logger.warning("reference_instrument_missing", symbol=reference_symbol)
            trend = MarketTrend.NEUTRAL
            reference_price = None
            reference_change = None

        survivors = [
            candidate
            for candidate in (
                AnalyzedCandidate.from_ticker(t, funding.get(t.symbol, Decimal("0")))
                for t in tickers
            )
            if self._passes_screen(candidate)
        ]
        survivors.sort(key=lambda c: c.quote_volume, reverse=True)
        candidates = tuple(survivors[: self._settings.max_candidates])

        logger.info(
            "market_screened",
            instruments=len(tickers),
            survivors=len(survivors),
            candidates=[c.symbol for c in candidates],
            trend=trend.value,
        )

        return MarketSnapshot(
            candidates=candidates,
            trend=trend,
            reference_symbol=reference_symbol,
            reference_price=reference_price,
            reference_change_percent=reference_change,
        )

    def _passes_screen(self, candidate: AnalyzedCandidate) -> bool:
        s = self._settings
        return (
            candidate.symbol.endswith(s.quote_asset)
            and candidate.symbol != s.reference_symbol
            and candidate.quote_volume > s.min_quote_volume
            and candidate.open_interest > s.min_open_interest
            and candidate.volatility >= s.min_volatility
            and abs(candidate.funding_rate) <= s.max_abs_funding_rate
        )
