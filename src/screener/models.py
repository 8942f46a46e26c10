"""Shared data models for the futures signal screener.

Prices, volumes and rates are Decimal, parsed from the exchange's decimal
strings. Never use float for prices: derived targets must be exact
(100 * 1.10 == 110). Sentiment scores are plain floats.
"""

import time
from dataclasses import asdict, dataclass, field
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from enum import Enum
from typing import Any


def parse_decimal(raw: Any) -> Decimal:
    """Parse a feed value into Decimal, falling back to zero for missing/garbage."""
    if raw is None:
        return Decimal("0")
    try:
        value = Decimal(str(raw))
    except InvalidOperation:
        return Decimal("0")
    if not value.is_finite():
        return Decimal("0")
    return value


class MarketTrend(str, Enum):
    """Coarse market direction derived from the reference instrument."""

    BULLISH = "Bullish"
    BEARISH = "Bearish"
    NEUTRAL = "Neutral"


class SentimentStatus(str, Enum):
    """Tri-state sentiment classification."""

    BULLISH = "Bullish"
    BEARISH = "Bearish"
    NEUTRAL = "Neutral"


class Direction(str, Enum):
    """Trade direction proposed by the analyst."""

    LONG = "LONG"
    SHORT = "SHORT"


@dataclass(frozen=True)
class TickerSnapshot:
    """One row of the 24h ticker feed."""

    symbol: str
    last_price: Decimal
    price_change_percent: Decimal
    quote_volume: Decimal
    open_interest: Decimal

    @classmethod
    def from_raw(cls, raw: dict) -> "TickerSnapshot":
        return cls(
            symbol=str(raw.get("symbol", "")),
            last_price=parse_decimal(raw.get("lastPrice")),
            price_change_percent=parse_decimal(raw.get("priceChangePercent")),
            quote_volume=parse_decimal(raw.get("quoteVolume")),
            open_interest=parse_decimal(raw.get("openInterest")),
        )


@dataclass(frozen=True)
class AnalyzedCandidate:
    """Instrument that survived the screen, with derived metrics.

    volatility is abs(price_change_percent), so always >= 0.
    """

    symbol: str
    last_price: Decimal
    price_change_percent: Decimal
    quote_volume: Decimal
    open_interest: Decimal
    volatility: Decimal
    funding_rate: Decimal

    @classmethod
    def from_ticker(cls, ticker: TickerSnapshot, funding_rate: Decimal) -> "AnalyzedCandidate":
        return cls(
            symbol=ticker.symbol,
            last_price=ticker.last_price,
            price_change_percent=ticker.price_change_percent,
            quote_volume=ticker.quote_volume,
            open_interest=ticker.open_interest,
            volatility=abs(ticker.price_change_percent),
            funding_rate=funding_rate,
        )

    def to_dict(self) -> dict[str, str]:
        """JSON-serialisable form, Decimals as strings."""
        return {k: str(v) for k, v in asdict(self).items()}


@dataclass(frozen=True)
class MarketSnapshot:
    """Bounded, volume-ranked candidate set plus the market trend."""

    candidates: tuple[AnalyzedCandidate, ...]
    trend: MarketTrend
    reference_symbol: str
    reference_price: Decimal | None = None
    reference_change_percent: Decimal | None = None

    @property
    def reference_price_display(self) -> str:
        """Thousands-grouped price with at most 3 decimals, or "N/A"."""
        if self.reference_price is None:
            return "N/A"
        rounded = self.reference_price.quantize(Decimal("0.001"), rounding=ROUND_HALF_UP)
        text = f"{rounded:,f}"
        if "." in text:
            text = text.rstrip("0").rstrip(".")
        return text

    @property
    def reference_change_display(self) -> str:
        if self.reference_change_percent is None:
            return "0.00"
        return f"{self.reference_change_percent:.2f}"


@dataclass(frozen=True)
class SentimentResult:
    """Aggregated sentiment for one asset."""

    asset: str
    score: float
    status: SentimentStatus


@dataclass(frozen=True)
class AnalystPick:
    """Categorical pick from the advisory collaborator."""

    pair: str
    direction: Direction
    narrative: str


@dataclass(frozen=True)
class GridLevel:
    """Staged order at a price with a size weight in percent."""

    price: Decimal
    size_percent: Decimal

    @property
    def size_label(self) -> str:
        return f"{self.size_percent}%"


@dataclass(frozen=True)
class TradeRecommendation:
    """Fully specified trade plan derived from an analyst pick."""

    id: str
    pair: str
    direction: Direction
    narrative: str
    entry_price: Decimal
    take_profit: Decimal
    stop_loss: Decimal
    grid_levels: tuple[GridLevel, GridLevel, GridLevel]
    estimated_profit_percent: Decimal


@dataclass(frozen=True)
class ScanResult:
    """Everything one successful scan cycle publishes."""

    scan_id: str
    snapshot: MarketSnapshot
    sentiment: tuple[SentimentResult, ...]
    recommendations: tuple[TradeRecommendation, ...]
    started_at: float
    completed_at: float = field(default_factory=time.time)


@dataclass(frozen=True)
class DeliveryReport:
    """Outcome of handing one recommendation to one sink."""

    recommendation_id: str
    sink: str
    delivered: bool
    error: str | None = None
