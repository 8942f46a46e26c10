"""Recommendation sinks -- downstream consumers of published trade plans.

Delivery mechanics of real channels (chat bots, storage) live outside this
package; a sink only has to accept a recommendation or raise.
"""

from abc import ABC, abstractmethod

from screener.logging import get_logger
from screener.models import TradeRecommendation

logger = get_logger(__name__)


class RecommendationSink(ABC):
    """Receives each recommendation of a successful scan cycle."""

    name: str = "sink"

    @abstractmethod
    async def publish(self, recommendation: TradeRecommendation) -> None:
        """Deliver one recommendation. Raise on delivery failure."""
        ...


class LoggingSink(RecommendationSink):
    """Writes each recommendation as a structured log event."""

    name = "log"

    async def publish(self, recommendation: TradeRecommendation) -> None:
        logger.info(
            "trade_recommendation",
            id=recommendation.id,
            pair=recommendation.pair,
            direction=recommendation.direction.value,
            entry_price=str(recommendation.entry_price),
            take_profit=str(recommendation.take_profit),
            stop_loss=str(recommendation.stop_loss),
            grid=[
                (str(level.price), level.size_label)
                for level in recommendation.grid_levels
            ],
            estimated_profit_percent=str(recommendation.estimated_profit_percent),
        )
