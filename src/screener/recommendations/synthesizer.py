"""Recommendation synthesizer -- turns analyst picks into full trade plans.

Every numeric field is derived from the candidate's screened last price P:

  LONG:  TP = P * 1.10, SL = P * 0.95, grid P * 1.01 / 1.02 / 1.03
  SHORT: TP = P * 0.90, SL = P * 1.05, grid P * 0.99 / 0.98 / 0.97
  grid weights 33% / 33% / 34%, estimated profit 9.9% (constant)

Picks naming a pair outside the candidate set are dropped, never fatal.
"""

from collections.abc import Sequence
from decimal import Decimal
from uuid import uuid4

from screener.exceptions import MalformedPickError
from screener.logging import get_logger
from screener.models import (
    AnalystPick,
    AnalyzedCandidate,
    Direction,
    GridLevel,
    TradeRecommendation,
)

logger = get_logger(__name__)

ESTIMATED_PROFIT_PERCENT = Decimal("9.9")

_TAKE_PROFIT = {Direction.LONG: Decimal("1.10"), Direction.SHORT: Decimal("0.90")}
_STOP_LOSS = {Direction.LONG: Decimal("0.95"), Direction.SHORT: Decimal("1.05")}
_GRID = {
    Direction.LONG: (
        (Decimal("1.01"), Decimal("33")),
        (Decimal("1.02"), Decimal("33")),
        (Decimal("1.03"), Decimal("34")),
    ),
    Direction.SHORT: (
        (Decimal("0.99"), Decimal("33")),
        (Decimal("0.98"), Decimal("33")),
        (Decimal("0.97"), Decimal("34")),
    ),
}


def new_run_token() -> str:
    """Token distinguishing one synthesis run from every other."""
    return uuid4().hex[:12]


class RecommendationSynthesizer:
    """Derives entry, take-profit, stop-loss and grid levels for each pick."""

    def synthesize(
        self,
        picks: Sequence[AnalystPick],
        candidates: Sequence[AnalyzedCandidate],
        run_token: str | None = None,
    ) -> list[TradeRecommendation]:
        """Build one TradeRecommendation per pick whose pair was screened.

        Args:
            picks: Analyst picks, in the analyst's order.
            candidates: The screened candidate set the picks refer to.
            run_token: Identifier suffix shared by this batch. A fresh one is
                generated when omitted.
        """
        token = run_token or new_run_token()
        by_symbol = {c.symbol: c for c in candidates}
        recommendations: list[TradeRecommendation] = []

        for pick in picks:
            try:
                candidate = self._lookup(pick, by_symbol)
            except MalformedPickError as e:
                logger.warning("pick_dropped", pair=pick.pair, reason=str(e))
                continue

            rec_id = f"{pick.pair}-{token}-{len(recommendations) + 1}"
            recommendations.append(build_recommendation(rec_id, pick, candidate.last_price))

        logger.info(
            "recommendations_synthesized",
            picks=len(picks),
            recommendations=len(recommendations),
            run_token=token,
        )
        return recommendations

    @staticmethod
    def _lookup(
        pick: AnalystPick, by_symbol: dict[str, AnalyzedCandidate]
    ) -> AnalyzedCandidate:
        candidate = by_symbol.get(pick.pair)
        if candidate is None:
            raise MalformedPickError(f"{pick.pair} is not in the candidate set")
        return candidate


def build_recommendation(
    rec_id: str, pick: AnalystPick, price: Decimal
) -> TradeRecommendation:
    """Pure derivation of a trade plan from entry price and direction."""
    direction = pick.direction
    grid = tuple(
        GridLevel(price=price * factor, size_percent=weight)
        for factor, weight in _GRID[direction]
    )
    return TradeRecommendation(
        id=rec_id,
        pair=pick.pair,
        direction=direction,
        narrative=pick.narrative,
        entry_price=price,
        take_profit=price * _TAKE_PROFIT[direction],
        stop_loss=price * _STOP_LOSS[direction],
        grid_levels=grid,  # type: ignore[arg-type]
        estimated_profit_percent=ESTIMATED_PROFIT_PERCENT,
    )
