"""Per-asset sentiment aggregation and tri-state classification."""

from collections.abc import Mapping, Sequence

from screener.config import SentimentSettings
from screener.logging import get_logger
from screener.models import SentimentResult, SentimentStatus
from screener.sentiment.scorer import SentimentScorer

logger = get_logger(__name__)

NEUTRAL_SCORE = 50.0


class SentimentAggregator:
    """Averages snippet scores per asset and classifies the mean.

    Classification (inclusive thresholds):
      score >= bullish_threshold (66) -> Bullish
      score <= bearish_threshold (39) -> Bearish
      otherwise                       -> Neutral
    """

    def __init__(
        self,
        scorer: SentimentScorer | None = None,
        settings: SentimentSettings | None = None,
    ) -> None:
        self._settings = settings or SentimentSettings()
        self._scorer = scorer or SentimentScorer(self._settings)

    def classify(self, score: float) -> SentimentStatus:
        if score >= self._settings.bullish_threshold:
            return SentimentStatus.BULLISH
        if score <= self._settings.bearish_threshold:
            return SentimentStatus.BEARISH
        return SentimentStatus.NEUTRAL

    def aggregate(
        self, asset_snippets: Mapping[str, Sequence[str]]
    ) -> list[SentimentResult]:
        """One SentimentResult per asset, in mapping order."""
        results: list[SentimentResult] = []
        for asset, snippets in asset_snippets.items():
            if not snippets:
                results.append(
                    SentimentResult(asset=asset, score=NEUTRAL_SCORE, status=SentimentStatus.NEUTRAL)
                )
                continue

            scores = [self._scorer.score(text) for text in snippets]
            mean = sum(scores) / len(scores)
            results.append(
                SentimentResult(asset=asset, score=round(mean, 2), status=self.classify(mean))
            )

        logger.debug(
            "sentiment_aggregated",
            assets={r.asset: r.score for r in results},
        )
        return results
