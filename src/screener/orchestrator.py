"""Scan orchestrator -- composes one full scan cycle.

Each cycle:
  1. SCREEN + SENTIMENT: MarketScreener.screen() and the sentiment branch
     run concurrently; they share nothing.
  2. ADVISE: The candidate set and trend go to the advisory collaborator
     while the status narrator rotates.
  3. SYNTHESIZE: Picks become trade plans priced off the screened last price.

A screener or advisory failure aborts the whole cycle and nothing is
returned, including sentiment results already computed. Cancelling
run_cycle() abandons in-flight feed and advisory calls the same way.
"""

from __future__ import annotations

import asyncio
import time
from uuid import uuid4

from screener.advisory.client import AdvisoryClient
from screener.logging import bind_scan_context, clear_scan_context, get_logger
from screener.market_data.screener import MarketScreener
from screener.models import MarketSnapshot, ScanResult, SentimentResult, TradeRecommendation
from screener.recommendations.synthesizer import RecommendationSynthesizer
from screener.sentiment.aggregator import SentimentAggregator
from screener.sentiment.corpus import SnippetSource
from screener.status import StatusNarrator, advisory_status_messages

logger = get_logger(__name__)


class ScanOrchestrator:
    """Runs one scan cycle at a time on behalf of a caller.

    The orchestrator holds no state between cycles besides its collaborators;
    serialising cycles is the caller's job (see AutoScanner).

    Args:
        screener: Market screener over the exchange feeds.
        aggregator: Per-asset sentiment aggregator.
        snippet_source: Corpus for the sentiment branch.
        advisory: External analyst producing categorical picks.
        synthesizer: Pick -> trade plan derivation.
        narrator: Status line exposed to the caller while the analyst works.
    """

    def __init__(
        self,
        screener: MarketScreener,
        aggregator: SentimentAggregator,
        snippet_source: SnippetSource,
        advisory: AdvisoryClient,
        synthesizer: RecommendationSynthesizer,
        narrator: StatusNarrator | None = None,
    ) -> None:
        self._screener = screener
        self._aggregator = aggregator
        self._snippet_source = snippet_source
        self._advisory = advisory
        self._synthesizer = synthesizer
        self._narrator = narrator or StatusNarrator()

    @property
    def narrator(self) -> StatusNarrator:
        return self._narrator

    async def run_cycle(self) -> ScanResult:
        """Run one full scan cycle.

        Raises:
            DataFetchError: A market feed failed.
            AdvisoryError: The advisory collaborator failed.
        """
        scan_id = uuid4().hex[:12]
        started_at = time.time()
        bind_scan_context(scan_id)
        logger.info("scan_cycle_started")

        try:
            self._narrator.set("Fetching live market data from Binance...")
            snapshot, sentiment = await self._screen_and_score()
            recommendations = await self._advise(snapshot, scan_id)
        except asyncio.CancelledError:
            logger.info("scan_cycle_cancelled")
            raise
        except Exception as e:
            logger.error("scan_cycle_failed", error=str(e), error_type=type(e).__name__)
            raise
        finally:
            self._narrator.clear()
            clear_scan_context()

        result = ScanResult(
            scan_id=scan_id,
            snapshot=snapshot,
            sentiment=tuple(sentiment),
            recommendations=tuple(recommendations),
            started_at=started_at,
        )
        logger.info(
            "scan_cycle_completed",
            scan_id=scan_id,
            trend=snapshot.trend.value,
            candidates=len(snapshot.candidates),
            recommendations=len(recommendations),
            duration_seconds=round(result.completed_at - started_at, 3),
        )
        return result

    async def _screen_and_score(self) -> tuple[MarketSnapshot, list[SentimentResult]]:
        """Fan out screener and sentiment; the screener's error wins."""
        market_task = asyncio.ensure_future(self._screener.screen())
        sentiment_task = asyncio.ensure_future(self._score_sentiment())
        try:
            snapshot = await market_task
            sentiment = await sentiment_task
        finally:
            for task in (market_task, sentiment_task):
                if not task.done():
                    task.cancel()
            await asyncio.gather(market_task, sentiment_task, return_exceptions=True)
        return snapshot, sentiment

    async def _score_sentiment(self) -> list[SentimentResult]:
        snippets = await self._snippet_source.fetch_snippets()
        return self._aggregator.aggregate(snippets)

    async def _advise(
        self, snapshot: MarketSnapshot, scan_id: str
    ) -> list[TradeRecommendation]:
        if not snapshot.candidates:
            logger.info("no_candidates_skipping_advisory", trend=snapshot.trend.value)
            return []

        async with self._narrator.narrating(advisory_status_messages(snapshot.trend)):
            picks = await self._advisory.get_picks(snapshot.candidates, snapshot.trend)

        return self._synthesizer.synthesize(picks, snapshot.candidates, run_token=scan_id)
