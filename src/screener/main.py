"""Entry point for the futures signal screener.

Wires all components together, optionally embeds the FastAPI JSON API,
and starts periodic scanning. When the API is enabled (default), the scan
driver and the API share a single asyncio event loop via uvicorn's
programmatic API and FastAPI's lifespan context manager.

Handles SIGINT/SIGTERM for graceful shutdown.

Component wiring order (in _build_components):
1. BinanceFuturesClient (ticker + funding feeds)
2. MarketScreener
3. SentimentScorer / SentimentAggregator / StaticSnippetSource
4. GeminiAdvisoryClient
5. RecommendationSynthesizer
6. StatusNarrator
7. ScanOrchestrator
8. AutoScanner (with LoggingSink)
"""

import asyncio
import signal
from contextlib import asynccontextmanager
from typing import Any

import uvicorn
from fastapi import FastAPI

from screener.advisory.gemini_client import GeminiAdvisoryClient
from screener.auto_scan import AutoScanner
from screener.config import AppSettings
from screener.exchange.binance_client import BinanceFuturesClient
from screener.logging import get_logger, setup_logging
from screener.market_data.screener import MarketScreener
from screener.orchestrator import ScanOrchestrator
from screener.recommendations.synthesizer import RecommendationSynthesizer
from screener.sentiment.aggregator import SentimentAggregator
from screener.sentiment.corpus import StaticSnippetSource
from screener.sentiment.scorer import SentimentScorer
from screener.sinks import LoggingSink
from screener.status import StatusNarrator


def _log_status(message: str) -> None:
    """Mirror the narrator's status line into the debug log."""
    if message:
        get_logger("screener.status").debug("scan_status", status=message)


def _build_components(settings: AppSettings) -> dict[str, Any]:
    """Build all screener components from settings.

    Args:
        settings: Application-wide settings.

    Returns:
        Dict mapping component names to instances.
    """
    logger = get_logger("screener.main")

    market_client = BinanceFuturesClient(settings.exchange)
    market_screener = MarketScreener(market_client, settings.screener)

    scorer = SentimentScorer(settings.sentiment)
    aggregator = SentimentAggregator(scorer, settings.sentiment)
    snippet_source = StaticSnippetSource()

    if not settings.advisory.api_key.get_secret_value():
        logger.warning(
            "no_advisory_api_key_configured",
            note="Market screening and sentiment will work. "
            "Cycles with candidates will fail at the advisory step.",
        )
    advisory = GeminiAdvisoryClient(settings.advisory)

    synthesizer = RecommendationSynthesizer()
    narrator = StatusNarrator(interval=settings.scan.status_interval, on_update=_log_status)

    orchestrator = ScanOrchestrator(
        screener=market_screener,
        aggregator=aggregator,
        snippet_source=snippet_source,
        advisory=advisory,
        synthesizer=synthesizer,
        narrator=narrator,
    )
    auto_scanner = AutoScanner(orchestrator, settings.scan, sinks=[LoggingSink()])

    return {
        "market_client": market_client,
        "market_screener": market_screener,
        "aggregator": aggregator,
        "advisory": advisory,
        "orchestrator": orchestrator,
        "auto_scanner": auto_scanner,
    }


async def _close_components(components: dict[str, Any]) -> None:
    await components["auto_scanner"].stop()
    await components["advisory"].close()
    await components["market_client"].close()


def _setup_signal_handlers(auto_scanner: AutoScanner) -> None:
    """Register SIGINT/SIGTERM to stop scanning gracefully.

    Must be called after the asyncio event loop is running.
    """
    logger = get_logger("screener.main")
    loop = asyncio.get_running_loop()

    def _graceful_handler() -> None:
        logger.info("graceful_shutdown_signal")
        asyncio.create_task(auto_scanner.stop())

    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, _graceful_handler)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Start auto-scanning with the API; stop it and release clients on shutdown."""
    logger = get_logger("screener.main")
    components = app.state.components

    app.state.auto_scanner = components["auto_scanner"]
    await components["auto_scanner"].start()
    logger.info("lifespan_started")

    yield

    await _close_components(components)
    logger.info("screener_stopped")


async def run() -> None:
    """Run the screener.

    With the API enabled (API_ENABLED=true, the default) uvicorn serves the
    JSON API and the lifespan drives auto-scanning. Otherwise auto-scanning
    runs directly until a signal or a failed cycle stops it.
    """
    settings = AppSettings()

    setup_logging(settings.log_level)
    logger = get_logger("screener.main")

    components = _build_components(settings)

    if settings.api.enabled:
        from screener.api.app import create_api_app

        app = create_api_app(lifespan=lifespan)
        app.state.components = components

        logger.info(
            "starting_with_api",
            host=settings.api.host,
            port=settings.api.port,
            scan_interval=settings.scan.scan_interval,
        )

        config = uvicorn.Config(
            app,
            host=settings.api.host,
            port=settings.api.port,
            log_level="warning",  # Suppress uvicorn access logs
        )
        server = uvicorn.Server(config)
        await server.serve()
    else:
        auto_scanner: AutoScanner = components["auto_scanner"]
        _setup_signal_handlers(auto_scanner)

        logger.info("starting_without_api", scan_interval=settings.scan.scan_interval)

        try:
            await auto_scanner.start()
            await auto_scanner.wait()
            if auto_scanner.last_error:
                logger.error("auto_scan_halted", error=auto_scanner.last_error)
        finally:
            await _close_components(components)
            logger.info("screener_stopped")


def main() -> None:
    """Synchronous entry point."""
    asyncio.run(run())


if __name__ == "__main__":
    main()
