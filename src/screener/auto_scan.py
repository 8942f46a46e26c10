"""Periodic scan driver with at-most-one-in-flight and fail-closed policy.

Runs ScanOrchestrator cycles on a fixed interval in a background task.
A failed cycle records a single human-readable failure message and stops
the loop; it is never retried silently. Stopping cancels the in-flight
cycle, which then publishes nothing.
"""

from __future__ import annotations

import asyncio
from collections.abc import Sequence

from screener.config import ScanSettings
from screener.exceptions import ScanAbandonedError, ScanInProgressError
from screener.logging import get_logger
from screener.models import DeliveryReport, ScanResult
from screener.orchestrator import ScanOrchestrator
from screener.sinks import RecommendationSink

logger = get_logger(__name__)


def failure_message(error: BaseException) -> str:
    """Single user-facing message for an aborted cycle."""
    return f"Failed to complete analysis. {error}"


class AutoScanner:
    """Serialises scan cycles and publishes their results.

    Args:
        orchestrator: Runs the individual cycles.
        settings: Scan interval.
        sinks: Receivers for each published recommendation.
    """

    def __init__(
        self,
        orchestrator: ScanOrchestrator,
        settings: ScanSettings,
        sinks: Sequence[RecommendationSink] = (),
    ) -> None:
        self._orchestrator = orchestrator
        self._settings = settings
        self._sinks = tuple(sinks)
        self._cycle_lock = asyncio.Lock()
        self._cycle_task: asyncio.Future[ScanResult] | None = None
        self._task: asyncio.Task | None = None  # type: ignore[type-arg]
        self._running = False
        self._latest: ScanResult | None = None
        self._last_error: str | None = None
        self._last_deliveries: list[DeliveryReport] = []

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def in_flight(self) -> bool:
        return self._cycle_lock.locked()

    @property
    def latest_result(self) -> ScanResult | None:
        return self._latest

    @property
    def last_error(self) -> str | None:
        return self._last_error

    @property
    def last_deliveries(self) -> list[DeliveryReport]:
        return list(self._last_deliveries)

    async def scan_once(self) -> ScanResult:
        """Run and publish one cycle.

        Raises:
            ScanInProgressError: Another cycle is still in flight.
            ScanAbandonedError: stop() cancelled the cycle.
            DataFetchError, AdvisoryError: The cycle failed; last_error is set.
        """
        if self._cycle_lock.locked():
            raise ScanInProgressError("a scan cycle is already in flight")

        async with self._cycle_lock:
            cycle = asyncio.ensure_future(self._orchestrator.run_cycle())
            self._cycle_task = cycle
            try:
                result = await cycle
            except asyncio.CancelledError:
                logger.info("scan_cycle_abandoned")
                current = asyncio.current_task()
                if cycle.cancelled() and current is not None and not current.cancelling():
                    raise ScanAbandonedError("scan cycle was cancelled") from None
                raise
            except Exception as e:
                self._last_error = failure_message(e)
                raise
            finally:
                self._cycle_task = None

            self._last_error = None
            await self._publish(result)
        return result

    async def start(self) -> None:
        """Begin periodic scanning in the background."""
        if self._running:
            logger.warning("auto_scan_already_running")
            return
        self._running = True
        self._task = asyncio.create_task(self._run_loop())
        logger.info("auto_scan_started", scan_interval=self._settings.scan_interval)

    async def stop(self) -> None:
        """Stop periodic scanning and abandon any in-flight cycle."""
        self._running = False
        if self._cycle_task is not None and not self._cycle_task.done():
            self._cycle_task.cancel()
        if self._task is not None:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
        logger.info("auto_scan_stop_requested")

    async def wait(self) -> None:
        """Block until the background loop exits (stop() or a failed cycle)."""
        if self._task is not None:
            try:
                await self._task
            except asyncio.CancelledError:
                pass

    async def _run_loop(self) -> None:
        """Scan, publish, sleep; exit on the first failed cycle."""
        try:
            while self._running:
                try:
                    await self.scan_once()
                except ScanInProgressError:
                    logger.warning("auto_scan_tick_skipped", reason="cycle_in_flight")
                except (asyncio.CancelledError, ScanAbandonedError):
                    break
                except Exception as e:
                    logger.error(
                        "auto_scan_stopped_on_failure",
                        error=failure_message(e),
                        exc_info=True,
                    )
                    break
                if self._running:
                    await asyncio.sleep(self._settings.scan_interval)
        finally:
            self._running = False
            logger.info("auto_scan_stopped")

    async def _publish(self, result: ScanResult) -> None:
        """Store the result and hand every recommendation to every sink.

        Sink failures are reported, never raised: delivery does not affect
        the cycle's outcome.
        """
        self._latest = result
        reports: list[DeliveryReport] = []
        for rec in result.recommendations:
            for sink in self._sinks:
                try:
                    await sink.publish(rec)
                except Exception as e:
                    logger.warning(
                        "sink_delivery_failed",
                        sink=sink.name,
                        recommendation_id=rec.id,
                        error=str(e),
                    )
                    reports.append(DeliveryReport(rec.id, sink.name, False, str(e)))
                else:
                    reports.append(DeliveryReport(rec.id, sink.name, True))
        self._last_deliveries = reports

    def get_status(self) -> dict:
        """Snapshot of the driver for API consumers."""
        latest = self._latest
        return {
            "auto_scanning": self._running,
            "in_flight": self.in_flight,
            "status": self._orchestrator.narrator.current,
            "last_error": self._last_error,
            "last_scan_id": latest.scan_id if latest else None,
            "last_scan_completed_at": latest.completed_at if latest else None,
            "scan_interval": self._settings.scan_interval,
        }
