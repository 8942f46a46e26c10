"""Tests for the AutoScanner scan driver.

Tests verify:
- A successful cycle is stored and every recommendation reaches every sink
- Sink failures are reported per delivery and never fail the cycle
- At most one cycle is in flight
- A failed cycle records a single message and halts the loop
- stop() abandons the in-flight cycle without publishing it
"""

import asyncio
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

import pytest

from screener.auto_scan import AutoScanner, failure_message
from screener.config import ScanSettings
from screener.exceptions import DataFetchError, ScanAbandonedError, ScanInProgressError
from screener.models import (
    AnalystPick,
    Direction,
    MarketSnapshot,
    MarketTrend,
    ScanResult,
    TradeRecommendation,
)
from screener.orchestrator import ScanOrchestrator
from screener.recommendations.synthesizer import build_recommendation
from screener.sinks import RecommendationSink
from screener.status import StatusNarrator


class _RecordingSink(RecommendationSink):
    name = "recording"

    def __init__(self) -> None:
        self.received: list[TradeRecommendation] = []

    async def publish(self, recommendation: TradeRecommendation) -> None:
        self.received.append(recommendation)


class _FailingSink(RecommendationSink):
    name = "broken"

    async def publish(self, recommendation: TradeRecommendation) -> None:
        raise ConnectionError("chat unreachable")


def _make_result(scan_id: str = "scan1", pairs: tuple[str, ...] = ("ETHUSDT",)) -> ScanResult:
    recs = tuple(
        build_recommendation(
            f"{pair}-{scan_id}-{i}",
            AnalystPick(pair, Direction.LONG, "Breakout."),
            Decimal("100"),
        )
        for i, pair in enumerate(pairs, start=1)
    )
    return ScanResult(
        scan_id=scan_id,
        snapshot=MarketSnapshot(
            candidates=(), trend=MarketTrend.NEUTRAL, reference_symbol="BTCUSDT"
        ),
        sentiment=(),
        recommendations=recs,
        started_at=0.0,
    )


def _make_orchestrator(**run_cycle_kwargs) -> MagicMock:
    orchestrator = MagicMock(spec=ScanOrchestrator)
    orchestrator.run_cycle = AsyncMock(**run_cycle_kwargs)
    orchestrator.narrator = StatusNarrator()
    return orchestrator


def _hanging_cycle() -> tuple[asyncio.Event, dict, object]:
    """run_cycle stand-in that blocks until cancelled."""
    entered = asyncio.Event()
    state = {"cancelled": False}

    async def _run() -> ScanResult:
        entered.set()
        try:
            await asyncio.Event().wait()
        except asyncio.CancelledError:
            state["cancelled"] = True
            raise
        return _make_result()

    return entered, state, _run


class TestScanOnce:
    @pytest.mark.asyncio
    async def test_publishes_to_every_sink(self, scan_settings: ScanSettings) -> None:
        result = _make_result(pairs=("ETHUSDT", "SOLUSDT"))
        first, second = _RecordingSink(), _RecordingSink()
        scanner = AutoScanner(
            _make_orchestrator(return_value=result), scan_settings, sinks=[first, second]
        )

        returned = await scanner.scan_once()

        assert returned is result
        assert scanner.latest_result is result
        assert [r.pair for r in first.received] == ["ETHUSDT", "SOLUSDT"]
        assert second.received == first.received
        assert len(scanner.last_deliveries) == 4
        assert all(d.delivered for d in scanner.last_deliveries)

    @pytest.mark.asyncio
    async def test_sink_failure_reported_not_raised(
        self, scan_settings: ScanSettings
    ) -> None:
        result = _make_result()
        recording = _RecordingSink()
        scanner = AutoScanner(
            _make_orchestrator(return_value=result),
            scan_settings,
            sinks=[_FailingSink(), recording],
        )

        await scanner.scan_once()

        failed, delivered = scanner.last_deliveries
        assert failed.sink == "broken"
        assert failed.delivered is False
        assert failed.error == "chat unreachable"
        assert delivered.sink == "recording"
        assert delivered.delivered is True
        assert recording.received == list(result.recommendations)
        assert scanner.last_error is None

    @pytest.mark.asyncio
    async def test_failure_sets_single_message(self, scan_settings: ScanSettings) -> None:
        scanner = AutoScanner(
            _make_orchestrator(side_effect=DataFetchError("Binance ticker request failed")),
            scan_settings,
        )

        with pytest.raises(DataFetchError):
            await scanner.scan_once()

        assert scanner.last_error == (
            "Failed to complete analysis. Binance ticker request failed"
        )
        assert scanner.latest_result is None
        assert not scanner.in_flight

    @pytest.mark.asyncio
    async def test_success_clears_previous_error(self, scan_settings: ScanSettings) -> None:
        result = _make_result()
        orchestrator = _make_orchestrator(side_effect=[DataFetchError("down"), result])
        scanner = AutoScanner(orchestrator, scan_settings)

        with pytest.raises(DataFetchError):
            await scanner.scan_once()
        await scanner.scan_once()

        assert scanner.last_error is None
        assert scanner.latest_result is result

    @pytest.mark.asyncio
    async def test_failure_keeps_previous_result(self, scan_settings: ScanSettings) -> None:
        result = _make_result()
        orchestrator = _make_orchestrator(side_effect=[result, DataFetchError("down")])
        scanner = AutoScanner(orchestrator, scan_settings)

        await scanner.scan_once()
        with pytest.raises(DataFetchError):
            await scanner.scan_once()

        assert scanner.latest_result is result

    @pytest.mark.asyncio
    async def test_second_request_rejected_while_in_flight(
        self, scan_settings: ScanSettings
    ) -> None:
        entered, _, run = _hanging_cycle()
        scanner = AutoScanner(_make_orchestrator(side_effect=run), scan_settings)

        first = asyncio.create_task(scanner.scan_once())
        await asyncio.wait_for(entered.wait(), timeout=1)
        assert scanner.in_flight

        with pytest.raises(ScanInProgressError):
            await scanner.scan_once()

        await scanner.stop()
        with pytest.raises(ScanAbandonedError):
            await first

    @pytest.mark.asyncio
    async def test_stop_abandons_manual_cycle(self, scan_settings: ScanSettings) -> None:
        entered, state, run = _hanging_cycle()
        sink = _RecordingSink()
        scanner = AutoScanner(_make_orchestrator(side_effect=run), scan_settings, sinks=[sink])

        task = asyncio.create_task(scanner.scan_once())
        await asyncio.wait_for(entered.wait(), timeout=1)
        await scanner.stop()

        with pytest.raises(ScanAbandonedError):
            await task
        assert state["cancelled"]
        assert scanner.latest_result is None
        assert sink.received == []
        assert scanner.last_error is None

    @pytest.mark.asyncio
    async def test_caller_cancellation_propagates(self, scan_settings: ScanSettings) -> None:
        entered, state, run = _hanging_cycle()
        scanner = AutoScanner(_make_orchestrator(side_effect=run), scan_settings)

        task = asyncio.create_task(scanner.scan_once())
        await asyncio.wait_for(entered.wait(), timeout=1)
        task.cancel()

        with pytest.raises(asyncio.CancelledError):
            await task
        assert state["cancelled"]
        assert not scanner.in_flight


class TestLoop:
    @pytest.mark.asyncio
    async def test_loop_halts_on_failed_cycle(self, scan_settings: ScanSettings) -> None:
        result = _make_result()
        orchestrator = _make_orchestrator(side_effect=[result, DataFetchError("down")])
        scanner = AutoScanner(orchestrator, scan_settings)

        await scanner.start()
        await asyncio.wait_for(scanner.wait(), timeout=1)

        assert not scanner.is_running
        assert orchestrator.run_cycle.await_count == 2
        assert scanner.latest_result is result
        assert scanner.last_error == failure_message(DataFetchError("down"))

    @pytest.mark.asyncio
    async def test_stop_abandons_in_flight_cycle(self, scan_settings: ScanSettings) -> None:
        entered, state, run = _hanging_cycle()
        sink = _RecordingSink()
        scanner = AutoScanner(_make_orchestrator(side_effect=run), scan_settings, sinks=[sink])

        await scanner.start()
        assert scanner.is_running
        await asyncio.wait_for(entered.wait(), timeout=1)
        await scanner.stop()

        assert not scanner.is_running
        assert not scanner.in_flight
        assert state["cancelled"]
        assert scanner.latest_result is None
        assert sink.received == []

    @pytest.mark.asyncio
    async def test_start_twice_runs_one_loop(self, scan_settings: ScanSettings) -> None:
        entered, _, run = _hanging_cycle()
        orchestrator = _make_orchestrator(side_effect=run)
        scanner = AutoScanner(orchestrator, scan_settings)

        await scanner.start()
        await scanner.start()
        await asyncio.wait_for(entered.wait(), timeout=1)

        assert orchestrator.run_cycle.await_count == 1
        await scanner.stop()

    @pytest.mark.asyncio
    async def test_stop_when_not_started(self, scan_settings: ScanSettings) -> None:
        scanner = AutoScanner(_make_orchestrator(), scan_settings)
        await scanner.stop()
        assert not scanner.is_running


class TestStatus:
    @pytest.mark.asyncio
    async def test_status_structure(self, scan_settings: ScanSettings) -> None:
        result = _make_result(scan_id="abc")
        scanner = AutoScanner(_make_orchestrator(return_value=result), scan_settings)

        before = scanner.get_status()
        assert before["auto_scanning"] is False
        assert before["in_flight"] is False
        assert before["last_scan_id"] is None
        assert before["last_error"] is None

        await scanner.scan_once()
        after = scanner.get_status()

        assert after["last_scan_id"] == "abc"
        assert after["last_scan_completed_at"] == result.completed_at
        assert after["status"] == ""
        assert after["scan_interval"] == 0
