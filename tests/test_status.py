"""Tests for the status narrator."""

import asyncio

import pytest

from screener.models import MarketTrend
from screener.status import StatusNarrator, advisory_status_messages


class TestAdvisoryMessages:
    def test_first_message_names_trend(self) -> None:
        messages = advisory_status_messages(MarketTrend.BEARISH)
        assert messages[0] == "Market trend is Bearish. Analyzing pairs..."
        assert len(messages) == 7

    def test_last_message(self) -> None:
        assert advisory_status_messages(MarketTrend.NEUTRAL)[-1] == (
            "Finalizing grid strategies..."
        )


class TestStatusNarrator:
    def test_set_and_clear(self) -> None:
        updates: list[str] = []
        narrator = StatusNarrator(on_update=updates.append)

        narrator.set("Fetching")
        assert narrator.current == "Fetching"
        narrator.clear()

        assert narrator.current == ""
        assert updates == ["Fetching", ""]

    @pytest.mark.asyncio
    async def test_first_message_set_on_entry(self) -> None:
        narrator = StatusNarrator(interval=10)
        async with narrator.narrating(["one", "two"]):
            assert narrator.current == "one"

    @pytest.mark.asyncio
    async def test_rotates_and_wraps(self) -> None:
        updates: list[str] = []
        narrator = StatusNarrator(interval=0.01, on_update=updates.append)

        async with narrator.narrating(["a", "b"]):
            await asyncio.sleep(0.1)

        assert updates[:4] == ["a", "b", "a", "b"]

    @pytest.mark.asyncio
    async def test_rotation_stops_on_exit(self) -> None:
        updates: list[str] = []
        narrator = StatusNarrator(interval=0.01, on_update=updates.append)

        async with narrator.narrating(["a", "b"]):
            pass
        count = len(updates)
        await asyncio.sleep(0.05)

        assert len(updates) == count

    @pytest.mark.asyncio
    async def test_rotation_stops_on_error(self) -> None:
        updates: list[str] = []
        narrator = StatusNarrator(interval=0.01, on_update=updates.append)

        with pytest.raises(RuntimeError):
            async with narrator.narrating(["a", "b"]):
                raise RuntimeError("advisor failed")
        count = len(updates)
        await asyncio.sleep(0.05)

        assert len(updates) == count

    @pytest.mark.asyncio
    async def test_empty_messages(self) -> None:
        narrator = StatusNarrator(interval=0.01)
        async with narrator.narrating([]):
            await asyncio.sleep(0.02)
        assert narrator.current == ""
