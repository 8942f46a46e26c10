"""Human-readable status narration for a running scan.

Purely a presentation affordance: the narrator rotates through messages on
its own task and never blocks or influences the scan itself.
"""

import asyncio
from collections.abc import AsyncIterator, Callable, Sequence
from contextlib import asynccontextmanager

from screener.models import MarketTrend


def advisory_status_messages(trend: MarketTrend) -> tuple[str, ...]:
    """Messages shown while waiting on the advisory collaborator."""
    return (
        f"Market trend is {trend.value}. Analyzing pairs...",
        "Filtering coins by volume and volatility...",
        "Screening for stable funding rates...",
        "Identifying top candidates...",
        "Engaging AI analyst for deep analysis...",
        "Compiling top recommendations...",
        "Finalizing grid strategies...",
    )


class StatusNarrator:
    """Holds the current status line and rotates it on a timer.

    Args:
        interval: Seconds between rotations.
        on_update: Optional callback invoked with every new status line.
    """

    def __init__(
        self,
        interval: float = 1.5,
        on_update: Callable[[str], None] | None = None,
    ) -> None:
        self._interval = interval
        self._on_update = on_update
        self._current = ""

    @property
    def current(self) -> str:
        return self._current

    def set(self, message: str) -> None:
        self._current = message
        if self._on_update is not None:
            self._on_update(message)

    def clear(self) -> None:
        self.set("")

    @asynccontextmanager
    async def narrating(self, messages: Sequence[str]) -> AsyncIterator[None]:
        """Rotate through messages until the block exits, on any path."""
        if messages:
            self.set(messages[0])
        task = asyncio.create_task(self._rotate(messages))
        try:
            yield
        finally:
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass

    async def _rotate(self, messages: Sequence[str]) -> None:
        if not messages:
            return
        index = 1
        while True:
            await asyncio.sleep(self._interval)
            self.set(messages[index % len(messages)])
            index += 1
