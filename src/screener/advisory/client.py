"""Abstract advisory collaborator interface.

The advisory collaborator is an external oracle: given the screened
candidates and the market trend it names pairs, a direction and a narrative.
"""

from abc import ABC, abstractmethod
from collections.abc import Sequence

from screener.models import AnalystPick, AnalyzedCandidate, MarketTrend


class AdvisoryClient(ABC):
    """Abstract base class for trade-pick advisors."""

    @abstractmethod
    async def get_picks(
        self, candidates: Sequence[AnalyzedCandidate], trend: MarketTrend
    ) -> list[AnalystPick]:
        """Return categorical picks for the candidate set.

        Raises:
            AdvisoryError: The advisor failed or answered with malformed JSON.
        """
        ...

    async def close(self) -> None:
        """Release transport resources, if any."""
        return None
