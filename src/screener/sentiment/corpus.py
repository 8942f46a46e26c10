"""Snippet sources feeding the sentiment aggregator.

The corpus is injected into the scan pipeline rather than read from module
state, so tests and alternative feeds can supply their own snippets.
"""

from abc import ABC, abstractmethod
from collections.abc import Mapping, Sequence
from types import MappingProxyType

DEFAULT_ASSETS: tuple[str, ...] = ("BTC", "ETH", "SOL", "DOGE", "XRP", "BNB")

DEFAULT_SNIPPETS: Mapping[str, tuple[str, ...]] = MappingProxyType(
    {
        "BTC": (
            "Big breakout for #bitcoin, saylor just bought more!",
            "BTC is going to pump hard this week, massive volume incoming.",
            "Potential SEC lawsuit news could cause a selloff on BTC.",
        ),
        "ETH": (
            "#ethereum upgrade complete! Very bullish for the ecosystem.",
            "ETH fees are high, but the rocket is fueled for a new ATH.",
            "Whalechart shows big wallets are accumulating ETH.",
        ),
        "SOL": (
            "Another #solana outage? This is getting bearish.",
            "SOL is so fast, huge potential. Watcher_guru just posted a bullish article.",
            "Solana could flip ETH, it's a moon mission.",
        ),
        "DOGE": (
            "elonmusk tweeted about #dogecoin again! To the moon!",
            "Just a meme coin, be careful, high risk of a dump.",
            "DOGE is fun but lacks real utility. Neutral for now.",
        ),
        "XRP": (
            "The SEC vs Ripple lawsuit is still ongoing, bearish outlook for #XRP.",
            "If XRP wins the lawsuit, it will surge like never before.",
            "Cointelegraph reports positive developments in the XRP case.",
        ),
        "BNB": (
            "cz_binance announced a new #BNB launchpad project. Bullish!",
            "Binance chain is solid, BNB is a safe bet for long term.",
            "FUD around Binance, could see a BNB dump soon.",
        ),
    }
)


class SnippetSource(ABC):
    """Provides the asset -> snippets mapping for one aggregation run."""

    @abstractmethod
    async def fetch_snippets(self) -> Mapping[str, Sequence[str]]:
        ...


class StaticSnippetSource(SnippetSource):
    """Serves a fixed corpus over a fixed asset list.

    The asset list defaults to DEFAULT_ASSETS for the built-in corpus and to
    the corpus keys for an injected one. Assets without an entry in the
    corpus map to an empty sequence.
    """

    def __init__(
        self,
        snippets: Mapping[str, Sequence[str]] | None = None,
        assets: Sequence[str] | None = None,
    ) -> None:
        if snippets is None:
            snippets = DEFAULT_SNIPPETS
            assets = DEFAULT_ASSETS if assets is None else assets
        self._snippets = snippets
        self._assets = tuple(assets) if assets is not None else tuple(snippets)

    async def fetch_snippets(self) -> dict[str, tuple[str, ...]]:
        return {asset: tuple(self._snippets.get(asset, ())) for asset in self._assets}
