"""Lexical sentiment scoring for short social-media snippets.

score = baseline
      + term_weight        per distinct bullish term present
      - term_weight        per distinct bearish term present
      + influencer_weight  per distinct influencer handle present
      + media_weight       per distinct media outlet present
clamped to [0, 100]. Terms are matched as configured, as substrings of the
normalised text: "sec" also matches inside "second", while a handle such as
"cz_binance" can never match because "_" is stripped from the text.
"""

import re

from screener.config import SentimentSettings

_STRIP_RE = re.compile(r"[^a-z0-9 ]")

SCORE_MIN = 0.0
SCORE_MAX = 100.0


def normalize(text: str) -> str:
    """Lower-case and drop every character outside [a-z0-9 ]."""
    return _STRIP_RE.sub("", text.lower())


def _distinct_terms(terms: tuple[str, ...]) -> tuple[str, ...]:
    return tuple(dict.fromkeys(term for term in terms if term))


class SentimentScorer:
    """Deterministic bullish/bearish lexical scorer.

    Args:
        settings: Lexicons and weights. Defaults to SentimentSettings().
    """

    def __init__(self, settings: SentimentSettings | None = None) -> None:
        self._settings = settings or SentimentSettings()
        self._bullish = _distinct_terms(self._settings.bullish_terms)
        self._bearish = _distinct_terms(self._settings.bearish_terms)
        self._influencers = _distinct_terms(self._settings.influencers)
        self._media = _distinct_terms(self._settings.media_outlets)

    def score(self, text: str) -> float:
        """Score a snippet in [0, 100]. Never raises for str input."""
        cleaned = normalize(text)
        s = self._settings

        score = s.baseline
        score += s.term_weight * _count_present(self._bullish, cleaned)
        score -= s.term_weight * _count_present(self._bearish, cleaned)
        score += s.influencer_weight * _count_present(self._influencers, cleaned)
        score += s.media_weight * _count_present(self._media, cleaned)

        return max(SCORE_MIN, min(SCORE_MAX, score))


def _count_present(terms: tuple[str, ...], text: str) -> int:
    return sum(1 for term in terms if term in text)
