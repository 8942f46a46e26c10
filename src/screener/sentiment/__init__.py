"""Lexical social-media sentiment scoring and per-asset aggregation."""

from screener.sentiment.aggregator import SentimentAggregator
from screener.sentiment.corpus import SnippetSource, StaticSnippetSource
from screener.sentiment.scorer import SentimentScorer

__all__ = ["SentimentAggregator", "SentimentScorer", "SnippetSource", "StaticSnippetSource"]
