"""Trade plan synthesis from categorical analyst picks."""

from screener.recommendations.synthesizer import RecommendationSynthesizer

__all__ = ["RecommendationSynthesizer"]
