"""Advisory collaborator -- external analyst producing categorical trade picks."""

from screener.advisory.client import AdvisoryClient
from screener.advisory.gemini_client import GeminiAdvisoryClient
from screener.advisory.parsing import parse_pick, parse_picks

__all__ = ["AdvisoryClient", "GeminiAdvisoryClient", "parse_pick", "parse_picks"]
