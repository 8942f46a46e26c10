"""Gemini-backed advisory client using the generateContent REST endpoint.

Requests structured JSON output matching RESPONSE_SCHEMA. The response's
numeric fields are requested for the analyst's own reasoning but never
trusted downstream.
"""

import json
from collections.abc import Sequence

import httpx

from screener.advisory.client import AdvisoryClient
from screener.advisory.parsing import parse_picks
from screener.config import AdvisorySettings
from screener.exceptions import AdvisoryError
from screener.logging import get_logger
from screener.models import AnalystPick, AnalyzedCandidate, MarketTrend

logger = get_logger(__name__)

RESPONSE_SCHEMA: dict = {
    "type": "ARRAY",
    "items": {
        "type": "OBJECT",
        "properties": {
            "pair": {"type": "STRING"},
            "recommendation": {"type": "STRING"},
            "justification": {"type": "STRING"},
            "entryPrice": {"type": "NUMBER"},
            "takeProfit": {"type": "NUMBER"},
            "stopLoss": {"type": "NUMBER"},
            "gridLevels": {
                "type": "ARRAY",
                "items": {
                    "type": "OBJECT",
                    "properties": {
                        "price": {"type": "NUMBER"},
                        "size": {"type": "STRING"},
                    },
                    "required": ["price", "size"],
                },
            },
        },
        "required": [
            "pair",
            "recommendation",
            "justification",
            "entryPrice",
            "takeProfit",
            "stopLoss",
            "gridLevels",
        ],
    },
}


def build_prompt(
    candidates: Sequence[AnalyzedCandidate], trend: MarketTrend, max_picks: int
) -> str:
    """Render the analyst prompt for the screened candidate set."""
    candidates_json = json.dumps([c.to_dict() for c in candidates], indent=2)
    return (
        "You are an expert trading analyst for Binance USD-M futures. Pick the "
        f"top {max_picks} high-probability trades from a pre-vetted list, aiming "
        "for a 10% profit per cycle.\n\n"
        f'The overall market trend, from BTCUSDT 24h performance, is "{trend.value}".\n\n'
        "Every candidate already passed this screen:\n"
        "1. Liquidity: quote volume > 10M USDT and open interest > 1M.\n"
        "2. Volatility: absolute 24h price change >= 2%.\n"
        "3. Stable funding: funding rate between -0.1% and +0.1%.\n\n"
        f"Candidates:\n{candidates_json}\n\n"
        f"Select the best {max_picks}.\n"
        '- If "Bullish", prefer LONG positions.\n'
        '- If "Bearish", prefer SHORT positions.\n'
        '- If "Neutral", judge each candidate on its own merit.\n\n'
        "For each pick return pair (exact symbol from the list), recommendation "
        "(LONG or SHORT), justification, and a complete plan with entryPrice "
        "near lastPrice, takeProfit, stopLoss and gridLevels, as JSON."
    )


class GeminiAdvisoryClient(AdvisoryClient):
    """Calls Gemini generateContent and parses the JSON array it returns.

    Args:
        settings: Model, endpoint, credentials and sampling parameters.
        http_client: Optional pre-built httpx.AsyncClient (tests inject one
            with a MockTransport). One is created from settings otherwise.
    """

    def __init__(
        self,
        settings: AdvisorySettings,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self._settings = settings
        self._http = http_client or httpx.AsyncClient(timeout=settings.timeout_seconds)

    async def close(self) -> None:
        await self._http.aclose()

    async def get_picks(
        self, candidates: Sequence[AnalyzedCandidate], trend: MarketTrend
    ) -> list[AnalystPick]:
        api_key = self._settings.api_key.get_secret_value()
        if not api_key:
            raise AdvisoryError("advisory API key is not configured")

        url = f"{self._settings.base_url.rstrip('/')}/models/{self._settings.model}:generateContent"
        body = {
            "contents": [
                {
                    "role": "user",
                    "parts": [
                        {"text": build_prompt(candidates, trend, self._settings.max_picks)}
                    ],
                }
            ],
            "generationConfig": {
                "responseMimeType": "application/json",
                "responseSchema": RESPONSE_SCHEMA,
                "temperature": self._settings.temperature,
            },
        }

        logger.info(
            "advisory_request",
            model=self._settings.model,
            candidates=len(candidates),
            trend=trend.value,
        )
        try:
            resp = await self._http.post(
                url,
                params={"key": api_key},
                json=body,
            )
        except httpx.HTTPError as e:
            raise AdvisoryError(f"advisory request failed: {e}") from e

        if resp.status_code != 200:
            raise AdvisoryError(
                f"advisory request failed with status {resp.status_code}: {resp.text[:200]}"
            )

        try:
            data = resp.json()
        except ValueError as e:
            raise AdvisoryError(f"advisory envelope is not valid JSON: {e}") from e

        picks = parse_picks(_extract_text(data))
        logger.info("advisory_picks_received", picks=[p.pair for p in picks])
        return picks


def _extract_text(payload: dict) -> str:
    """Concatenate the text parts of the first candidate."""
    try:
        parts = payload["candidates"][0]["content"]["parts"]
    except (KeyError, IndexError, TypeError) as e:
        raise AdvisoryError("advisory response has no candidate content") from e
    if not isinstance(parts, list):
        raise AdvisoryError(
            f"advisory response parts are {type(parts).__name__}, expected list"
        )

    text = "".join(
        part["text"]
        for part in parts
        if isinstance(part, dict) and isinstance(part.get("text"), str)
    )
    if not text.strip():
        raise AdvisoryError("advisory response text is empty")
    return text.strip()
