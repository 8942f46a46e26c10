"""Parsing of the advisory collaborator's JSON output into AnalystPicks.

Only pair, recommendation and justification are consumed. Numeric fields
(entryPrice, takeProfit, stopLoss, gridLevels) are ignored; the
synthesizer recomputes them from the screened last price.
"""

import json
from typing import Any

from screener.exceptions import AdvisoryError, MalformedPickError
from screener.logging import get_logger
from screener.models import AnalystPick, Direction

logger = get_logger(__name__)

_REQUIRED_FIELDS = ("pair", "recommendation", "justification")


def parse_pick(raw: Any) -> AnalystPick:
    """Validate one advisory element.

    Raises:
        MalformedPickError: Not an object, missing a required field, or the
            direction is not LONG/SHORT.
    """
    if not isinstance(raw, dict):
        raise MalformedPickError(f"pick is {type(raw).__name__}, expected object")

    missing = [f for f in _REQUIRED_FIELDS if not isinstance(raw.get(f), str) or not raw[f].strip()]
    if missing:
        raise MalformedPickError(f"pick missing required fields: {', '.join(missing)}")

    direction_raw = raw["recommendation"].strip().upper()
    try:
        direction = Direction(direction_raw)
    except ValueError as e:
        raise MalformedPickError(f"unknown direction {raw['recommendation']!r}") from e

    return AnalystPick(
        pair=raw["pair"].strip().upper(),
        direction=direction,
        narrative=raw["justification"].strip(),
    )


def parse_picks(text: str) -> list[AnalystPick]:
    """Parse the advisory JSON array, dropping malformed elements.

    Raises:
        AdvisoryError: The text is not JSON or its top level is not an array.
    """
    try:
        payload = json.loads(text)
    except json.JSONDecodeError as e:
        raise AdvisoryError(f"advisory response is not valid JSON: {e}") from e

    if not isinstance(payload, list):
        raise AdvisoryError(
            f"advisory response is {type(payload).__name__}, expected array"
        )

    picks: list[AnalystPick] = []
    for index, raw in enumerate(payload):
        try:
            picks.append(parse_pick(raw))
        except MalformedPickError as e:
            logger.warning("pick_dropped", index=index, reason=str(e))
    return picks
