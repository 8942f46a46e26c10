"""Tests for advisory output parsing.

Malformed elements are dropped one by one; only a non-JSON or non-array
payload fails the whole response.
"""

import json

import pytest

from screener.advisory.parsing import parse_pick, parse_picks
from screener.exceptions import AdvisoryError, MalformedPickError
from screener.models import AnalystPick, Direction


def _raw_pick(**overrides) -> dict:
    pick = {
        "pair": "ETHUSDT",
        "recommendation": "LONG",
        "justification": "Breaking out above the weekly range on rising volume.",
        "entryPrice": 3400.0,
        "takeProfit": 3740.0,
        "stopLoss": 3230.0,
        "gridLevels": [{"price": 3434.0, "size": "33%"}],
    }
    pick.update(overrides)
    return pick


class TestParsePick:
    def test_valid_pick(self) -> None:
        pick = parse_pick(_raw_pick())
        assert pick == AnalystPick(
            pair="ETHUSDT",
            direction=Direction.LONG,
            narrative="Breaking out above the weekly range on rising volume.",
        )

    def test_direction_case_insensitive(self) -> None:
        assert parse_pick(_raw_pick(recommendation=" short ")).direction == Direction.SHORT

    def test_pair_normalised(self) -> None:
        assert parse_pick(_raw_pick(pair=" solusdt ")).pair == "SOLUSDT"

    def test_numeric_fields_are_not_required(self) -> None:
        raw = {"pair": "ETHUSDT", "recommendation": "LONG", "justification": "x"}
        assert parse_pick(raw).pair == "ETHUSDT"

    @pytest.mark.parametrize("field", ["pair", "recommendation", "justification"])
    def test_missing_required_field(self, field: str) -> None:
        raw = _raw_pick()
        del raw[field]
        with pytest.raises(MalformedPickError, match=field):
            parse_pick(raw)

    def test_blank_field_is_missing(self) -> None:
        with pytest.raises(MalformedPickError, match="pair"):
            parse_pick(_raw_pick(pair="  "))

    def test_non_string_field_is_missing(self) -> None:
        with pytest.raises(MalformedPickError, match="pair"):
            parse_pick(_raw_pick(pair=123))

    def test_unknown_direction(self) -> None:
        with pytest.raises(MalformedPickError, match="HOLD"):
            parse_pick(_raw_pick(recommendation="HOLD"))

    def test_not_an_object(self) -> None:
        with pytest.raises(MalformedPickError, match="expected object"):
            parse_pick(["ETHUSDT", "LONG"])


class TestParsePicks:
    def test_valid_array(self) -> None:
        text = json.dumps([_raw_pick(), _raw_pick(pair="SOLUSDT", recommendation="SHORT")])
        picks = parse_picks(text)
        assert [(p.pair, p.direction) for p in picks] == [
            ("ETHUSDT", Direction.LONG),
            ("SOLUSDT", Direction.SHORT),
        ]

    def test_malformed_elements_dropped(self) -> None:
        text = json.dumps(
            [
                _raw_pick(recommendation="SIDEWAYS"),
                {"pair": "XRPUSDT"},
                "not-an-object",
                _raw_pick(pair="DOGEUSDT"),
            ]
        )
        picks = parse_picks(text)
        assert [p.pair for p in picks] == ["DOGEUSDT"]

    def test_empty_array(self) -> None:
        assert parse_picks("[]") == []

    def test_invalid_json(self) -> None:
        with pytest.raises(AdvisoryError, match="not valid JSON"):
            parse_picks("Here are my picks: ETH LONG")

    def test_top_level_object_rejected(self) -> None:
        with pytest.raises(AdvisoryError, match="expected array"):
            parse_picks(json.dumps({"picks": [_raw_pick()]}))
