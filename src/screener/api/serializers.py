"""JSON serialisation of scan results for the API."""

from __future__ import annotations

from dataclasses import asdict
from decimal import Decimal
from enum import Enum
from typing import Any

from screener.models import DeliveryReport, MarketSnapshot, ScanResult, TradeRecommendation


def to_jsonable(obj: Any) -> Any:
    """Recursively convert Decimal and Enum values for JSON serialization."""
    if isinstance(obj, Decimal):
        return str(obj)
    if isinstance(obj, Enum):
        return obj.value
    if isinstance(obj, dict):
        return {k: to_jsonable(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [to_jsonable(item) for item in obj]
    return obj


def snapshot_to_dict(snapshot: MarketSnapshot) -> dict:
    return {
        "trend": snapshot.trend.value,
        "reference_symbol": snapshot.reference_symbol,
        "reference_price": to_jsonable(snapshot.reference_price),
        "reference_price_display": snapshot.reference_price_display,
        "reference_change_percent": snapshot.reference_change_display,
        "candidates": [c.to_dict() for c in snapshot.candidates],
    }


def recommendation_to_dict(rec: TradeRecommendation) -> dict:
    return {
        "id": rec.id,
        "pair": rec.pair,
        "recommendation": rec.direction.value,
        "justification": rec.narrative,
        "entry_price": str(rec.entry_price),
        "take_profit": str(rec.take_profit),
        "stop_loss": str(rec.stop_loss),
        "grid_levels": [
            {"price": str(level.price), "size": level.size_label}
            for level in rec.grid_levels
        ],
        "estimated_profit_percent": str(rec.estimated_profit_percent),
    }


def scan_result_to_dict(
    result: ScanResult, deliveries: list[DeliveryReport] | None = None
) -> dict:
    return {
        "scan_id": result.scan_id,
        "started_at": result.started_at,
        "completed_at": result.completed_at,
        "market": snapshot_to_dict(result.snapshot),
        "sentiment": [to_jsonable(asdict(s)) for s in result.sentiment],
        "recommendations": [recommendation_to_dict(r) for r in result.recommendations],
        "deliveries": [asdict(d) for d in deliveries or []],
    }
