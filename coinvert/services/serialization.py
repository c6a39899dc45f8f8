"""JSON codecs for the blobs kept in the rate cache.

Encodings are deterministic (sorted keys, compact separators) and floats are
written with their shortest round-tripping repr, so decode(encode(x)) == x.
"""

from __future__ import annotations

import json
from collections.abc import Iterable, Mapping
from typing import Any

from coinvert.providers.schemas import HistoricalSeries, RatePoint, RateTable


class DecodeError(ValueError):
    """Raised when a cached blob cannot be turned back into a value."""


def _dumps(payload: Any) -> str:
    return json.dumps(payload, sort_keys=True, separators=(",", ":"))


def _loads(blob: str) -> Any:
    try:
        return json.loads(blob)
    except (TypeError, ValueError) as exc:
        raise DecodeError(f"Cached blob is not valid JSON: {exc}") from exc


def encode_latest_tables(tables: Mapping[str, RateTable]) -> str:
    """Encode the per-base latest tables as `{base: {code: rate}}`."""

    return _dumps({table.base: table.rates for table in tables.values()})


def decode_latest_tables(blob: str) -> dict[str, RateTable]:
    payload = _loads(blob)
    if not isinstance(payload, dict) or not all(
        isinstance(rates, dict) for rates in payload.values()
    ):
        raise DecodeError("Cached latest rates must map each base to a rates object")
    try:
        tables = [RateTable(base=base, rates=rates) for base, rates in payload.items()]
    except (TypeError, ValueError) as exc:
        raise DecodeError(f"Cached latest rates are invalid: {exc}") from exc
    return {table.base: table for table in tables}


def encode_series(series: HistoricalSeries) -> str:
    return _dumps(
        {
            "base": series.base,
            "target": series.target,
            "points": [[point.date, point.rate] for point in series.points],
        }
    )


def decode_series(blob: str) -> HistoricalSeries:
    payload = _loads(blob)
    if not isinstance(payload, dict) or not isinstance(payload.get("points"), list):
        raise DecodeError("Cached series must be an object with a 'points' list")
    try:
        points = [RatePoint(date=day, rate=rate) for day, rate in payload["points"]]
        return HistoricalSeries(base=payload["base"], target=payload["target"], points=points)
    except (KeyError, TypeError, ValueError) as exc:
        raise DecodeError(f"Cached series is invalid: {exc}") from exc


def encode_currency_list(codes: Iterable[str]) -> str:
    return _dumps(sorted({str(code).strip().lower() for code in codes}))


def decode_currency_list(blob: str) -> set[str]:
    payload = _loads(blob)
    if not isinstance(payload, list) or not all(isinstance(code, str) for code in payload):
        raise DecodeError("Cached currency list must be a list of strings")
    return set(payload)
