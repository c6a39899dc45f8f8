"""Dataclasses describing normalized rate payloads."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Dict, Iterable, List, Mapping, Tuple


def normalize_currency(code: str) -> str:
    """Normalize a requested currency code to canonical lowercase form."""

    if not code or not str(code).strip():
        raise ValueError("Currency code cannot be blank.")
    normalized = str(code).strip().lower()
    if not normalized.isascii() or not normalized.isalnum():
        raise ValueError(f"Currency code must be ASCII letters or digits: {code!r}")
    return normalized


def _normalize_rates(rates: Mapping[str, float | int]) -> Dict[str, float]:
    return {str(code).strip().lower(): float(value) for code, value in rates.items()}


@dataclass(frozen=True)
class RateTable:
    """Latest rates for one base currency: units of target per 1 unit of base.

    The table holds exactly what upstream delivered, which usually omits the
    base itself. Use `rate_for` to look up a rate with the identity rate
    applied for the base.
    """

    base: str
    rates: Dict[str, float] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "base", normalize_currency(self.base))
        object.__setattr__(self, "rates", _normalize_rates(self.rates))

    def rate_for(self, code: str) -> float | None:
        normalized = normalize_currency(code)
        if normalized == self.base:
            return 1.0
        return self.rates.get(normalized)

    def codes(self) -> set[str]:
        """Codes present in the table plus the base currency."""

        return set(self.rates) | {self.base}

    def __len__(self) -> int:
        return len(self.rates)


@dataclass(frozen=True)
class RatePoint:
    """Single historical observation keyed by ISO calendar date."""

    date: str
    rate: float

    def __post_init__(self) -> None:
        parsed = date.fromisoformat(str(self.date))
        object.__setattr__(self, "date", parsed.isoformat())
        object.__setattr__(self, "rate", float(self.rate))


@dataclass(frozen=True)
class HistoricalSeries:
    """Ascending day-by-day rates for a base/target pair."""

    base: str
    target: str
    points: List[RatePoint] = field(default_factory=list)

    def __post_init__(self) -> None:
        object.__setattr__(self, "base", normalize_currency(self.base))
        object.__setattr__(self, "target", normalize_currency(self.target))
        object.__setattr__(self, "points", list(self._normalize_points(self.points)))

    @staticmethod
    def _normalize_points(points: Iterable[RatePoint]) -> Iterable[RatePoint]:
        for point in points:
            if not isinstance(point, RatePoint):
                raise TypeError("points must contain RatePoint instances")
            yield point

    def as_pairs(self) -> List[Tuple[str, float]]:
        return [(point.date, point.rate) for point in self.points]

    def is_empty(self) -> bool:
        return not self.points

    def __len__(self) -> int:
        return len(self.points)
