"""Amount conversion and display helpers built on a fetched RateTable."""

from __future__ import annotations

from collections.abc import Iterable

from coinvert.providers.schemas import RateTable, normalize_currency


class ConversionError(ValueError):
    """Raised when a table has no rate for the requested target."""


def convert_amount(amount: float | int | str, table: RateTable, target: str) -> float:
    """Convert `amount` of the table's base into `target` by plain multiplication.

    Converting into the base itself uses the identity rate.
    """

    try:
        value = float(amount)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"Amount is not a number: {amount!r}") from exc

    rate = table.rate_for(target)
    if rate is None:
        raise ConversionError(f"No {normalize_currency(target)} rate in the {table.base} table.")
    return value * rate


def format_amount(value: float) -> str:
    return f"{value:.2f}"


def currency_choices(codes: Iterable[str], base: str) -> list[str]:
    """Codes offered to a picker: every known code plus `base`, sorted case-insensitively."""

    choices = {str(code).strip().lower() for code in codes if str(code).strip()}
    choices.add(normalize_currency(base))
    return sorted(choices, key=str.upper)
