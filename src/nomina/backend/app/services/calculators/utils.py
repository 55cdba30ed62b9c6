"""Utility helpers for calculator modules."""

from __future__ import annotations

from collections.abc import Iterable


def format_percentage(value: float) -> str:
    """Return a human-readable percentage label for ``value``."""

    percentage = round(value * 100, 4)
    if float(int(percentage)) == percentage:
        return f"{int(percentage)}%"
    return f"{percentage:.2f}%"


def round_currency(value: float) -> float:
    """Round monetary amounts to two decimals."""

    # ``+ 0.0`` folds negative zero so serialised payloads never show ``-0.0``.
    return round(value, 2) + 0.0


def sum_currency(values: Iterable[float]) -> float:
    """Add already-rounded amounts and round the result."""

    return round_currency(sum(values))
