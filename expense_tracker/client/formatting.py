"""Display helpers shared by the client views."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from datetime import date
from typing import Any

from babel.numbers import format_currency

CURRENCY = "USD"
LOCALE = "en_US"


def format_date(value: str | date | None) -> str:
    """Format an ISO date as ``Jan 15, 2024``; unparsable input is returned as-is."""

    if not value:
        return ""
    if isinstance(value, str):
        try:
            value = date.fromisoformat(value)
        except ValueError:
            return value
    return f"{value:%b} {value.day}, {value.year}"


def _as_float(value: Any) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0


def format_amount(amount: Any) -> str:
    return format_currency(_as_float(amount), CURRENCY, locale=LOCALE)


def calculate_total(expenses: Iterable[Mapping[str, Any]]) -> float:
    return sum(_as_float(expense.get("amount")) for expense in expenses)


def sort_by_date_desc(expenses: Iterable[Mapping[str, Any]]) -> list[Mapping[str, Any]]:
    # sorted() is stable, so same-day expenses keep their incoming order.
    return sorted(expenses, key=lambda expense: expense.get("date") or "", reverse=True)


def truncate(text: str | None, length: int = 50) -> str | None:
    if not text or len(text) <= length:
        return text
    return text[:length] + "..."


__all__ = [
    "calculate_total",
    "format_amount",
    "format_date",
    "sort_by_date_desc",
    "truncate",
]
