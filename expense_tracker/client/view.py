"""Qt-independent view models for the desktop client.

The window in :mod:`expense_tracker.client.window` only copies what these
helpers produce into widgets, so layout choice, row formatting and message
wording are decided here.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from datetime import date
from typing import Any, Final, Literal

from expense_tracker.validation import sanitize_expense, validate_expense, validate_field

from .formatting import format_amount, format_date, truncate

LAYOUT_BREAKPOINT: Final[int] = 768
ERROR_DURATION_MS: Final[int] = 5000
SUCCESS_DURATION_MS: Final[int] = 4000
DELETE_CONFIRMATION: Final[str] = "Are you sure you want to delete this expense?"
TABLE_HEADERS: Final[tuple[str, ...]] = ("Date", "Description", "Category", "Amount", "Action")
EMPTY_DESCRIPTION: Final[str] = "—"

Layout = Literal["table", "cards"]


def select_layout(width: int) -> Layout:
    """Use the table at or above the breakpoint and stacked cards below it."""

    return "table" if width >= LAYOUT_BREAKPOINT else "cards"


@dataclass(frozen=True)
class ExpenseRow:
    expense_id: int
    date: str
    description: str
    category: str
    amount: str
    notes: str | None


def build_rows(expenses: Iterable[Mapping[str, Any]]) -> list[ExpenseRow]:
    rows = []
    for expense in expenses:
        description = expense.get("description") or None
        rows.append(
            ExpenseRow(
                expense_id=int(expense["id"]),
                date=format_date(expense.get("date")),
                description=truncate(description) or EMPTY_DESCRIPTION,
                category=str(expense.get("category") or ""),
                amount=format_amount(expense.get("amount")),
                notes=description,
            )
        )
    return rows


def form_errors(form: Mapping[str, Any], today: date | None = None) -> list[str]:
    """Run the shared sanitizer and validator over raw form input."""

    return validate_expense(sanitize_expense(form), today=today).messages()


def field_error(field_name: str, value: Any, today: date | None = None) -> str | None:
    """Per-field feedback used when an input loses focus."""

    sanitized = sanitize_expense({field_name: value})
    return validate_field(field_name, sanitized.get(field_name), today=today)


def describe_error(exc: BaseException, fallback: str) -> str:
    """Turn an API or network failure into the text shown to the user."""

    code = getattr(exc, "code", None)
    details = getattr(exc, "details", None) or {}
    if code == "VALIDATION_ERROR":
        messages = [item.get("message") for item in details.get("errors", []) if item.get("message")]
        return ", ".join(messages) or "Validation failed"
    message = getattr(exc, "message", None) or str(exc)
    return message or fallback


__all__ = [
    "DELETE_CONFIRMATION",
    "EMPTY_DESCRIPTION",
    "ERROR_DURATION_MS",
    "ExpenseRow",
    "LAYOUT_BREAKPOINT",
    "SUCCESS_DURATION_MS",
    "TABLE_HEADERS",
    "build_rows",
    "describe_error",
    "field_error",
    "form_errors",
    "select_layout",
]
