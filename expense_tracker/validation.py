"""Field rules for expenses, shared by the API server and the desktop client.

Both layers call :func:`sanitize_expense` and then :func:`validate_expense`, so
a submission is judged by exactly the same rules wherever it is checked.
"""

from __future__ import annotations

import math
import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Final

VALID_CATEGORIES: Final[tuple[str, ...]] = (
    "Food",
    "Transport",
    "Entertainment",
    "Utilities",
    "Healthcare",
    "Shopping",
    "Other",
)
EXPENSE_FIELDS: Final[tuple[str, ...]] = ("date", "amount", "category", "description")
MAX_AMOUNT: Final[float] = 999999
MAX_DESCRIPTION_LENGTH: Final[int] = 255

_DATE_PATTERN: Final[re.Pattern[str]] = re.compile(r"^\d{4}-\d{2}-\d{2}$")


@dataclass(frozen=True)
class FieldError:
    field: str
    message: str

    def to_dict(self) -> dict[str, str]:
        return {"field": self.field, "message": self.message}


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of :func:`validate_expense`: a validity flag and ordered errors."""

    errors: tuple[FieldError, ...] = field(default_factory=tuple)

    @property
    def is_valid(self) -> bool:
        return not self.errors

    def messages(self) -> list[str]:
        return [error.message for error in self.errors]

    def to_details(self) -> dict[str, list[dict[str, str]]]:
        return {"errors": [error.to_dict() for error in self.errors]}


def is_valid_date(value: Any) -> bool:
    """Return ``True`` for a strict ``YYYY-MM-DD`` string naming a real calendar day."""

    if not isinstance(value, str) or not _DATE_PATTERN.match(value):
        return False
    try:
        date.fromisoformat(value)
    except ValueError:
        return False
    return True


def _parse_amount(value: Any) -> float | None:
    if value is None:
        return None
    if isinstance(value, bool):
        return math.nan
    if isinstance(value, (int, float)):
        try:
            return float(value)
        except OverflowError:
            return math.inf
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            return float(text)
        except ValueError:
            return math.nan
    return math.nan


def sanitize_expense(raw: Mapping[str, Any]) -> dict[str, Any]:
    """Normalise a raw payload into the canonical expense field types.

    Unknown keys are dropped. Strings are trimmed, ``amount`` becomes a float
    (``nan`` when it cannot be parsed, ``None`` when missing) and an empty
    ``description`` becomes ``None``.
    """

    raw_date = raw.get("date")
    if isinstance(raw_date, date):
        raw_date = raw_date.isoformat()
    elif isinstance(raw_date, str):
        raw_date = raw_date.strip()

    category = raw.get("category")
    if isinstance(category, str):
        category = category.strip()

    description = raw.get("description")
    if isinstance(description, str):
        description = description.strip() or None

    return {
        "date": raw_date,
        "amount": _parse_amount(raw.get("amount")),
        "category": category,
        "description": description,
    }


def _check_date(value: Any, today: date) -> str | None:
    if value is None or value == "":
        return "Date is required"
    if not is_valid_date(value):
        return "Invalid date format (use YYYY-MM-DD)"
    if date.fromisoformat(value) > today:
        return "Date cannot be in the future"
    return None


def _check_amount(value: Any) -> str | None:
    if value is None or value == "":
        return "Amount is required"
    amount = _parse_amount(value)
    if amount is None or not math.isfinite(amount):
        return "Amount must be a number"
    if amount <= 0:
        return "Amount must be greater than 0"
    if amount > MAX_AMOUNT:
        return "Amount too large"
    return None


def _check_category(value: Any) -> str | None:
    if value is None or value == "":
        return "Category is required"
    if value not in VALID_CATEGORIES:
        return f"Category must be one of: {', '.join(VALID_CATEGORIES)}"
    return None


def _check_description(value: Any) -> str | None:
    if value is None or value == "":
        return None
    if not isinstance(value, str):
        return "Description must be text"
    if len(value) > MAX_DESCRIPTION_LENGTH:
        return f"Description too long (max {MAX_DESCRIPTION_LENGTH} chars)"
    return None


def validate_field(field_name: str, value: Any, today: date | None = None) -> str | None:
    """Check one field in isolation and return its error message, if any."""

    if field_name == "date":
        return _check_date(value, today or date.today())
    if field_name == "amount":
        return _check_amount(value)
    if field_name == "category":
        return _check_category(value)
    if field_name == "description":
        return _check_description(value)
    return None


def validate_expense(candidate: Mapping[str, Any], today: date | None = None) -> ValidationResult:
    """Check every field of a sanitised expense and collect all errors.

    The date rule compares calendar days only; ``today`` defaults to the local
    current date.
    """

    reference = today or date.today()
    errors = []
    for name in EXPENSE_FIELDS:
        message = validate_field(name, candidate.get(name), reference)
        if message is not None:
            errors.append(FieldError(name, message))
    return ValidationResult(tuple(errors))


__all__ = [
    "EXPENSE_FIELDS",
    "FieldError",
    "MAX_AMOUNT",
    "MAX_DESCRIPTION_LENGTH",
    "VALID_CATEGORIES",
    "ValidationResult",
    "is_valid_date",
    "sanitize_expense",
    "validate_expense",
    "validate_field",
]
