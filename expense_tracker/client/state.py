"""In-memory client state, the single source of truth for rendering."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any

from .formatting import calculate_total, sort_by_date_desc


@dataclass
class ExpenseState:
    """Expenses currently shown by the client plus the loading flag.

    Mutators only change this container; callers re-render afterwards.
    """

    expenses: list[dict[str, Any]] = field(default_factory=list)
    is_loading: bool = False

    def replace(self, expenses: Iterable[dict[str, Any]]) -> None:
        self.expenses = [dict(item) for item in sort_by_date_desc(expenses)]

    def add(self, expense: dict[str, Any]) -> None:
        self.expenses.insert(0, dict(expense))

    def remove(self, expense_id: int) -> bool:
        before = len(self.expenses)
        self.expenses = [item for item in self.expenses if item.get("id") != expense_id]
        return len(self.expenses) != before

    def total(self) -> float:
        return calculate_total(self.expenses)

    @property
    def is_empty(self) -> bool:
        return not self.expenses


__all__ = ["ExpenseState"]
