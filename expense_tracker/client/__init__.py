"""Desktop client for the expense tracker API."""

from .api import ExpenseClient
from .state import ExpenseState

__all__ = ["ExpenseClient", "ExpenseState"]
