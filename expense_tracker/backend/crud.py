"""CRUD helper functions for the expense tracking backend.

Every function issues a single statement against the ``expenses`` table. Any
SQLAlchemy fault is re-raised as :class:`StoreError` naming the operation.
Validation is not repeated here: callers validate before writing.
"""
from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Iterator, List, Optional

from sqlalchemy import delete, func, literal, select, union_all
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from expense_tracker.errors import EmptyUpdateError, EntityNotFoundError, StoreError

from . import models, schemas

LOG = logging.getLogger(__name__)

UPDATABLE_FIELDS = ("date", "amount", "category", "description")
TOTAL_LABEL = "TOTAL"


@contextmanager
def _store_operation(operation: str) -> Iterator[None]:
    try:
        yield
    except SQLAlchemyError as exc:
        LOG.error("Store operation %s failed: %s", operation, exc)
        raise StoreError(operation, str(exc)) from exc


def list_expenses(session: Session, filters: Optional[schemas.ExpenseFilter] = None) -> List[models.Expense]:
    """Return expenses newest first, optionally filtered by category and amount range.

    The amount range only applies when both bounds are supplied.
    """
    filters = filters or schemas.ExpenseFilter()
    stmt = select(models.Expense)
    if filters.category:
        stmt = stmt.where(models.Expense.category == filters.category)
    if filters.min_amount is not None and filters.max_amount is not None:
        stmt = stmt.where(models.Expense.amount.between(filters.min_amount, filters.max_amount))
    stmt = stmt.order_by(models.Expense.date.desc(), models.Expense.id.asc())
    with _store_operation("list_expenses"):
        return list(session.scalars(stmt))


def get_expense(session: Session, expense_id: int) -> Optional[models.Expense]:
    with _store_operation("get_expense"):
        return session.get(models.Expense, expense_id)


def create_expense(session: Session, expense_in: schemas.ExpenseCreate) -> models.Expense:
    expense = models.Expense(**expense_in.model_dump())
    with _store_operation("create_expense"):
        session.add(expense)
        session.flush()
        session.refresh(expense)
    LOG.info("Created expense %s (%s, %.2f)", expense.id, expense.category, expense.amount)
    return expense


def update_expense(session: Session, expense_id: int, update_in: schemas.ExpenseUpdate) -> models.Expense:
    """Apply the explicitly set fields of ``update_in`` and return the refreshed row."""
    changes = {
        field: value
        for field, value in update_in.model_dump(exclude_unset=True).items()
        if field in UPDATABLE_FIELDS
    }
    if not changes:
        raise EmptyUpdateError("No valid fields to update")
    expense = get_expense(session, expense_id)
    if expense is None:
        raise EntityNotFoundError(f"Expense with ID {expense_id} not found")
    with _store_operation("update_expense"):
        for field, value in changes.items():
            setattr(expense, field, value)
        session.flush()
        session.refresh(expense)
    LOG.info("Updated expense %s (%s)", expense_id, ", ".join(sorted(changes)))
    return expense


def delete_expense(session: Session, expense_id: int) -> None:
    stmt = delete(models.Expense).where(models.Expense.id == expense_id)
    with _store_operation("delete_expense"):
        result = session.execute(stmt)
    if result.rowcount == 0:
        raise EntityNotFoundError(f"Expense with ID {expense_id} not found")
    LOG.info("Deleted expense %s", expense_id)


def expense_summary(session: Session) -> List[schemas.CategorySummary]:
    """Return count and rounded total per category, followed by a ``TOTAL`` row.

    Categories without expenses are absent. On an empty table only the
    ``TOTAL`` row is returned, with zero count and total.
    """
    total_count = func.count(models.Expense.id).label("total_count")
    by_category = select(
        models.Expense.category.label("category"),
        total_count,
        func.round(func.sum(models.Expense.amount), 2).label("category_total"),
    ).group_by(models.Expense.category)
    overall = select(
        literal(TOTAL_LABEL).label("category"),
        func.count(models.Expense.id).label("total_count"),
        func.coalesce(func.round(func.sum(models.Expense.amount), 2), 0.0).label("category_total"),
    )
    with _store_operation("expense_summary"):
        rows = session.execute(union_all(by_category, overall)).all()

    summary = [
        schemas.CategorySummary(
            category=row.category,
            total_count=row.total_count,
            category_total=row.category_total,
        )
        for row in rows
    ]
    summary.sort(key=lambda item: (item.category == TOTAL_LABEL, item.category))
    return summary
