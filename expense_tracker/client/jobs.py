"""Background execution of :class:`ExpenseClient` calls for the desktop window.

Requests block, so each one runs on a Qt thread pool. The outcome comes back on
the UI thread, where :class:`ExpenseTasks` updates the :class:`ExpenseState`
and turns failures into the text shown to the user.
"""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import Any, Callable

from .api import ExpenseClient
from .state import ExpenseState
from .view import describe_error

LOG = logging.getLogger(__name__)

LOAD_FAILED_MESSAGE = "Could not load expenses. Check your connection."
ADD_FAILED_MESSAGE = "Failed to add expense"
DELETE_FAILED_MESSAGE = "Failed to delete expense"


@lru_cache(maxsize=None)
def _call_type(qt_core: Any) -> type:
    """Build the runnable class once per Qt binding."""

    class _CallSignals(qt_core.QObject):
        succeeded = qt_core.Signal(object)
        failed = qt_core.Signal(object)

    class _ApiCall(qt_core.QRunnable):
        def __init__(self, fn: Callable[..., Any], args: tuple[Any, ...]) -> None:
            super().__init__()
            self._fn = fn
            self._args = args
            self.signals = _CallSignals()

        def run(self) -> None:
            try:
                result = self._fn(*self._args)
            except Exception as exc:  # noqa: BLE001 - delivered through ``failed``
                self.signals.failed.emit(exc)
            else:
                self.signals.succeeded.emit(result)

    return _ApiCall


class ExpenseTasks:
    """Load, add and delete expenses without blocking the UI thread.

    ``on_error`` receives a user-facing message for every failed call.
    """

    def __init__(
        self,
        client: ExpenseClient,
        qt_core: Any,
        *,
        on_error: Callable[[str], None],
        thread_pool: Any | None = None,
    ) -> None:
        self.client = client
        self._qt_core = qt_core
        self._pool = thread_pool or qt_core.QThreadPool.globalInstance()
        self._on_error = on_error
        # Signal objects stay referenced until their result is delivered.
        self._pending: set[Any] = set()

    @property
    def pending(self) -> int:
        return len(self._pending)

    def _run(
        self,
        fn: Callable[..., Any],
        args: tuple[Any, ...],
        on_success: Callable[[Any], None],
        on_failure: Callable[[Exception], None],
    ) -> None:
        call = _call_type(self._qt_core)(fn, args)
        signals = call.signals
        self._pending.add(signals)

        def succeeded(result: Any) -> None:
            self._pending.discard(signals)
            on_success(result)

        def failed(exc: Exception) -> None:
            self._pending.discard(signals)
            on_failure(exc)

        signals.succeeded.connect(succeeded)
        signals.failed.connect(failed)
        self._pool.start(call)

    def load(self, state: ExpenseState, on_done: Callable[[], None]) -> None:
        """Refresh ``state`` from the server; ``on_done`` runs either way."""

        state.is_loading = True

        def loaded(expenses: list[dict]) -> None:
            state.is_loading = False
            state.replace(expenses)
            on_done()

        def failed(exc: Exception) -> None:
            LOG.error("Could not load expenses: %s", exc)
            state.is_loading = False
            on_done()
            self._on_error(LOAD_FAILED_MESSAGE)

        self._run(self.client.get_expenses, (), loaded, failed)

    def add(
        self,
        state: ExpenseState,
        form: dict[str, Any],
        on_added: Callable[[dict], None],
        on_settled: Callable[[], None],
    ) -> None:
        """Create an expense and prepend it to ``state``.

        ``on_settled`` runs before ``on_added`` or the error message, so the
        form can leave its busy state first.
        """

        def added(expense: dict) -> None:
            state.add(expense)
            on_settled()
            on_added(expense)

        def failed(exc: Exception) -> None:
            LOG.warning("Could not add expense: %s", exc)
            on_settled()
            self._on_error(describe_error(exc, ADD_FAILED_MESSAGE))

        self._run(self.client.add_expense, (form,), added, failed)

    def delete(self, state: ExpenseState, expense_id: int, on_deleted: Callable[[int], None]) -> None:
        def deleted(_result: Any) -> None:
            state.remove(expense_id)
            on_deleted(expense_id)

        def failed(exc: Exception) -> None:
            LOG.warning("Could not delete expense %s: %s", expense_id, exc)
            self._on_error(describe_error(exc, DELETE_FAILED_MESSAGE))

        self._run(self.client.delete_expense, (expense_id,), deleted, failed)


__all__ = ["ExpenseTasks"]
