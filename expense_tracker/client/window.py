"""PySide6 main window for the expense tracker.

Widgets are created once in :func:`build_bindings` and handed around as a
:class:`ViewBindings` instance. Every state change re-renders the whole list
through :func:`render_expenses`.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable

from expense_tracker.validation import VALID_CATEGORIES

from .api import ExpenseClient
from .formatting import format_amount
from .jobs import ExpenseTasks
from .state import ExpenseState
from .view import (
    DELETE_CONFIRMATION,
    ERROR_DURATION_MS,
    SUCCESS_DURATION_MS,
    TABLE_HEADERS,
    build_rows,
    field_error,
    form_errors,
    select_layout,
)

try:  # pragma: no cover - optional dependency
    from PySide6 import QtCore, QtWidgets
except ImportError:  # pragma: no cover - optional dependency
    QtCore = QtWidgets = None  # type: ignore[assignment]


SUBMIT_LABEL = "Add Expense"
SUBMIT_BUSY_LABEL = "Adding..."

STYLESHEET = """
QWidget {
    background: #f4f4f4;
    color: #161616;
    font-family: "Segoe UI", "IBM Plex Sans", sans-serif;
}

QTableWidget {
    background: white;
    border: 1px solid #d0d0d0;
    border-radius: 8px;
    gridline-color: #e0e0e0;
    alternate-background-color: #f2f2f2;
}

QHeaderView::section {
    background: #e5e5e5;
    font-weight: 600;
    padding: 8px;
    border: none;
}

QGroupBox, QFrame#ExpenseCard {
    background: white;
    border: 1px solid #d0d0d0;
    border-radius: 12px;
    padding: 12px;
}

QPushButton {
    background: #0f62fe;
    color: white;
    padding: 8px 16px;
    border-radius: 8px;
    font-weight: 600;
}

QPushButton#DangerButton {
    background: #da1e28;
}

QPushButton:disabled {
    background: #8d8d8d;
    color: #c6c6c6;
}

QLabel#TotalLabel {
    font-size: 18pt;
    font-weight: 600;
}

QFrame#Alert-error { background: #fff1f1; border-left: 4px solid #da1e28; }
QFrame#Alert-success { background: #defbe6; border-left: 4px solid #24a148; }
QFrame#Alert-info { background: #edf5ff; border-left: 4px solid #0f62fe; }
"""


@dataclass
class ViewBindings:
    """References to every widget the controller reads or updates."""

    date_edit: Any
    amount_edit: Any
    category_combo: Any
    description_edit: Any
    submit_button: Any
    message_layout: Any
    total_label: Any
    empty_label: Any
    loading_label: Any
    pages: Any
    table: Any
    cards_layout: Any


def build_bindings(parent: Any) -> tuple[Any, ViewBindings]:
    """Create the widget tree and return its root together with the bindings."""

    root = QtWidgets.QWidget(parent)
    layout = QtWidgets.QVBoxLayout(root)
    layout.setContentsMargins(24, 24, 24, 24)
    layout.setSpacing(16)

    message_container = QtWidgets.QWidget()
    message_layout = QtWidgets.QVBoxLayout(message_container)
    message_layout.setContentsMargins(0, 0, 0, 0)
    layout.addWidget(message_container)

    form_card = QtWidgets.QGroupBox("Add new expense")
    form_layout = QtWidgets.QFormLayout(form_card)

    date_edit = QtWidgets.QDateEdit(QtCore.QDate.currentDate())
    date_edit.setDisplayFormat("yyyy-MM-dd")
    date_edit.setCalendarPopup(True)

    amount_edit = QtWidgets.QLineEdit()
    amount_edit.setPlaceholderText("0.00")

    category_combo = QtWidgets.QComboBox()
    category_combo.addItem("")
    category_combo.addItems(list(VALID_CATEGORIES))

    description_edit = QtWidgets.QLineEdit()
    description_edit.setPlaceholderText("Optional notes")
    description_edit.setMaxLength(255)

    submit_button = QtWidgets.QPushButton(SUBMIT_LABEL)

    form_layout.addRow("Date", date_edit)
    form_layout.addRow("Amount", amount_edit)
    form_layout.addRow("Category", category_combo)
    form_layout.addRow("Description", description_edit)
    form_layout.addRow(submit_button)
    layout.addWidget(form_card)

    total_label = QtWidgets.QLabel(format_amount(0))
    total_label.setObjectName("TotalLabel")
    layout.addWidget(total_label)

    loading_label = QtWidgets.QLabel("Loading expenses...")
    loading_label.setVisible(False)
    layout.addWidget(loading_label)

    empty_label = QtWidgets.QLabel("No expenses yet. Add your first one above.")
    empty_label.setAlignment(QtCore.Qt.AlignmentFlag.AlignCenter)
    empty_label.setVisible(False)
    layout.addWidget(empty_label)

    table = QtWidgets.QTableWidget(0, len(TABLE_HEADERS))
    table.setHorizontalHeaderLabels(list(TABLE_HEADERS))
    table.horizontalHeader().setSectionResizeMode(QtWidgets.QHeaderView.ResizeMode.Stretch)
    table.setEditTriggers(QtWidgets.QAbstractItemView.EditTrigger.NoEditTriggers)
    table.setSelectionBehavior(QtWidgets.QAbstractItemView.SelectionBehavior.SelectRows)
    table.setAlternatingRowColors(True)
    table.verticalHeader().setVisible(False)

    cards_host = QtWidgets.QWidget()
    cards_layout = QtWidgets.QVBoxLayout(cards_host)
    cards_layout.setSpacing(12)
    cards_scroll = QtWidgets.QScrollArea()
    cards_scroll.setWidgetResizable(True)
    cards_scroll.setWidget(cards_host)

    pages = QtWidgets.QStackedWidget()
    pages.addWidget(table)
    pages.addWidget(cards_scroll)
    layout.addWidget(pages, 1)

    bindings = ViewBindings(
        date_edit=date_edit,
        amount_edit=amount_edit,
        category_combo=category_combo,
        description_edit=description_edit,
        submit_button=submit_button,
        message_layout=message_layout,
        total_label=total_label,
        empty_label=empty_label,
        loading_label=loading_label,
        pages=pages,
        table=table,
        cards_layout=cards_layout,
    )
    return root, bindings


def read_form(bindings: ViewBindings) -> dict[str, str]:
    return {
        "date": bindings.date_edit.date().toString("yyyy-MM-dd"),
        "amount": bindings.amount_edit.text(),
        "category": bindings.category_combo.currentText(),
        "description": bindings.description_edit.text(),
    }


def clear_form(bindings: ViewBindings) -> None:
    bindings.date_edit.setDate(QtCore.QDate.currentDate())
    bindings.amount_edit.clear()
    # Resetting the combo must not trigger the "Category is required" feedback.
    blocked = bindings.category_combo.blockSignals(True)
    bindings.category_combo.setCurrentIndex(0)
    bindings.category_combo.blockSignals(blocked)
    bindings.description_edit.clear()


def set_form_loading(bindings: ViewBindings, is_loading: bool) -> None:
    bindings.submit_button.setEnabled(not is_loading)
    bindings.submit_button.setText(SUBMIT_BUSY_LABEL if is_loading else SUBMIT_LABEL)


def _delete_button(expense_id: int, on_delete: Callable[[int], None]) -> Any:
    button = QtWidgets.QPushButton("Delete")
    button.setObjectName("DangerButton")
    button.clicked.connect(lambda _checked=False, value=expense_id: on_delete(value))
    return button


def _render_table(bindings: ViewBindings, state: ExpenseState, on_delete: Callable[[int], None]) -> None:
    table = bindings.table
    table.setRowCount(0)
    for row in build_rows(state.expenses):
        index = table.rowCount()
        table.insertRow(index)
        table.setItem(index, 0, QtWidgets.QTableWidgetItem(row.date))
        description_item = QtWidgets.QTableWidgetItem(row.description)
        if row.notes:
            description_item.setToolTip(row.notes)
        table.setItem(index, 1, description_item)
        table.setItem(index, 2, QtWidgets.QTableWidgetItem(row.category))
        amount_item = QtWidgets.QTableWidgetItem(row.amount)
        amount_item.setTextAlignment(
            QtCore.Qt.AlignmentFlag.AlignRight | QtCore.Qt.AlignmentFlag.AlignVCenter
        )
        table.setItem(index, 3, amount_item)
        table.setCellWidget(index, 4, _delete_button(row.expense_id, on_delete))
        table.setRowHeight(index, 36)
    bindings.pages.setCurrentIndex(0)


def _clear_layout(layout: Any) -> None:
    while layout.count():
        item = layout.takeAt(0)
        widget = item.widget()
        if widget is not None:
            widget.deleteLater()


def _render_cards(bindings: ViewBindings, state: ExpenseState, on_delete: Callable[[int], None]) -> None:
    layout = bindings.cards_layout
    _clear_layout(layout)
    for row in build_rows(state.expenses):
        card = QtWidgets.QFrame()
        card.setObjectName("ExpenseCard")
        card_layout = QtWidgets.QFormLayout(card)
        card_layout.addRow("Date", QtWidgets.QLabel(row.date))
        card_layout.addRow("Category", QtWidgets.QLabel(row.category))
        card_layout.addRow("Amount", QtWidgets.QLabel(row.amount))
        if row.notes:
            notes = QtWidgets.QLabel(row.notes)
            notes.setWordWrap(True)
            card_layout.addRow("Notes", notes)
        card_layout.addRow(_delete_button(row.expense_id, on_delete))
        layout.addWidget(card)
    layout.addStretch(1)
    bindings.pages.setCurrentIndex(1)


def render_expenses(
    bindings: ViewBindings,
    state: ExpenseState,
    width: int,
    on_delete: Callable[[int], None],
) -> str:
    """Redraw the whole list for ``state`` and return the layout used."""

    bindings.loading_label.setVisible(state.is_loading)
    bindings.total_label.setText(f"Total: {format_amount(state.total())}")
    bindings.empty_label.setVisible(state.is_empty and not state.is_loading)
    bindings.pages.setVisible(not state.is_empty)
    layout = select_layout(width)
    if layout == "table":
        _render_table(bindings, state, on_delete)
    else:
        _render_cards(bindings, state, on_delete)
    return layout


class MessageArea:
    """Dismissible, auto-expiring alerts stacked above the form."""

    def __init__(self, layout: Any) -> None:
        self._layout = layout
        self._alerts: set[Any] = set()

    def show(self, message: str, kind: str = "info", duration_ms: int | None = None) -> Any:
        alert = QtWidgets.QFrame()
        alert.setObjectName(f"Alert-{kind}")
        row = QtWidgets.QHBoxLayout(alert)
        label = QtWidgets.QLabel(message)
        label.setWordWrap(True)
        close = QtWidgets.QToolButton()
        close.setText("×")
        close.clicked.connect(lambda _checked=False: self.dismiss(alert))
        row.addWidget(label, 1)
        row.addWidget(close)
        self._layout.addWidget(alert)
        self._alerts.add(alert)
        if duration_ms:
            QtCore.QTimer.singleShot(duration_ms, lambda: self.dismiss(alert))
        return alert

    def dismiss(self, alert: Any) -> None:
        if alert not in self._alerts:
            return
        self._alerts.discard(alert)
        self._layout.removeWidget(alert)
        alert.deleteLater()

    def clear(self) -> None:
        for alert in list(self._alerts):
            self.dismiss(alert)


class ExpenseWindow(QtWidgets.QMainWindow):  # type: ignore[misc]
    """Main window: add form, running total and the expense list."""

    def __init__(
        self,
        *,
        client: ExpenseClient | None = None,
        state: ExpenseState | None = None,
        qt_core: Any = None,
        thread_pool: Any = None,
    ) -> None:
        if QtWidgets is None:  # pragma: no cover
            raise RuntimeError("PySide6 is required to launch the expense tracker GUI")
        super().__init__()
        self._state = state or ExpenseState()
        self._tasks = ExpenseTasks(
            client or ExpenseClient(),
            qt_core or QtCore,
            on_error=self.show_error,
            thread_pool=thread_pool,
        )
        self._layout_in_use: str | None = None

        self.setWindowTitle("Expense Tracker")
        self.resize(960, 720)
        self.setStyleSheet(STYLESHEET)

        root, self._bindings = build_bindings(self)
        scroll = QtWidgets.QScrollArea()
        scroll.setWidgetResizable(True)
        scroll.setWidget(root)
        self.setCentralWidget(scroll)
        self._messages = MessageArea(self._bindings.message_layout)

        self._connect_signals()
        self.load_expenses()

    # ------------------------------------------------------------------
    def _connect_signals(self) -> None:
        bindings = self._bindings
        bindings.submit_button.clicked.connect(self._on_submit)
        bindings.amount_edit.editingFinished.connect(
            lambda: self._report_field("amount", bindings.amount_edit.text())
        )
        bindings.date_edit.editingFinished.connect(
            lambda: self._report_field("date", read_form(bindings)["date"])
        )
        bindings.category_combo.currentTextChanged.connect(lambda text: self._report_field("category", text))

    def _report_field(self, field_name: str, value: Any) -> None:
        message = field_error(field_name, value)
        if message:
            self.show_error(message)

    @property
    def bindings(self) -> ViewBindings:
        return self._bindings

    @property
    def state(self) -> ExpenseState:
        return self._state

    @property
    def current_layout(self) -> str | None:
        return self._layout_in_use

    def render(self) -> None:
        self._layout_in_use = render_expenses(
            self._bindings, self._state, self.width(), self.confirm_delete
        )

    def show_error(self, message: str) -> None:
        self._messages.show(message, "error", ERROR_DURATION_MS)

    def show_success(self, message: str) -> None:
        self._messages.show(message, "success", SUCCESS_DURATION_MS)

    # ------------------------------------------------------------------
    def load_expenses(self) -> None:
        self._tasks.load(self._state, on_done=self.render)
        self.render()

    def _on_submit(self) -> None:
        self._messages.clear()
        form = read_form(self._bindings)
        errors = form_errors(form)
        if errors:
            self.show_error(", ".join(errors))
            return
        set_form_loading(self._bindings, True)
        self._tasks.add(
            self._state,
            form,
            on_added=self._on_expense_added,
            on_settled=lambda: set_form_loading(self._bindings, False),
        )

    def _on_expense_added(self, _expense: dict) -> None:
        self.render()
        clear_form(self._bindings)
        self.show_success("Expense added successfully!")

    def confirm_delete(self, expense_id: int) -> None:
        """Ask before deleting; nothing is sent unless the user answers Yes."""

        answer = QtWidgets.QMessageBox.question(
            self,
            "Confirm delete",
            DELETE_CONFIRMATION,
            QtWidgets.QMessageBox.StandardButton.Yes | QtWidgets.QMessageBox.StandardButton.No,
        )
        if answer != QtWidgets.QMessageBox.StandardButton.Yes:
            return
        self._tasks.delete(self._state, expense_id, on_deleted=self._on_expense_deleted)

    def _on_expense_deleted(self, _expense_id: int) -> None:
        self.render()
        self.show_success("Expense deleted successfully")

    # ------------------------------------------------------------------
    def resizeEvent(self, event: Any) -> None:  # noqa: N802 - Qt override
        super().resizeEvent(event)
        if getattr(self, "_bindings", None) is None:
            return
        if select_layout(self.width()) != self._layout_in_use:
            self.render()


__all__ = [
    "ExpenseWindow",
    "MessageArea",
    "STYLESHEET",
    "ViewBindings",
    "build_bindings",
    "render_expenses",
]
