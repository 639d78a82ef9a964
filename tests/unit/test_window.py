from __future__ import annotations

import os
from datetime import date

import pytest

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")
QtWidgets = pytest.importorskip("PySide6.QtWidgets")
QtCore = pytest.importorskip("PySide6.QtCore")
QtGui = pytest.importorskip("PySide6.QtGui")
QtTest = pytest.importorskip("PySide6.QtTest")

from expense_tracker.client.state import ExpenseState  # noqa: E402
from expense_tracker.client.view import DELETE_CONFIRMATION  # noqa: E402
from expense_tracker.client.window import ExpenseWindow, MessageArea, render_expenses  # noqa: E402
from expense_tracker.errors import NetworkError, NotFound  # noqa: E402

EXPENSES = [
    {"id": 1, "date": "2024-01-15", "amount": 10.0, "category": "Food", "description": "Lunch"},
    {"id": 2, "date": "2024-01-14", "amount": 5.0, "category": "Transport", "description": None},
]


class _RecordingClient:
    def __init__(self, expenses=None, *, fail_load=False, fail_delete=False) -> None:
        self.expenses = [dict(item) for item in expenses or []]
        self.fail_load = fail_load
        self.fail_delete = fail_delete
        self.added: list[dict] = []
        self.deleted: list[int] = []
        self._next_id = 100

    def get_expenses(self, filters=None):
        if self.fail_load:
            raise NetworkError("Network error. Check your internet connection.")
        return [dict(item) for item in self.expenses]

    def add_expense(self, payload):
        self.added.append(dict(payload))
        self._next_id += 1
        return {
            "id": self._next_id,
            "date": payload["date"],
            "amount": float(payload["amount"]),
            "category": payload["category"],
            "description": payload.get("description") or None,
        }

    def delete_expense(self, expense_id):
        if self.fail_delete:
            raise NotFound(f"Expense with ID {expense_id} not found")
        self.deleted.append(expense_id)
        return True


class _InlinePool:
    """Runs each call immediately on the calling thread."""

    def start(self, runnable) -> None:
        runnable.run()


@pytest.fixture(scope="session")
def qt_app():
    return QtWidgets.QApplication.instance() or QtWidgets.QApplication([])


@pytest.fixture()
def make_window(qt_app):
    created = []

    def factory(client):
        window = ExpenseWindow(client=client, qt_core=QtCore, thread_pool=_InlinePool())
        created.append(window)
        return window

    yield factory
    for window in created:
        window.close()
        window.deleteLater()


def _alert_texts(window) -> list[str]:
    layout = window.bindings.message_layout
    texts = []
    for index in range(layout.count()):
        label = layout.itemAt(index).widget().findChild(QtWidgets.QLabel)
        texts.append(label.text())
    return texts


def _answer(monkeypatch, button, calls=None):
    def fake_question(*args, **_kwargs):
        if calls is not None:
            calls.append(args)
        return button

    monkeypatch.setattr(QtWidgets.QMessageBox, "question", fake_question)


def test_initial_load_renders_table(make_window):
    window = make_window(_RecordingClient(EXPENSES))
    bindings = window.bindings

    assert window.current_layout == "table"
    assert bindings.pages.currentIndex() == 0
    assert bindings.table.rowCount() == 2
    assert bindings.table.item(0, 1).text() == "Lunch"
    assert bindings.total_label.text() == "Total: $15.00"
    assert not bindings.loading_label.isVisibleTo(window)
    assert window.state.is_loading is False


def test_failed_load_reports_error_and_stops_loading(make_window):
    window = make_window(_RecordingClient(fail_load=True))
    assert window.state.is_loading is False
    assert window.state.is_empty
    assert _alert_texts(window) == ["Could not load expenses. Check your connection."]


def test_declined_delete_sends_nothing(make_window, monkeypatch):
    client = _RecordingClient(EXPENSES)
    window = make_window(client)
    calls: list[tuple] = []
    _answer(monkeypatch, QtWidgets.QMessageBox.StandardButton.No, calls)

    window.confirm_delete(1)

    assert calls and calls[0][2] == DELETE_CONFIRMATION
    assert client.deleted == []
    assert window.bindings.table.rowCount() == 2


def test_confirmed_delete_removes_row_and_rerenders(make_window, monkeypatch):
    client = _RecordingClient(EXPENSES)
    window = make_window(client)
    _answer(monkeypatch, QtWidgets.QMessageBox.StandardButton.Yes)

    window.confirm_delete(1)

    assert client.deleted == [1]
    assert [item["id"] for item in window.state.expenses] == [2]
    assert window.bindings.table.rowCount() == 1
    assert window.bindings.total_label.text() == "Total: $5.00"
    assert _alert_texts(window) == ["Expense deleted successfully"]


def test_failed_delete_keeps_row_and_shows_server_message(make_window, monkeypatch):
    window = make_window(_RecordingClient(EXPENSES, fail_delete=True))
    _answer(monkeypatch, QtWidgets.QMessageBox.StandardButton.Yes)

    window.confirm_delete(2)

    assert window.bindings.table.rowCount() == 2
    assert _alert_texts(window) == ["Expense with ID 2 not found"]


def test_submit_adds_expense_and_resets_form(make_window):
    client = _RecordingClient(EXPENSES)
    window = make_window(client)
    bindings = window.bindings
    bindings.amount_edit.setText("12.50")
    bindings.category_combo.setCurrentText("Shopping")
    bindings.description_edit.setText("Socks")

    bindings.submit_button.click()

    assert client.added[0]["amount"] == "12.50"
    assert client.added[0]["date"] == date.today().isoformat()
    assert window.state.expenses[0]["category"] == "Shopping"
    assert bindings.table.rowCount() == 3
    assert bindings.amount_edit.text() == ""
    assert bindings.category_combo.currentIndex() == 0
    assert bindings.submit_button.isEnabled()
    assert _alert_texts(window) == ["Expense added successfully!"]


def test_invalid_submit_reports_errors_without_calling_api(make_window):
    client = _RecordingClient()
    window = make_window(client)

    window.bindings.submit_button.click()

    assert client.added == []
    assert _alert_texts(window) == ["Amount is required, Category is required"]


def test_resize_across_breakpoint_switches_layout(make_window):
    window = make_window(_RecordingClient(EXPENSES))
    assert window.current_layout == "table"

    window.resize(600, 720)
    window.resizeEvent(QtGui.QResizeEvent(QtCore.QSize(600, 720), QtCore.QSize(960, 720)))
    assert window.current_layout == "cards"
    assert window.bindings.pages.currentIndex() == 1

    window.resize(1024, 720)
    window.resizeEvent(QtGui.QResizeEvent(QtCore.QSize(1024, 720), QtCore.QSize(600, 720)))
    assert window.current_layout == "table"


def test_render_expenses_picks_layout_by_width(make_window):
    window = make_window(_RecordingClient())
    bindings = window.bindings
    state = ExpenseState()
    state.replace(EXPENSES)

    assert render_expenses(bindings, state, 767, lambda _id: None) == "cards"
    # Two cards plus the trailing stretch.
    assert bindings.cards_layout.count() == 3
    assert render_expenses(bindings, state, 768, lambda _id: None) == "table"
    assert bindings.table.rowCount() == 2


def test_message_area_dismiss_and_expiry(qt_app):
    host = QtWidgets.QWidget()
    layout = QtWidgets.QVBoxLayout(host)
    area = MessageArea(layout)

    sticky = area.show("Heads up")
    assert layout.count() == 1
    sticky.findChild(QtWidgets.QToolButton).click()
    assert layout.count() == 0

    area.show("Saved", "success", duration_ms=10)
    assert layout.count() == 1
    QtTest.QTest.qWait(200)
    assert layout.count() == 0

    area.show("One")
    area.show("Two")
    area.clear()
    assert layout.count() == 0
