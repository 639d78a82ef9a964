from __future__ import annotations

import sys
from types import SimpleNamespace

import pytest

from expense_tracker.client import gui as gui_module


def test_launch_gui_skips_without_qt(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(gui_module, "_ensure_qt", lambda: None)
    assert gui_module.launch_gui(auto_exec=False) is False


def test_launch_gui_initialises_window(monkeypatch: pytest.MonkeyPatch) -> None:
    class DummyApp:
        _instance: "DummyApp | None" = None

        def __init__(self, argv: list[str] | None = None) -> None:
            type(self)._instance = self
            self.argv = argv
            self.style: str | None = None
            self.exec_called = False

        @classmethod
        def instance(cls) -> "DummyApp | None":
            return cls._instance

        def setStyle(self, value: str) -> None:
            self.style = value

        def exec(self) -> None:
            self.exec_called = True

    class DummyWindow:
        created: list["DummyWindow"] = []

        def __init__(self, *, client: object, qt_core: object) -> None:
            type(self).created.append(self)
            self.client = client
            self.qt_core = qt_core
            self.shown = False

        def show(self) -> None:
            self.shown = True

    qt_core = object()
    qt_widgets = SimpleNamespace(QApplication=DummyApp)
    monkeypatch.setitem(sys.modules, "expense_tracker.client.window", SimpleNamespace(ExpenseWindow=DummyWindow))
    monkeypatch.setattr(gui_module, "_ensure_qt", lambda: (qt_core, qt_widgets))

    assert gui_module.launch_gui("http://gui.test/api", auto_exec=False) is True
    window = DummyWindow.created[-1]
    assert window.shown
    assert window.qt_core is qt_core
    assert window.client.base_url == "http://gui.test/api"
    app = DummyApp.instance()
    assert app is not None and app.style == "Fusion"
    assert app.exec_called is False
