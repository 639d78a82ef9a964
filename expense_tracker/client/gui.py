"""Entry point for the optional Qt desktop client."""

from __future__ import annotations

import logging
import sys

LOG = logging.getLogger(__name__)

_INSTALL_HINT = "pip install .[gui]"


def _ensure_qt() -> tuple[object, object] | None:
    """Attempt to import the Qt bindings used by the GUI."""

    try:  # pragma: no cover - optional dependency resolution
        from PySide6 import QtCore, QtWidgets
    except ImportError as exc:  # pragma: no cover - optional dependency resolution
        LOG.error(
            "PySide6 is not installed. Install the GUI extras via `%s`. (%s)",
            _INSTALL_HINT,
            exc,
        )
        return None
    return QtCore, QtWidgets


def launch_gui(api_url: str | None = None, *, auto_exec: bool = True) -> bool:
    """Open the expense tracker window if the Qt bindings are available."""

    qt_modules = _ensure_qt()
    if qt_modules is None:
        return False
    QtCore, QtWidgets = qt_modules
    from .api import ExpenseClient
    from .window import ExpenseWindow

    app = QtWidgets.QApplication.instance()
    if app is None:
        app = QtWidgets.QApplication(sys.argv or ["expense-tracker-gui"])
        app.setStyle("Fusion")

    client = ExpenseClient(api_url)
    window = ExpenseWindow(client=client, qt_core=QtCore)
    window.show()
    LOG.info("Expense tracker GUI talking to %s", client.base_url)
    if auto_exec:
        app.exec()
    return True


__all__ = ["launch_gui"]
