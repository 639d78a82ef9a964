"""Command-line interface for the expense tracker."""

from __future__ import annotations

import argparse
import logging

from expense_tracker import __version__
from expense_tracker.config import get_settings
from expense_tracker.logging import configure_cli_logging

DESCRIPTION = "Expense Tracker"

LOG = logging.getLogger(__name__)


def _add_serve_subparser(
    subparsers: argparse._SubParsersAction[argparse.ArgumentParser],
) -> None:
    settings = get_settings()
    serve = subparsers.add_parser("serve", help="Run the REST API with uvicorn")
    serve.add_argument("--host", default=settings.host, help="Interface to bind")
    serve.add_argument("--port", type=int, default=settings.port, help="TCP port to listen on")
    serve.add_argument("--reload", action="store_true", help="Restart on source changes (development)")


def _add_gui_subparser(
    subparsers: argparse._SubParsersAction[argparse.ArgumentParser],
) -> None:
    gui = subparsers.add_parser("gui", help="Launch the optional PySide6 desktop client")
    gui.add_argument("--api-url", dest="api_url", help="Base URL of the API (default from settings)")
    gui.add_argument(
        "--no-exec",
        action="store_true",
        help="Initialise the GUI without starting the Qt event loop (testing)",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="expense-tracker", description=DESCRIPTION)
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--log-level", default=None, help="Logging level (DEBUG, INFO, ...)")
    parser.add_argument("--json-logs", action="store_true", help="Also write JSON logs to logs/")
    subparsers = parser.add_subparsers(dest="command", required=True)
    _add_serve_subparser(subparsers)
    _add_gui_subparser(subparsers)
    subparsers.add_parser("init-db", help="Create the expenses table and exit")
    return parser


def _handle_serve(args: argparse.Namespace) -> int:
    import uvicorn

    LOG.info("Serving API on http://%s:%s%s", args.host, args.port, get_settings().api_prefix)
    uvicorn.run(
        "expense_tracker.backend.server:app",
        host=args.host,
        port=args.port,
        reload=args.reload,
        log_level=(args.log_level or "info").lower(),
    )
    return 0


def _handle_gui(args: argparse.Namespace) -> int:
    from expense_tracker.client.gui import launch_gui

    launched = launch_gui(args.api_url, auto_exec=not args.no_exec)
    return 0 if launched else 1


def _handle_init_db(_: argparse.Namespace) -> int:
    from expense_tracker.backend import database

    database.init_db()
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_cli_logging(json_logs=args.json_logs, level=args.log_level)
    if args.command == "serve":
        return _handle_serve(args)
    if args.command == "gui":
        return _handle_gui(args)
    if args.command == "init-db":
        return _handle_init_db(args)
    parser.error(f"Unknown command: {args.command}")  # pragma: no cover
    return 2  # pragma: no cover


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
