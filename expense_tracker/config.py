"""Runtime configuration for the expense tracker.

Settings are resolved from built-in defaults, then an optional YAML file named
by ``EXPENSE_TRACKER_CONFIG``, then individual ``EXPENSE_TRACKER_*``
environment variables. Later sources win.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, fields, replace
from functools import cache
from pathlib import Path
from typing import Any, Final

import yaml

ENV_PREFIX: Final[str] = "EXPENSE_TRACKER_"
CONFIG_ENV_FLAG: Final[str] = f"{ENV_PREFIX}CONFIG"
# Settings whose environment variable does not follow the field name.
ENV_ALIASES: Final[dict[str, str]] = {"environment": "ENV"}
DEFAULT_DB_PATH: Final[Path] = Path("data") / "expenses.db"


@dataclass(frozen=True)
class Settings:
    """Process-wide settings shared by the API server and the desktop client."""

    database_url: str = f"sqlite:///{DEFAULT_DB_PATH}"
    environment: str = "development"
    api_prefix: str = "/api"
    api_url: str = "http://127.0.0.1:5000/api"
    host: str = "127.0.0.1"
    port: int = 5000
    cors_origins: tuple[str, ...] = ("http://localhost:3000",)

    @property
    def is_production(self) -> bool:
        return self.environment.strip().lower() == "production"


def _coerce(name: str, value: Any) -> Any:
    """Convert raw YAML/env values into the type declared on :class:`Settings`."""

    if name == "port":
        return int(value)
    if name == "cors_origins":
        if isinstance(value, str):
            return tuple(item.strip() for item in value.split(",") if item.strip())
        return tuple(str(item) for item in value)
    return str(value)


def _load_yaml(path: Path) -> dict[str, Any]:
    with path.open("r", encoding="utf-8") as handle:
        payload = yaml.safe_load(handle) or {}
    if not isinstance(payload, Mapping):
        raise ValueError(f"Configuration file {path} must contain a mapping")
    return dict(payload)


def load_settings(environ: Mapping[str, str] | None = None) -> Settings:
    """Build a :class:`Settings` instance from YAML and environment overrides."""

    env = os.environ if environ is None else environ
    known = {item.name for item in fields(Settings)}
    overrides: dict[str, Any] = {}

    config_path = env.get(CONFIG_ENV_FLAG)
    if config_path:
        for key, value in _load_yaml(Path(config_path)).items():
            if key not in known:
                raise ValueError(f"Unknown configuration key: {key}")
            overrides[key] = _coerce(key, value)

    for name in known:
        raw = env.get(f"{ENV_PREFIX}{ENV_ALIASES.get(name, name.upper())}")
        if raw is not None and raw.strip():
            overrides[name] = _coerce(name, raw.strip())

    return replace(Settings(), **overrides)


@cache
def get_settings() -> Settings:
    """Return the settings for this process, resolved once."""

    return load_settings()


__all__ = ["Settings", "get_settings", "load_settings"]
