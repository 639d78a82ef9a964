"""HTTP client for talking with the expense tracker API.

Application errors (any non-2xx answer) are raised as :class:`ApiError`
carrying the server's code, message and details. Failures that happen before
a response exists are raised as :class:`NetworkError`. Nothing is retried and
no timeout is enforced unless one is passed explicitly.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping

import requests

from expense_tracker.config import get_settings
from expense_tracker.errors import ApiError, NetworkError

LOG = logging.getLogger(__name__)

NETWORK_ERROR_MESSAGE = "Network error. Check your internet connection."


class ExpenseClient:
    """Thin wrapper around the ``/expenses`` endpoints."""

    def __init__(
        self,
        base_url: str | None = None,
        *,
        session: Any | None = None,
        timeout: float | None = None,
    ) -> None:
        self.base_url = (base_url or get_settings().api_url).rstrip("/")
        self._session = session or requests.Session()
        self._timeout = timeout

    def _request(
        self,
        method: str,
        path: str,
        *,
        params: Mapping[str, Any] | None = None,
        json: Any | None = None,
    ) -> dict:
        url = f"{self.base_url}{path}"
        LOG.debug("%s %s", method, url)
        kwargs: dict[str, Any] = {"params": params, "json": json}
        if self._timeout is not None:
            kwargs["timeout"] = self._timeout
        try:
            response = self._session.request(
                method,
                url,
                headers={"Accept": "application/json"},
                **kwargs,
            )
        except requests.RequestException as exc:
            LOG.error("%s %s failed before a response: %s", method, url, exc)
            raise NetworkError(NETWORK_ERROR_MESSAGE) from exc

        if not 200 <= response.status_code < 300:
            raise _error_from_response(response)
        return response.json()

    def get_expenses(self, filters: Mapping[str, Any] | None = None) -> list[dict]:
        params = {
            key: value
            for key, value in (filters or {}).items()
            if key in {"category", "minAmount", "maxAmount"} and value not in (None, "")
        }
        return self._request("GET", "/expenses", params=params or None).get("data") or []

    def get_expense(self, expense_id: int) -> dict:
        return self._request("GET", f"/expenses/{expense_id}")["data"]

    def add_expense(self, expense: Mapping[str, Any]) -> dict:
        return self._request("POST", "/expenses", json=dict(expense))["data"]

    def update_expense(self, expense_id: int, updates: Mapping[str, Any]) -> dict:
        return self._request("PUT", f"/expenses/{expense_id}", json=dict(updates))["data"]

    def delete_expense(self, expense_id: int) -> bool:
        return bool(self._request("DELETE", f"/expenses/{expense_id}").get("success"))

    def get_categories(self) -> list[str]:
        return self._request("GET", "/expenses/categories").get("data") or []

    def get_summary(self) -> list[dict]:
        return self._request("GET", "/expenses/summary").get("data") or []


def _error_from_response(response: Any) -> ApiError:
    """Build an :class:`ApiError` from a failed response, tolerating non-JSON bodies."""

    try:
        payload = response.json()
    except ValueError:
        return ApiError(
            f"HTTP {response.status_code}: {getattr(response, 'reason', None) or 'error'}",
            status_code=response.status_code,
        )
    error = payload.get("error") if isinstance(payload, dict) else None
    error = error if isinstance(error, dict) else {}
    return ApiError(
        error.get("message") or "An error occurred",
        status_code=response.status_code,
        code=error.get("code"),
        details=error.get("details"),
    )


__all__ = ["ExpenseClient", "NETWORK_ERROR_MESSAGE"]
