from __future__ import annotations

import pytest
import requests

from expense_tracker.client.api import NETWORK_ERROR_MESSAGE, ExpenseClient
from expense_tracker.errors import ApiError, NetworkError


@pytest.fixture()
def api(client) -> ExpenseClient:
    return ExpenseClient("http://testserver/api", session=client)


def test_add_and_list_expenses(api):
    created = api.add_expense({"date": "2024-01-15", "amount": "42.50", "category": "Food"})
    assert created["amount"] == 42.5

    expenses = api.get_expenses()
    assert [item["id"] for item in expenses] == [created["id"]]
    assert api.get_expense(created["id"])["category"] == "Food"


def test_filters_are_forwarded_and_blank_values_dropped(api):
    api.add_expense({"date": "2024-01-15", "amount": 5, "category": "Food"})
    api.add_expense({"date": "2024-01-16", "amount": 9, "category": "Transport"})

    expenses = api.get_expenses({"category": "Transport", "minAmount": "", "ignored": "x"})
    assert [item["category"] for item in expenses] == ["Transport"]


def test_update_delete_categories_and_summary(api):
    created = api.add_expense({"date": "2024-01-15", "amount": 5, "category": "Food"})
    updated = api.update_expense(created["id"], {"description": "Snacks"})
    assert updated["description"] == "Snacks"

    assert "Healthcare" in api.get_categories()
    assert api.get_summary()[-1]["category"] == "TOTAL"

    assert api.delete_expense(created["id"]) is True


def test_application_errors_carry_code_and_details(api):
    with pytest.raises(ApiError) as excinfo:
        api.add_expense({"date": "2099-01-01", "amount": 10, "category": "Food"})
    error = excinfo.value
    assert not isinstance(error, NetworkError)
    assert error.status_code == 400
    assert error.code == "VALIDATION_ERROR"
    assert error.details["errors"][0]["field"] == "date"


def test_missing_expense_is_not_found(api):
    with pytest.raises(ApiError) as excinfo:
        api.delete_expense(31337)
    assert excinfo.value.status_code == 404
    assert excinfo.value.code == "NOT_FOUND"


class _FailingSession:
    def request(self, *_args, **_kwargs):
        raise requests.ConnectionError("connection refused")


def test_transport_failures_become_network_errors():
    api = ExpenseClient("http://127.0.0.1:9/api", session=_FailingSession())
    with pytest.raises(NetworkError) as excinfo:
        api.get_expenses()
    assert excinfo.value.code == "NETWORK_ERROR"
    assert excinfo.value.message == NETWORK_ERROR_MESSAGE
    assert isinstance(excinfo.value.__cause__, requests.ConnectionError)


class _HtmlResponse:
    status_code = 502
    reason = "Bad Gateway"

    def json(self):
        raise ValueError("not json")


class _HtmlSession:
    def __init__(self) -> None:
        self.calls: list[tuple[str, str, dict]] = []

    def request(self, method, url, **kwargs):
        self.calls.append((method, url, kwargs))
        return _HtmlResponse()


def test_non_json_error_bodies_fall_back_to_status_line():
    session = _HtmlSession()
    api = ExpenseClient("http://example.test/api/", session=session)
    with pytest.raises(ApiError) as excinfo:
        api.get_categories()
    assert str(excinfo.value) == "HTTP 502: Bad Gateway"
    assert excinfo.value.status_code == 502
    method, url, kwargs = session.calls[0]
    assert (method, url) == ("GET", "http://example.test/api/expenses/categories")
    assert "timeout" not in kwargs


def test_explicit_timeout_is_passed_through():
    session = _HtmlSession()
    api = ExpenseClient("http://example.test/api", session=session, timeout=2.5)
    with pytest.raises(ApiError):
        api.get_summary()
    assert session.calls[0][2]["timeout"] == 2.5
