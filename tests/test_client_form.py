"""Tests for the add-transaction form state machine."""

from __future__ import annotations

from datetime import date

import pytest

from client.backend_client import HttpBackendClient
from client.form import FormState, TransactionForm
from shared.errors import FieldError, InternalError, UnauthorizedError, ValidationError
from tests.fakes import RecordingTransactionsClient


def _filled_form(client: RecordingTransactionsClient, **kwargs) -> TransactionForm:
    form = TransactionForm(backend_client=client, **kwargs)
    form.amount = "42.50"
    form.description = "Coffee"
    form.type = "EXPENSE"
    form.date = "2025-01-15"
    return form


def test_new_form_defaults_to_today_and_idle() -> None:
    form = TransactionForm(backend_client=RecordingTransactionsClient())

    assert form.state is FormState.IDLE
    assert form.date == date.today().isoformat()
    assert form.type is None


def test_successful_submit_clears_form_and_signals_refresh() -> None:
    client = RecordingTransactionsClient()
    refreshes: list[int] = []
    form = _filled_form(client, on_transaction_added=lambda: refreshes.append(1))

    created = form.submit()

    assert created is not None
    assert created.description == "Coffee"
    assert client.created_payloads == [
        {"amount": "42.50", "description": "Coffee", "type": "EXPENSE", "date": "2025-01-15"}
    ]
    assert refreshes == [1]
    assert form.amount == ""
    assert form.description == ""
    assert form.type is None
    assert form.state is FormState.IDLE
    assert form.submit_error is None


def test_local_validation_failure_never_calls_backend() -> None:
    client = RecordingTransactionsClient()
    refreshes: list[int] = []
    form = _filled_form(client, on_transaction_added=lambda: refreshes.append(1))
    form.amount = "-3"

    assert form.submit() is None

    assert client.created_payloads == []
    assert refreshes == []
    assert form.field_errors == {"amount": "Amount must be a positive number"}
    assert form.submit_error == "Amount must be a positive number"
    assert form.state is FormState.IDLE
    assert form.description == "Coffee"


def test_missing_type_is_reported_inline() -> None:
    form = _filled_form(RecordingTransactionsClient())
    form.type = None

    form.submit()

    assert "type" in form.field_errors


def test_server_validation_error_is_surfaced() -> None:
    client = RecordingTransactionsClient(
        create_error=ValidationError([FieldError(field="date", message="Invalid date format")])
    )
    form = _filled_form(client)

    assert form.submit() is None

    assert form.field_errors == {"date": "Invalid date format"}
    assert form.state is FormState.IDLE


@pytest.mark.parametrize(
    ("error", "message"),
    [
        (UnauthorizedError(), "Unauthorized"),
        (InternalError("Failed to create transaction"), "Failed to create transaction"),
    ],
)
def test_backend_failures_show_banner_and_keep_values(error: Exception, message: str) -> None:
    refreshes: list[int] = []
    form = _filled_form(RecordingTransactionsClient(create_error=error), on_transaction_added=lambda: refreshes.append(1))

    assert form.submit() is None

    assert form.submit_error == message
    assert form.field_errors == {}
    assert form.amount == "42.50"
    assert refreshes == []
    assert form.state is FormState.IDLE


def test_submit_while_submitting_is_rejected() -> None:
    form = _filled_form(RecordingTransactionsClient())
    form.state = FormState.SUBMITTING

    with pytest.raises(RuntimeError, match="already in progress"):
        form.submit()


def test_form_is_submitting_during_backend_call() -> None:
    observed: list[FormState] = []
    client = RecordingTransactionsClient()
    form = _filled_form(client)
    original_create = client.create_transaction

    def _create(payload):
        observed.append(form.state)
        return original_create(payload)

    client.create_transaction = _create  # type: ignore[method-assign]

    form.submit()

    assert observed == [FormState.SUBMITTING]


def test_malformed_backend_response_sets_banner(monkeypatch: pytest.MonkeyPatch) -> None:
    class _Response:
        def __enter__(self):
            return self

        def __exit__(self, exc_type, exc, tb):
            return False

        def read(self) -> bytes:
            return b'{"id": "not-a-uuid"}'

    monkeypatch.setattr("client.backend_client.urlopen", lambda _request: _Response())
    form = TransactionForm(backend_client=HttpBackendClient(access_token="token", base_url="http://api.test"))
    form.amount = "42.50"
    form.description = "Coffee"
    form.type = "EXPENSE"
    form.date = "2025-01-15"

    assert form.submit() is None

    assert form.submit_error == "Unexpected response from backend"
    assert form.state is FormState.IDLE
    assert form.amount == "42.50"
