"""Tests for the transaction service create/list semantics."""

from __future__ import annotations

import logging
from decimal import Decimal

import pytest

from backend.repositories.transactions_repository import InMemoryTransactionsRepository
from backend.services.transaction_service import TransactionService
from shared.errors import InternalError, ValidationError
from shared.models import TransactionType
from tests.fakes import USER_A, USER_B, FailingTransactionsRepository


def _service() -> TransactionService:
    return TransactionService(transactions_repository=InMemoryTransactionsRepository())


def test_create_then_list_round_trips_values() -> None:
    service = _service()

    created = service.create_transaction(
        USER_A,
        {"amount": "42.50", "description": "Coffee", "type": "EXPENSE", "date": "2025-01-15"},
    )
    listed = service.list_transactions(USER_A)

    assert [item.id for item in listed] == [created.id]
    assert listed[0].amount == Decimal("42.50")
    assert listed[0].type == TransactionType.EXPENSE
    assert listed[0].description == "Coffee"
    assert listed[0].user_id == USER_A


def test_listing_twice_returns_identical_results() -> None:
    service = _service()
    for day in ("2025-01-03", "2025-01-01", "2025-01-02"):
        service.create_transaction(USER_A, {"amount": "5", "description": day, "type": "INCOME", "date": day})

    first = service.list_transactions(USER_A)
    second = service.list_transactions(USER_A)

    assert first == second
    assert [item.description for item in first] == ["2025-01-03", "2025-01-02", "2025-01-01"]


def test_users_never_see_each_others_transactions() -> None:
    service = _service()
    service.create_transaction(USER_B, {"amount": "9", "description": "B only", "type": "INCOME", "date": "2025-01-01"})

    assert service.list_transactions(USER_A) == []
    assert [item.description for item in service.list_transactions(USER_B)] == ["B only"]


def test_invalid_payload_is_not_persisted(caplog: pytest.LogCaptureFixture) -> None:
    service = _service()
    caplog.set_level(logging.INFO)

    with pytest.raises(ValidationError) as error:
        service.create_transaction(USER_A, {"amount": "0", "description": "Zero", "type": "EXPENSE", "date": "2025-01-01"})

    assert error.value.field == "amount"
    assert service.list_transactions(USER_A) == []
    assert "transaction_validation_failed" in caplog.text
    assert "fields=amount" in caplog.text


def test_store_failures_become_internal_errors(caplog: pytest.LogCaptureFixture) -> None:
    service = TransactionService(transactions_repository=FailingTransactionsRepository())

    with pytest.raises(InternalError, match="Failed to fetch transactions") as list_error:
        service.list_transactions(USER_A)
    with pytest.raises(InternalError, match="Failed to create transaction"):
        service.create_transaction(USER_A, {"amount": "1", "description": "x", "type": "INCOME", "date": "2025-01-01"})

    assert isinstance(list_error.value.__cause__, RuntimeError)
    assert "transactions_list_failed" in caplog.text
    assert "transaction_create_failed" in caplog.text


def test_summarize_and_dashboard_use_the_owner_list() -> None:
    service = _service()
    service.create_transaction(USER_A, {"amount": "100", "description": "Pay", "type": "INCOME", "date": "2025-01-01"})
    service.create_transaction(USER_A, {"amount": "30", "description": "Food", "type": "EXPENSE", "date": "2025-01-02"})
    service.create_transaction(USER_A, {"amount": "20", "description": "Bus", "type": "EXPENSE", "date": "2025-01-03"})
    service.create_transaction(USER_B, {"amount": "999", "description": "Other", "type": "INCOME", "date": "2025-01-03"})

    summary = service.summarize(USER_A)
    view = service.dashboard(USER_A)

    assert (summary.total_income, summary.total_expenses, summary.net_balance) == (
        Decimal("100"),
        Decimal("50"),
        Decimal("50"),
    )
    assert [row.description for row in view.rows] == ["Bus", "Food", "Pay"]
