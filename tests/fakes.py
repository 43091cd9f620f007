"""Deterministic fakes shared by service, API and client tests."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Any
from uuid import UUID

from shared.models import Transaction, TransactionCreateRequest, TransactionType


USER_A = UUID("aaaaaaaa-aaaa-aaaa-aaaa-aaaaaaaaaaaa")
USER_B = UUID("bbbbbbbb-bbbb-bbbb-bbbb-bbbbbbbbbbbb")


def make_transaction(
    *,
    amount: str,
    type: TransactionType,
    day: date = date(2025, 1, 10),
    description: str = "Entry",
    user_id: UUID = USER_A,
    transaction_id: str = "11111111-1111-1111-1111-111111111111",
    created_at: datetime | None = None,
) -> Transaction:
    return Transaction(
        id=UUID(transaction_id),
        amount=Decimal(amount),
        description=description,
        type=type,
        date=day,
        created_at=created_at or datetime(2025, 1, 10, 12, 0, tzinfo=timezone.utc),
        user_id=user_id,
    )


class FailingTransactionsRepository:
    """Repository whose every call fails like an unreachable store."""

    def __init__(self) -> None:
        self.create_calls = 0

    def list_transactions(self, user_id: UUID) -> list[Transaction]:
        raise RuntimeError("Supabase request failed with status 503: upstream down")

    def create_transaction(self, user_id: UUID, data: TransactionCreateRequest) -> Transaction:
        self.create_calls += 1
        raise RuntimeError("Supabase request failed with status 503: upstream down")


@dataclass
class RecordingTransactionsClient:
    """Client fake recording create payloads and returning canned results."""

    transactions: list[Transaction] = field(default_factory=list)
    create_error: Exception | None = None
    list_error: Exception | None = None
    created_payloads: list[dict[str, Any]] = field(default_factory=list)

    def list_transactions(self) -> list[Transaction]:
        if self.list_error is not None:
            raise self.list_error
        return list(self.transactions)

    def create_transaction(self, payload: dict[str, Any]) -> Transaction:
        self.created_payloads.append(dict(payload))
        if self.create_error is not None:
            raise self.create_error
        created = make_transaction(
            amount=str(payload["amount"]),
            type=TransactionType(payload["type"]),
            day=date.fromisoformat(str(payload["date"])),
            description=str(payload["description"]),
            transaction_id=f"{len(self.created_payloads):08d}-0000-0000-0000-000000000000",
        )
        self.transactions.append(created)
        return created
