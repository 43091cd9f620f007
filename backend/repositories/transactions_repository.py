"""Transactions repository adapters.

Rows live in the `transactions` table and are always scoped to the owning
user. Listing is ordered by `date` descending, newest entry first on ties.
"""

from __future__ import annotations

import threading
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Protocol
from uuid import UUID, uuid4

from backend.db.supabase_client import SupabaseClient
from shared.models import Transaction, TransactionCreateRequest


_SELECT_COLUMNS = "id,amount,description,type,date,created_at,user_id"


def sort_newest_first(transactions: list[Transaction]) -> list[Transaction]:
    """Return transactions ordered by date desc, then created_at desc."""

    return sorted(transactions, key=lambda row: (row.date, row.created_at), reverse=True)


class TransactionsRepository(Protocol):
    def list_transactions(self, user_id: UUID) -> list[Transaction]:
        """Return every transaction owned by `user_id`, newest date first."""

    def create_transaction(self, user_id: UUID, data: TransactionCreateRequest) -> Transaction:
        """Persist a new transaction for `user_id` and return the stored row."""


class InMemoryTransactionsRepository:
    """In-memory repository used for local dev/tests when Supabase is not configured."""

    def __init__(self, seed: list[Transaction] | None = None) -> None:
        self._rows: list[Transaction] = list(seed or [])
        self._lock = threading.Lock()

    def list_transactions(self, user_id: UUID) -> list[Transaction]:
        with self._lock:
            # latest insert first; the sort is stable on equal timestamps
            rows = [row for row in reversed(self._rows) if row.user_id == user_id]
        return sort_newest_first(rows)

    def create_transaction(self, user_id: UUID, data: TransactionCreateRequest) -> Transaction:
        transaction = Transaction(
            id=uuid4(),
            amount=data.amount,
            description=data.description,
            type=data.type,
            date=data.date,
            created_at=datetime.now(timezone.utc),
            user_id=user_id,
        )
        with self._lock:
            self._rows.append(transaction)
        return transaction


class SupabaseTransactionsRepository:
    """Supabase repository reading and writing the transactions table through PostgREST."""

    def __init__(self, client: SupabaseClient, table: str = "transactions") -> None:
        self._client = client
        self._table = table

    @staticmethod
    def _parse_row(row: dict[str, object]) -> Transaction:
        raw_date = row.get("date")
        if isinstance(raw_date, datetime):
            parsed_date = raw_date.date()
        elif isinstance(raw_date, date):
            parsed_date = raw_date
        else:
            # timestamp columns come back as full ISO datetimes
            parsed_date = date.fromisoformat(str(raw_date)[:10])

        created_at = row.get("created_at")
        if isinstance(created_at, datetime):
            created_at_value = created_at
        else:
            created_at_value = datetime.fromisoformat(str(created_at).replace("Z", "+00:00"))

        return Transaction(
            id=row.get("id"),
            amount=Decimal(str(row.get("amount"))),
            description=row.get("description"),
            type=row.get("type"),
            date=parsed_date,
            created_at=created_at_value,
            user_id=row.get("user_id"),
        )

    def list_transactions(self, user_id: UUID) -> list[Transaction]:
        query = [
            ("user_id", f"eq.{user_id}"),
            ("select", _SELECT_COLUMNS),
            ("order", "date.desc,created_at.desc"),
        ]
        rows = self._client.get_rows(table=self._table, query=query)
        return [self._parse_row(row) for row in rows]

    def create_transaction(self, user_id: UUID, data: TransactionCreateRequest) -> Transaction:
        payload = {
            "amount": str(data.amount),
            "description": data.description,
            "type": data.type.value,
            "date": data.date.isoformat(),
            "user_id": str(user_id),
        }
        rows = self._client.post_rows(table=self._table, payload=payload)
        if not rows:
            raise RuntimeError("Supabase insert returned no representation")
        return self._parse_row(rows[0])
