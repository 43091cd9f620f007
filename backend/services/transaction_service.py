"""Transaction recording and summarization for authenticated users.

The service owns the create/list semantics behind the HTTP surface: payloads
are validated before they reach the store, and any unexpected store failure
is logged and normalized into `InternalError` so callers never see driver
details.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from uuid import UUID

from backend.reporting.summary import build_dashboard_view, summarize_transactions
from backend.repositories.transactions_repository import TransactionsRepository
from shared.errors import InternalError, ValidationError
from shared.models import DashboardView, Transaction, TransactionSummary
from shared.validation import validate_transaction_input


logger = logging.getLogger(__name__)

LIST_FAILED_MESSAGE = "Failed to fetch transactions"
CREATE_FAILED_MESSAGE = "Failed to create transaction"


@dataclass(slots=True)
class TransactionService:
    transactions_repository: TransactionsRepository

    def list_transactions(self, user_id: UUID) -> list[Transaction]:
        """Return the user's transactions ordered by date, newest first."""

        try:
            return self.transactions_repository.list_transactions(user_id)
        except Exception as exc:  # store failures are terminal for the request
            logger.exception("transactions_list_failed user_id=%s", user_id)
            raise InternalError(LIST_FAILED_MESSAGE) from exc

    def create_transaction(self, user_id: UUID, payload: object) -> Transaction:
        """Validate a raw payload and persist it for the user."""

        try:
            data = validate_transaction_input(payload)
        except ValidationError as exc:
            logger.info(
                "transaction_validation_failed user_id=%s fields=%s",
                user_id,
                ",".join(exc.fields),
            )
            raise

        try:
            transaction = self.transactions_repository.create_transaction(user_id, data)
        except Exception as exc:
            logger.exception("transaction_create_failed user_id=%s", user_id)
            raise InternalError(CREATE_FAILED_MESSAGE) from exc

        logger.info(
            "transaction_created user_id=%s transaction_id=%s type=%s",
            user_id,
            transaction.id,
            transaction.type.value,
        )
        return transaction

    def summarize(self, user_id: UUID) -> TransactionSummary:
        return summarize_transactions(self.list_transactions(user_id))

    def dashboard(self, user_id: UUID) -> DashboardView:
        return build_dashboard_view(self.list_transactions(user_id))
