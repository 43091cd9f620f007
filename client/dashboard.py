"""Dashboard page state: the in-memory transaction list for one visit."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from backend.reporting.summary import build_dashboard_view, summarize_transactions
from client.backend_client import TransactionsClient
from client.form import TransactionForm
from shared.errors import AppError
from shared.models import DashboardView, Transaction, TransactionSummary


logger = logging.getLogger(__name__)

FETCH_FAILED_MESSAGE = "Failed to fetch transactions"


@dataclass
class Dashboard:
    backend_client: TransactionsClient
    transactions: list[Transaction] = field(default_factory=list)
    is_loading: bool = False
    error: str | None = None

    def refresh(self) -> DashboardView:
        """Re-fetch the list and return the recomputed view.

        On failure the previous list is kept and `error` is set.
        """

        self.is_loading = True
        try:
            self.transactions = self.backend_client.list_transactions()
            self.error = None
        except AppError as exc:
            logger.warning("dashboard_refresh_failed error_type=%s", type(exc).__name__)
            self.error = FETCH_FAILED_MESSAGE
        finally:
            self.is_loading = False
        return self.view

    @property
    def summary(self) -> TransactionSummary:
        return summarize_transactions(self.transactions)

    @property
    def view(self) -> DashboardView:
        return build_dashboard_view(self.transactions)

    def on_transaction_added(self) -> None:
        self.refresh()

    def new_form(self) -> TransactionForm:
        return TransactionForm(
            backend_client=self.backend_client,
            on_transaction_added=self.on_transaction_added,
        )
