"""Add-transaction form: local validation, submission and refresh signalling."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import date
from enum import Enum

from client.backend_client import TransactionsClient
from shared.errors import AppError, ValidationError
from shared.models import Transaction
from shared.validation import validate_transaction_input


logger = logging.getLogger(__name__)


class FormState(str, Enum):
    IDLE = "idle"
    SUBMITTING = "submitting"


def _today_iso() -> str:
    return date.today().isoformat()


@dataclass
class TransactionForm:
    """Form state for logging one income or expense.

    The list is never updated optimistically: `on_transaction_added` fires
    only after the backend confirms the creation.
    """

    backend_client: TransactionsClient
    on_transaction_added: Callable[[], None] | None = None
    amount: str = ""
    description: str = ""
    type: str | None = None
    date: str = field(default_factory=_today_iso)
    state: FormState = FormState.IDLE
    submit_error: str | None = None
    field_errors: dict[str, str] = field(default_factory=dict)

    def values(self) -> dict[str, str | None]:
        return {
            "amount": self.amount,
            "description": self.description,
            "type": self.type,
            "date": self.date,
        }

    def reset(self) -> None:
        self.amount = ""
        self.description = ""
        self.type = None
        self.date = _today_iso()
        self.field_errors = {}

    def submit(self) -> Transaction | None:
        """Validate and send the form; return the created transaction or None on failure."""

        if self.state is FormState.SUBMITTING:
            raise RuntimeError("A submission is already in progress")

        self.state = FormState.SUBMITTING
        self.submit_error = None
        self.field_errors = {}
        try:
            validate_transaction_input(self.values())
            created = self.backend_client.create_transaction(self.values())
        except ValidationError as exc:
            self.field_errors = {error.field: error.message for error in exc.errors}
            self.submit_error = exc.message
            return None
        except AppError as exc:
            logger.warning("transaction_form_submit_failed error_type=%s", type(exc).__name__)
            self.submit_error = str(exc) or "Failed to create transaction"
            return None
        finally:
            self.state = FormState.IDLE

        self.reset()
        if self.on_transaction_added is not None:
            self.on_transaction_added()
        return created
