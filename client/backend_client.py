"""Backend client abstraction for the dashboard and the transaction form.

Design choice:
- `LocalBackendClient` calls the transaction service in-process (dev, tests).
- `HttpBackendClient` talks to the FastAPI surface with the same methods.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Protocol
from uuid import UUID
from urllib.error import HTTPError, URLError
from urllib.request import Request, urlopen

from pydantic import ValidationError as PydanticValidationError

from backend.services.transaction_service import TransactionService
from shared import config
from shared.errors import FieldError, InternalError, UnauthorizedError, ValidationError
from shared.models import Transaction


logger = logging.getLogger(__name__)


class TransactionsClient(Protocol):
    def list_transactions(self) -> list[Transaction]:
        """Return the signed-in user's transactions, newest date first."""

    def create_transaction(self, payload: dict[str, Any]) -> Transaction:
        """Create a transaction from raw form values."""


@dataclass(slots=True)
class LocalBackendClient:
    transaction_service: TransactionService
    user_id: UUID

    def list_transactions(self) -> list[Transaction]:
        return self.transaction_service.list_transactions(self.user_id)

    def create_transaction(self, payload: dict[str, Any]) -> Transaction:
        return self.transaction_service.create_transaction(self.user_id, payload)


_UNEXPECTED_RESPONSE_MESSAGE = "Unexpected response from backend"


def _parse_transaction(row: object) -> Transaction:
    try:
        return Transaction.model_validate(row)
    except PydanticValidationError as exc:
        logger.warning("backend_transaction_invalid error_count=%s", exc.error_count())
        raise InternalError(_UNEXPECTED_RESPONSE_MESSAGE) from exc


def _validation_error_from_body(body: dict[str, Any]) -> ValidationError:
    details = body.get("details")
    errors = [
        FieldError(field=str(item["field"]), message=str(item["message"]))
        for item in details or []
        if isinstance(item, dict) and "field" in item and "message" in item
    ]
    if errors:
        return ValidationError(errors)
    return ValidationError.for_field("body", str(body.get("error") or "Invalid data"))


@dataclass(slots=True)
class HttpBackendClient:
    access_token: str | None = None
    base_url: str | None = None

    def _url(self, path: str) -> str:
        return f"{(self.base_url or config.api_base_url()).rstrip('/')}{path}"

    def _request(self, method: str, path: str, body: dict[str, Any] | None = None) -> Any:
        headers = {"Accept": "application/json"}
        if self.access_token:
            headers["Authorization"] = f"Bearer {self.access_token}"
        data = None
        if body is not None:
            headers["Content-Type"] = "application/json"
            data = json.dumps(body).encode("utf-8")

        request = Request(url=self._url(path), data=data, headers=headers, method=method)
        try:
            with urlopen(request) as response:  # noqa: S310 - API URL comes from trusted config
                raw_body = response.read()
        except HTTPError as exc:
            raise self._map_http_error(exc) from exc
        except URLError as exc:
            logger.warning("backend_unreachable method=%s path=%s reason=%s", method, path, exc.reason)
            raise InternalError("Backend is unreachable") from exc

        try:
            return json.loads(raw_body.decode("utf-8"))
        except ValueError as exc:
            logger.warning("backend_response_invalid method=%s path=%s", method, path)
            raise InternalError(_UNEXPECTED_RESPONSE_MESSAGE) from exc

    @staticmethod
    def _map_http_error(exc: HTTPError) -> Exception:
        raw_body = exc.read().decode("utf-8", errors="replace")
        try:
            body = json.loads(raw_body) if raw_body else {}
        except ValueError:
            body = {}
        if not isinstance(body, dict):
            body = {}

        if exc.code == 400:
            return _validation_error_from_body(body)
        if exc.code == 401:
            return UnauthorizedError()
        return InternalError(str(body.get("error") or "Request failed"))

    def list_transactions(self) -> list[Transaction]:
        rows = self._request("GET", "/api/transactions")
        if not isinstance(rows, list):
            raise InternalError(_UNEXPECTED_RESPONSE_MESSAGE)
        return [_parse_transaction(row) for row in rows]

    def create_transaction(self, payload: dict[str, Any]) -> Transaction:
        row = self._request("POST", "/api/transactions", body=payload)
        return _parse_transaction(row)
