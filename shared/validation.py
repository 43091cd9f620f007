"""Input validation for transaction and credential payloads.

Each helper is a pure function from a raw mapping to a typed model. Failures
are translated from pydantic's error list into the stable `FieldError` shape
so callers never see library internals.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import TypeVar

from pydantic import BaseModel, ValidationError as PydanticValidationError

from shared.errors import FieldError, ValidationError
from shared.models import LoginRequest, RegisterRequest, TransactionCreateRequest


_ModelT = TypeVar("_ModelT", bound=BaseModel)

_MISSING_FIELD_MESSAGE = "Field required"


def _field_errors(exc: PydanticValidationError) -> list[FieldError]:
    errors: list[FieldError] = []
    seen: set[str] = set()
    for error in exc.errors():
        location = error.get("loc") or ()
        field = str(location[0]) if location else "body"
        if field in seen:
            continue
        seen.add(field)
        message = _MISSING_FIELD_MESSAGE if error.get("type") == "missing" else str(error.get("msg"))
        errors.append(FieldError(field=field, message=message))
    return errors


def _validate(model: type[_ModelT], raw: object) -> _ModelT:
    if not isinstance(raw, Mapping):
        raise ValidationError.for_field("body", "Expected a JSON object")
    try:
        return model.model_validate(dict(raw))
    except PydanticValidationError as exc:
        raise ValidationError(_field_errors(exc)) from None


def validate_transaction_input(raw: object) -> TransactionCreateRequest:
    """Validate `{amount, description, type, date}` into a typed create request."""
    return _validate(TransactionCreateRequest, raw)


def validate_register_input(raw: object) -> RegisterRequest:
    return _validate(RegisterRequest, raw)


def validate_login_input(raw: object) -> LoginRequest:
    return _validate(LoginRequest, raw)
