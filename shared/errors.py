"""Error taxonomy shared by the backend, the HTTP boundary and the client."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class FieldError:
    """A single failing input field and its user-facing message."""

    field: str
    message: str

    def to_dict(self) -> dict[str, str]:
        return {"field": self.field, "message": self.message}


class AppError(Exception):
    """Base class for errors surfaced to API callers."""


class UnauthorizedError(AppError):
    """Raised when a request carries no valid session."""

    def __init__(self, message: str = "Unauthorized") -> None:
        super().__init__(message)
        self.message = message


class ValidationError(AppError):
    """Raised when raw input fails field-level validation.

    `field` and `message` describe the first failing field; `errors` holds
    every failing field in input order.
    """

    def __init__(self, errors: list[FieldError]) -> None:
        if not errors:
            raise ValueError("ValidationError requires at least one field error")
        self.errors = list(errors)
        super().__init__(f"{self.field}: {self.message}")

    @classmethod
    def for_field(cls, field: str, message: str) -> "ValidationError":
        return cls([FieldError(field=field, message=message)])

    @property
    def field(self) -> str:
        return self.errors[0].field

    @property
    def message(self) -> str:
        return self.errors[0].message

    @property
    def fields(self) -> list[str]:
        return [error.field for error in self.errors]

    def to_payload(self) -> list[dict[str, str]]:
        return [error.to_dict() for error in self.errors]


class InternalError(AppError):
    """Raised when the store or runtime fails unexpectedly.

    The message is safe to show to users; the underlying cause is chained.
    """

    def __init__(self, message: str = "Internal Server Error") -> None:
        super().__init__(message)
        self.message = message


class AuthServiceError(AppError):
    """Raised when the session collaborator refuses a register/login call."""

    def __init__(self, status_code: int, message: str) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.message = message
