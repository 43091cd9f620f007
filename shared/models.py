"""Pydantic contracts shared across backend, API and client."""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from enum import Enum
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator, validate_email
from pydantic_core import PydanticCustomError


DESCRIPTION_MAX_LENGTH = 255
NAME_MIN_LENGTH = 2
PASSWORD_MIN_LENGTH = 6
AMOUNT_MAX_INTEGER_DIGITS = 12

_CENT = Decimal("0.01")
_AMOUNT_LIMIT = Decimal(10) ** AMOUNT_MAX_INTEGER_DIGITS

AMOUNT_MESSAGE = "Amount must be a positive number"
AMOUNT_PRECISION_MESSAGE = "Amount must have at most 2 decimal places"
AMOUNT_TOO_LARGE_MESSAGE = "Amount is too large"
DESCRIPTION_REQUIRED_MESSAGE = "Description is required"
DESCRIPTION_TOO_LONG_MESSAGE = f"Description must be less than {DESCRIPTION_MAX_LENGTH} characters"
TYPE_MESSAGE = "Type must be INCOME or EXPENSE"
DATE_MESSAGE = "Invalid date format"
NAME_MESSAGE = f"Name must be at least {NAME_MIN_LENGTH} characters"
EMAIL_MESSAGE = "Invalid email address"
PASSWORD_MESSAGE = f"Password must be at least {PASSWORD_MIN_LENGTH} characters"


class TransactionType(str, Enum):
    """Closed set of transaction directions."""

    INCOME = "INCOME"
    EXPENSE = "EXPENSE"


def _invalid(error_type: str, message: str) -> PydanticCustomError:
    return PydanticCustomError(error_type, message)


class TransactionCreateRequest(BaseModel):
    """Raw create payload coerced into typed values.

    Values arrive as loosely typed strings from a form or JSON body.
    """

    model_config = ConfigDict(extra="ignore")

    amount: Decimal
    description: str
    type: TransactionType
    date: date

    @field_validator("amount", mode="before")
    @classmethod
    def parse_amount(cls, value: object) -> Decimal:
        if isinstance(value, bool):
            raise _invalid("amount_invalid", AMOUNT_MESSAGE)
        if isinstance(value, (int, float, Decimal)):
            value = str(value)
        if not isinstance(value, str):
            raise _invalid("amount_invalid", AMOUNT_MESSAGE)
        try:
            parsed = Decimal(value.strip())
        except InvalidOperation:
            raise _invalid("amount_invalid", AMOUNT_MESSAGE) from None
        if not parsed.is_finite() or parsed <= 0:
            raise _invalid("amount_invalid", AMOUNT_MESSAGE)
        if parsed >= _AMOUNT_LIMIT:
            raise _invalid("amount_too_large", AMOUNT_TOO_LARGE_MESSAGE)
        if parsed.quantize(_CENT) != parsed:
            raise _invalid("amount_precision", AMOUNT_PRECISION_MESSAGE)
        return parsed

    @field_validator("description", mode="before")
    @classmethod
    def check_description(cls, value: object) -> str:
        if not isinstance(value, str) or len(value) < 1:
            raise _invalid("description_required", DESCRIPTION_REQUIRED_MESSAGE)
        if len(value) > DESCRIPTION_MAX_LENGTH:
            raise _invalid("description_too_long", DESCRIPTION_TOO_LONG_MESSAGE)
        return value

    @field_validator("type", mode="before")
    @classmethod
    def check_type(cls, value: object) -> str:
        if isinstance(value, TransactionType):
            return value.value
        if value not in {member.value for member in TransactionType}:
            raise _invalid("type_invalid", TYPE_MESSAGE)
        return value

    @field_validator("date", mode="before")
    @classmethod
    def parse_date(cls, value: object) -> date:
        if isinstance(value, datetime):
            return value.date()
        if isinstance(value, date):
            return value
        if not isinstance(value, str) or not value.strip():
            raise _invalid("date_invalid", DATE_MESSAGE)
        raw = value.strip()
        try:
            return date.fromisoformat(raw)
        except ValueError:
            pass
        try:
            return datetime.fromisoformat(raw.replace("Z", "+00:00")).date()
        except ValueError:
            raise _invalid("date_invalid", DATE_MESSAGE) from None


class Transaction(BaseModel):
    """Stored transaction owned by exactly one user."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    id: UUID
    amount: Decimal
    description: str
    type: TransactionType
    date: date
    created_at: datetime = Field(alias="createdAt")
    user_id: UUID = Field(alias="userId")

    def to_payload(self) -> dict[str, object]:
        """Return the JSON-safe external representation."""
        return self.model_dump(mode="json", by_alias=True)


class TransactionSummary(BaseModel):
    model_config = ConfigDict(extra="forbid")

    total_income: Decimal
    total_expenses: Decimal
    net_balance: Decimal
    count: int


class CardTone(str, Enum):
    POSITIVE = "positive"
    NEGATIVE = "negative"
    NEUTRAL = "neutral"


class DashboardCard(BaseModel):
    model_config = ConfigDict(extra="forbid")

    label: str
    value: str
    tone: CardTone


class DashboardRow(BaseModel):
    model_config = ConfigDict(extra="forbid")

    id: UUID
    date: str
    description: str
    type: TransactionType
    amount: str


class DashboardView(BaseModel):
    """Rendered dashboard: summary cards plus the transactions table."""

    model_config = ConfigDict(extra="forbid")

    summary: TransactionSummary
    cards: list[DashboardCard]
    rows: list[DashboardRow]
    is_empty: bool
    empty_message: str | None = None


def _check_email(value: object) -> str:
    if not isinstance(value, str):
        raise _invalid("email_invalid", EMAIL_MESSAGE)
    try:
        _, normalized = validate_email(value.strip())
    except PydanticCustomError:
        raise _invalid("email_invalid", EMAIL_MESSAGE) from None
    return normalized


def _check_password(value: object) -> str:
    if not isinstance(value, str) or len(value) < PASSWORD_MIN_LENGTH:
        raise _invalid("password_too_short", PASSWORD_MESSAGE)
    return value


class LoginRequest(BaseModel):
    model_config = ConfigDict(extra="ignore")

    email: str
    password: str

    @field_validator("email", mode="before")
    @classmethod
    def check_email(cls, value: object) -> str:
        return _check_email(value)

    @field_validator("password", mode="before")
    @classmethod
    def check_password(cls, value: object) -> str:
        return _check_password(value)


class RegisterRequest(LoginRequest):
    name: str

    @field_validator("name", mode="before")
    @classmethod
    def check_name(cls, value: object) -> str:
        if not isinstance(value, str) or len(value.strip()) < NAME_MIN_LENGTH:
            raise _invalid("name_too_short", NAME_MESSAGE)
        return value.strip()


class AuthenticatedUser(BaseModel):
    """The slice of the session collaborator's user the core consumes."""

    model_config = ConfigDict(extra="ignore")

    id: UUID
    email: str | None = None
    name: str | None = None


class AuthSession(BaseModel):
    model_config = ConfigDict(extra="ignore")

    access_token: str | None = None
    refresh_token: str | None = None
    token_type: str = "bearer"
    expires_in: int | None = None
    user: AuthenticatedUser
