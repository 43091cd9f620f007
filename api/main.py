"""FastAPI entrypoint for transaction HTTP endpoints."""

from __future__ import annotations

import json
import logging
from functools import lru_cache
from typing import Any

from fastapi import FastAPI, Header
from fastapi.middleware.cors import CORSMiddleware
from fastapi.requests import Request
from fastapi.responses import JSONResponse, Response
from fastapi.concurrency import run_in_threadpool

from shared import config as _config
from backend.auth.supabase_auth import (
    get_user_from_bearer_token,
    sign_in_with_password,
    sign_out,
    sign_up,
    to_authenticated_user,
)
from backend.factory import build_transaction_service
from backend.services.transaction_service import TransactionService
from shared.errors import AuthServiceError, InternalError, UnauthorizedError, ValidationError
from shared.models import AuthenticatedUser
from shared.validation import validate_login_input, validate_register_input


logger = logging.getLogger(__name__)


@lru_cache(maxsize=1)
def get_transaction_service() -> TransactionService:
    """Create and cache the transaction service once per process."""

    return build_transaction_service()


def _extract_bearer_token(authorization: str | None) -> str:
    if not authorization:
        raise UnauthorizedError()
    prefix = "Bearer "
    if not authorization.startswith(prefix):
        raise UnauthorizedError()
    token = authorization[len(prefix) :].strip()
    if not token:
        raise UnauthorizedError()
    return token


def _resolve_authenticated_user(authorization: str | None) -> AuthenticatedUser:
    """Resolve the caller's identity from the authorization header."""

    token = _extract_bearer_token(authorization)
    try:
        user_payload = get_user_from_bearer_token(token)
        return to_authenticated_user(user_payload)
    except UnauthorizedError as exc:
        logger.info("auth_session_rejected reason=%s", exc.message)
        raise UnauthorizedError() from exc


async def _read_json_body(request: Request) -> Any:
    raw_body = await request.body()
    if not raw_body:
        raise ValidationError.for_field("body", "Request body is required")
    try:
        return json.loads(raw_body)
    except ValueError as exc:
        raise ValidationError.for_field("body", "Request body must be valid JSON") from exc


_config.configure_logging()

app = FastAPI(title="CashFlow Transactions API")

ALLOW_ORIGINS = _config.cors_allow_origins()


@app.middleware("http")
async def log_http_requests(request: Request, call_next):
    """Log incoming requests, HTTP status codes and unexpected errors."""

    logger.info("http_request_received method=%s path=%s", request.method, request.url.path)
    try:
        response = await call_next(request)
    except Exception:
        logger.exception(
            "http_request_failed method=%s path=%s",
            request.method,
            request.url.path,
        )
        raise

    logger.info(
        "http_response_sent method=%s path=%s status_code=%s",
        request.method,
        request.url.path,
        response.status_code,
    )
    return response


app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOW_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

logger.info("cors_allow_origins=%s", ALLOW_ORIGINS)


@app.exception_handler(UnauthorizedError)
async def handle_unauthorized(_request: Request, exc: UnauthorizedError) -> JSONResponse:
    return JSONResponse(status_code=401, content={"error": exc.message})


@app.exception_handler(ValidationError)
async def handle_validation_error(_request: Request, exc: ValidationError) -> JSONResponse:
    return JSONResponse(status_code=400, content={"error": "Invalid data", "details": exc.to_payload()})


@app.exception_handler(InternalError)
async def handle_internal_error(_request: Request, exc: InternalError) -> JSONResponse:
    return JSONResponse(status_code=500, content={"error": exc.message})


@app.exception_handler(AuthServiceError)
async def handle_auth_service_error(_request: Request, exc: AuthServiceError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


@app.exception_handler(Exception)
async def handle_unexpected_exception(request: Request, exc: Exception) -> JSONResponse:
    """Return a JSON 500 response for unhandled exceptions."""

    logger.exception(
        "unhandled_exception method=%s path=%s exception_type=%s",
        request.method,
        request.url.path,
        type(exc).__name__,
        exc_info=exc,
    )
    return JSONResponse(status_code=500, content={"error": "Internal Server Error"})


@app.get("/health")
def health() -> dict[str, str]:
    """Healthcheck endpoint."""

    return {"status": "ok"}


@app.get("/api/transactions")
def list_transactions(authorization: str | None = Header(default=None)) -> JSONResponse:
    """Return the authenticated user's transactions, newest date first."""

    user = _resolve_authenticated_user(authorization)
    transactions = get_transaction_service().list_transactions(user.id)
    return JSONResponse(content=[transaction.to_payload() for transaction in transactions])


@app.post("/api/transactions")
async def create_transaction(
    request: Request,
    authorization: str | None = Header(default=None),
) -> JSONResponse:
    """Create a transaction owned by the authenticated user."""

    # Auth before body parsing.
    user = await run_in_threadpool(_resolve_authenticated_user, authorization)
    payload = await _read_json_body(request)
    transaction = await run_in_threadpool(get_transaction_service().create_transaction, user.id, payload)
    return JSONResponse(status_code=201, content=transaction.to_payload())


@app.get("/api/transactions/summary")
def transactions_summary(authorization: str | None = Header(default=None)) -> JSONResponse:
    user = _resolve_authenticated_user(authorization)
    summary = get_transaction_service().summarize(user.id)
    return JSONResponse(content=summary.model_dump(mode="json"))


@app.get("/api/dashboard")
def dashboard(authorization: str | None = Header(default=None)) -> JSONResponse:
    """Return summary cards and formatted rows for the dashboard page."""

    user = _resolve_authenticated_user(authorization)
    view = get_transaction_service().dashboard(user.id)
    return JSONResponse(content=view.model_dump(mode="json"))


@app.post("/api/auth/register")
async def register(request: Request) -> JSONResponse:
    credentials = validate_register_input(await _read_json_body(request))
    session = await run_in_threadpool(sign_up, credentials)
    logger.info("auth_user_registered user_id=%s", session.user.id)
    return JSONResponse(status_code=201, content=session.model_dump(mode="json"))


@app.post("/api/auth/login")
async def login(request: Request) -> JSONResponse:
    credentials = validate_login_input(await _read_json_body(request))
    session = await run_in_threadpool(sign_in_with_password, credentials)
    return JSONResponse(content=session.model_dump(mode="json"))


@app.post("/api/auth/logout", status_code=204)
def logout(authorization: str | None = Header(default=None)) -> Response:
    """Revoke the caller's session."""

    token = _extract_bearer_token(authorization)
    try:
        sign_out(token)
    except UnauthorizedError as exc:
        logger.info("auth_session_rejected reason=%s", exc.message)
        raise UnauthorizedError() from exc
    return Response(status_code=204)
