"""Supabase Auth session collaborator: token validation and the session lifecycle."""

from __future__ import annotations

import json
import logging
from typing import Any
from uuid import UUID
from urllib.error import HTTPError, URLError
from urllib.request import Request, urlopen

from shared import config
from shared.errors import AuthServiceError, UnauthorizedError
from shared.models import AuthenticatedUser, AuthSession, LoginRequest, RegisterRequest


logger = logging.getLogger(__name__)


REQUIRED_AUTH_USER_ID_FIELD = "id"
_DUPLICATE_USER_MARKERS = ("already registered", "already exists", "user_already_exists")


def _is_uuid_like(value: str) -> bool:
    try:
        UUID(value)
    except (ValueError, TypeError):
        return False
    return True


def _auth_settings() -> tuple[str, str]:
    supabase_url = (config.supabase_url() or "").rstrip("/")
    anon_key = config.supabase_anon_key()
    if not supabase_url or not anon_key:
        raise UnauthorizedError("Supabase auth is not configured")
    return supabase_url, anon_key


def get_user_from_bearer_token(token: str) -> dict[str, object]:
    """Return the Supabase auth user payload for a bearer token."""

    supabase_url, anon_key = _auth_settings()

    request = Request(
        url=f"{supabase_url}/auth/v1/user",
        headers={
            "apikey": anon_key,
            "Authorization": f"Bearer {token}",
            "Accept": "application/json",
        },
        method="GET",
    )

    try:
        with urlopen(request) as response:  # noqa: S310 - trusted Supabase URL from env
            if response.status != 200:
                raise UnauthorizedError("Unauthorized")
            payload = json.loads(response.read().decode("utf-8"))
            if not isinstance(payload, dict):
                raise UnauthorizedError("Unauthorized")
            user_id = payload.get(REQUIRED_AUTH_USER_ID_FIELD)
            if not isinstance(user_id, str) or not _is_uuid_like(user_id):
                raise UnauthorizedError("Unauthorized")
            return payload
    except HTTPError as exc:
        raise UnauthorizedError("Unauthorized") from exc
    except URLError as exc:
        raise UnauthorizedError("Unauthorized") from exc


def to_authenticated_user(payload: dict[str, Any]) -> AuthenticatedUser:
    """Reduce a Supabase user payload to the fields the core consumes."""

    user_id = payload.get(REQUIRED_AUTH_USER_ID_FIELD)
    if not isinstance(user_id, str) or not _is_uuid_like(user_id):
        raise UnauthorizedError("Unauthorized")

    email = payload.get("email")
    metadata = payload.get("user_metadata")
    name = metadata.get("name") if isinstance(metadata, dict) else None
    return AuthenticatedUser(
        id=UUID(user_id),
        email=email if isinstance(email, str) else None,
        name=name if isinstance(name, str) else None,
    )


def _post_auth(path: str, body: dict[str, Any]) -> dict[str, Any]:
    supabase_url, anon_key = _auth_settings()
    request = Request(
        url=f"{supabase_url}/auth/v1/{path}",
        data=json.dumps(body).encode("utf-8"),
        headers={
            "apikey": anon_key,
            "Accept": "application/json",
            "Content-Type": "application/json",
        },
        method="POST",
    )
    with urlopen(request) as response:  # noqa: S310 - trusted Supabase URL from env
        raw_body = response.read()
    try:
        payload = json.loads(raw_body.decode("utf-8"))
    except ValueError as exc:
        raise AuthServiceError(502, "Unexpected authentication service response") from exc
    if not isinstance(payload, dict):
        raise AuthServiceError(502, "Unexpected authentication service response")
    return payload


def _error_message(exc: HTTPError) -> str:
    raw_body = exc.read().decode("utf-8", errors="replace")[:500]
    try:
        payload = json.loads(raw_body)
    except ValueError:
        return raw_body
    if not isinstance(payload, dict):
        return raw_body
    for key in ("msg", "error_description", "message", "error_code", "error"):
        value = payload.get(key)
        if isinstance(value, str) and value:
            return value
    return raw_body


def _to_session(payload: dict[str, Any]) -> AuthSession:
    user_payload = payload.get("user")
    if not isinstance(user_payload, dict):
        # Signup without auto-confirm returns the bare user and no session.
        user_payload = payload
    return AuthSession(
        access_token=payload.get("access_token"),
        refresh_token=payload.get("refresh_token"),
        token_type=str(payload.get("token_type") or "bearer"),
        expires_in=payload.get("expires_in"),
        user=to_authenticated_user(user_payload),
    )


def sign_up(request: RegisterRequest) -> AuthSession:
    """Create an email/password account and return its session when auto-confirmed."""

    try:
        payload = _post_auth(
            "signup",
            {"email": request.email, "password": request.password, "data": {"name": request.name}},
        )
    except HTTPError as exc:
        message = _error_message(exc)
        if any(marker in message.lower() for marker in _DUPLICATE_USER_MARKERS):
            raise AuthServiceError(409, "User already exists") from exc
        if 400 <= exc.code < 500:
            raise AuthServiceError(400, message or "Registration failed") from exc
        logger.warning("auth_sign_up_failed status=%s", exc.code)
        raise AuthServiceError(502, "Authentication service unavailable") from exc
    except URLError as exc:
        logger.warning("auth_sign_up_unreachable reason=%s", exc.reason)
        raise AuthServiceError(502, "Authentication service unavailable") from exc

    return _to_session(payload)


def sign_in_with_password(request: LoginRequest) -> AuthSession:
    """Exchange email/password credentials for a session."""

    try:
        payload = _post_auth(
            "token?grant_type=password",
            {"email": request.email, "password": request.password},
        )
    except HTTPError as exc:
        if 400 <= exc.code < 500:
            raise UnauthorizedError("Invalid email or password") from exc
        logger.warning("auth_sign_in_failed status=%s", exc.code)
        raise AuthServiceError(502, "Authentication service unavailable") from exc
    except URLError as exc:
        logger.warning("auth_sign_in_unreachable reason=%s", exc.reason)
        raise AuthServiceError(502, "Authentication service unavailable") from exc

    return _to_session(payload)


def sign_out(token: str) -> None:
    """Revoke the session behind a bearer token."""

    supabase_url, anon_key = _auth_settings()
    request = Request(
        url=f"{supabase_url}/auth/v1/logout",
        data=b"",
        headers={
            "apikey": anon_key,
            "Authorization": f"Bearer {token}",
            "Accept": "application/json",
        },
        method="POST",
    )
    try:
        with urlopen(request):  # noqa: S310 - trusted Supabase URL from env
            return
    except HTTPError as exc:
        if exc.code in (401, 403, 404):
            raise UnauthorizedError("Unauthorized") from exc
        logger.warning("auth_sign_out_failed status=%s", exc.code)
        raise AuthServiceError(502, "Authentication service unavailable") from exc
    except URLError as exc:
        logger.warning("auth_sign_out_unreachable reason=%s", exc.reason)
        raise AuthServiceError(502, "Authentication service unavailable") from exc
