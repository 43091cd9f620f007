"""Minimal Supabase PostgREST client used by backend repositories only."""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any
from urllib.error import HTTPError, URLError
from urllib.parse import urlencode
from urllib.request import Request, urlopen


@dataclass(slots=True)
class SupabaseSettings:
    url: str
    service_role_key: str
    anon_key: str | None = None


class SupabaseClient:
    def __init__(self, settings: SupabaseSettings) -> None:
        self.settings = settings

    def _api_key(self, use_anon_key: bool) -> str:
        api_key = self.settings.anon_key if use_anon_key else self.settings.service_role_key
        if not api_key:
            raise ValueError("Missing Supabase API key for requested mode")
        return api_key

    def _table_url(self, table: str, query: dict[str, str | int] | list[tuple[str, str | int]] | None) -> str:
        base_url = f"{self.settings.url.rstrip('/')}/rest/v1/{table}"
        if not query:
            return base_url
        return f"{base_url}?{urlencode(query, doseq=True)}"

    def get_rows(
        self,
        *,
        table: str,
        query: dict[str, str | int] | list[tuple[str, str | int]],
        use_anon_key: bool = False,
    ) -> list[dict[str, Any]]:
        """Fetch rows from PostgREST matching the encoded query."""

        api_key = self._api_key(use_anon_key)
        request = Request(
            url=self._table_url(table, query),
            headers={
                "apikey": api_key,
                "Authorization": f"Bearer {api_key}",
                "Accept": "application/json",
            },
            method="GET",
        )
        try:
            with urlopen(request) as response:  # noqa: S310 - URL comes from trusted env config
                return json.loads(response.read().decode("utf-8"))
        except HTTPError as exc:
            body = exc.read().decode("utf-8", errors="replace")[:500]
            raise RuntimeError(
                f"Supabase request failed with status {exc.code}: {body}"
            ) from exc
        except URLError as exc:
            raise RuntimeError(f"Supabase request failed: {exc.reason}") from exc

    def post_rows(
        self,
        *,
        table: str,
        payload: dict[str, Any] | list[dict[str, Any]],
        prefer: str = "return=representation",
        use_anon_key: bool = False,
    ) -> list[dict[str, Any]]:
        """Insert one or many rows and return the representation PostgREST sends back."""

        api_key = self._api_key(use_anon_key)
        request = Request(
            url=self._table_url(table, None),
            data=json.dumps(payload).encode("utf-8"),
            headers={
                "apikey": api_key,
                "Authorization": f"Bearer {api_key}",
                "Accept": "application/json",
                "Content-Type": "application/json",
                "Prefer": prefer,
            },
            method="POST",
        )
        try:
            with urlopen(request) as response:  # noqa: S310 - URL comes from trusted env config
                raw_body = response.read().decode("utf-8")
        except HTTPError as exc:
            body = exc.read().decode("utf-8", errors="replace")[:500]
            raise RuntimeError(
                f"Supabase request failed with status {exc.code}: {body}"
            ) from exc
        except URLError as exc:
            raise RuntimeError(f"Supabase request failed: {exc.reason}") from exc

        if not raw_body:
            return []
        rows = json.loads(raw_body)
        if isinstance(rows, dict):
            return [rows]
        return rows
