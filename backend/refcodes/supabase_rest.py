from __future__ import annotations

import logging
from typing import Any, Dict, List

import requests

from refcodes import config
from refcodes.errors import ExternalStoreError

DEFAULT_TIMEOUT = 20

logger = logging.getLogger(__name__)


class SupabaseRestError(ExternalStoreError):
    pass


def eq(value: Any) -> str:
    """PostgREST equality filter value."""
    return f"eq.{value}"


def parse_content_range_total(header: str | None) -> int:
    # "0-4/57" or "*/0"
    text = (header or "").strip()
    if "/" not in text:
        raise SupabaseRestError(f"Missing row count in Content-Range header: {header!r}")
    total = text.rsplit("/", 1)[1]
    if total == "*":
        raise SupabaseRestError("Row count was not computed (Content-Range total is '*')")
    try:
        return int(total)
    except ValueError as exc:
        raise SupabaseRestError(f"Invalid Content-Range header: {header!r}") from exc


class SupabaseRestClient:
    def __init__(
        self,
        *,
        supabase_url: str | None = None,
        service_key: str | None = None,
        timeout: int = DEFAULT_TIMEOUT,
        session: requests.Session | None = None,
    ) -> None:
        url = (supabase_url if supabase_url is not None else config.SUPABASE_URL).strip().rstrip("/")
        key = (service_key if service_key is not None else config.SUPABASE_KEY).strip()
        self.base_url = f"{url}/rest/v1" if url else ""
        self.timeout = timeout
        self.session = session or requests.Session()
        self._configured = bool(url and key)
        self.common_headers = {
            "apikey": key,
            "Authorization": f"Bearer {key}",
            "Content-Type": "application/json",
        }

    @property
    def configured(self) -> bool:
        return self._configured

    def _ensure_configured(self) -> None:
        if not self.configured:
            raise SupabaseRestError(
                "Supabase is not configured. Set SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY."
            )

    def _send(
        self,
        method: str,
        path: str,
        *,
        params: Dict[str, Any] | None = None,
        payload: Any = None,
        headers: Dict[str, str] | None = None,
    ) -> requests.Response:
        self._ensure_configured()
        merged_headers = dict(self.common_headers)
        if headers:
            merged_headers.update(headers)
        try:
            response = self.session.request(
                method=method,
                url=f"{self.base_url}{path}",
                params=params,
                json=payload,
                headers=merged_headers,
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            raise SupabaseRestError(f"Supabase {method} {path} failed: {exc}") from exc
        if response.status_code >= 400:
            snippet = response.text[:1200]
            raise SupabaseRestError(f"Supabase {method} {path} failed ({response.status_code}): {snippet}")
        return response

    def _request(
        self,
        method: str,
        path: str,
        *,
        params: Dict[str, Any] | None = None,
        payload: Any = None,
        headers: Dict[str, str] | None = None,
    ) -> Any:
        response = self._send(method, path, params=params, payload=payload, headers=headers)
        content_type = response.headers.get("content-type", "")
        if response.text and "application/json" in content_type:
            return response.json()
        return None

    def fetch_rows(
        self,
        table: str,
        *,
        select: str = "*",
        filters: Dict[str, str] | None = None,
        order: str | None = None,
        page_size: int = 1000,
    ) -> List[Dict[str, Any]]:
        filters = filters or {}
        rows: list[Dict[str, Any]] = []
        offset = 0
        while True:
            params: Dict[str, Any] = {"select": select, "limit": page_size, "offset": offset}
            if order:
                params["order"] = order
            params.update(filters)
            page = self._request("GET", f"/{table}", params=params)
            if not isinstance(page, list):
                raise SupabaseRestError(f"Unexpected response type for table {table}")
            rows.extend(page)
            if len(page) < page_size:
                break
            offset += page_size
        return rows

    def count_rows(self, table: str, *, filters: Dict[str, str] | None = None) -> int:
        params: Dict[str, Any] = {"select": "id"}
        params.update(filters or {})
        response = self._send(
            "HEAD",
            f"/{table}",
            params=params,
            headers={"Prefer": "count=exact"},
        )
        return parse_content_range_total(response.headers.get("content-range"))

    def insert_rows(
        self,
        table: str,
        rows: List[Dict[str, Any]],
        *,
        returning: bool = False,
    ) -> List[Dict[str, Any]]:
        if not rows:
            return []
        result = self._request(
            "POST",
            f"/{table}",
            payload=rows,
            headers={"Prefer": "return=representation" if returning else "return=minimal"},
        )
        if not returning:
            return []
        if not isinstance(result, list):
            raise SupabaseRestError(f"Unexpected insert response for table {table}")
        return result

    def update_rows(
        self,
        table: str,
        values: Dict[str, Any],
        *,
        filters: Dict[str, str],
    ) -> List[Dict[str, Any]]:
        if not filters:
            raise ValueError("update_rows requires at least one filter")
        result = self._request(
            "PATCH",
            f"/{table}",
            params=dict(filters),
            payload=values,
            headers={"Prefer": "return=representation"},
        )
        return result if isinstance(result, list) else []

    def delete_rows(self, table: str, *, filters: Dict[str, str]) -> List[Dict[str, Any]]:
        if not filters:
            raise ValueError("delete_rows requires at least one filter")
        result = self._request(
            "DELETE",
            f"/{table}",
            params=dict(filters),
            headers={"Prefer": "return=representation"},
        )
        return result if isinstance(result, list) else []

    def rpc(self, function: str, params: Dict[str, Any] | None = None) -> Any:
        return self._request("POST", f"/rpc/{function}", payload=params or {})


_client: SupabaseRestClient | None = None


def get_supabase_client() -> SupabaseRestClient:
    global _client
    if _client is None:
        _client = SupabaseRestClient(timeout=config.SQL_TIMEOUT_SEC)
        if not _client.configured:
            logger.warning("Supabase client created without SUPABASE_URL/SUPABASE_SERVICE_ROLE_KEY")
    return _client
