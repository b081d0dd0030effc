"""Record store backend for a hosted PostgREST-compatible database.

The hosted store exposes each table at ``{STORE_URL}/rest/v1/{table}`` and
accepts filters, ordering and limits as query parameters
(``statut=eq.Actif``, ``order=date_depart.desc``, ``limit=5``). Writes ask
for the written row back with ``Prefer: return=representation``.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping

import httpx

from .store import StoreError

logger = logging.getLogger("landedcost.store.rest")


def _eq(value: Any) -> str:
    if isinstance(value, bool):
        return f"eq.{str(value).lower()}"
    return f"eq.{value}"


def build_client(base_url: str, api_key: str, timeout: float = 10.0) -> httpx.Client:
    headers = {"Accept": "application/json"}
    if api_key:
        headers["apikey"] = api_key
        headers["Authorization"] = f"Bearer {api_key}"
    return httpx.Client(base_url=f"{base_url}/rest/v1", headers=headers, timeout=httpx.Timeout(timeout))


class RestRecordStore:
    def __init__(self, client: httpx.Client) -> None:
        self.client = client

    def _request(self, method: str, table: str, operation: str, **kwargs: Any) -> httpx.Response:
        try:
            response = self.client.request(method, f"/{table}", **kwargs)
        except httpx.HTTPError as exc:
            raise StoreError(f"{operation} on {table} failed: {exc}", table=table, operation=operation) from exc
        if response.is_error:
            detail = response.text[:200]
            logger.warning(
                "store.rest_error",
                extra={"extra_data": {"table": table, "operation": operation, "status": response.status_code}},
            )
            raise StoreError(
                f"{operation} on {table} returned {response.status_code}: {detail}",
                table=table,
                operation=operation,
            )
        return response

    def select(
        self,
        table: str,
        *,
        order_by: str | None = None,
        descending: bool = False,
        filters: Mapping[str, Any] | None = None,
        limit: int | None = None,
    ) -> list[dict[str, Any]]:
        params: dict[str, str] = {"select": "*"}
        for name, value in (filters or {}).items():
            params[name] = _eq(value)
        if order_by:
            params["order"] = f"{order_by}.{'desc' if descending else 'asc'}"
        if limit is not None:
            params["limit"] = str(limit)
        response = self._request("GET", table, "select", params=params)
        try:
            rows = response.json()
        except ValueError as exc:
            raise StoreError(f"select on {table} returned invalid JSON", table=table, operation="select") from exc
        if not isinstance(rows, list):
            raise StoreError(f"select on {table} returned a non-list body", table=table, operation="select")
        return rows

    def insert(self, table: str, payload: Mapping[str, Any]) -> dict[str, Any]:
        response = self._request(
            "POST",
            table,
            "insert",
            json=dict(payload),
            headers={"Prefer": "return=representation"},
        )
        body = response.json() if response.content else []
        if isinstance(body, list) and body:
            return body[0]
        if isinstance(body, dict):
            return body
        return dict(payload)

    def update(self, table: str, key_field: str, key: Any, payload: Mapping[str, Any]) -> None:
        self._request("PATCH", table, "update", params={key_field: _eq(key)}, json=dict(payload))

    def delete(self, table: str, key_field: str, key: Any) -> None:
        self._request("DELETE", table, "delete", params={key_field: _eq(key)})
