from __future__ import annotations

from typing import Any, Sequence

import httpx
from loguru import logger

from daytracker.db.store import Filter, Order, Row, StoreError


def _literal(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if hasattr(value, "isoformat"):
        return value.isoformat()
    return str(value)


def _quoted(value: Any) -> str:
    text = _literal(value).replace("\\", "\\\\").replace('"', '\\"')
    return f'"{text}"'


def build_params(filters: Sequence[Filter] = (), order: Sequence[Order] = ()) -> list[tuple[str, str]]:
    """PostgREST query string: ``col=op.value`` pairs (a column may repeat) plus ``order``."""
    params: list[tuple[str, str]] = []
    for f in filters:
        if f.op in {"eq", "gte", "lte"}:
            params.append((f.column, f"{f.op}.{_literal(f.value)}"))
        elif f.op == "in":
            params.append((f.column, f"in.({','.join(_quoted(v) for v in f.value)})"))
        elif f.op == "is":
            params.append((f.column, "is.null"))
        else:
            raise StoreError(f"Unsupported filter operator: {f.op}")
    if order:
        params.append(("order", ",".join(f"{column}.{'asc' if asc else 'desc'}" for column, asc in order)))
    return params


class RestStore:
    """
    Task store on the hosted PostgREST endpoint.

    Every call carries the user's token, so row-level security decides what
    the user can read and write.
    """

    def __init__(
        self,
        *,
        base_url: str,
        anon_key: str,
        access_token: str,
        timeout: float = 10.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.anon_key = anon_key
        self.access_token = access_token
        self.timeout = timeout
        self._transport = transport

    def _headers(self, prefer: str | None = None) -> dict[str, str]:
        headers = {
            "apikey": self.anon_key,
            "Authorization": f"Bearer {self.access_token}",
            "Accept": "application/json",
            "Content-Type": "application/json",
        }
        if prefer:
            headers["Prefer"] = prefer
        return headers

    def _request(
        self,
        method: str,
        path: str,
        *,
        params: list[tuple[str, str]] | None = None,
        json: Any = None,
        prefer: str | None = None,
    ) -> Any:
        url = f"{self.base_url}{path}"
        try:
            with httpx.Client(timeout=self.timeout, transport=self._transport) as client:
                resp = client.request(method, url, headers=self._headers(prefer), params=params, json=json)
                resp.raise_for_status()
        except httpx.HTTPStatusError as exc:
            logger.error(
                "store http error method={} path={} status={} body={}",
                method,
                path,
                exc.response.status_code,
                exc.response.text[:200],
            )
            raise StoreError(f"{method} {path} failed with {exc.response.status_code}") from exc
        except httpx.HTTPError as exc:
            logger.error("store transport error method={} path={} err={}", method, path, exc)
            raise StoreError(f"{method} {path} failed") from exc
        if not resp.content:
            return None
        return resp.json()

    def select(self, table: str, filters: Sequence[Filter] = (), order: Sequence[Order] = ()) -> list[Row]:
        params = [("select", "*")] + build_params(filters, order)
        data = self._request("GET", f"/rest/v1/{table}", params=params)
        return list(data or [])

    def insert(self, table: str, rows: list[Row], *, on_conflict: Sequence[str] | None = None) -> list[Row]:
        """One request for all rows, so PostgREST writes them in a single statement."""
        if not rows:
            return []
        prefer = "return=representation"
        params = None
        if on_conflict:
            prefer += ",resolution=ignore-duplicates"
            params = [("on_conflict", ",".join(on_conflict))]
        data = self._request("POST", f"/rest/v1/{table}", params=params, json=rows, prefer=prefer)
        return list(data or [])

    def update(self, table: str, values: Row, filters: Sequence[Filter]) -> list[Row]:
        data = self._request(
            "PATCH",
            f"/rest/v1/{table}",
            params=build_params(filters),
            json=values,
            prefer="return=representation",
        )
        return list(data or [])

    def delete(self, table: str, filters: Sequence[Filter]) -> None:
        if not filters:
            raise StoreError("delete without filters")
        self._request("DELETE", f"/rest/v1/{table}", params=build_params(filters))

    def current_user_id(self) -> str:
        data = self._request("GET", "/auth/v1/user")
        user_id = (data or {}).get("id")
        if not user_id:
            raise StoreError("auth user has no id")
        return str(user_id)
