"""httpx-backed data client for the hosted backend's PostgREST endpoint."""

from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Any, Optional

import httpx
from pydantic import BaseModel
from pydantic_core import to_jsonable_python

from portal.client.base import DataClient
from portal.client.errors import RemoteError, no_rows
from portal.client.query import RELATIONS, Query, QueryResult, plain_value, split_filter_key
from portal.client.rows import to_row

logger = logging.getLogger(__name__)

_OBJECT_MEDIA_TYPE = "application/vnd.pgrst.object+json"

_OPERATORS = {
    "eq": "eq",
    "in": "in",
    "from": "gte",
    "to": "lte",
    "ilike": "ilike",
    "isnull": "is",
}


class RestDataClient(DataClient):
    """Translates ``Query`` objects into PostgREST requests."""

    def __init__(
        self,
        base_url: str,
        api_key: str,
        *,
        timeout: float = 15.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._http = httpx.AsyncClient(
            base_url=f"{base_url.rstrip('/')}/rest/v1",
            headers={
                "apikey": api_key,
                "Authorization": f"Bearer {api_key}",
            },
            timeout=timeout,
            transport=transport,
        )

    async def close(self) -> None:
        await self._http.aclose()

    # ── Reads ───────────────────────────────────────────────────────

    async def _select(self, query: Query) -> QueryResult:
        params = build_params(query)
        path = f"/{query.table}"

        if query.count_only:
            response = await self._send(
                "HEAD", path, params=params, headers={"Prefer": "count=exact"},
            )
            return QueryResult(count=parse_content_range(response.headers.get("content-range")))

        headers = {"Accept": _OBJECT_MEDIA_TYPE} if query.single else {}
        response = await self._send("GET", path, params=params, headers=headers)
        payload = response.json()
        items = [payload] if query.single else payload

        columns = (query.columns + query.embed) if query.columns else None
        return QueryResult(rows=[to_row(query.table, item, columns) for item in items])

    # ── Writes ──────────────────────────────────────────────────────

    async def _insert(self, table: str, values: dict[str, Any]) -> BaseModel:
        response = await self._send(
            "POST",
            f"/{table}",
            json=to_jsonable_python(values),
            headers={"Prefer": "return=representation", "Accept": _OBJECT_MEDIA_TYPE},
        )
        return to_row(table, response.json())

    async def _update(
        self, table: str, values: dict[str, Any], match: dict[str, Any],
    ) -> BaseModel:
        params = [(column, f"eq.{format_value(value)}") for column, value in match.items()]
        response = await self._send(
            "PATCH",
            f"/{table}",
            params=params,
            json=to_jsonable_python(values),
            headers={"Prefer": "return=representation"},
        )
        rows = response.json()
        if not rows:
            raise no_rows(table)
        return to_row(table, rows[0])

    # ── Transport ───────────────────────────────────────────────────

    async def _send(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        try:
            response = await self._http.request(method, path, **kwargs)
        except httpx.TimeoutException as exc:
            raise RemoteError(f"Request to {path} timed out", code="timeout") from exc
        except httpx.HTTPError as exc:
            raise RemoteError(f"Request to {path} failed: {exc}", code="network") from exc

        if response.status_code >= 400:
            raise _error_from_response(response)
        return response


# ── Query translation ───────────────────────────────────────────────


def format_value(value: Any) -> str:
    """Render a filter value the way PostgREST expects it in a URL."""
    value = plain_value(value)
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    return str(value)


def _condition(key: str, value: Any) -> tuple[str, str]:
    """``("status__in", [...])`` → ``("status", "in.(pending,in_progress)")``."""
    column, op = split_filter_key(key)
    operator = _OPERATORS[op]
    if op == "in":
        rendered = "(" + ",".join(format_value(v) for v in value) + ")"
    elif op == "ilike":
        rendered = f"*{format_value(value)}*"
    elif op == "isnull":
        return column, "is.null" if value else "not.is.null"
    else:
        rendered = format_value(value)
    return column, f"{operator}.{rendered}"


def build_select(query: Query) -> str:
    parts = list(query.columns) if query.columns else ["*"]
    for name in query.embed:
        target, fk_column = RELATIONS[query.table][name]
        parts.append(f"{name}:{target}!{fk_column}(*)")
    return ",".join(parts)


def build_params(query: Query) -> list[tuple[str, str]]:
    """All URL query parameters for *query*, in a stable order."""
    params: list[tuple[str, str]] = [("select", build_select(query))]

    for key, value in query.active_filters().items():
        params.append(_condition(key, value))

    if query.any_of:
        alternatives = []
        for alternative in query.any_of:
            terms = [
                ".".join(_condition(key, value))
                for key, value in alternative.items()
                if value is not None
            ]
            if len(terms) == 1:
                alternatives.append(terms[0])
            elif terms:
                alternatives.append("and(" + ",".join(terms) + ")")
        if alternatives:
            params.append(("or", "(" + ",".join(alternatives) + ")"))

    if query.order_by:
        descending = query.order_by.startswith("-")
        params.append(("order", f"{query.order_by.lstrip('-')}.{'desc' if descending else 'asc'}"))

    if query.limit and not query.single:
        params.append(("limit", str(query.limit)))

    return params


def parse_content_range(header: Optional[str]) -> int:
    """``"0-24/3573"`` or ``"*/42"`` → total count."""
    if not header or "/" not in header:
        return 0
    total = header.rsplit("/", 1)[1]
    return int(total) if total.isdigit() else 0


def _error_from_response(response: httpx.Response) -> RemoteError:
    try:
        body = response.json()
    except ValueError:
        body = {}
    if not isinstance(body, dict):
        body = {}
    message = body.get("message") or f"HTTP {response.status_code}"
    code = body.get("code") or str(response.status_code)
    logger.error("REST data client error %s (code=%s): %s", response.status_code, code, message)
    return RemoteError(message, code=code)
