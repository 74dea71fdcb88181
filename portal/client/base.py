"""Remote data client interface shared by the SQL and REST implementations."""

from __future__ import annotations

import abc
import logging
from typing import Any, Optional

from pydantic import BaseModel

from portal.client.deadline import Deadline, run_with_deadline
from portal.client.query import TABLES, Query, QueryResult, plain_values

logger = logging.getLogger(__name__)


class DataClient(abc.ABC):
    """Executes reads and writes against the backend tables.

    Every public call accepts an optional ``Deadline``; the budget left on
    it bounds the call, and an exhausted budget raises ``RemoteTimeout``.
    Rows come back as the typed models from ``portal.client.rows``.
    """

    # ── Reads ───────────────────────────────────────────────────────

    async def select(
        self,
        query: Query,
        *,
        deadline: Optional[Deadline] = None,
    ) -> QueryResult:
        logger.debug("select %s filters=%s any_of=%s", query.table, query.filters, query.any_of)
        return await run_with_deadline(self._select(query), deadline)

    async def fetch_one(
        self,
        query: Query,
        *,
        deadline: Optional[Deadline] = None,
    ) -> BaseModel:
        """Exactly one row, or ``RemoteError`` with code ``PGRST116``."""
        result = await self.select(query.model_copy(update={"single": True}), deadline=deadline)
        return result.rows[0]

    async def count(
        self,
        query: Query,
        *,
        deadline: Optional[Deadline] = None,
    ) -> int:
        result = await self.select(query.model_copy(update={"count_only": True}), deadline=deadline)
        return result.count or 0

    # ── Writes ──────────────────────────────────────────────────────

    async def insert(
        self,
        table: str,
        values: dict[str, Any],
        *,
        deadline: Optional[Deadline] = None,
    ) -> BaseModel:
        _check_table(table)
        logger.debug("insert into %s", table)
        return await run_with_deadline(self._insert(table, plain_values(values)), deadline)

    async def update(
        self,
        table: str,
        values: dict[str, Any],
        *,
        match: dict[str, Any],
        deadline: Optional[Deadline] = None,
    ) -> BaseModel:
        """Update the row(s) equal to *match*; returns the first updated row."""
        _check_table(table)
        if not match:
            raise ValueError("update() requires a non-empty match filter")
        logger.debug("update %s match=%s", table, match)
        return await run_with_deadline(
            self._update(table, plain_values(values), plain_values(match)),
            deadline,
        )

    async def close(self) -> None:
        """Release connections held by the client."""

    # ── Backend hooks ───────────────────────────────────────────────

    @abc.abstractmethod
    async def _select(self, query: Query) -> QueryResult: ...

    @abc.abstractmethod
    async def _insert(self, table: str, values: dict[str, Any]) -> BaseModel: ...

    @abc.abstractmethod
    async def _update(
        self, table: str, values: dict[str, Any], match: dict[str, Any],
    ) -> BaseModel: ...


def _check_table(table: str) -> None:
    if table not in TABLES:
        raise ValueError(f"Unknown table '{table}'")
