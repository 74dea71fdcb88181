"""SQLAlchemy-backed data client.

Each call opens its own ``AsyncSession`` from the factory, so coroutines
gathered by the dashboard service never share a session.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

import sqlalchemy as sa
from pydantic import BaseModel
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker
from sqlalchemy.orm import selectinload

from portal.client.base import DataClient
from portal.client.errors import RemoteError, no_rows
from portal.client.models import RECORDS
from portal.client.query import Query, QueryResult
from portal.client.rows import to_row
from portal.common.filters import (
    UnknownColumnError,
    apply_any_of,
    apply_filters,
    apply_sorting,
    build_conditions,
)

logger = logging.getLogger(__name__)

# PostgreSQL error code for "undefined column"
_UNDEFINED_COLUMN = "42703"


class SqlDataClient(DataClient):
    """Runs ``Query`` objects as SQL through an async session factory."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        *,
        engine: Optional[AsyncEngine] = None,
    ) -> None:
        self._session_factory = session_factory
        self._engine = engine

    async def close(self) -> None:
        if self._engine is not None:
            await self._engine.dispose()

    # ── Reads ───────────────────────────────────────────────────────

    async def _select(self, query: Query) -> QueryResult:
        model = RECORDS[query.table]
        try:
            if query.count_only:
                return QueryResult(count=await self._count(model, query))

            stmt = self._where(select(model), model, query)
            stmt = apply_sorting(stmt, model, query.order_by)
            for name in query.embed:
                stmt = stmt.options(selectinload(getattr(model, name)))
            if query.single:
                stmt = stmt.limit(2)
            elif query.limit:
                stmt = stmt.limit(query.limit)

            async with self._session_factory() as session:
                records = (await session.execute(stmt)).scalars().all()
                data = [_as_dict(record, query.embed) for record in records]
        except UnknownColumnError as exc:
            raise RemoteError(str(exc), code=_UNDEFINED_COLUMN) from exc
        except SQLAlchemyError as exc:
            raise _remote_error(exc) from exc

        if query.single and len(data) != 1:
            raise no_rows(query.table)

        columns = (query.columns + query.embed) if query.columns else None
        rows = [to_row(query.table, item, columns) for item in data]
        return QueryResult(rows=rows)

    async def _count(self, model: Any, query: Query) -> int:
        stmt = self._where(select(func.count()).select_from(model), model, query)
        async with self._session_factory() as session:
            return (await session.execute(stmt)).scalar_one()

    @staticmethod
    def _where(stmt: sa.Select, model: Any, query: Query) -> sa.Select:
        stmt = apply_filters(stmt, model, query.active_filters())
        return apply_any_of(stmt, model, query.any_of)

    # ── Writes ──────────────────────────────────────────────────────

    async def _insert(self, table: str, values: dict[str, Any]) -> BaseModel:
        model = RECORDS[table]
        try:
            async with self._session_factory() as session:
                async with session.begin():
                    record = model(**values)
                    session.add(record)
                data = _as_dict(record, [])
        except SQLAlchemyError as exc:
            raise _remote_error(exc) from exc
        except TypeError as exc:
            # Unknown keyword for the mapped class
            raise RemoteError(str(exc), code=_UNDEFINED_COLUMN) from exc
        return to_row(table, data)

    async def _update(
        self, table: str, values: dict[str, Any], match: dict[str, Any],
    ) -> BaseModel:
        model = RECORDS[table]
        try:
            stmt = select(model).where(*build_conditions(model, match))
            async with self._session_factory() as session:
                async with session.begin():
                    records = (await session.execute(stmt)).scalars().all()
                    if not records:
                        raise no_rows(table)
                    for record in records:
                        for key, value in values.items():
                            if key not in model.__table__.columns:
                                raise UnknownColumnError(model, key)
                            setattr(record, key, value)
                data = _as_dict(records[0], [])
        except UnknownColumnError as exc:
            raise RemoteError(str(exc), code=_UNDEFINED_COLUMN) from exc
        except SQLAlchemyError as exc:
            raise _remote_error(exc) from exc
        return to_row(table, data)


# ── Helpers ─────────────────────────────────────────────────────────


def _as_dict(record: Any, embed: list[str]) -> dict[str, Any]:
    """Column values of *record* plus the requested embedded relations."""
    mapper = sa.inspect(record).mapper
    data = {attr.key: getattr(record, attr.key) for attr in mapper.column_attrs}
    for name in embed:
        related = getattr(record, name)
        data[name] = _as_dict(related, []) if related is not None else None
    return data


def _remote_error(exc: SQLAlchemyError) -> RemoteError:
    code = None
    orig = getattr(exc, "orig", None)
    if orig is not None:
        code = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
    if code is None and isinstance(exc, IntegrityError):
        code = "23000"
    logger.error("SQL data client error (code=%s): %s", code, exc)
    return RemoteError(str(exc.orig if orig is not None else exc), code=code)
