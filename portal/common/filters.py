"""Translate suffix-operator filter dicts and sort strings into SQLAlchemy clauses."""

from __future__ import annotations

from typing import Any, Optional

from sqlalchemy import Select, and_, or_
from sqlalchemy.orm import InstrumentedAttribute

from portal.client.query import plain_value, split_filter_key


class UnknownColumnError(ValueError):
    """A filter or sort referenced a column the model does not have."""

    def __init__(self, model: Any, name: str) -> None:
        self.column = name
        super().__init__(f"column {model.__tablename__}.{name} does not exist")


# ── Sorting ─────────────────────────────────────────────────────────

def apply_sorting(
    query: Select,
    model: Any,
    sort: Optional[str],
) -> Select:
    """
    Parse a sort string like ``"-created_at"`` and apply ORDER BY.

    * Leading ``-`` → DESC; otherwise ASC.
    """
    if not sort:
        return query

    descending = sort.startswith("-")
    col = _get_column(model, sort.lstrip("-"))
    return query.order_by(col.desc() if descending else col.asc())


# ── Generic filtering ──────────────────────────────────────────────

def build_conditions(model: Any, filters: dict[str, Any]) -> list:
    """
    Turn a filter dict into a list of SQL conditions.

    Key suffixes determine the operator (see ``portal.client.query``).
    ``None`` values are silently skipped.
    """
    conditions: list = []

    for key, value in filters.items():
        if value is None:
            continue

        name, op = split_filter_key(key)
        col = _get_column(model, name)
        value = plain_value(value)

        if op == "ilike":
            conditions.append(col.ilike(f"%{value}%"))
        elif op == "from":
            conditions.append(col >= value)
        elif op == "to":
            conditions.append(col <= value)
        elif op == "in":
            conditions.append(col.in_(value))
        elif op == "isnull":
            conditions.append(col.is_(None) if value else col.isnot(None))
        else:
            conditions.append(col == value)

    return conditions


def apply_filters(
    query: Select,
    model: Any,
    filters: dict[str, Any],
) -> Select:
    """AND every condition from *filters* onto *query*."""
    conditions = build_conditions(model, filters)
    if conditions:
        query = query.where(and_(*conditions))
    return query


def apply_any_of(
    query: Select,
    model: Any,
    alternatives: list[dict[str, Any]],
) -> Select:
    """OR together one condition group per entry of *alternatives*."""
    groups = []
    for alternative in alternatives:
        conditions = build_conditions(model, alternative)
        if conditions:
            groups.append(and_(*conditions))
    if groups:
        query = query.where(or_(*groups))
    return query


# ── Internal helper ─────────────────────────────────────────────────

def _get_column(model: Any, name: str) -> InstrumentedAttribute:
    """Retrieve a mapped column attribute by name."""
    col = getattr(model, name, None)
    if col is None or name not in model.__table__.columns:
        raise UnknownColumnError(model, name)
    return col
