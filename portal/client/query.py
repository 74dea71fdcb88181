"""Backend-neutral query description.

A ``Query`` names a table plus optional filters, an OR-group, column
selection, embedded relations, ordering and a limit. Both data clients
translate the same object: ``SqlDataClient`` into a SQLAlchemy ``Select``,
``RestDataClient`` into PostgREST query parameters.

Filter keys use operator suffixes:

============  ==================
Suffix        Operator
============  ==================
(none)        ``==``
``__in``      ``IN (…)``
``__from``    ``>=``
``__to``      ``<=``
``__ilike``   case-insensitive substring match
``__isnull``  ``IS NULL`` (value True) / ``IS NOT NULL`` (value False)
============  ==================
"""

from __future__ import annotations

import enum
from typing import Any, Optional

from pydantic import BaseModel, Field, model_validator

PROFILES = "profiles"
LEAVE_REQUESTS = "leave_requests"
TASKS = "tasks"
ANNOUNCEMENTS = "announcements"
PROJECT_UPDATES = "project_updates"

TABLES: frozenset[str] = frozenset(
    {PROFILES, LEAVE_REQUESTS, TASKS, ANNOUNCEMENTS, PROJECT_UPDATES}
)

# relation name → (target table, foreign-key column on the source table)
RELATIONS: dict[str, dict[str, tuple[str, str]]] = {
    PROFILES: {},
    LEAVE_REQUESTS: {
        "employee": (PROFILES, "employee_id"),
        "manager": (PROFILES, "manager_id"),
    },
    TASKS: {
        "assignee": (PROFILES, "assigned_to"),
        "assigner": (PROFILES, "assigned_by"),
    },
    ANNOUNCEMENTS: {
        "author": (PROFILES, "author_id"),
    },
    PROJECT_UPDATES: {
        "employee": (PROFILES, "employee_id"),
    },
}

_OPERATORS = ("in", "from", "to", "ilike", "isnull")


def plain_value(value: Any) -> Any:
    """Unwrap enums (also inside lists) to the raw values the backend stores."""
    if isinstance(value, enum.Enum):
        return value.value
    if isinstance(value, (list, tuple, set, frozenset)):
        return [plain_value(v) for v in value]
    return value


def plain_values(values: dict[str, Any]) -> dict[str, Any]:
    return {key: plain_value(value) for key, value in values.items()}


def split_filter_key(key: str) -> tuple[str, str]:
    """Split ``"status__in"`` into ``("status", "in")``; plain keys map to ``"eq"``."""
    column, sep, op = key.rpartition("__")
    if sep and op in _OPERATORS:
        return column, op
    return key, "eq"


class Query(BaseModel):
    """A read against one backend table."""

    table: str
    filters: dict[str, Any] = Field(default_factory=dict)
    any_of: list[dict[str, Any]] = Field(
        default_factory=list,
        description="Single-condition filter dicts OR-ed together",
    )
    columns: Optional[list[str]] = None
    embed: list[str] = Field(default_factory=list)
    count_only: bool = False
    order_by: Optional[str] = Field(
        None, description='Sort field; prefix "-" for DESC (e.g. "-created_at")',
    )
    limit: Optional[int] = Field(None, ge=1)
    single: bool = False

    @model_validator(mode="after")
    def _check_table_and_relations(self) -> "Query":
        if self.table not in TABLES:
            raise ValueError(f"Unknown table '{self.table}'")
        unknown = [name for name in self.embed if name not in RELATIONS[self.table]]
        if unknown:
            raise ValueError(f"Table '{self.table}' has no relation(s) {unknown}")
        return self

    def active_filters(self) -> dict[str, Any]:
        """Filters with ``None`` values dropped."""
        return {k: v for k, v in self.filters.items() if v is not None}


class QueryResult(BaseModel):
    """Rows (already typed) and/or an exact count."""

    rows: list[Any] = Field(default_factory=list)
    count: Optional[int] = None

    @property
    def first(self) -> Any:
        return self.rows[0] if self.rows else None
