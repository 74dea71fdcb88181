"""Single-row lookups that map the backend's "no rows" error to a 404."""

from __future__ import annotations

import uuid
from typing import Optional, Sequence

from pydantic import BaseModel

from portal.client.base import DataClient
from portal.client.errors import RemoteError
from portal.client.query import Query
from portal.common.exceptions import NotFoundException


async def get_or_404(
    client: DataClient,
    table: str,
    row_id: uuid.UUID,
    entity_type: str,
    *,
    embed: Optional[Sequence[str]] = None,
) -> BaseModel:
    """Fetch the row with *row_id* or raise ``NotFoundException``."""
    try:
        return await client.fetch_one(Query(
            table=table,
            filters={"id": row_id},
            embed=list(embed or []),
        ))
    except RemoteError as exc:
        if exc.is_not_found:
            raise NotFoundException(entity_type, str(row_id)) from exc
        raise
