"""Auth service — token verification and profile lookup on sign-in."""

from __future__ import annotations

import logging
import uuid
from datetime import date
from typing import Any, NamedTuple, Optional

from jose import JWTError, jwt

from portal.client.base import DataClient
from portal.client.deadline import Deadline
from portal.client.errors import RemoteError
from portal.client.query import PROFILES, Query
from portal.client.rows import Profile
from portal.common.constants import (
    DEFAULT_DEPARTMENT,
    DEFAULT_JOB_TITLE,
    DEFAULT_LOCATION,
    DEFAULT_PROFILE_ROLE,
)
from portal.config import settings

logger = logging.getLogger(__name__)


class Identity(NamedTuple):
    """The authenticated user as asserted by the hosted auth service."""

    id: uuid.UUID
    email: str


class ProfileUnavailable(Exception):
    """No profile exists and a default one could not be created."""


# ── Token verification ──────────────────────────────────────────────

def decode_access_token(token: str) -> Identity:
    """Verify a hosted-auth access token and return the identity it names.

    Raises ``JWTError`` for any invalid, expired or malformed token.
    """
    payload: dict[str, Any] = jwt.decode(
        token,
        settings.JWT_SECRET,
        algorithms=[settings.JWT_ALGORITHM],
        audience=settings.JWT_AUDIENCE,
    )
    try:
        identity_id = uuid.UUID(payload["sub"])
    except (KeyError, TypeError, ValueError) as exc:
        raise JWTError("Token subject is not a valid identity id") from exc
    return Identity(id=identity_id, email=payload.get("email") or "")


# ── Profile lookup ──────────────────────────────────────────────────

def default_profile_values(identity: Identity, today: Optional[date] = None) -> dict[str, Any]:
    """Row inserted the first time an identity signs in."""
    local_part = identity.email.split("@", 1)[0] if identity.email else ""
    return {
        "id": identity.id,
        "email": identity.email,
        "full_name": local_part or "User",
        "role": DEFAULT_PROFILE_ROLE,
        "department": DEFAULT_DEPARTMENT,
        "job_title": DEFAULT_JOB_TITLE,
        "location": DEFAULT_LOCATION,
        "joining_date": today or date.today(),
        "is_active": True,
    }


async def fetch_profile(
    client: DataClient,
    identity: Identity,
    *,
    deadline: Optional[Deadline] = None,
) -> Profile:
    """Return the identity's profile, creating a default one on first sign-in.

    A "no row" answer triggers one insert of the default profile followed by
    a single re-fetch. Every call shares *deadline*.
    """
    query = Query(table=PROFILES, filters={"id": identity.id})
    try:
        return await client.fetch_one(query, deadline=deadline)
    except RemoteError as exc:
        if not exc.is_not_found:
            raise

    logger.info("No profile for identity %s; creating default profile", identity.id)
    try:
        await client.insert(PROFILES, default_profile_values(identity), deadline=deadline)
    except RemoteError as exc:
        logger.error("Could not create profile for %s: %s", identity.id, exc.message)
        raise ProfileUnavailable(str(identity.id)) from exc

    return await client.fetch_one(query, deadline=deadline)
