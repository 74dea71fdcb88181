"""Auth dependencies — JWT validation, profile resolution, RBAC enforcement."""

from __future__ import annotations

from typing import Callable

from fastapi import Depends, Request
from fastapi.exceptions import HTTPException
from jose import ExpiredSignatureError, JWTError

from portal.auth.service import ProfileUnavailable, decode_access_token, fetch_profile
from portal.client.base import DataClient
from portal.client.deadline import Deadline
from portal.client.rows import Profile
from portal.common.constants import UserRole
from portal.common.exceptions import ForbiddenException
from portal.config import settings
from portal.dependencies import get_data_client


def _extract_bearer(request: Request) -> str:
    """Extract Bearer token from Authorization header."""
    auth_header = request.headers.get("Authorization")
    if not auth_header or not auth_header.startswith("Bearer "):
        raise HTTPException(status_code=401, detail="Missing or invalid Authorization header.")
    return auth_header[7:]


# ── Core dependency ─────────────────────────────────────────────────

async def get_current_user(
    request: Request,
    client: DataClient = Depends(get_data_client),
) -> Profile:
    """Validate the JWT and return the caller's profile (created on first sign-in)."""
    token = _extract_bearer(request)

    try:
        identity = decode_access_token(token)
    except ExpiredSignatureError:
        raise HTTPException(status_code=401, detail="Token has expired.")
    except JWTError:
        raise HTTPException(status_code=401, detail="Invalid token.")

    deadline = Deadline(settings.PROFILE_FETCH_TIMEOUT_SECONDS)
    try:
        profile = await fetch_profile(client, identity, deadline=deadline)
    except ProfileUnavailable:
        raise HTTPException(status_code=401, detail="Profile unavailable.")

    if not profile.is_active:
        raise HTTPException(status_code=401, detail="User account is inactive.")

    request.state.user_role = profile.role
    return profile


# ── Role-based dependency ───────────────────────────────────────────

def require_role(*allowed_roles: UserRole) -> Callable:
    """Return a FastAPI dependency that enforces role membership."""

    async def _check(profile: Profile = Depends(get_current_user)) -> Profile:
        if profile.role not in allowed_roles:
            raise ForbiddenException(
                detail=f"Role '{profile.role.value}' is not permitted. Required: {[r.value for r in allowed_roles]}.",
            )
        return profile

    return _check
