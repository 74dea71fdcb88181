"""Auth router — the signed-in user's own profile."""

from fastapi import APIRouter, Depends

from portal.auth.dependencies import get_current_user
from portal.client.rows import Profile

router = APIRouter()


# ── GET /me ─────────────────────────────────────────────────────────

@router.get("/me", response_model=Profile)
async def me(profile: Profile = Depends(get_current_user)):
    """Current profile. The first call for a new identity creates it with defaults."""
    return profile
