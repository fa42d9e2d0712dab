"""Profile lookup routes."""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.engine import Engine

from ..auth import get_current_profile_id
from ..config import get_engine
from ..core.access import shares_workspace
from ..core.database import get_connection
from ..core.identity import get_profile
from ..core.models import Profile

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/profiles", tags=["profiles"])


@router.get("/{profile_id}", response_model=Profile)
async def read_profile(
    profile_id: UUID,
    viewer_id: UUID = Depends(get_current_profile_id),
    engine: Engine = Depends(get_engine),
):
    """
    Get a profile.

    Visible to the profile itself and to anyone sharing a workspace with it.

    **Errors:**
    - `403`: No shared workspace
    - `404`: Profile not found
    """
    try:
        with get_connection(engine) as conn:
            profile = get_profile(conn, profile_id)
            if profile is None:
                raise HTTPException(status_code=404, detail="Profile not found")
            if profile_id != viewer_id and not shares_workspace(conn, viewer_id, profile_id):
                raise HTTPException(status_code=403, detail="You do not share a workspace with this user")
            return Profile.model_validate(profile)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Failed to get profile: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Failed to get profile: {str(e)}")
