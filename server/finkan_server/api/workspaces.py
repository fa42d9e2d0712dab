"""Workspace and membership routes."""

import logging
from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.engine import Engine

from ..auth import AuthContext, get_auth_context, get_current_profile_id
from ..config import get_engine
from ..core.exceptions import AccessDenied, AuthenticationError, NotFound, ValidationError
from ..core.models import MemberAdd, Workspace, WorkspaceCreate, WorkspaceMember, WorkspaceUpdate
from ..core.workspaces import WorkspaceService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/workspaces", tags=["workspaces"])


def get_workspace_service(engine: Engine = Depends(get_engine)) -> WorkspaceService:
    """
    Get a WorkspaceService instance.

    Args:
        engine: Database engine of the running app

    Returns:
        WorkspaceService instance
    """
    return WorkspaceService(engine)


@router.get("", response_model=List[Workspace])
async def list_workspaces(
    profile_id: UUID = Depends(get_current_profile_id),
    service: WorkspaceService = Depends(get_workspace_service),
):
    """List the workspaces the caller belongs to, with the caller's role."""
    try:
        return service.list_for_profile(profile_id)
    except Exception as e:
        logger.error(f"Failed to list workspaces: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Failed to list workspaces: {str(e)}")


@router.post("", response_model=Workspace, status_code=201)
async def create_workspace(
    request: WorkspaceCreate,
    auth_ctx: AuthContext = Depends(get_auth_context),
    service: WorkspaceService = Depends(get_workspace_service),
):
    """
    Create a workspace owned by the caller.

    **Request Body:**
    - `name`: Workspace name
    - `icon` (optional): Emoji icon, defaults to 💼
    - `description` (optional)

    The workspace and the owner membership are created together or not at all.

    **Errors:**
    - `400`: Blank name
    - `401`: Session email belongs to a different profile
    """
    try:
        return service.create(auth_ctx.profile_id, auth_ctx.email, request)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except AuthenticationError as e:
        raise HTTPException(status_code=401, detail=str(e))
    except Exception as e:
        logger.error(f"Failed to create workspace: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Failed to create workspace: {str(e)}")


@router.get("/{workspace_id}", response_model=Workspace)
async def get_workspace(
    workspace_id: UUID,
    profile_id: UUID = Depends(get_current_profile_id),
    service: WorkspaceService = Depends(get_workspace_service),
):
    try:
        return service.get(workspace_id, profile_id)
    except NotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    except AccessDenied as e:
        raise HTTPException(status_code=403, detail=str(e))
    except Exception as e:
        logger.error(f"Failed to get workspace: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Failed to get workspace: {str(e)}")


@router.patch("/{workspace_id}", response_model=Workspace)
async def update_workspace(
    workspace_id: UUID,
    request: WorkspaceUpdate,
    profile_id: UUID = Depends(get_current_profile_id),
    service: WorkspaceService = Depends(get_workspace_service),
):
    """
    Update workspace name, icon or description.

    Only fields present in the request body are changed. Requires owner or admin role.
    """
    try:
        return service.update(workspace_id, profile_id, request)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except NotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    except AccessDenied as e:
        raise HTTPException(status_code=403, detail=str(e))
    except Exception as e:
        logger.error(f"Failed to update workspace: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Failed to update workspace: {str(e)}")


@router.delete("/{workspace_id}", status_code=204)
async def delete_workspace(
    workspace_id: UUID,
    profile_id: UUID = Depends(get_current_profile_id),
    service: WorkspaceService = Depends(get_workspace_service),
):
    """
    Delete a workspace and everything in it.

    Members, projects, columns and tasks are removed with it. Owner only.

    **Response:**
    - `204 No Content`: Workspace deleted

    **Errors:**
    - `403`: Caller is not the owner
    - `404`: Workspace not found
    """
    try:
        service.delete(workspace_id, profile_id)
        return None
    except NotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    except AccessDenied as e:
        raise HTTPException(status_code=403, detail=str(e))
    except Exception as e:
        logger.error(f"Failed to delete workspace: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Failed to delete workspace: {str(e)}")


@router.get("/{workspace_id}/members", response_model=List[WorkspaceMember])
async def list_members(
    workspace_id: UUID,
    profile_id: UUID = Depends(get_current_profile_id),
    service: WorkspaceService = Depends(get_workspace_service),
):
    try:
        return service.list_members(workspace_id, profile_id)
    except NotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    except AccessDenied as e:
        raise HTTPException(status_code=403, detail=str(e))
    except Exception as e:
        logger.error(f"Failed to list members: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Failed to list members: {str(e)}")


@router.post("/{workspace_id}/members", response_model=WorkspaceMember, status_code=201)
async def add_member(
    workspace_id: UUID,
    request: MemberAdd,
    profile_id: UUID = Depends(get_current_profile_id),
    service: WorkspaceService = Depends(get_workspace_service),
):
    """
    Add an existing user to the workspace by email.

    **Request Body:**
    - `email`: Email of a user who has signed in at least once
    - `role` (optional): `member` (default) or `admin`

    **Errors:**
    - `400`: Already a member
    - `403`: Caller is not an owner or admin
    - `404`: Workspace or user not found
    """
    try:
        return service.add_member(workspace_id, profile_id, request)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except NotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    except AccessDenied as e:
        raise HTTPException(status_code=403, detail=str(e))
    except Exception as e:
        logger.error(f"Failed to add member: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Failed to add member: {str(e)}")


@router.delete("/{workspace_id}/members/{member_id}", status_code=204)
async def remove_member(
    workspace_id: UUID,
    member_id: UUID,
    profile_id: UUID = Depends(get_current_profile_id),
    service: WorkspaceService = Depends(get_workspace_service),
):
    """Remove a member. Owners and admins may remove others; anyone may leave."""
    try:
        service.remove_member(workspace_id, profile_id, member_id)
        return None
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except NotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    except AccessDenied as e:
        raise HTTPException(status_code=403, detail=str(e))
    except Exception as e:
        logger.error(f"Failed to remove member: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Failed to remove member: {str(e)}")
