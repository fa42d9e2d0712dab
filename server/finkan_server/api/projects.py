"""Project routes. Projects are archived, never hard-deleted."""

import logging
from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.engine import Engine

from ..auth import get_current_profile_id
from ..config import get_engine
from ..core.board import BoardService
from ..core.exceptions import AccessDenied, NotFound, ValidationError
from ..core.models import Project, ProjectCreate, ProjectUpdate

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["projects"])


def get_board_service(engine: Engine = Depends(get_engine)) -> BoardService:
    """Get a BoardService instance bound to the app's engine."""
    return BoardService(engine)


@router.get("/workspaces/{workspace_id}/projects", response_model=List[Project])
async def list_projects(
    workspace_id: UUID,
    include_archived: bool = Query(False, description="Include archived projects"),
    profile_id: UUID = Depends(get_current_profile_id),
    service: BoardService = Depends(get_board_service),
):
    """List the workspace's projects, newest first."""
    try:
        return service.list_projects(workspace_id, profile_id, include_archived=include_archived)
    except NotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    except AccessDenied as e:
        raise HTTPException(status_code=403, detail=str(e))
    except Exception as e:
        logger.error(f"Failed to list projects: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Failed to list projects: {str(e)}")


@router.post("/workspaces/{workspace_id}/projects", response_model=Project, status_code=201)
async def create_project(
    workspace_id: UUID,
    request: ProjectCreate,
    profile_id: UUID = Depends(get_current_profile_id),
    service: BoardService = Depends(get_board_service),
):
    """
    Create a project in the workspace.

    **Request Body:**
    - `name`: Project name
    - `description` (optional)
    - `default_columns` (optional): create "To Do", "In Progress" and "Done" (default true)
    """
    try:
        return service.create_project(workspace_id, profile_id, request)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except NotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    except AccessDenied as e:
        raise HTTPException(status_code=403, detail=str(e))
    except Exception as e:
        logger.error(f"Failed to create project: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Failed to create project: {str(e)}")


@router.get("/projects/{project_id}", response_model=Project)
async def get_project(
    project_id: UUID,
    profile_id: UUID = Depends(get_current_profile_id),
    service: BoardService = Depends(get_board_service),
):
    try:
        return service.get_project(project_id, profile_id)
    except NotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    except AccessDenied as e:
        raise HTTPException(status_code=403, detail=str(e))
    except Exception as e:
        logger.error(f"Failed to get project: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Failed to get project: {str(e)}")


@router.patch("/projects/{project_id}", response_model=Project)
async def update_project(
    project_id: UUID,
    request: ProjectUpdate,
    profile_id: UUID = Depends(get_current_profile_id),
    service: BoardService = Depends(get_board_service),
):
    try:
        return service.update_project(project_id, profile_id, request)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except NotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    except AccessDenied as e:
        raise HTTPException(status_code=403, detail=str(e))
    except Exception as e:
        logger.error(f"Failed to update project: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Failed to update project: {str(e)}")


@router.post("/projects/{project_id}/archive", response_model=Project)
async def archive_project(
    project_id: UUID,
    profile_id: UUID = Depends(get_current_profile_id),
    service: BoardService = Depends(get_board_service),
):
    """Archive a project. It disappears from the default project list but keeps its board."""
    try:
        return service.archive_project(project_id, profile_id)
    except NotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    except AccessDenied as e:
        raise HTTPException(status_code=403, detail=str(e))
    except Exception as e:
        logger.error(f"Failed to archive project: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Failed to archive project: {str(e)}")
