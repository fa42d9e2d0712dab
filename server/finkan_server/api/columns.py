"""Board column routes."""

import logging
from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException

from ..auth import get_current_profile_id
from ..core.board import BoardService
from ..core.exceptions import AccessDenied, NotFound, ValidationError
from ..core.models import BoardColumn, ColumnCreate, ColumnUpdate
from .projects import get_board_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["columns"])


@router.get("/projects/{project_id}/columns", response_model=List[BoardColumn])
async def list_columns(
    project_id: UUID,
    profile_id: UUID = Depends(get_current_profile_id),
    service: BoardService = Depends(get_board_service),
):
    """List the project's columns ordered by position."""
    try:
        return service.list_columns(project_id, profile_id)
    except NotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    except AccessDenied as e:
        raise HTTPException(status_code=403, detail=str(e))
    except Exception as e:
        logger.error(f"Failed to list columns: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Failed to list columns: {str(e)}")


@router.post("/projects/{project_id}/columns", response_model=BoardColumn, status_code=201)
async def create_column(
    project_id: UUID,
    request: ColumnCreate,
    profile_id: UUID = Depends(get_current_profile_id),
    service: BoardService = Depends(get_board_service),
):
    """Add a column at the end of the board."""
    try:
        return service.create_column(project_id, profile_id, request)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except NotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    except AccessDenied as e:
        raise HTTPException(status_code=403, detail=str(e))
    except Exception as e:
        logger.error(f"Failed to create column: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Failed to create column: {str(e)}")


@router.patch("/columns/{column_id}", response_model=BoardColumn)
async def update_column(
    column_id: UUID,
    request: ColumnUpdate,
    profile_id: UUID = Depends(get_current_profile_id),
    service: BoardService = Depends(get_board_service),
):
    """
    Rename a column and/or move it.

    **Request Body:**
    - `name` (optional): New name
    - `position` (optional): New 0-based index; other columns shift to make room
    """
    try:
        return service.update_column(column_id, profile_id, request)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except NotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    except AccessDenied as e:
        raise HTTPException(status_code=403, detail=str(e))
    except Exception as e:
        logger.error(f"Failed to update column: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Failed to update column: {str(e)}")


@router.delete("/columns/{column_id}", status_code=204)
async def delete_column(
    column_id: UUID,
    profile_id: UUID = Depends(get_current_profile_id),
    service: BoardService = Depends(get_board_service),
):
    """
    Delete a column and all of its tasks.

    The remaining columns are renumbered to close the gap.

    **Response:**
    - `204 No Content`: Column deleted
    """
    try:
        service.delete_column(column_id, profile_id)
        return None
    except NotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    except AccessDenied as e:
        raise HTTPException(status_code=403, detail=str(e))
    except Exception as e:
        logger.error(f"Failed to delete column: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Failed to delete column: {str(e)}")
