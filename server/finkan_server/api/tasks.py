"""Task routes."""

import logging
from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException

from ..auth import get_current_profile_id
from ..core.board import BoardService
from ..core.exceptions import AccessDenied, NotFound, ValidationError
from ..core.models import Task, TaskCreate, TaskMove, TaskUpdate
from .projects import get_board_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["tasks"])


@router.get("/projects/{project_id}/tasks", response_model=List[Task])
async def list_project_tasks(
    project_id: UUID,
    profile_id: UUID = Depends(get_current_profile_id),
    service: BoardService = Depends(get_board_service),
):
    """List every task on the board, ordered by column position then task position."""
    try:
        return service.list_project_tasks(project_id, profile_id)
    except NotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    except AccessDenied as e:
        raise HTTPException(status_code=403, detail=str(e))
    except Exception as e:
        logger.error(f"Failed to list tasks: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Failed to list tasks: {str(e)}")


@router.get("/columns/{column_id}/tasks", response_model=List[Task])
async def list_column_tasks(
    column_id: UUID,
    profile_id: UUID = Depends(get_current_profile_id),
    service: BoardService = Depends(get_board_service),
):
    try:
        return service.list_tasks(column_id, profile_id)
    except NotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    except AccessDenied as e:
        raise HTTPException(status_code=403, detail=str(e))
    except Exception as e:
        logger.error(f"Failed to list tasks: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Failed to list tasks: {str(e)}")


@router.post("/tasks", response_model=Task, status_code=201)
async def create_task(
    request: TaskCreate,
    profile_id: UUID = Depends(get_current_profile_id),
    service: BoardService = Depends(get_board_service),
):
    """
    Create a task at the end of a column.

    **Request Body:**
    - `column_id`: Target column
    - `title`: Task title
    - `description`, `assignee_id`, `due_date`, `recurrence_pattern` (optional)
    - `priority` (optional): low | medium | high | urgent (default medium)
    - `status` (optional): todo | in_progress | review | done (default todo)
    - `is_recurring` (optional): default false

    **Errors:**
    - `400`: Blank title or assignee outside the workspace
    - `403`: Caller is not a member of the column's workspace
    - `404`: Column not found
    """
    try:
        return service.create_task(profile_id, request)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except NotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    except AccessDenied as e:
        raise HTTPException(status_code=403, detail=str(e))
    except Exception as e:
        logger.error(f"Failed to create task: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Failed to create task: {str(e)}")


@router.get("/tasks/{task_id}", response_model=Task)
async def get_task(
    task_id: UUID,
    profile_id: UUID = Depends(get_current_profile_id),
    service: BoardService = Depends(get_board_service),
):
    try:
        return service.get_task(task_id, profile_id)
    except NotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    except AccessDenied as e:
        raise HTTPException(status_code=403, detail=str(e))
    except Exception as e:
        logger.error(f"Failed to get task: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Failed to get task: {str(e)}")


@router.patch("/tasks/{task_id}", response_model=Task)
async def update_task(
    task_id: UUID,
    request: TaskUpdate,
    profile_id: UUID = Depends(get_current_profile_id),
    service: BoardService = Depends(get_board_service),
):
    """Update task details. Only fields present in the request body are written."""
    try:
        return service.update_task(task_id, profile_id, request)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except NotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    except AccessDenied as e:
        raise HTTPException(status_code=403, detail=str(e))
    except Exception as e:
        logger.error(f"Failed to update task: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Failed to update task: {str(e)}")


@router.post("/tasks/{task_id}/move", response_model=Task)
async def move_task(
    task_id: UUID,
    request: TaskMove,
    profile_id: UUID = Depends(get_current_profile_id),
    service: BoardService = Depends(get_board_service),
):
    """
    Move a task.

    To another column of the same project: the task goes to the end of that
    column. Within its own column: the task is placed at `position`.
    """
    try:
        return service.move_task(task_id, profile_id, request)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except NotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    except AccessDenied as e:
        raise HTTPException(status_code=403, detail=str(e))
    except Exception as e:
        logger.error(f"Failed to move task: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Failed to move task: {str(e)}")


@router.delete("/tasks/{task_id}", status_code=204)
async def delete_task(
    task_id: UUID,
    profile_id: UUID = Depends(get_current_profile_id),
    service: BoardService = Depends(get_board_service),
):
    try:
        service.delete_task(task_id, profile_id)
        return None
    except NotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    except AccessDenied as e:
        raise HTTPException(status_code=403, detail=str(e))
    except Exception as e:
        logger.error(f"Failed to delete task: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Failed to delete task: {str(e)}")
