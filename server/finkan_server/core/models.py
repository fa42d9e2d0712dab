"""Pydantic models for workspaces, projects, columns, tasks and profiles."""

from datetime import datetime
from typing import Literal, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from .exceptions import ValidationError

WorkspaceRole = Literal["owner", "admin", "member"]
TaskPriority = Literal["low", "medium", "high", "urgent"]
TaskStatus = Literal["todo", "in_progress", "review", "done"]


class _Row(BaseModel):
    model_config = ConfigDict(from_attributes=True)


# Profiles

class Profile(_Row):
    id: UUID
    email: str
    full_name: Optional[str] = None
    avatar_url: Optional[str] = None
    role: str = "member"
    auth_provider: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


# Workspaces

class WorkspaceCreate(BaseModel):
    """Request model for creating a workspace."""

    name: str = Field(..., max_length=255)
    icon: Optional[str] = Field(None, max_length=32)
    description: Optional[str] = None


class WorkspaceUpdate(BaseModel):
    """Partial update; only fields present in the request are written."""

    name: Optional[str] = Field(None, max_length=255)
    icon: Optional[str] = Field(None, max_length=32)
    description: Optional[str] = None


class Workspace(_Row):
    id: UUID
    name: str
    icon: Optional[str] = None
    description: Optional[str] = None
    created_by: Optional[UUID] = None
    is_archived: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    role: Optional[WorkspaceRole] = Field(None, description="Caller's role in the workspace")


class WorkspaceMember(_Row):
    workspace_id: UUID
    profile_id: UUID
    role: WorkspaceRole
    created_at: Optional[datetime] = None
    email: str
    full_name: Optional[str] = None
    avatar_url: Optional[str] = None


class MemberAdd(BaseModel):
    """Request model for adding an existing profile to a workspace."""

    email: EmailStr
    role: Literal["admin", "member"] = "member"


# Projects

class ProjectCreate(BaseModel):
    name: str = Field(..., max_length=255)
    description: Optional[str] = None
    default_columns: bool = Field(True, description="Create the To Do / In Progress / Done columns")


class ProjectUpdate(BaseModel):
    name: Optional[str] = Field(None, max_length=255)
    description: Optional[str] = None


class Project(_Row):
    id: UUID
    workspace_id: UUID
    name: str
    description: Optional[str] = None
    created_by: Optional[UUID] = None
    is_archived: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


# Columns

class ColumnCreate(BaseModel):
    name: str = Field(..., max_length=255)


class ColumnUpdate(BaseModel):
    name: Optional[str] = Field(None, max_length=255)
    position: Optional[int] = Field(None, ge=0, description="New index within the project")


class BoardColumn(_Row):
    id: UUID
    project_id: UUID
    name: str
    position: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


# Tasks

class TaskCreate(BaseModel):
    column_id: UUID
    title: str = Field(..., max_length=500)
    description: Optional[str] = None
    assignee_id: Optional[UUID] = None
    priority: TaskPriority = "medium"
    status: TaskStatus = "todo"
    due_date: Optional[datetime] = None
    is_recurring: bool = False
    recurrence_pattern: Optional[str] = Field(None, max_length=255)


class TaskUpdate(BaseModel):
    """Typed partial update over the updatable task fields.

    Only fields explicitly present in the request body are written; the
    column and position are changed through the move operation instead.
    """

    title: Optional[str] = Field(None, max_length=500)
    description: Optional[str] = None
    assignee_id: Optional[UUID] = None
    priority: Optional[TaskPriority] = None
    status: Optional[TaskStatus] = None
    due_date: Optional[datetime] = None
    is_recurring: Optional[bool] = None
    recurrence_pattern: Optional[str] = Field(None, max_length=255)


class TaskMove(BaseModel):
    column_id: UUID
    position: Optional[int] = Field(
        None,
        ge=0,
        description="Index within the column; ignored when changing columns (tasks are appended)",
    )


class Task(_Row):
    id: UUID
    column_id: UUID
    title: str
    description: Optional[str] = None
    assignee_id: Optional[UUID] = None
    priority: TaskPriority
    status: TaskStatus
    due_date: Optional[datetime] = None
    is_recurring: bool = False
    recurrence_pattern: Optional[str] = None
    position: int
    created_by: Optional[UUID] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


def required_text(value: Optional[str], field: str) -> str:
    """Strip a required text field, rejecting blanks."""
    cleaned = (value or "").strip()
    if not cleaned:
        raise ValidationError(f"{field} must not be empty")
    return cleaned
