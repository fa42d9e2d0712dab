"""Type definitions for the FinKan client"""

from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Any, Optional


def _known(cls, data: dict[str, Any]) -> dict[str, Any]:
    names = {f.name for f in fields(cls)}
    return {k: v for k, v in data.items() if k in names}


@dataclass
class Profile:
    id: str
    email: str
    full_name: Optional[str] = None
    avatar_url: Optional[str] = None
    role: str = "member"
    auth_provider: Optional[str] = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Profile:
        return cls(**_known(cls, data))


@dataclass
class Workspace:
    """
    A workspace the caller belongs to.

    Attributes:
        role: The caller's role ("owner", "admin" or "member") when the
            server reports it
    """

    id: str
    name: str
    icon: Optional[str] = None
    description: Optional[str] = None
    created_by: Optional[str] = None
    is_archived: bool = False
    role: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Workspace:
        return cls(**_known(cls, data))


@dataclass
class Member:
    workspace_id: str
    profile_id: str
    role: str
    email: str
    full_name: Optional[str] = None
    avatar_url: Optional[str] = None
    created_at: Optional[str] = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Member:
        return cls(**_known(cls, data))


@dataclass
class Project:
    id: str
    workspace_id: str
    name: str
    description: Optional[str] = None
    created_by: Optional[str] = None
    is_archived: bool = False
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Project:
        return cls(**_known(cls, data))


@dataclass
class Column:
    id: str
    project_id: str
    name: str
    position: int
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Column:
        return cls(**_known(cls, data))


@dataclass
class Task:
    """A task card. `position` is its 0-based index within `column_id`."""

    id: str
    column_id: str
    title: str
    position: int
    priority: str = "medium"
    status: str = "todo"
    description: Optional[str] = None
    assignee_id: Optional[str] = None
    due_date: Optional[str] = None
    is_recurring: bool = False
    recurrence_pattern: Optional[str] = None
    created_by: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Task:
        return cls(**_known(cls, data))
