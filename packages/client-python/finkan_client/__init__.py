"""FinKan Python client"""

from .client import APIError, AuthenticationRequired, FinKan
from .stores import BoardStore, ProjectStore, WorkspaceStore
from .types import Column, Member, Profile, Project, Task, Workspace

__all__ = [
    "FinKan",
    "APIError",
    "AuthenticationRequired",
    "WorkspaceStore",
    "ProjectStore",
    "BoardStore",
    "Workspace",
    "Member",
    "Profile",
    "Project",
    "Column",
    "Task",
]
__version__ = "0.1.0"
