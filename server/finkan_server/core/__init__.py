"""Core business logic"""

from .board import BoardService
from .workspaces import WorkspaceService
from .exceptions import (
    FinKanError,
    ValidationError,
    AuthenticationError,
    AccessDenied,
    NotFound,
)

__all__ = [
    "BoardService",
    "WorkspaceService",
    "FinKanError",
    "ValidationError",
    "AuthenticationError",
    "AccessDenied",
    "NotFound",
]
