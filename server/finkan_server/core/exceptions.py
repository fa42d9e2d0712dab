"""Domain errors raised by the FinKan core.

Route handlers translate these into HTTP responses:

- ValidationError     -> 400
- AuthenticationError -> 401
- AccessDenied        -> 403
- NotFound            -> 404
"""


class FinKanError(Exception):
    """Base class for all FinKan errors."""
    pass


class ValidationError(FinKanError):
    """Raised when a request is well-formed but semantically invalid."""
    pass


class AuthenticationError(FinKanError):
    """Raised when a session credential is missing, invalid or expired."""
    pass


class AccessDenied(FinKanError):
    """Raised when an authenticated caller lacks the required membership or role."""
    pass


class NotFound(FinKanError):
    """Raised when the addressed resource has no row."""

    def __init__(self, resource: str, resource_id: object = None):
        self.resource = resource
        self.resource_id = resource_id
        super().__init__(f"{resource.capitalize()} not found")
