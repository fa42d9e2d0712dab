"""Authentication for the FinKan API.

This module provides FastAPI dependencies that turn a session credential
into the caller's identity. Supported credentials:
- Session cookie (set by the Microsoft login routes)
- Session token in an Authorization: Bearer header

Requests without a valid credential are rejected with 401; there is no
anonymous or default identity.
"""

import logging
from typing import Optional
from uuid import UUID

from fastapi import Depends, Header, HTTPException, Request
from pydantic import BaseModel

from .config import Settings, get_settings
from .core.exceptions import AuthenticationError
from .core.sessions import decode_session_token

logger = logging.getLogger(__name__)


class AuthContext(BaseModel):
    """Authentication context for a request."""

    profile_id: UUID
    email: str
    role: str = "member"
    auth_method: str  # "cookie" or "bearer"


def _credentials(
    request: Request, authorization: Optional[str], settings: Settings
) -> list[tuple[str, str]]:
    found = []
    cookie = request.cookies.get(settings.session_cookie_name)
    if cookie:
        found.append((cookie, "cookie"))
    if authorization and authorization.startswith("Bearer "):
        found.append((authorization.split(" ", 1)[1].strip(), "bearer"))
    return found


def _verify(token: str, settings: Settings) -> tuple[UUID, dict]:
    payload = decode_session_token(token, settings.jwt_secret, settings.jwt_algorithm)
    try:
        profile_id = UUID(str(payload["sub"]))
    except ValueError:
        raise AuthenticationError("Invalid session token: malformed subject")
    if not payload.get("email"):
        raise AuthenticationError("Invalid session token: missing email")
    return profile_id, payload


async def get_auth_context(
    request: Request,
    authorization: Optional[str] = Header(None),
    settings: Settings = Depends(get_settings),
) -> AuthContext:
    """Extract authentication context from the request.

    Priority:
    1. Session cookie
    2. Session token (Authorization: Bearer header)

    A credential that fails verification is skipped in favour of the next
    one, so a stale cookie does not shadow a valid bearer token.

    Returns:
        AuthContext bound to the verified token's subject

    Raises:
        HTTPException: 401 if the credential is missing, invalid or expired
    """
    credentials = _credentials(request, authorization, settings)
    if not credentials:
        raise HTTPException(status_code=401, detail="Authentication required")

    failure: Optional[AuthenticationError] = None
    for token, method in credentials:
        try:
            profile_id, payload = _verify(token, settings)
        except AuthenticationError as e:
            logger.info(f"Rejected {method} credential: {e}")
            failure = failure or e
            continue
        return AuthContext(
            profile_id=profile_id,
            email=payload["email"],
            role=payload.get("role") or "member",
            auth_method=method,
        )

    raise HTTPException(status_code=401, detail=str(failure))


async def get_current_profile_id(
    auth_ctx: AuthContext = Depends(get_auth_context),
) -> UUID:
    """Get the current authenticated profile's database ID."""
    return auth_ctx.profile_id
