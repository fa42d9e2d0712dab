"""Signed session tokens and OAuth state values."""

from __future__ import annotations

import secrets
from datetime import datetime, timedelta, timezone
from typing import Any, Mapping, Optional

import jwt

from .exceptions import AuthenticationError

OAUTH_STATE_TTL = timedelta(minutes=10)
OAUTH_STATE_PURPOSE = "oauth_state"


def issue_session_token(
    profile: Mapping[str, Any],
    secret: str,
    ttl: timedelta,
    algorithm: str = "HS256",
    now: Optional[datetime] = None,
) -> str:
    """Sign a session token for a profile.

    Claims: sub (profile id), email, role, iat, exp.
    """
    issued_at = now or datetime.now(timezone.utc)
    payload = {
        "sub": str(profile["id"]),
        "email": profile["email"],
        "role": profile.get("role") or "member",
        "iat": issued_at,
        "exp": issued_at + ttl,
    }
    return jwt.encode(payload, secret, algorithm=algorithm)


def decode_session_token(token: str, secret: str, algorithm: str = "HS256") -> dict[str, Any]:
    """Verify a session token and return its claims.

    Raises:
        AuthenticationError: expired, tampered or malformed token
    """
    try:
        payload = jwt.decode(
            token,
            secret,
            algorithms=[algorithm],
            options={"require": ["sub", "exp"]},
        )
    except jwt.ExpiredSignatureError:
        raise AuthenticationError("Session has expired")
    except jwt.InvalidTokenError as e:
        raise AuthenticationError(f"Invalid session token: {str(e)}")

    if payload.get("purpose") == OAUTH_STATE_PURPOSE:
        raise AuthenticationError("Invalid session token: wrong token type")
    return payload


def issue_oauth_state(secret: str, algorithm: str = "HS256") -> tuple[str, str]:
    """Create an OAuth state nonce and the signed value kept in a cookie.

    Returns:
        (nonce sent to the provider, signed cookie value)
    """
    nonce = secrets.token_urlsafe(24)
    now = datetime.now(timezone.utc)
    signed = jwt.encode(
        {"nonce": nonce, "purpose": OAUTH_STATE_PURPOSE, "iat": now, "exp": now + OAUTH_STATE_TTL},
        secret,
        algorithm=algorithm,
    )
    return nonce, signed


def verify_oauth_state(
    state: Optional[str], signed: Optional[str], secret: str, algorithm: str = "HS256"
) -> None:
    """Check the state echoed by the provider against the signed cookie value."""
    if not state or not signed:
        raise AuthenticationError("Missing OAuth state")
    try:
        payload = jwt.decode(signed, secret, algorithms=[algorithm])
    except jwt.InvalidTokenError:
        raise AuthenticationError("Invalid or expired OAuth state")
    if payload.get("purpose") != OAUTH_STATE_PURPOSE or not secrets.compare_digest(
        str(payload.get("nonce", "")), state
    ):
        raise AuthenticationError("OAuth state mismatch")
