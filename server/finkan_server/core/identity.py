"""Profile resolution for identity-provider logins."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Optional
from uuid import UUID

from sqlalchemy import delete, func, insert, select, update
from sqlalchemy.engine import Connection

from .database import auth_sessions_table, profiles_table, row_to_dict
from .exceptions import AuthenticationError

logger = logging.getLogger(__name__)

DEFAULT_PROVIDER_TOKEN_TTL = 3600


@dataclass
class ExternalIdentity:
    """Identity returned by an external provider after a successful exchange."""

    provider_id: str
    email: Optional[str]
    full_name: Optional[str] = None
    avatar_url: Optional[str] = None
    provider: str = "microsoft"


def _normalize_email(email: Optional[str]) -> Optional[str]:
    if not email:
        return None
    return email.strip().lower() or None


def get_profile(conn: Connection, profile_id: UUID) -> Optional[dict[str, Any]]:
    row = conn.execute(
        select(profiles_table).where(profiles_table.c.id == profile_id)
    ).fetchone()
    return row_to_dict(row)


def resolve_profile(conn: Connection, identity: ExternalIdentity) -> dict[str, Any]:
    """Find or create the profile for an external identity.

    Priority:
    1. Profile already linked to the provider id
    2. Profile with the same email, which gets linked to the provider id
    3. New profile

    Args:
        conn: Database connection (caller owns the transaction)
        identity: Identity from the provider

    Returns:
        Profile row as a dict

    Raises:
        AuthenticationError: provider returned neither a known id nor an email
    """
    row = conn.execute(
        select(profiles_table).where(profiles_table.c.microsoft_id == identity.provider_id)
    ).fetchone()
    if row is not None:
        return row_to_dict(row)

    email = _normalize_email(identity.email)
    if email is None:
        raise AuthenticationError("Identity provider did not return an email address")

    row = conn.execute(
        select(profiles_table).where(func.lower(profiles_table.c.email) == email)
    ).fetchone()
    if row is not None:
        logger.info(f"Linking {identity.provider} account to existing profile {row.id}")
        linked = conn.execute(
            update(profiles_table)
            .where(profiles_table.c.id == row.id)
            .values(
                microsoft_id=identity.provider_id,
                auth_provider=identity.provider,
                updated_at=func.now(),
            )
            .returning(*profiles_table.c)
        ).fetchone()
        return row_to_dict(linked)

    created = conn.execute(
        insert(profiles_table)
        .values(
            email=email,
            full_name=identity.full_name,
            avatar_url=identity.avatar_url,
            microsoft_id=identity.provider_id,
            auth_provider=identity.provider,
        )
        .returning(*profiles_table.c)
    ).fetchone()
    logger.info(f"Created profile {created.id} for {identity.provider} login")
    return row_to_dict(created)


def ensure_profile(conn: Connection, profile_id: UUID, email: str) -> None:
    """Create the caller's profile row if the login flow never materialized it.

    Raises:
        AuthenticationError: If another profile already holds the email
    """
    exists = conn.execute(
        select(profiles_table.c.id).where(profiles_table.c.id == profile_id)
    ).fetchone()
    if exists is not None:
        return

    email = _normalize_email(email) or email
    holder = conn.execute(
        select(profiles_table.c.id).where(func.lower(profiles_table.c.email) == email)
    ).fetchone()
    if holder is not None:
        raise AuthenticationError("Session does not match the profile registered for this email")

    logger.info(f"Lazily creating profile {profile_id}")
    conn.execute(insert(profiles_table).values(id=profile_id, email=email))


def store_provider_tokens(
    conn: Connection,
    profile_id: UUID,
    access_token: str,
    refresh_token: Optional[str],
    expires_in: Optional[int] = None,
) -> bool:
    """Replace the profile's stored provider tokens.

    Tokens are only kept when the provider issued a refresh token.

    Returns:
        True if a session row was written
    """
    if not refresh_token:
        return False

    conn.execute(delete(auth_sessions_table).where(auth_sessions_table.c.user_id == profile_id))
    expires_at = datetime.now(timezone.utc) + timedelta(
        seconds=expires_in or DEFAULT_PROVIDER_TOKEN_TTL
    )
    conn.execute(
        insert(auth_sessions_table).values(
            user_id=profile_id,
            access_token=access_token,
            refresh_token=refresh_token,
            expires_at=expires_at,
        )
    )
    return True
