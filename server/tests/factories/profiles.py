"""Profile factory for creating test profiles."""

from uuid import UUID
from typing import Optional
from sqlalchemy import insert, select
from sqlalchemy.engine import Connection

from finkan_server.core.database import profiles_table
from .constants import (
    TEST_PROFILE_ID,
    TEST_PROFILE_EMAIL,
    TEST_PROFILE_NAME,
    make_test_profile_id,
)


def create_test_profile(
    conn: Connection,
    profile_id: Optional[UUID] = None,
    email: Optional[str] = None,
    full_name: Optional[str] = None,
    microsoft_id: Optional[str] = None,
    suffix: Optional[str] = None,
) -> UUID:
    """Create a test profile in the database.

    Args:
        conn: Database connection
        profile_id: Profile UUID (defaults to TEST_PROFILE_ID or generated from suffix)
        email: Email (defaults to TEST_PROFILE_EMAIL or generated from suffix)
        full_name: Display name (defaults to TEST_PROFILE_NAME)
        microsoft_id: Linked Microsoft account id (none by default)
        suffix: Suffix for generating unique IDs (overrides profile_id/email)

    Returns:
        Created profile's UUID

    Example:
        # Default test profile
        profile_id = create_test_profile(conn)

        # Several profiles
        alice = create_test_profile(conn, suffix="alice")
        bob = create_test_profile(conn, suffix="bob")
    """
    if suffix:
        profile_id = make_test_profile_id(suffix)
        email = email or f"{suffix}@example.com"
        full_name = full_name or f"Test {suffix.capitalize()}"
    else:
        profile_id = profile_id or TEST_PROFILE_ID
        email = email or TEST_PROFILE_EMAIL
        full_name = full_name or TEST_PROFILE_NAME

    # Check if profile already exists
    existing = conn.execute(
        select(profiles_table.c.id).where(profiles_table.c.id == profile_id)
    ).fetchone()

    if existing:
        return profile_id

    conn.execute(
        insert(profiles_table).values(
            id=profile_id,
            email=email,
            full_name=full_name,
            microsoft_id=microsoft_id,
            auth_provider="microsoft" if microsoft_id else None,
        )
    )

    return profile_id
