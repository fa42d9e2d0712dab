"""Unit tests for profile resolution after an identity-provider login."""

from uuid import uuid4

import pytest
from sqlalchemy import func, select

from finkan_server.core.database import auth_sessions_table, profiles_table
from finkan_server.core.exceptions import AuthenticationError
from finkan_server.core.identity import (
    ExternalIdentity,
    ensure_profile,
    get_profile,
    resolve_profile,
    store_provider_tokens,
)
from tests.factories import create_test_profile


def profile_count(conn):
    return conn.execute(select(func.count()).select_from(profiles_table)).scalar()


class TestResolveProfile:
    def test_creates_profile_for_new_identity(self, db_connection):
        identity = ExternalIdentity(
            provider_id="ms-new", email="New.User@Example.com", full_name="New User"
        )

        profile = resolve_profile(db_connection, identity)

        assert profile["email"] == "new.user@example.com"
        assert profile["full_name"] == "New User"
        assert profile["microsoft_id"] == "ms-new"
        assert profile["auth_provider"] == "microsoft"
        assert profile["role"] == "member"

    def test_matches_existing_provider_id_first(self, db_connection):
        profile_id = create_test_profile(
            db_connection, suffix="linked", microsoft_id="ms-linked"
        )

        # Email changed at the provider; the provider id still wins
        profile = resolve_profile(
            db_connection, ExternalIdentity(provider_id="ms-linked", email="renamed@example.com")
        )

        assert profile["id"] == profile_id
        assert profile_count(db_connection) == 1

    def test_links_existing_email(self, db_connection):
        profile_id = create_test_profile(db_connection, suffix="invited")

        profile = resolve_profile(
            db_connection,
            ExternalIdentity(provider_id="ms-invited", email="INVITED@example.com"),
        )

        assert profile["id"] == profile_id
        assert profile["microsoft_id"] == "ms-invited"
        assert profile["auth_provider"] == "microsoft"
        assert profile_count(db_connection) == 1

    def test_identity_without_email_is_rejected(self, db_connection):
        with pytest.raises(AuthenticationError):
            resolve_profile(db_connection, ExternalIdentity(provider_id="ms-x", email=None))


class TestEnsureProfile:
    def test_creates_missing_profile(self, db_connection):
        profile_id = uuid4()
        ensure_profile(db_connection, profile_id, "Lazy@Example.com")

        assert get_profile(db_connection, profile_id)["email"] == "lazy@example.com"

    def test_existing_profile_untouched(self, db_connection, test_profile):
        before = get_profile(db_connection, test_profile)
        ensure_profile(db_connection, test_profile, "other@example.com")

        assert get_profile(db_connection, test_profile) == before


class TestStoreProviderTokens:
    def test_replaces_previous_session(self, db_connection, test_profile):
        assert store_provider_tokens(db_connection, test_profile, "access-1", "refresh-1", 60)
        assert store_provider_tokens(db_connection, test_profile, "access-2", "refresh-2")

        rows = db_connection.execute(
            select(auth_sessions_table).where(auth_sessions_table.c.user_id == test_profile)
        ).fetchall()
        assert len(rows) == 1
        assert rows[0].access_token == "access-2"
        assert rows[0].refresh_token == "refresh-2"
        assert rows[0].expires_at is not None

    def test_without_refresh_token_nothing_is_stored(self, db_connection, test_profile):
        assert not store_provider_tokens(db_connection, test_profile, "access", None)
        count = db_connection.execute(
            select(func.count()).select_from(auth_sessions_table)
        ).scalar()
        assert count == 0
