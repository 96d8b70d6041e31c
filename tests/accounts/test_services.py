"""
Tests for accounts services.
"""

from unittest.mock import patch

import pytest
from django.db import IntegrityError

from apps.accounts.models import User
from apps.accounts.services import (
    find_or_create_user_by_email,
    get_user_by_reference,
    get_user_for_access_token,
    issue_access_token,
)
from config.settings.base import settings

from .factories import UserFactory


@pytest.mark.django_db
class TestFindOrCreateUserByEmail:
    """Tests for find_or_create_user_by_email."""

    def test_creates_user_for_new_email(self) -> None:
        user, created = find_or_create_user_by_email("new@example.com", name="New Parent")

        assert created is True
        assert user.email == "new@example.com"
        assert user.name == "New Parent"

    def test_returns_existing_user(self) -> None:
        existing = UserFactory(email="owner@example.com")

        user, created = find_or_create_user_by_email("owner@example.com")

        assert created is False
        assert user.pk == existing.pk

    def test_email_lookup_is_case_insensitive(self) -> None:
        existing = UserFactory(email="owner@example.com")

        user, created = find_or_create_user_by_email("  Owner@Example.COM ")

        assert created is False
        assert user.pk == existing.pk
        assert User.objects.count() == 1

    def test_concurrent_insert_returns_winner(self) -> None:
        """Losing the unique-email race returns the row that won."""
        winner = UserFactory(email="race@example.com")

        with (
            patch.object(User.objects, "get", side_effect=[User.DoesNotExist, winner]),
            patch.object(User.objects, "create_user", side_effect=IntegrityError),
        ):
            user, created = find_or_create_user_by_email("race@example.com")

        assert created is False
        assert user == winner


@pytest.mark.django_db
class TestGetUserByReference:
    """Tests for get_user_by_reference."""

    def test_returns_user_for_pk(self) -> None:
        user = UserFactory()

        assert get_user_by_reference(str(user.pk)) == user

    @pytest.mark.parametrize("reference", [None, "", "not-a-number", "999999"])
    def test_returns_none_for_unusable_reference(self, reference) -> None:
        assert get_user_by_reference(reference) is None


@pytest.mark.django_db
class TestAccessTokens:
    """Tests for signed owner API tokens."""

    def test_token_resolves_to_user(self) -> None:
        user = UserFactory()

        assert get_user_for_access_token(issue_access_token(user)) == user

    def test_tampered_token_rejected(self) -> None:
        token = issue_access_token(UserFactory())

        assert get_user_for_access_token(token[:-2] + "xx") is None

    def test_bare_user_pk_rejected(self) -> None:
        """A client-chosen reference is not a token."""
        user = UserFactory()

        assert get_user_for_access_token(str(user.pk)) is None

    def test_expired_token_rejected(self) -> None:
        token = issue_access_token(UserFactory())

        with patch.object(settings, "ACCESS_TOKEN_MAX_AGE", -1):
            assert get_user_for_access_token(token) is None

    def test_deleted_user_rejected(self) -> None:
        user = UserFactory()
        token = issue_access_token(user)
        user.delete()

        assert get_user_for_access_token(token) is None

    @pytest.mark.parametrize("token", [None, ""])
    def test_missing_token(self, token) -> None:
        assert get_user_for_access_token(token) is None
