"""Unit tests for UserRepository."""

import pytest
from app.repositories.user import UserRepository
from tests.factories.user import UserFactory


class TestUserRepository:
    """Ensure ``UserRepository`` performs the lookups authentication relies on."""

    @pytest.fixture()
    def repo(self):
        return UserRepository()

    def test_create_and_get_user(self, repo, session):
        """Create a user and fetch it by id."""
        created = repo.create(username="alice", email="alice@example.com", password_hash="h")
        session.commit()

        fetched = repo.get(created.id)
        assert fetched is not None
        assert fetched.username == "alice"
        assert fetched.password_version == 0

    def test_find_by_email_is_exact(self, repo, session):
        """Email lookups are case-sensitive."""
        u = UserFactory(email="bob@example.com")

        assert repo.find_by_email("bob@example.com").id == u.id
        assert repo.find_by_email("BOB@example.com") is None
        assert repo.find_by_email("nonexistent@example.com") is None

    def test_find_by_email_or_username_matches_either(self, repo, session):
        u = UserFactory(email="carol@example.com", username="carol")

        assert repo.find_by_email_or_username("carol@example.com", "other").id == u.id
        assert repo.find_by_email_or_username("other@example.com", "carol").id == u.id
        assert repo.find_by_email_or_username("other@example.com", "other") is None

    def test_find_by_email_or_username_prefers_email_match(self, repo, session):
        """When two rows match, the one owning the email is returned."""
        by_username = UserFactory(email="first@example.com", username="taken")
        by_email = UserFactory(email="wanted@example.com", username="someone")

        found = repo.find_by_email_or_username("wanted@example.com", "taken")
        assert found.id == by_email.id
        assert found.id != by_username.id

    def test_exists_and_find_one(self, repo, session):
        UserFactory(username="dave")

        assert repo.exists(username="dave")
        assert not repo.exists(username="nobody")
        assert repo.find_one(username="dave").username == "dave"
