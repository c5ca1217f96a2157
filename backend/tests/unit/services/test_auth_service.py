# tests/unit/services/test_auth_service.py
from __future__ import annotations

import time

import jwt
import pytest
from app.models.companion import TravelCompanion
from app.models.user import User
from app.repositories.user import UserRepository
from app.services._shared.errors import (
    DuplicateEmailError,
    DuplicateUsernameError,
    InvalidAccessTokenError,
    InvalidCredentialsError,
    InvalidRefreshTokenError,
    TokenInvalidatedError,
    UserNotFoundError,
)
from app.services._shared.ports import TokenClass, TokenPayload
from app.services.auth import AuthPolicy, AuthResultOut, AuthService, LoginIn, RegisterIn
from app.services.companions import CompanionService
from sqlalchemy import select
from tests.factories.user import DEFAULT_PASSWORD, UserFactory
from tests.helpers.fakes import RecordingCompanions
from tests.helpers.utils import FAST_HASHER


def _register(service: AuthService, **overrides) -> AuthResultOut:
    data = {"username": "alice", "email": "a@x.com", "password": "Secr3t!"}
    data.update(overrides)
    return service.register(RegisterIn(**data))


def _self_companions(session, user_id: int) -> list[TravelCompanion]:
    stmt = select(TravelCompanion).where(
        TravelCompanion.user_id == user_id, TravelCompanion.is_myself.is_(True)
    )
    return list(session.execute(stmt).scalars())


def _set_password_version(session, user_id: int, version: int) -> None:
    session.get(User, user_id).password_version = version
    session.commit()


# -------------------------------- Register --------------------------------- #
class TestRegister:
    def test_returns_public_user_and_token_pair(self, auth_service):
        result = _register(auth_service)

        assert result.user.username == "alice"
        assert result.user.email == "a@x.com"
        assert result.user.avatar_url is None
        assert len(result.access_token.split(".")) == 3
        assert len(result.refresh_token.split(".")) == 3
        assert not hasattr(result.user, "password_hash")

    def test_persists_hash_not_plaintext(self, auth_service, session):
        result = _register(auth_service)

        user = UserRepository().get(result.user.id)
        assert user.password_hash != "Secr3t!"
        assert FAST_HASHER.verify("Secr3t!", user.password_hash)

    def test_token_payload_describes_new_user(self, auth_service, token_provider):
        result = _register(auth_service)

        payload = token_provider.verify(TokenClass.ACCESS, result.access_token)
        assert payload == TokenPayload(
            id=result.user.id, user_id=result.user.id, email="a@x.com", password_version=0
        )

    def test_lifetimes_are_exact(self, auth_service, token_provider):
        result = _register(auth_service)

        iat, exp = token_provider.decode_times(TokenClass.ACCESS, result.access_token)
        assert (exp - iat).total_seconds() == 900
        iat, exp = token_provider.decode_times(TokenClass.REFRESH, result.refresh_token)
        assert (exp - iat).total_seconds() == 604800

    def test_creates_self_companion(self, auth_service, session):
        result = _register(auth_service)

        companions = _self_companions(session, result.user.id)
        assert [c.name for c in companions] == ["alice"]

    def test_duplicate_email(self, auth_service, session):
        UserFactory(email="a@x.com", username="someone")
        session.commit()

        with pytest.raises(DuplicateEmailError) as exc_info:
            _register(auth_service, username="different")
        assert str(exc_info.value) == "Email already registered"

    def test_duplicate_username(self, auth_service, session):
        UserFactory(email="other@x.com", username="alice")
        session.commit()

        with pytest.raises(DuplicateUsernameError) as exc_info:
            _register(auth_service, email="new@x.com")
        assert str(exc_info.value) == "Username already taken"

    def test_email_wins_when_both_collide(self, auth_service, session):
        UserFactory(email="a@x.com", username="alice")
        session.commit()

        with pytest.raises(DuplicateEmailError):
            _register(auth_service)

    def test_email_wins_across_two_rows(self, auth_service, session):
        UserFactory(email="first@x.com", username="alice")
        UserFactory(email="a@x.com", username="second")
        session.commit()

        with pytest.raises(DuplicateEmailError):
            _register(auth_service)

    def test_email_case_is_significant(self, auth_service):
        _register(auth_service)
        other = _register(auth_service, username="alice2", email="A@x.com")
        assert other.user.email == "A@x.com"

    def test_companion_failure_is_best_effort_by_default(self, session, token_provider):
        companions = RecordingCompanions(error=RuntimeError("companions down"))
        service = AuthService(token_provider=token_provider, hasher=FAST_HASHER, companions=companions)

        result = _register(service)

        assert result.user.username == "alice"
        assert companions.calls == [(result.user.id, "alice")]
        assert UserRepository().get(result.user.id) is not None


# --------------------------------- Login ----------------------------------- #
class TestLogin:
    def test_login_returns_same_user(self, auth_service):
        registered = _register(auth_service)

        logged_in = auth_service.login(LoginIn(email="a@x.com", password="Secr3t!"))
        assert logged_in.user == registered.user
        assert logged_in.access_token != registered.access_token

    def test_unknown_email_and_wrong_password_are_identical(self, auth_service, session):
        user = UserFactory(email="known@x.com")
        session.commit()

        with pytest.raises(InvalidCredentialsError) as unknown:
            auth_service.login(LoginIn(email="missing@x.com", password=DEFAULT_PASSWORD))
        with pytest.raises(InvalidCredentialsError) as wrong:
            auth_service.login(LoginIn(email=user.email, password="not-the-password"))

        assert str(unknown.value) == str(wrong.value) == "Invalid email or password"
        assert unknown.value.code == wrong.value.code == "invalid_credentials"

    def test_email_lookup_is_case_sensitive(self, auth_service, session):
        UserFactory(email="case@x.com")
        session.commit()

        with pytest.raises(InvalidCredentialsError):
            auth_service.login(LoginIn(email="CASE@x.com", password=DEFAULT_PASSWORD))

    def test_email_is_matched_as_given(self, auth_service, session):
        """Trimming is the input schema's job; the service compares verbatim."""
        UserFactory(email="pad@x.com")
        session.commit()

        with pytest.raises(InvalidCredentialsError):
            auth_service.login(LoginIn(email=" pad@x.com ", password=DEFAULT_PASSWORD))

    def test_login_backfills_missing_self_companion(self, auth_service, session):
        """Accounts that predate companions get one on their next login."""
        user = UserFactory(username="legacy")
        session.commit()
        assert _self_companions(session, user.id) == []

        auth_service.login(LoginIn(email=user.email, password=DEFAULT_PASSWORD))
        auth_service.login(LoginIn(email=user.email, password=DEFAULT_PASSWORD))

        assert [c.name for c in _self_companions(session, user.id)] == ["legacy"]


# -------------------------------- Refresh ---------------------------------- #
class TestRefresh:
    def test_refresh_rotates_pair(self, auth_service):
        first = _register(auth_service)

        second = auth_service.refresh_token(first.refresh_token)

        assert second.user.id == first.user.id
        assert second.refresh_token != first.refresh_token
        assert second.access_token != first.access_token

    def test_old_refresh_token_still_valid(self, auth_service):
        """Stateless rotation: nothing records or revokes the presented token."""
        first = _register(auth_service)
        auth_service.refresh_token(first.refresh_token)

        again = auth_service.refresh_token(first.refresh_token)
        assert again.user.id == first.user.id

    @pytest.mark.parametrize("garbage", ["", "garbage", "a.b.c"])
    def test_garbage_token(self, auth_service, garbage):
        with pytest.raises(InvalidRefreshTokenError) as exc_info:
            auth_service.refresh_token(garbage)
        assert str(exc_info.value) == "Invalid refresh token"

    def test_access_token_is_not_a_refresh_token(self, auth_service):
        result = _register(auth_service)

        with pytest.raises(InvalidRefreshTokenError):
            auth_service.refresh_token(result.access_token)

    def test_valid_token_for_missing_user(self, auth_service, token_provider):
        ghost = TokenPayload(id=424242, user_id=424242, email="ghost@x.com")
        token = token_provider.issue(TokenClass.REFRESH, ghost)

        with pytest.raises(InvalidRefreshTokenError):
            auth_service.refresh_token(token)

    def test_payload_rebuilt_from_current_record(self, auth_service, token_provider, session):
        result = _register(auth_service)
        _set_password_version(session, result.user.id, 1)

        rotated = auth_service.refresh_token(result.refresh_token)

        payload = token_provider.verify(TokenClass.REFRESH, rotated.refresh_token)
        assert payload.password_version == 1

    def test_password_version_check_when_enabled(self, session, token_provider):
        service = AuthService(
            token_provider=token_provider,
            hasher=FAST_HASHER,
            companions=CompanionService(),
            policy=AuthPolicy(enforce_password_version=True),
        )
        result = _register(service)
        _set_password_version(session, result.user.id, 1)

        with pytest.raises(InvalidRefreshTokenError):
            service.refresh_token(result.refresh_token)
        with pytest.raises(TokenInvalidatedError):
            service.authenticate_access_token(result.access_token)

    def test_stale_version_still_refreshes_by_default(self, auth_service, session):
        result = _register(auth_service)
        _set_password_version(session, result.user.id, 1)

        rotated = auth_service.refresh_token(result.refresh_token)
        assert rotated.user.id == result.user.id


# ------------------------------ Current user -------------------------------- #
class TestCurrentUser:
    def test_unknown_id(self, auth_service):
        with pytest.raises(UserNotFoundError) as exc_info:
            auth_service.get_current_user(999_999)
        assert str(exc_info.value) == "User not found"

    def test_known_id_returns_exactly_five_fields(self, auth_service):
        result = _register(auth_service)

        current = auth_service.get_current_user(result.user.id)

        assert set(current.__dataclass_fields__) == {
            "id",
            "username",
            "email",
            "avatar_url",
            "created_at",
        }
        assert current.id == result.user.id
        assert current.username == "alice"
        assert current.created_at is not None


# --------------------------- Access-token auth ------------------------------ #
class TestAuthenticateAccessToken:
    def test_accepts_access_token(self, auth_service):
        result = _register(auth_service)

        payload = auth_service.authenticate_access_token(result.access_token)
        assert payload.user_id == result.user.id

    def test_rejects_refresh_token(self, auth_service):
        result = _register(auth_service)

        with pytest.raises(InvalidAccessTokenError) as exc_info:
            auth_service.authenticate_access_token(result.refresh_token)
        assert str(exc_info.value) == "Invalid or expired token"

    def test_deleted_user_invalidates_token(self, auth_service, session):
        result = _register(auth_service)
        session.delete(session.get(User, result.user.id))
        session.commit()

        with pytest.raises(TokenInvalidatedError) as exc_info:
            auth_service.authenticate_access_token(result.access_token)
        assert str(exc_info.value) == "Token invalidated. Please log in again."

    def test_stale_password_version_invalidates_token_by_default(self, auth_service, session):
        result = _register(auth_service)
        _set_password_version(session, result.user.id, 1)

        with pytest.raises(TokenInvalidatedError):
            auth_service.authenticate_access_token(result.access_token)

    def test_token_without_version_claim_matches_version_zero(
        self, auth_service, token_config, session
    ):
        result = _register(auth_service)
        iat = int(time.time())
        claims = {
            "id": result.user.id,
            "user_id": result.user.id,
            "email": "a@x.com",
            "iat": iat,
            "exp": iat + 60,
            "type": "access",
        }
        legacy = jwt.encode(claims, token_config.access_secret, algorithm="HS256")

        assert auth_service.authenticate_access_token(legacy).password_version == 0

        _set_password_version(session, result.user.id, 1)
        with pytest.raises(TokenInvalidatedError):
            auth_service.authenticate_access_token(legacy)


# ------------------------------ End to end ---------------------------------- #
def test_alice_register_login_refresh(auth_service):
    registered = _register(auth_service)
    assert registered.user.username == "alice"

    logged_in = auth_service.login(LoginIn(email="a@x.com", password="Secr3t!"))
    assert logged_in.user.id == registered.user.id

    refreshed = auth_service.refresh_token(logged_in.refresh_token)
    assert refreshed.user.id == registered.user.id
    assert refreshed.refresh_token != logged_in.refresh_token
    assert refreshed.access_token != logged_in.access_token
