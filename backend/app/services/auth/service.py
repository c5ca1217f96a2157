# app/services/auth/service.py
from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager

from sqlalchemy.exc import IntegrityError

from app.models.user import User
from app.services._shared.base import BaseService, ServiceContext
from app.services._shared.errors import (
    DuplicateEmailError,
    DuplicateUsernameError,
    InvalidAccessTokenError,
    InvalidCredentialsError,
    InvalidRefreshTokenError,
    InvalidTokenError,
    ServiceError,
    TokenInvalidatedError,
    UnexpectedError,
    UserNotFoundError,
    violates,
)
from app.services._shared.ports import (
    CompanionBootstrap,
    PasswordHasher,
    TokenClass,
    TokenPayload,
    TokenProvider,
)
from app.services.auth.dto import (
    AuthPolicy,
    AuthResultOut,
    CompanionPolicy,
    CurrentUserOut,
    LoginIn,
    PublicUserOut,
    RegisterIn,
)

logger = logging.getLogger(__name__)


def _same_version(claims: TokenPayload, user: User) -> bool:
    return claims.password_version == int(user.password_version or 0)


class AuthService(BaseService):
    """
    Authentication lifecycle service (register / login / refresh / current user).

    Tokens are stateless: nothing about an issued token is stored, so refresh
    is a full rotation from the current user record and concurrent refreshes
    with the same token each get their own pair. Refusals are deliberately
    coarse (one error per operation) so callers cannot probe which emails
    exist or why a token failed.
    """

    def __init__(
        self,
        *,
        token_provider: TokenProvider,
        hasher: PasswordHasher,
        companions: CompanionBootstrap,
        policy: AuthPolicy | None = None,
        ctx: ServiceContext | None = None,
    ) -> None:
        """
        Initialize the service with its collaborators.

        :param token_provider: Codec issuing/verifying access and refresh tokens.
        :param hasher: One-way password hasher.
        :param companions: Self-companion bootstrap invoked after register/login.
        :param policy: Companion and password-version policy switches.
        :param ctx: Optional request-scoped context.
        """
        super().__init__(ctx=ctx)
        self.tokens = token_provider
        self.hasher = hasher
        self.companions = companions
        self.policy = policy or AuthPolicy()

    # ------------------------------------------------------------------ #
    # Register
    # ------------------------------------------------------------------ #

    def register(self, dto: RegisterIn) -> AuthResultOut:
        """
        Create an account and issue its first token pair.

        Identity fields are used as given; trimming happens in
        :class:`~app.schemas.auth.RegisterSchema`.

        :param dto: Registration input.
        :returns: Public user plus access/refresh tokens.
        :raises DuplicateEmailError: Email already registered (checked first).
        :raises DuplicateUsernameError: Username already taken.
        :raises UnexpectedError: Unclassified store failure, or companion
            bootstrap failure under the ``required`` policy.
        """
        email, username = dto.email, dto.username

        with self._store_errors("register"):
            try:
                with self.rw_uow() as uow:
                    existing = uow.users.find_by_email_or_username(email, username)
                    if existing is not None:
                        if existing.email == email:
                            raise DuplicateEmailError()
                        raise DuplicateUsernameError()

                    user = uow.users.create(
                        username=username,
                        email=email,
                        password_hash=self.hasher.hash(dto.password),
                    )
                    public = self._to_public(user)
                    payload = TokenPayload.for_user(user)
            except IntegrityError as exc:
                # Lost a race with a concurrent registration past the pre-check.
                raise self._classify_integrity(exc) from exc

        logger.info("User registered", extra={"event": "auth.register", "user_id": public.id})
        # Separate scope: the user row is already committed.
        self._bootstrap_companion(public.id, username)
        return self._issue_pair(public, payload)

    # ------------------------------------------------------------------ #
    # Login
    # ------------------------------------------------------------------ #

    def login(self, dto: LoginIn) -> AuthResultOut:
        """
        Verify credentials and issue a token pair.

        Unknown email and wrong password raise the same error; the unknown
        email path still runs one hash verification.

        :param dto: Login input.
        :returns: Public user plus access/refresh tokens.
        :raises InvalidCredentialsError: On any credential mismatch.
        """
        with self._store_errors("login"):
            with self.ro_uow() as uow:
                user = uow.users.find_by_email(dto.email)
                if user is None:
                    self.hasher.burn(dto.password)
                    logger.debug("Login refused: unknown email", extra={"event": "auth.login"})
                    raise InvalidCredentialsError()
                if not self.hasher.verify(dto.password, user.password_hash):
                    logger.debug(
                        "Login refused: password mismatch",
                        extra={"event": "auth.login", "user_id": user.id},
                    )
                    raise InvalidCredentialsError()
                public = self._to_public(user)
                payload = TokenPayload.for_user(user)

        self._bootstrap_companion(public.id, public.username)
        logger.info("User logged in", extra={"event": "auth.login", "user_id": public.id})
        return self._issue_pair(public, payload)

    # ------------------------------------------------------------------ #
    # Refresh
    # ------------------------------------------------------------------ #

    def refresh_token(self, token: str) -> AuthResultOut:
        """
        Exchange a valid refresh token for a brand-new pair.

        The presented token is only read; it is neither recorded nor revoked.

        :param token: Encoded refresh JWT.
        :returns: Public user plus a new access/refresh pair.
        :raises InvalidRefreshTokenError: Malformed, forged, expired or
            wrong-class token, unknown user, or stale ``password_version``
            when that check is enabled.
        """
        try:
            claims = self.tokens.verify(TokenClass.REFRESH, token)
        except InvalidTokenError as exc:
            raise InvalidRefreshTokenError() from exc

        with self._store_errors("refresh"):
            with self.ro_uow() as uow:
                user = uow.users.get(claims.id)
                if user is None or not self._version_matches(claims, user):
                    raise InvalidRefreshTokenError()
                public = self._to_public(user)
                payload = TokenPayload.for_user(user)

        logger.info("Token refreshed", extra={"event": "auth.refresh", "user_id": public.id})
        return self._issue_pair(public, payload)

    # ------------------------------------------------------------------ #
    # Current user / bearer authentication
    # ------------------------------------------------------------------ #

    def get_current_user(self, user_id: int) -> CurrentUserOut:
        """
        Read-only projection of a user.

        :param user_id: User id (usually taken from a verified access token).
        :returns: ``{id, username, email, avatar_url, created_at}``.
        :raises UserNotFoundError: No user with that id.
        """
        with self._store_errors("current_user"):
            with self.ro_uow() as uow:
                user = uow.users.get(user_id)
                if user is None:
                    raise UserNotFoundError(user_id)
                return CurrentUserOut(
                    id=user.id,
                    username=user.username,
                    email=user.email,
                    avatar_url=user.avatar_url,
                    created_at=user.created_at,
                )

    def authenticate_access_token(self, token: str) -> TokenPayload:
        """
        Verify a bearer access token against the current user record.

        The user must still exist and its ``password_version`` must equal the
        token's; this check runs regardless of
        :attr:`AuthPolicy.enforce_password_version`.

        :param token: Encoded access JWT.
        :returns: Identity claims of the token.
        :raises InvalidAccessTokenError: Malformed, forged, expired or wrong-class token.
        :raises TokenInvalidatedError: User deleted or password changed since issue.
        """
        try:
            claims = self.tokens.verify(TokenClass.ACCESS, token)
        except InvalidTokenError as exc:
            raise InvalidAccessTokenError() from exc

        with self._store_errors("authenticate"):
            with self.ro_uow() as uow:
                user = uow.users.get(claims.id)
                if user is None or not _same_version(claims, user):
                    logger.debug(
                        "Access token invalidated",
                        extra={"event": "auth.authenticate", "user_id": claims.id},
                    )
                    raise TokenInvalidatedError()
        return claims

    # ------------------------------------------------------------------ #
    # Helpers
    # ------------------------------------------------------------------ #

    @contextmanager
    def _store_errors(self, operation: str) -> Iterator[None]:
        """Surface anything that is not a classified :class:`ServiceError` as ``UnexpectedError``."""
        try:
            yield
        except ServiceError:
            raise
        except Exception as exc:
            logger.exception(
                "Auth operation failed", extra={"event": f"auth.{operation}.error"}
            )
            raise UnexpectedError() from exc

    def _classify_integrity(self, exc: IntegrityError) -> ServiceError:
        if violates(exc, "uq_users_email"):
            return DuplicateEmailError()
        if violates(exc, "uq_users_username"):
            return DuplicateUsernameError()
        logger.error(
            "Unclassified integrity error on register",
            exc_info=exc,
            extra={"event": "auth.register.error"},
        )
        return UnexpectedError()

    def _bootstrap_companion(self, user_id: int, seed: str) -> None:
        try:
            self.companions.ensure_self_companion(user_id, seed)
        except Exception as exc:
            if self.policy.companion is CompanionPolicy.REQUIRED:
                logger.exception(
                    "Companion bootstrap failed",
                    extra={"event": "companion.bootstrap.error", "user_id": user_id},
                )
                raise UnexpectedError() from exc
            logger.warning(
                "Companion bootstrap failed; continuing",
                exc_info=True,
                extra={
                    "event": "companion.bootstrap.error",
                    "user_id": user_id,
                    "policy": self.policy.companion.value,
                },
            )

    def _version_matches(self, claims: TokenPayload, user: User) -> bool:
        return not self.policy.enforce_password_version or _same_version(claims, user)

    def _issue_pair(self, public: PublicUserOut, payload: TokenPayload) -> AuthResultOut:
        return AuthResultOut(
            user=public,
            access_token=self.tokens.issue(TokenClass.ACCESS, payload),
            refresh_token=self.tokens.issue(TokenClass.REFRESH, payload),
        )

    @staticmethod
    def _to_public(user: User) -> PublicUserOut:
        return PublicUserOut(
            id=user.id,
            username=user.username,
            email=user.email,
            avatar_url=user.avatar_url,
        )
