"""Auth service — registration, login, forgot/reset password.

Learn: Each method is one atomic unit of work, with no state machine
between calls. Collaborators are injected so tests can swap them:
- CredentialStore: user lookups and writes
- TokenService: bearer tokens for successful logins
- human verifier: reCAPTCHA oracle, consulted before touching storage
- notifier: sends reset links, fire-and-forget

Error policy (see errors.py):
- registration reports *which* field collided (409) — the user has to
  fix it, and usernames are public anyway
- login collapses bad password, unknown email and failed human check
  into one AuthenticationError so none of them can be probed
- forgot-password never says whether the email exists
"""

import secrets
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional, Protocol

import structlog
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from gamegauge.auth.credentials import CredentialStore, digest_reset_token
from gamegauge.auth.jwt import TokenService
from gamegauge.auth.password import dummy_verify, hash_password, verify_password
from gamegauge.config import settings
from gamegauge.db.models import User
from gamegauge.errors import (
    AuthenticationError,
    ConflictError,
    ExpiredTokenError,
    HumanVerificationError,
    InvalidTokenError,
    UnexpectedError,
)

logger = structlog.get_logger()


class HumanVerifier(Protocol):
    async def check(self, token: Optional[str]) -> bool: ...


class ResetNotifier(Protocol):
    async def send_reset_link(self, to_email: str, token: str) -> None: ...


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes; everything we store is UTC.
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class PasswordAuthenticator:
    """Email + password check with a uniform failure."""

    def __init__(self, store: CredentialStore):
        self.store = store

    async def authenticate(self, email: str, password: str) -> User:
        user = await self.store.find_by_email(email)
        if user is None:
            dummy_verify(password)
            raise AuthenticationError()
        if not verify_password(password, user.password_hash):
            raise AuthenticationError()
        return user


class AuthService:
    """Business logic for account lifecycle."""

    def __init__(
        self,
        db: AsyncSession,
        tokens: TokenService,
        verifier: HumanVerifier,
        notifier: ResetNotifier,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self.db = db
        self.store = CredentialStore(db)
        self.authenticator = PasswordAuthenticator(self.store)
        self.tokens = tokens
        self.verifier = verifier
        self.notifier = notifier
        self.clock = clock

    # ─── Register ───────────────────────────────────────

    async def register_user(
        self,
        username: str,
        email: str,
        password: str,
        recaptcha_token: Optional[str],
    ) -> User:
        log = logger.bind(username=username)
        log.info("auth.register.attempt")

        if not await self.verifier.check(recaptcha_token):
            log.warning("auth.register.human_verification_failed")
            raise HumanVerificationError()

        try:
            if await self.store.find_by_username(username):
                log.warning("auth.register.conflict", field="username")
                raise ConflictError("username", "Username is already taken")

            if await self.store.find_by_email(email):
                log.warning("auth.register.conflict", field="email")
                raise ConflictError("email", "Email is already in use")

            user = User(
                username=username,
                email=email,
                password_hash=hash_password(password),
                email_verified=False,
            )
            await self.store.save(user)
        except SQLAlchemyError:
            await self.db.rollback()
            log.exception("auth.register.storage_error")
            raise UnexpectedError("Unexpected error during registration")

        log.info("auth.registered", user_id=user.id)
        return user

    # ─── Login ──────────────────────────────────────────

    async def login(
        self, email: str, password: str, recaptcha_token: Optional[str]
    ) -> str:
        """Check credentials and return a fresh bearer token."""
        log = logger.bind(email=email)

        if not await self.verifier.check(recaptcha_token):
            log.warning("auth.login.human_verification_failed")
            raise AuthenticationError()

        try:
            await self.authenticator.authenticate(email, password)
            user = await self.store.find_by_email(email)
        except SQLAlchemyError:
            log.exception("auth.login.storage_error")
            raise UnexpectedError("Unexpected error during login")
        except AuthenticationError:
            log.warning("auth.login.failed")
            raise

        if user is None:
            log.error("auth.login.user_vanished")
            raise UnexpectedError("User not found after authentication")

        token = self.tokens.issue(user.email)
        log.info("auth.login.success", user_id=user.id)
        return token

    # ─── Password reset ─────────────────────────────────

    async def forgot_password(self, email: str) -> bool:
        """Issue a reset token and email it. Returns False for unknown emails.

        Learn: the route ignores the return value and always answers the
        same sentence, so the endpoint can't be used to enumerate
        accounts. The boolean exists for logging and tests.
        """
        user = await self.store.find_by_email(email)
        if user is None:
            logger.info("auth.forgot_password.unknown_email")
            return False

        token = secrets.token_urlsafe(32)
        user.reset_token_hash = digest_reset_token(token)
        user.reset_token_expires_at = self.clock() + timedelta(
            minutes=settings.reset_token_expire_minutes
        )
        await self.store.save(user)
        logger.info("auth.forgot_password.token_issued", user_id=user.id)

        # The token is already committed; a mail failure must not undo it.
        try:
            await self.notifier.send_reset_link(user.email, token)
        except Exception:
            logger.exception("auth.reset_email_failed", user_id=user.id)
        return True

    async def reset_password(self, token: str, new_password: str) -> None:
        """Set a new password using a single-use reset token.

        An expired token is left in place: it can never pass this check
        again and the next forgot-password request overwrites it.
        """
        user = await self.store.find_by_reset_token(token)
        if user is None or user.reset_token_expires_at is None:
            logger.warning("auth.reset_password.invalid_token")
            raise InvalidTokenError("Invalid reset token")

        if _as_utc(user.reset_token_expires_at) < self.clock():
            logger.warning("auth.reset_password.expired_token", user_id=user.id)
            raise ExpiredTokenError("Reset token has expired")

        user.password_hash = hash_password(new_password)
        user.reset_token_hash = None
        user.reset_token_expires_at = None
        await self.store.save(user)
        logger.info("auth.reset_password.done", user_id=user.id)
