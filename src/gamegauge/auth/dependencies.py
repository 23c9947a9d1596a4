"""FastAPI auth dependencies — the per-request authentication gateway.

Learn: These are used as Depends() in route handlers (or at the
include_router level) to turn the Authorization header into an identity.

The gateway is deliberately forgiving: a missing, malformed or expired
token just means "no identity". It never rejects a request by itself.
Rejection happens in get_current_user, which protected routers declare.
The one hard failure is a validly signed token whose user no longer
exists — that is a data inconsistency, reported as 401.

The resolved identity is cached on request.state so the gateway does
its work once per request even if several dependencies ask for it.
"""

from dataclasses import dataclass
from typing import Optional

import structlog
from fastapi import Depends, Header, HTTPException, Request
from sqlalchemy.ext.asyncio import AsyncSession

from gamegauge.auth.credentials import CredentialStore
from gamegauge.auth.jwt import TokenService
from gamegauge.db.engine import get_db
from gamegauge.errors import AuthenticationError, TokenError

logger = structlog.get_logger()

BEARER_PREFIX = "Bearer "


@dataclass(frozen=True)
class CurrentIdentity:
    """The authenticated caller.

    Learn: `subject` is the account email — the opaque string every
    service method takes as `owner_email`. There are no roles; the
    authority set is always empty.
    """

    subject: str
    authorities: tuple[str, ...] = ()


class AuthenticationGateway:
    """Resolves a bearer token into a CurrentIdentity (or None)."""

    def __init__(self, tokens: TokenService, store: CredentialStore):
        self.tokens = tokens
        self.store = store

    async def authenticate(
        self, request: Request, authorization: Optional[str]
    ) -> Optional[CurrentIdentity]:
        existing = getattr(request.state, "identity", None)
        if existing is not None:
            return existing

        if not authorization or not authorization.startswith(BEARER_PREFIX):
            return None

        token = authorization[len(BEARER_PREFIX):]
        try:
            subject = self.tokens.subject_of(token)
        except TokenError as e:
            logger.warning("auth.token_unreadable", error=str(e))
            return None

        user = await self.store.find_by_email(subject)
        if user is None:
            logger.error("auth.token_subject_unknown", subject=subject)
            raise AuthenticationError("Token subject does not match any account")

        try:
            self.tokens.verify(token, expected_subject=user.email)
        except TokenError as e:
            logger.warning("auth.token_rejected", subject=subject, error=str(e))
            return None

        identity = CurrentIdentity(subject=user.email)
        request.state.identity = identity
        logger.debug("auth.authenticated", subject=subject)
        return identity


def get_token_service() -> TokenService:
    return TokenService()


async def get_current_user_optional(
    request: Request,
    authorization: Optional[str] = Header(None),
    db: AsyncSession = Depends(get_db),
    tokens: TokenService = Depends(get_token_service),
) -> Optional[CurrentIdentity]:
    """Extract current identity (optional — returns None if no auth).

    Learn: This is the "soft" auth dependency. Used for endpoints that
    work both authenticated and unauthenticated. For mandatory auth,
    use get_current_user instead.
    """
    gateway = AuthenticationGateway(tokens, CredentialStore(db))
    return await gateway.authenticate(request, authorization)


async def get_current_user(
    identity: Optional[CurrentIdentity] = Depends(get_current_user_optional),
) -> CurrentIdentity:
    """Extract current identity (required — 401 if no auth).

    Learn: This is the "hard" auth dependency. Used for endpoints
    that require authentication.
    """
    if not identity:
        raise HTTPException(
            status_code=401,
            detail="Authentication required",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return identity
