"""JWT token creation and verification.

Learn: JWT (JSON Web Token) provides stateless authentication. The
server keeps no session: the token itself says who you are (`sub`, the
account email) and until when (`exp`, 24h after `iat`). It is signed
with HS256 using GAMEGAUGE_JWT_SECRET, so any change to the payload
breaks the signature.

Two read paths:
- subject_of(): signature + expiry. Used by the auth gateway to know
  *which* user to load before doing the full check.
- verify(): signature + expiry + expected subject. Expiry is checked
  against an injectable clock so tests can move time forward.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Optional

import jwt

from gamegauge.config import settings
from gamegauge.errors import ExpiredTokenError, InvalidTokenError

Clock = Callable[[], datetime]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class TokenClaims:
    subject: str
    issued_at: datetime
    expires_at: datetime


class TokenService:
    """Issues and verifies signed bearer tokens."""

    def __init__(
        self,
        secret: Optional[str] = None,
        algorithm: Optional[str] = None,
        expires_minutes: Optional[int] = None,
        clock: Clock = _utcnow,
    ):
        self.secret = secret or settings.jwt_secret
        self.algorithm = algorithm or settings.jwt_algorithm
        self.ttl = timedelta(
            minutes=expires_minutes or settings.access_token_expire_minutes
        )
        self.clock = clock

    def issue(self, subject: str, extra_claims: Optional[dict[str, Any]] = None) -> str:
        """Create a signed token for `subject`, valid for the configured TTL."""
        now = self.clock()
        payload: dict[str, Any] = dict(extra_claims or {})
        payload.update(
            {
                "sub": subject,
                "iat": int(now.timestamp()),
                "exp": int((now + self.ttl).timestamp()),
            }
        )
        return jwt.encode(payload, self.secret, algorithm=self.algorithm)

    def subject_of(self, token: str) -> str:
        """Return the `sub` claim of a correctly signed, unexpired token.

        Raises InvalidTokenError for anything unparseable and
        ExpiredTokenError once `exp` has passed — callers treat both as
        "not authenticated", never as a server error.
        """
        payload = self._decode(token)
        subject = payload.get("sub")
        if not isinstance(subject, str) or not subject:
            raise InvalidTokenError("Token has no subject")
        if self._expires_at(payload) <= self.clock():
            raise ExpiredTokenError("Token has expired")
        return subject

    def verify(self, token: str, expected_subject: str) -> TokenClaims:
        """Full check: signature, expiry and subject.

        Returns the claims on success.
        Raises ExpiredTokenError or InvalidTokenError on failure.
        """
        payload = self._decode(token)
        try:
            issued_at = datetime.fromtimestamp(int(payload["iat"]), tz=timezone.utc)
        except (KeyError, TypeError, ValueError):
            raise InvalidTokenError("Token is missing iat")
        expires_at = self._expires_at(payload)

        if expires_at <= self.clock():
            raise ExpiredTokenError("Token has expired")
        if payload.get("sub") != expected_subject:
            raise InvalidTokenError("Token subject mismatch")

        return TokenClaims(
            subject=expected_subject, issued_at=issued_at, expires_at=expires_at
        )

    @staticmethod
    def _expires_at(payload: dict) -> datetime:
        try:
            return datetime.fromtimestamp(int(payload["exp"]), tz=timezone.utc)
        except (KeyError, TypeError, ValueError, OverflowError, OSError):
            raise InvalidTokenError("Token is missing exp")

    def _decode(self, token: str) -> dict:
        # Time claims are checked against self.clock, not PyJWT's wall clock.
        try:
            return jwt.decode(
                token,
                self.secret,
                algorithms=[self.algorithm],
                options={
                    "verify_exp": False,
                    "verify_iat": False,
                    "require": ["sub", "iat", "exp"],
                },
            )
        except jwt.InvalidTokenError as e:
            raise InvalidTokenError(f"Invalid token: {e}")
