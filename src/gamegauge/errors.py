"""Domain error taxonomy.

Learn: Services raise these instead of HTTPException so they stay usable
outside of FastAPI (CLI, tests, scripts). api/errors.py maps each class
to a status code and a deliberately minimal public message:

- ValidationError / ConflictError → field-level feedback (400 / 409)
- AuthenticationError → 401, never says *which* check failed
- NotFoundError / AuthorizationError → 404, same body for both so a
  caller can't probe for boards that belong to someone else
- TokenError → 400 for reset tokens (bearer tokens never get this far)
- UnexpectedError → 500, details only in the logs
"""

from typing import Optional


class GameGaugeError(Exception):
    """Base class for errors the API turns into structured responses."""

    status_code = 500
    public_message = "Internal server error"

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or self.public_message)
        self.message = message or self.public_message


class ValidationError(GameGaugeError):
    """Malformed input, reported per field."""

    status_code = 400
    public_message = "Validation failed"

    def __init__(self, errors: dict[str, str]):
        super().__init__("; ".join(f"{k}: {v}" for k, v in errors.items()))
        self.errors = errors


class HumanVerificationError(GameGaugeError):
    """The reCAPTCHA oracle rejected the request (registration only)."""

    status_code = 400
    public_message = "Human verification failed"


class ConflictError(GameGaugeError):
    """A unique field (username, email) is already taken."""

    status_code = 409
    public_message = "Conflict"

    def __init__(self, field: str, message: str):
        super().__init__(message)
        self.field = field


class AuthenticationError(GameGaugeError):
    """Bad credentials, unknown account or failed human verification on login."""

    status_code = 401
    public_message = "Invalid credentials"


class NotFoundError(GameGaugeError):
    """Resource absent — or present but not reachable by the caller."""

    status_code = 404
    public_message = "Resource not found"


class AuthorizationError(NotFoundError):
    """Caller is not the owner. Surfaced exactly like NotFoundError."""


class TokenError(GameGaugeError):
    """Raised when token creation/verification fails."""

    status_code = 400
    public_message = "Invalid token"


class InvalidTokenError(TokenError):
    """Token is unknown, malformed, badly signed or for another subject."""


class ExpiredTokenError(TokenError):
    """Token was valid once but its expiry has passed."""

    public_message = "Token has expired"


class UnexpectedError(GameGaugeError):
    """Storage or infrastructure fault. Logged in full, returned opaque."""
