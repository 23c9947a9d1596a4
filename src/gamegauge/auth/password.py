"""Password hashing utilities.

Learn: Uses bcrypt for secure password hashing. bcrypt automatically
handles salting and is resistant to rainbow table attacks.
The work factor (GAMEGAUGE_BCRYPT_ROUNDS, default 12) takes ~100ms per
hash on modern hardware; tests lower it to keep the suite fast.
"""

from typing import Optional

import bcrypt

from gamegauge.config import settings

# bcrypt only looks at the first 72 bytes.
_MAX_BYTES = 72


def hash_password(password: str, rounds: Optional[int] = None) -> str:
    """Hash a password with bcrypt.

    Learn: bcrypt includes a random salt automatically and produces
    hashes starting with "$2b$". Two calls with the same password give
    two different hashes.
    """
    pw_bytes = password.encode("utf-8")[:_MAX_BYTES]
    salt = bcrypt.gensalt(rounds=rounds or settings.bcrypt_rounds)
    return bcrypt.hashpw(pw_bytes, salt).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    """Verify a password against its hash (constant-time inside bcrypt)."""
    try:
        pw_bytes = password.encode("utf-8")[:_MAX_BYTES]
        hash_bytes = password_hash.encode("utf-8")
        return bcrypt.checkpw(pw_bytes, hash_bytes)
    except (ValueError, TypeError):
        return False


_dummy_hash: Optional[str] = None


def dummy_verify(password: str) -> None:
    """Burn the same time as a real check, for unknown accounts.

    Login answers "Invalid credentials" for both a wrong password and an
    unknown email; without this the unknown-email path returns ~100ms
    faster and leaks which emails are registered.
    """
    global _dummy_hash
    if _dummy_hash is None:
        _dummy_hash = hash_password("gamegauge-timing-equalizer")
    verify_password(password, _dummy_hash)
