"""Credential store — the only place that reads and writes user records.

Learn: Auth code never builds User queries itself. It asks the store
("find by email", "find by reset token") so the lookup rules live in
one spot. Reset tokens are looked up by their SHA-256 digest; the raw
token only exists in the email we send.
"""

import hashlib
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from gamegauge.db.models import User


def digest_reset_token(token: str) -> str:
    return hashlib.sha256(token.encode()).hexdigest()


class CredentialStore:
    """Persistence for User records."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def find_by_email(self, email: str) -> Optional[User]:
        result = await self.db.execute(select(User).where(User.email == email))
        return result.scalars().first()

    async def find_by_username(self, username: str) -> Optional[User]:
        result = await self.db.execute(select(User).where(User.username == username))
        return result.scalars().first()

    async def find_by_reset_token(self, token: str) -> Optional[User]:
        result = await self.db.execute(
            select(User).where(User.reset_token_hash == digest_reset_token(token))
        )
        return result.scalars().first()

    async def save(self, user: User) -> User:
        """Insert or update and commit. Returns the same, now persistent, user."""
        self.db.add(user)
        await self.db.commit()
        return user

    async def delete(self, user: User) -> None:
        await self.db.delete(user)
        await self.db.commit()
