"""User API — the caller's own profile.

Learn: The route gets the identity from get_current_user and passes the
subject down explicitly. The router is also mounted with the auth
dependency, so an anonymous call never reaches the handler.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from gamegauge.auth.credentials import CredentialStore
from gamegauge.auth.dependencies import CurrentIdentity, get_current_user
from gamegauge.db.engine import get_db
from gamegauge.errors import NotFoundError
from gamegauge.schemas.auth import UserRead

router = APIRouter(prefix="/users")


@router.get("/me", response_model=UserRead)
async def get_me(
    identity: CurrentIdentity = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Get the current authenticated user's info."""
    user = await CredentialStore(db).find_by_email(identity.subject)
    if user is None:
        raise NotFoundError("User not found")
    return user
