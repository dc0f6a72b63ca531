"""Request dependencies: the repository bundle and the authenticated staff user."""

from typing import Optional
from uuid import UUID

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from salonbook.core.database import get_db
from salonbook.models.salon import User
from salonbook.repositories.container import Repositories
from salonbook.services.auth import decode_access_token

bearer = HTTPBearer()


async def get_repositories(db: AsyncSession = Depends(get_db)) -> Repositories:
    return Repositories(db)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def _subject(claims: dict) -> Optional[UUID]:
    try:
        return UUID(str(claims.get("sub")))
    except ValueError:
        return None


async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(bearer),
    repos: Repositories = Depends(get_repositories),
) -> User:
    """Staff user behind the bearer token.

    401 for a bad token or unknown user, 403 for a disabled account. Salon
    membership is checked later by ``require_permission``.
    """
    claims = decode_access_token(credentials.credentials)
    if claims is None:
        raise _unauthorized("Could not validate credentials")

    user_id = _subject(claims)
    if user_id is None:
        raise _unauthorized("Invalid token payload")

    user = await repos.users.get(user_id)
    if user is None:
        raise _unauthorized("User not found")
    if not user.is_active:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="User account is disabled")
    return user
