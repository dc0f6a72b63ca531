"""Staff login."""

import logging

from fastapi import APIRouter, Depends, HTTPException, status

from salonbook.core.deps import get_repositories
from salonbook.repositories.container import Repositories
from salonbook.schemas.auth import Token, UserLogin
from salonbook.services.auth import authenticate_user, create_access_token

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post("/login", response_model=Token)
async def login(credentials: UserLogin, repos: Repositories = Depends(get_repositories)):
    """Exchange email and password for a bearer token."""
    user = await authenticate_user(repos, credentials.email, credentials.password)
    if user is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Incorrect email or password")

    logger.info("Staff login: %s", user.id)
    return Token(
        access_token=create_access_token(data={"sub": str(user.id)}),
        user_id=user.id,
        full_name=user.full_name,
        email=user.email,
    )
