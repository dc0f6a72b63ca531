"""Staff authentication.

bcrypt password hashes (passlib) and HS256 bearer tokens (python-jose). The
token subject is the user id; salon access is decided per request by
``core.permissions`` from the user's memberships, never from token claims.
"""

import logging
from datetime import timedelta
from typing import Optional

from jose import JWTError, jwt
from passlib.context import CryptContext

from salonbook.core.config import settings
from salonbook.models.salon import User
from salonbook.repositories.container import Repositories
from salonbook.utils.date_utils import utcnow

logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__default_ident="2b")

ALGORITHM = "HS256"
BCRYPT_MAX_BYTES = 72


def _bcrypt_input(password: str) -> str:
    encoded = password.encode("utf-8")
    if len(encoded) <= BCRYPT_MAX_BYTES:
        return password
    return encoded[:BCRYPT_MAX_BYTES].decode("utf-8", errors="ignore")


def hash_password(password: str) -> str:
    return pwd_context.hash(_bcrypt_input(password))


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(_bcrypt_input(plain_password), hashed_password)


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    lifetime = expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    claims = {**data, "exp": utcnow() + lifetime}
    return jwt.encode(claims, settings.JWT_SECRET_KEY, algorithm=ALGORITHM)


def decode_access_token(token: str) -> Optional[dict]:
    """Claims of a valid token; None when the signature or expiry is bad."""
    try:
        return jwt.decode(token, settings.JWT_SECRET_KEY, algorithms=[ALGORITHM])
    except JWTError as e:
        logger.warning("Rejected access token: %s", e)
        return None


async def authenticate_user(repos: Repositories, email: str, password: str) -> Optional[User]:
    """Active user matching the credentials, with ``last_login_at`` stamped."""
    user = await repos.users.get_by_email(email)
    if user is None or not user.is_active:
        return None
    if not verify_password(password, user.hashed_password):
        logger.info("Failed login for %s", email)
        return None

    user.last_login_at = utcnow()
    await repos.commit()
    return user
