# mediatree/core/security.py
import logging
from datetime import datetime, timedelta, timezone
from functools import lru_cache

from fastapi import Depends, HTTPException, Query, status
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError, jwt
from passlib.context import CryptContext

from mediatree.core.config import settings

logger = logging.getLogger(__name__)

# --- 1. Password hashing ---
pwd_context = CryptContext(schemes=["argon2"], deprecated="auto")

ALGORITHM = "HS256"

# The single shared user. The password form's username field is ignored.
SUBJECT = "viewer"

# auto_error=False: when no password is configured the API is open and
# requests without an Authorization header must get through.
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/token", auto_error=False)


def auth_required() -> bool:
    return bool(settings.ACCESS_PASSWORD)


@lru_cache(maxsize=4)
def _hash_for(password: str) -> str:
    # Hashed once per configured password, not per login
    return pwd_context.hash(password)


def verify_password(plain_password: str) -> bool:
    if not auth_required():
        return True
    try:
        return pwd_context.verify(plain_password, _hash_for(settings.ACCESS_PASSWORD))
    except ValueError:
        return False


# --- 2. JWT ---
def create_access_token(subject: str = SUBJECT) -> str:
    expire = datetime.now(timezone.utc) + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    return jwt.encode({"sub": subject, "exp": expire}, settings.SECRET_KEY, algorithm=ALGORITHM)


# --- 3. Dependency guarding every API router ---
async def require_access(
    header_token: str | None = Depends(oauth2_scheme),
    # <video src> cannot send headers, so streaming URLs carry ?token=
    query_token: str | None = Query(default=None, alias="token", include_in_schema=False),
) -> None:
    """
    Lets every request through when no ACCESS_PASSWORD is configured;
    otherwise requires a valid, unexpired bearer token.
    """
    if not auth_required():
        return

    token = header_token or query_token

    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    if not token:
        raise credentials_exception
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[ALGORITHM])
    except JWTError:
        logger.info("Rejected invalid or expired access token")
        raise credentials_exception
    if payload.get("sub") != SUBJECT:
        raise credentials_exception
