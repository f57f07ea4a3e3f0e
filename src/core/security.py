"""Security utilities for authentication.

Sessions are issued by the Google OAuth collaborator as bearer JWTs; this
module verifies them and resolves the calling user.
"""

from datetime import datetime, timedelta, timezone
import logging
from typing import Optional, TYPE_CHECKING
import uuid

from jose import JWTError, jwt
from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer
from redis import asyncio as aioredis
from redis.exceptions import RedisError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from .cache import revoked_token_key
from .config import get_settings
from .exceptions import ServiceUnavailableError, UnauthorizedError

logger = logging.getLogger(__name__)

# Avoid circular import
if TYPE_CHECKING:
    from models.user import User


oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/google", auto_error=False)


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """Create a JWT access token.

    Args:
        data: Token payload. Must include 'sub' (user_id).
        expires_delta: Optional expiration time delta.

    Returns:
        Encoded JWT token string carrying a unique 'jti'.
    """
    settings = get_settings()
    to_encode = data.copy()

    if expires_delta:
        expire = datetime.now(timezone.utc) + expires_delta
    else:
        expire = datetime.now(timezone.utc) + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)

    to_encode.update({"exp": expire, "jti": to_encode.get("jti") or uuid.uuid4().hex})
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_access_token(token: str) -> dict:
    """Decode and verify a token, raising UnauthorizedError when invalid."""
    settings = get_settings()
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError:
        raise UnauthorizedError("Could not validate credentials")
    if payload.get("sub") is None:
        raise UnauthorizedError("Could not validate credentials")
    return payload


async def get_token_payload(token: Optional[str] = Depends(oauth2_scheme)) -> dict:
    """Verified payload of the request's bearer token."""
    if not token:
        raise UnauthorizedError("No user session found")
    return decode_access_token(token)


async def revoke_token(redis_client: aioredis.Redis, payload: dict) -> None:
    """Mark a token as revoked until it would have expired anyway.

    Raises:
        ServiceUnavailableError: If the revocation cannot be recorded
    """
    jti = payload.get("jti")
    if not jti:
        return
    remaining = int(payload.get("exp", 0) - datetime.now(timezone.utc).timestamp())
    if remaining <= 0:
        return
    try:
        await redis_client.set(revoked_token_key(jti), b"1", ex=remaining)
    except RedisError as e:
        logger.error(f"Failed to revoke token {jti}: {e}")
        raise ServiceUnavailableError("Failed to logout") from e


async def is_token_revoked(redis_client: aioredis.Redis, jti: str) -> bool:
    """Check the revocation list; an unreachable store fails closed."""
    try:
        return await redis_client.exists(revoked_token_key(jti)) > 0
    except RedisError as e:
        logger.error(f"Failed to check revocation of token {jti}: {e}")
        raise ServiceUnavailableError("Session store unavailable") from e


async def resolve_user(db: AsyncSession, redis_client: aioredis.Redis, payload: dict) -> "User":
    """Load the active user a verified token belongs to."""
    # Import here to avoid circular import
    from models.user import User

    jti = payload.get("jti")
    if jti and await is_token_revoked(redis_client, jti):
        raise UnauthorizedError("Session has been logged out")

    result = await db.execute(
        select(User).where(User.id == str(payload["sub"]))
    )
    user = result.scalar_one_or_none()

    if user is None or not user.is_active:
        raise UnauthorizedError("Could not validate credentials")
    return user
