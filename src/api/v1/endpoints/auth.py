"""Authentication endpoints.

Sign-in itself happens through Google OAuth outside this service; these
endpoints expose the resulting session.
"""

from fastapi import APIRouter, Depends
from redis import asyncio as aioredis

from core.dependencies import get_current_user, get_redis
from core.security import get_token_payload, revoke_token
from models.user import User
from schemas.common import CurrentUserResponse, MessageResponse

router = APIRouter()


@router.get("/current-user", response_model=CurrentUserResponse)
async def current_user(user: User = Depends(get_current_user)):
    """Get the authenticated user without sensitive fields."""
    return CurrentUserResponse.model_validate(user)


@router.post("/logout", response_model=MessageResponse)
async def logout(
    user: User = Depends(get_current_user),
    payload: dict = Depends(get_token_payload),
    redis_client: aioredis.Redis = Depends(get_redis),
):
    """Revoke the current access token."""
    await revoke_token(redis_client, payload)
    return MessageResponse(message="Logged out successfully")
