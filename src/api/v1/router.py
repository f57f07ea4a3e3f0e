"""
API v1 router.

Mounted under the configured API prefix (``/api``).
"""

from fastapi import APIRouter

from .endpoints import auth, contracts

# Create the main API router
api_router = APIRouter()

api_router.include_router(auth.router, prefix="/auth", tags=["auth"])
api_router.include_router(contracts.router, prefix="/contracts", tags=["contracts"])
