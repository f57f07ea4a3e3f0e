"""Core functionality for ContractLens."""

from .config import get_settings
from .database import get_db, get_session_maker
from .security import (
    create_access_token,
    decode_access_token,
)

__all__ = [
    "get_settings",
    "get_db",
    "get_session_maker",
    "create_access_token",
    "decode_access_token",
]
