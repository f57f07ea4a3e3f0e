"""Database models for ContractLens."""

from .base import Base
from .user import User
from .contract_analysis import ContractAnalysis

__all__ = [
    "Base",
    "User",
    "ContractAnalysis",
]
