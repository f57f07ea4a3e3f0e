"""ContractAnalysis model: one completed, immutable contract analysis."""

from typing import Any, Dict, List, Optional

from sqlalchemy import String, Text, Integer, JSON, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, CreatedAtMixin, UUIDMixin

CONTRACT_TYPE_MAX_LENGTH = 200


class ContractAnalysis(UUIDMixin, CreatedAtMixin, Base):
    """Persisted result of analyzing one uploaded contract."""
    __tablename__ = "contract_analyses"

    user_id: Mapped[str] = mapped_column(String(36), ForeignKey("users.id"), nullable=False, index=True)

    contract_text: Mapped[str] = mapped_column(Text, nullable=False)
    contract_type: Mapped[str] = mapped_column(String(CONTRACT_TYPE_MAX_LENGTH), nullable=False)

    # Findings
    summary: Mapped[str] = mapped_column(Text, nullable=False)
    risks: Mapped[List[Dict[str, Any]]] = mapped_column(JSON, nullable=False, default=list)
    opportunities: Mapped[List[Dict[str, Any]]] = mapped_column(JSON, nullable=False, default=list)
    recommendations: Mapped[List[str]] = mapped_column(JSON, nullable=False, default=list)
    key_clauses: Mapped[List[str]] = mapped_column(JSON, nullable=False, default=list)
    overall_score: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)

    ai_model: Mapped[str] = mapped_column(String(100), nullable=False)
    language: Mapped[str] = mapped_column(String(16), nullable=False, default="en")
