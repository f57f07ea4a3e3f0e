"""Schemas for contract type detection and contract analyses."""

from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import ConfigDict, Field, field_validator

from .common import CamelModel


class AnalysisTier(str, Enum):
    """Account entitlement selecting analysis depth."""
    FREE = "free"
    PREMIUM = "premium"


class RiskItem(CamelModel):
    """One risk found in a contract."""
    risk: str
    explanation: str = ""
    severity: str = "medium"


class OpportunityItem(CamelModel):
    """One opportunity found in a contract."""
    opportunity: str
    explanation: str = ""
    impact: str = "medium"


class AnalysisFindings(CamelModel):
    """Validated structure returned by the analysis model.

    ``summary``, ``risks`` and ``opportunities`` have no defaults: a model
    response missing any of them fails validation.
    """
    summary: str
    risks: List[RiskItem]
    opportunities: List[OpportunityItem]
    recommendations: List[str] = Field(default_factory=list)
    key_clauses: List[str] = Field(default_factory=list)
    overall_score: Optional[int] = Field(default=None, ge=0, le=100)

    @field_validator("summary")
    @classmethod
    def summary_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("summary must not be empty")
        return value


class DetectTypeResponse(CamelModel):
    """Response of contract type detection."""
    detected_type: str


class ContractAnalysisResponse(CamelModel):
    """A stored contract analysis."""
    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: str
    contract_text: str
    contract_type: str
    summary: str
    risks: List[RiskItem]
    opportunities: List[OpportunityItem]
    recommendations: List[str] = Field(default_factory=list)
    key_clauses: List[str] = Field(default_factory=list)
    overall_score: Optional[int] = None
    ai_model: str
    language: str
    created_at: datetime
