"""Common Pydantic schemas."""

from typing import Optional, Dict
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from datetime import datetime, timezone


class CamelModel(BaseModel):
    """Base schema serialized with camelCase keys for the web client."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        protected_namespaces=(),
    )


class MessageResponse(BaseModel):
    """Plain message response."""
    message: str


class HealthResponse(BaseModel):
    """Health check response."""
    status: str = "ok"
    version: str
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    services: Dict[str, str] = Field(default_factory=dict)


class CurrentUserResponse(CamelModel):
    """Non-sensitive view of the authenticated user."""
    model_config = ConfigDict(from_attributes=True)

    id: str
    email: str
    name: Optional[str] = None
    picture: Optional[str] = None
    is_premium: bool = False
