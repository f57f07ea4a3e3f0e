"""User model for authentication."""

import uuid
from datetime import datetime
from sqlalchemy import Column, String, Boolean, DateTime
from .base import Base


class User(Base):
    """User account model.

    Rows are created by the Google OAuth collaborator; this service only
    reads them to resolve the caller and their analysis tier.
    """
    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    google_id = Column(String, unique=True, index=True, nullable=True)
    email = Column(String, nullable=False, unique=True, index=True)
    name = Column(String)
    picture = Column(String, nullable=True)
    is_active = Column(Boolean, default=True)
    is_premium = Column(Boolean, default=False)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
