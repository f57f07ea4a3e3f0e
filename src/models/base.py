"""Base model for SQLAlchemy ORM."""

from sqlalchemy.ext.asyncio import AsyncAttrs
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy import String, DateTime, func
from datetime import datetime, timezone
import uuid


class Base(AsyncAttrs, DeclarativeBase):
    """Base class for all database models with async support."""
    pass


class CreatedAtMixin:
    """Mixin for a server-assigned creation timestamp."""
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        server_default=func.now(),
        index=True,
    )


class UUIDMixin:
    """Mixin for UUID primary key."""
    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=lambda: str(uuid.uuid4())
    )


__all__ = ["Base", "CreatedAtMixin", "UUIDMixin"]
