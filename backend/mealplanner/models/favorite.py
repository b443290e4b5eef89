"""
Meal Planner Backend - Favorite Plan Model
==========================================

What:  ORM model for the `favorites` collection.
Who:   Written by FavoriteService.save_favorite(); read by list_favorites().

A favorite is a user-saved meal plan in markdown. It is created once and
never updated or deleted by this service.
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import DateTime, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from mealplanner.database import Base


class Favorite(Base):
    """A saved meal plan document."""

    __tablename__ = "favorites"

    # Store-assigned identifier, exposed to clients as a string
    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
        comment="Document identifier",
    )

    # Markdown body of the plan; no length limit
    content: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        comment="Meal plan markdown as submitted by the client",
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        comment="When the plan was saved (UTC)",
    )

    def __repr__(self) -> str:
        return f"<Favorite(id={self.id}, created_at='{self.created_at}')>"
