"""
Meal Planner Backend - Favorites Schemas
========================================

What:  Request and response models for POST/GET /favorites.
"""

import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import Field

from mealplanner.schemas.common import ApiModel


class SaveFavoriteRequest(ApiModel):
    """
    Body of POST /favorites.

    Optional at the schema level so an absent field reaches the service,
    which answers with the specific 400 message.
    """

    meal_plan_markdown: Optional[str] = Field(
        default=None,
        description="Meal plan markdown to save",
    )


class SaveFavoriteResponse(ApiModel):
    success: bool = Field(default=True)
    id: uuid.UUID = Field(description="Identifier assigned by the document store")


class FavoriteItem(ApiModel):
    """One document of the `favorites` collection."""

    id: uuid.UUID
    content: str
    created_at: datetime


class FavoriteListResponse(ApiModel):
    """All favorites, in no guaranteed order."""

    success: bool = Field(default=True)
    favorites: List[FavoriteItem]
