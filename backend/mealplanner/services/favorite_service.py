"""
Meal Planner Backend - Favorites Service
========================================

What:  Saves and lists user-selected meal plans in the `favorites` collection.
Who:   Called by POST /favorites and GET /favorites.

Error Handling:
    Missing content  → ClientInputError (400), nothing is written
    Store failure    → DocumentStoreError (500) with a per-operation message;
                       the driver error is logged here, not returned
"""

import logging
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from mealplanner.exceptions import ClientInputError, DocumentStoreError
from mealplanner.models.favorite import Favorite
from mealplanner.schemas.favorite import FavoriteItem

logger = logging.getLogger(__name__)


class FavoriteService:
    """Business logic for the favorites collection. Stateless."""

    async def save_favorite(self, db: AsyncSession, meal_plan_markdown: Optional[str]) -> Favorite:
        """
        Persist a meal plan as a new favorite.

        Args:
            db: Async session (injected by FastAPI)
            meal_plan_markdown: Plan body; None and "" are rejected

        Returns:
            The stored Favorite with its generated id.

        Raises:
            ClientInputError: no content provided
            DocumentStoreError: insert or commit failed
        """
        if not meal_plan_markdown:
            raise ClientInputError(
                message="No meal plan content provided.",
                field="mealPlanMarkdown",
            )

        favorite = Favorite(content=meal_plan_markdown)
        try:
            db.add(favorite)
            await db.flush()
            await db.commit()
        except Exception as e:
            await db.rollback()
            logger.error("Error saving favorite: %s", str(e), exc_info=True)
            raise DocumentStoreError(
                message="Failed to save favorite.",
                context={"error_type": type(e).__name__},
            ) from e

        logger.info("Favorite saved: %s (%d chars)", favorite.id, len(meal_plan_markdown))
        return favorite

    async def list_favorites(self, db: AsyncSession) -> List[FavoriteItem]:
        """
        Return every favorite. No pagination, filtering, or ordering.

        Raises:
            DocumentStoreError: the query failed
        """
        try:
            result = await db.execute(select(Favorite))
            favorites = list(result.scalars().all())
        except Exception as e:
            logger.error("Error fetching favorites: %s", str(e), exc_info=True)
            raise DocumentStoreError(
                message="Failed to fetch favorites.",
                context={"error_type": type(e).__name__},
            ) from e

        return [FavoriteItem.model_validate(favorite) for favorite in favorites]


favorite_service = FavoriteService()
