"""
Meal Planner Backend - Favorites Routes
=======================================

What:  POST /favorites (save) and GET /favorites (list all).
Who:   The frontend's "save plan" button and favorites list.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from mealplanner.database import get_db_session
from mealplanner.schemas.common import ErrorResponse
from mealplanner.schemas.favorite import (
    FavoriteListResponse,
    SaveFavoriteRequest,
    SaveFavoriteResponse,
)
from mealplanner.services.favorite_service import favorite_service

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Favorites"])


@router.post(
    "/favorites",
    response_model=SaveFavoriteResponse,
    responses={
        400: {"description": "No meal plan content provided", "model": ErrorResponse},
        500: {"description": "Document store failure", "model": ErrorResponse},
    },
    summary="Save a meal plan as a favorite",
)
async def save_favorite(
    payload: Optional[SaveFavoriteRequest] = None,
    db: AsyncSession = Depends(get_db_session),
) -> SaveFavoriteResponse:
    """
    Save the submitted markdown as a new favorite.

    An absent body, an absent field, null, and "" all yield 400 without a write.
    """
    markdown = payload.meal_plan_markdown if payload else None
    favorite = await favorite_service.save_favorite(db, markdown)
    return SaveFavoriteResponse(id=favorite.id)


@router.get(
    "/favorites",
    response_model=FavoriteListResponse,
    responses={500: {"description": "Document store failure", "model": ErrorResponse}},
    summary="List all saved favorites",
)
async def list_favorites(db: AsyncSession = Depends(get_db_session)) -> FavoriteListResponse:
    favorites = await favorite_service.list_favorites(db)
    return FavoriteListResponse(favorites=favorites)
