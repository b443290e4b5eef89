"""
Meal Planner Backend - Generation Route
=======================================

What:  POST /generate-plan
How:   The body is validated into MealPlanRequest (all four fields required,
       empty strings allowed), then handed to GenerationService.

Responses:
    200 {"success": true, "mealPlan": "..."}
    400 a field is missing or not a string
    500 {"success": false, "message": "Failed to generate meal plan."}
"""

import logging

from fastapi import APIRouter

from mealplanner.schemas.common import ErrorResponse
from mealplanner.schemas.meal_plan import MealPlanRequest, MealPlanResponse
from mealplanner.services.generation_service import generation_service

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Generation"])


@router.post(
    "/generate-plan",
    response_model=MealPlanResponse,
    responses={
        400: {"description": "Missing or invalid field", "model": ErrorResponse},
        500: {"description": "Text generation failed", "model": ErrorResponse},
    },
    summary="Generate a one-week meal plan",
)
async def generate_plan(payload: MealPlanRequest) -> MealPlanResponse:
    meal_plan = await generation_service.generate_plan(payload)
    return MealPlanResponse(meal_plan=meal_plan)
