"""
Meal Planner Backend - Generation Schemas
=========================================

What:  Request and response models for POST /generate-plan.

All four request fields must be present; empty strings are accepted and
passed through unchanged. A missing field is rejected with 400 before any
prompt is built, so a prompt never contains a placeholder for an absent
value.
"""

from pydantic import Field

from mealplanner.schemas.common import ApiModel


class MealPlanRequest(ApiModel):
    """
    Inputs for one meal plan generation. Transient, never persisted.

    Wire names: cookbook, dietaryNeeds, specialRequests, template.
    """

    cookbook: str = Field(description="Name of the cookbook to draw recipes from")
    dietary_needs: str = Field(description="Dietary constraints, free text")
    special_requests: str = Field(description="Anything else the plan should honor")
    template: str = Field(description="Existing meal plan markdown used as the template")


class MealPlanResponse(ApiModel):
    success: bool = Field(default=True)
    meal_plan: str = Field(description="Generated meal plan markdown")
