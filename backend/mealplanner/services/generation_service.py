"""
Meal Planner Backend - Generation Service
=========================================

What:  Builds the meal plan prompt and forwards it to the text generator.
Who:   Called by POST /generate-plan.

Prompt contract:
    The template and the three user fields are embedded verbatim. Nothing is
    escaped or trimmed, so whatever the client typed is what the model sees.
    Only the cookbook's *name* is included; uploaded cookbook contents are
    not read.
"""

import logging
from typing import Optional

from mealplanner.schemas.meal_plan import MealPlanRequest
from mealplanner.services.gemini_service import gemini_service
from mealplanner.services.llm_base import LLMService

logger = logging.getLogger(__name__)


PROMPT_TEMPLATE = """Using the following meal plan as a template:
--- TEMPLATE START ---
{template}
--- TEMPLATE END ---

Create a new one-week meal plan for a single person with the following changes:
1. Cookbook: {cookbook}
2. Dietary Needs: {dietary_needs}
3. Special Requests: {special_requests}

Respond ONLY with the complete, updated markdown for the new meal plan file. Do not include any other text or explanation."""


def build_prompt(request: MealPlanRequest) -> str:
    """Render the generation prompt for a validated request."""
    return PROMPT_TEMPLATE.format(
        template=request.template,
        cookbook=request.cookbook,
        dietary_needs=request.dietary_needs,
        special_requests=request.special_requests,
    )


class GenerationService:
    """
    Stateless handler for meal plan generation.

    Args:
        llm: Provider override (tests). Defaults to the Gemini singleton.
    """

    def __init__(self, llm: Optional[LLMService] = None):
        self._llm = llm

    @property
    def llm(self) -> LLMService:
        return self._llm or gemini_service

    async def generate_plan(self, request: MealPlanRequest) -> str:
        """
        Generate a meal plan.

        Returns:
            The generated markdown.

        Raises:
            GenerationServiceError: the provider call failed (→ 500).
        """
        prompt = build_prompt(request)
        logger.info(
            "Generating meal plan: cookbook=%r, template=%d chars",
            request.cookbook,
            len(request.template),
        )
        meal_plan = await self.llm.generate_text(prompt)
        logger.info("Meal plan generated: %d chars", len(meal_plan))
        return meal_plan


generation_service = GenerationService()
