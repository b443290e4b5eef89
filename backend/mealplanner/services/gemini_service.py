"""
Meal Planner Backend - Google Gemini Service
============================================

What:  Text-generation provider backed by the Google Gemini API.
How:   One GenerativeModel instance per process; each call is a single
       generate_content_async() request wrapped in a tenacity policy whose
       attempt count comes from GENERATION_MAX_ATTEMPTS (default 1, so a
       failed call is reported immediately without retrying).
Who:   Used by GenerationService; probed by GET /health.

Failure mapping:
    Any SDK exception, timeout, or blocked response (the SDK raises
    ValueError from .text when there are no candidates) becomes a
    GenerationServiceError. Whatever text the model returns, including an
    empty string, is passed back untouched. The raw exception is logged here with its
    traceback and never reaches the HTTP response.
"""

import logging
import time
import uuid

import google.generativeai as genai
from tenacity import (
    before_sleep_log,
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential_jitter,
)

from mealplanner.config import settings
from mealplanner.exceptions import GenerationServiceError
from mealplanner.services.llm_base import LLMService

logger = logging.getLogger(__name__)


class GeminiService(LLMService):
    """
    Google Gemini implementation of LLMService.

    The SDK keeps the API key in module-level state, so configure() runs once
    here rather than per request.
    """

    def __init__(self):
        if settings.gemini_api_key and settings.gemini_api_key != "your_gemini_api_key_here":
            genai.configure(api_key=settings.gemini_api_key)

        self.model = genai.GenerativeModel(settings.gemini_model)

        logger.info(
            "GeminiService initialized with model=%s, max_attempts=%d",
            settings.gemini_model,
            settings.generation_max_attempts,
        )

    async def generate_text(self, prompt: str) -> str:
        """
        Generate text for a prompt.

        Raises:
            GenerationServiceError: the call failed on every allowed attempt.
        """
        call_id = str(uuid.uuid4())[:8]
        logger.info("[%s] Sending prompt to Gemini (%d chars)", call_id, len(prompt))

        try:
            return await self._call_gemini_with_retry(prompt, call_id)
        except Exception as e:
            logger.error(
                "[%s] Gemini generation failed: %s",
                call_id,
                str(e),
                exc_info=True,
            )
            raise GenerationServiceError(
                context={"call_id": call_id, "error_type": type(e).__name__},
            ) from e

    @retry(
        retry=retry_if_exception_type(Exception),
        stop=stop_after_attempt(settings.generation_max_attempts),
        wait=wait_exponential_jitter(
            multiplier=settings.retry_min_wait,
            max=settings.retry_max_wait,
            jitter=1,
        ),
        before_sleep=before_sleep_log(logger, logging.WARNING),
        reraise=True,
    )
    async def _call_gemini_with_retry(self, prompt: str, call_id: str) -> str:
        """
        Makes the actual Gemini API call.

        Kept separate from generate_text() so only the API call sits inside
        the retry policy; error translation happens once, outside it.
        """
        start_time = time.time()

        try:
            response = await self.model.generate_content_async(
                prompt,
                request_options={"timeout": settings.gemini_timeout},
            )

            # .text raises ValueError when the response has no candidates
            # (e.g. blocked by safety filters)
            text = response.text

            duration_ms = (time.time() - start_time) * 1000
            logger.info(
                "[%s] Gemini generation completed in %.0fms, produced %d chars",
                call_id,
                duration_ms,
                len(text),
            )
            return text

        except Exception as e:
            duration_ms = (time.time() - start_time) * 1000
            logger.warning(
                "[%s] Gemini API call failed after %.0fms: %s",
                call_id,
                duration_ms,
                str(e),
            )
            raise

    async def health_check(self) -> bool:
        """
        Check that the API key works by listing models (no token cost).

        Returns False instead of raising.
        """
        try:
            models = genai.list_models()
            model_names = [m.name for m in models]
            target = f"models/{settings.gemini_model}"
            if target not in model_names:
                logger.warning("Configured model %s not found in available models", target)
            return True
        except Exception as e:
            logger.warning("Gemini health check failed: %s", str(e))
            return False


gemini_service = GeminiService()
