"""
Meal Planner Backend - Abstract Text Generation Interface
=========================================================

What:  Contract for the text-generation provider behind POST /generate-plan.
How:   Concrete providers inherit from LLMService and implement
       generate_text() and health_check().
Who:   GenerationService depends on this interface, not on Gemini directly,
       so tests can substitute a fake provider.
"""

from abc import ABC, abstractmethod


class LLMService(ABC):
    """
    Abstract interface for prompt-in, text-out generation.

    Contract:
        - generate_text() sends one prompt and returns the produced text
        - Provider errors are wrapped in GenerationServiceError
        - Retry behaviour, if any, belongs to the implementation

    Implementations:
        - GeminiService: Google Gemini via google-generativeai (default)
    """

    @abstractmethod
    async def generate_text(self, prompt: str) -> str:
        """
        Send a prompt to the model and return the generated text.

        Args:
            prompt: The complete prompt. Sent as-is.

        Returns:
            The model's text output, stripped of surrounding whitespace.

        Raises:
            GenerationServiceError: The provider call failed or produced no text.
        """
        ...

    @abstractmethod
    async def health_check(self) -> bool:
        """Lightweight reachability check; must not consume generation quota."""
        ...
