"""
LearnLoop Backend - Abstract LLM Service Interface
==================================================

What:  Abstract base class for the text-generation provider.
How:   Concrete implementations inherit from LLMService and implement
       generate_text() and health_check().
Who:   NoteService (summaries) and LearningService (roadmaps) depend on the
       contract; GeminiService fulfils it.
"""

from abc import ABC, abstractmethod


class LLMService(ABC):
    """
    Abstract interface for single-shot prompt → text generation.

    Contract:
        - generate_text() returns non-empty, stripped text
        - Exactly one upstream call per invocation (no retries)
        - Provider errors are translated to AppError subclasses:
          quota → UpstreamRateLimitError, bad request → ValidationError,
          anything else → LLMServiceError, empty output → AIResponseError
    """

    @abstractmethod
    async def generate_text(
        self,
        prompt: str,
        max_output_tokens: int,
        temperature: float,
    ) -> str:
        """
        Send a prompt and return the model's text answer.

        Args:
            prompt: Full prompt text.
            max_output_tokens: Upper bound on generated tokens.
            temperature: Sampling temperature.

        Raises:
            UpstreamRateLimitError, ValidationError, LLMServiceError, AIResponseError
        """
        ...

    @abstractmethod
    async def health_check(self) -> bool:
        """True if the provider is reachable and the key is accepted."""
        ...
