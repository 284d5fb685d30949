"""
LearnLoop Backend - Google Gemini Service Implementation
========================================================

What:  Concrete LLM service backed by Google Gemini text generation.
How:   Sends a prompt with a per-call generation config (token limit and
       temperature) and a request timeout, then translates SDK errors into
       the application's exception hierarchy.
Who:   Instantiated once at import; called by NoteService and LearningService.

Error Translation:
    ResourceExhausted (quota, 429)      → UpstreamRateLimitError (429)
    InvalidArgument (bad request, 400)  → ValidationError (400)
    any other API or transport failure  → LLMServiceError (503)
    blocked or empty candidate          → AIResponseError (500)

Every call is attempted exactly once. Failures surface to the client.
"""

import asyncio
import logging
import time
import uuid

import google.generativeai as genai
from google.api_core import exceptions as google_exceptions

from app.config import settings
from app.exceptions import (
    AIResponseError,
    LLMServiceError,
    UpstreamRateLimitError,
    ValidationError,
)
from app.middleware.request_id import request_id_var
from app.services.llm_base import LLMService

logger = logging.getLogger(__name__)


class GeminiService(LLMService):
    """Google Gemini implementation of LLMService."""

    def __init__(self):
        if settings.gemini_api_key:
            genai.configure(api_key=settings.gemini_api_key)

        self.model = genai.GenerativeModel(settings.gemini_model)
        logger.info("GeminiService initialized with model=%s", settings.gemini_model)

    async def generate_text(
        self,
        prompt: str,
        max_output_tokens: int,
        temperature: float,
    ) -> str:
        call_id = request_id_var.get() or str(uuid.uuid4())[:8]
        start_time = time.time()

        logger.info(
            "[%s] Gemini generate: prompt=%d chars, max_tokens=%d, temperature=%.2f",
            call_id,
            len(prompt),
            max_output_tokens,
            temperature,
        )

        try:
            response = await self.model.generate_content_async(
                prompt,
                generation_config=genai.GenerationConfig(
                    max_output_tokens=max_output_tokens,
                    temperature=temperature,
                ),
                request_options={"timeout": settings.gemini_timeout_seconds},
            )
        except google_exceptions.ResourceExhausted as e:
            logger.warning("[%s] Gemini quota exhausted: %s", call_id, str(e))
            raise UpstreamRateLimitError(
                message="Too many requests. Please try again later",
                context={"request_id": call_id},
            )
        except google_exceptions.InvalidArgument as e:
            logger.warning("[%s] Gemini rejected the request: %s", call_id, str(e))
            raise ValidationError(
                message="Invalid request to AI service",
                context={"request_id": call_id},
            )
        except google_exceptions.GoogleAPIError as e:
            logger.error("[%s] Gemini API error: %s", call_id, str(e))
            raise LLMServiceError(
                message="AI service temporarily unavailable",
                context={"request_id": call_id, "error_type": type(e).__name__},
            )
        except Exception as e:
            logger.error("[%s] Unexpected Gemini error: %s", call_id, str(e), exc_info=True)
            raise LLMServiceError(
                message="AI service temporarily unavailable",
                context={"request_id": call_id, "error_type": type(e).__name__},
            )

        text = self._response_text(response).strip()
        duration_ms = (time.time() - start_time) * 1000

        if not text:
            logger.warning("[%s] Gemini returned no content after %.0fms", call_id, duration_ms)
            raise AIResponseError(
                message="AI returned an empty response",
                context={"request_id": call_id},
            )

        logger.info(
            "[%s] Gemini completed in %.0fms, generated %d chars",
            call_id,
            duration_ms,
            len(text),
        )
        return text

    @staticmethod
    def _response_text(response) -> str:
        # .text raises ValueError when the candidate was blocked or has no parts
        try:
            return response.text or ""
        except ValueError:
            return ""

    async def health_check(self) -> bool:
        """Lists models (no token cost) to verify key and connectivity."""
        try:
            models = await asyncio.to_thread(lambda: [m.name for m in genai.list_models()])
        except Exception as e:
            logger.warning("Gemini health check failed: %s", str(e))
            return False

        target = f"models/{settings.gemini_model}"
        if target not in models:
            logger.warning("Configured model %s not found in available models", target)
        return True


# ── Singleton Instance ────────────────────────────────────────────────────
gemini_service = GeminiService()
