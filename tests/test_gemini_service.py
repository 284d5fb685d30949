"""
LearnLoop Backend - Gemini Service Unit Tests (Mocked)
======================================================

The google.generativeai module is patched, so no request leaves the
process. Covers the success path, the error translation table and the
single-attempt guarantee.
"""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from google.api_core import exceptions as google_exceptions

from app.exceptions import (
    AIResponseError,
    LLMServiceError,
    UpstreamRateLimitError,
    ValidationError,
)
from app.services.gemini_service import GeminiService


class _BlockedResponse:
    @property
    def text(self):
        raise ValueError("response has no parts")


@pytest.fixture
def service():
    with patch("app.services.gemini_service.genai"):
        svc = GeminiService()
        svc.model = MagicMock()
        svc.model.generate_content_async = AsyncMock()
        yield svc


class TestGenerateText:

    @pytest.mark.asyncio
    async def test_returns_stripped_text(self, service):
        service.model.generate_content_async.return_value = MagicMock(text="  A summary.\n")

        result = await service.generate_text("prompt", max_output_tokens=500, temperature=0.5)

        assert result == "A summary."

    @pytest.mark.asyncio
    async def test_passes_prompt_and_timeout(self, service):
        service.model.generate_content_async.return_value = MagicMock(text="ok")

        await service.generate_text("the prompt", max_output_tokens=2000, temperature=0.7)

        args, kwargs = service.model.generate_content_async.call_args
        assert args[0] == "the prompt"
        assert "timeout" in kwargs["request_options"]

    @pytest.mark.asyncio
    async def test_quota_maps_to_upstream_rate_limit(self, service):
        service.model.generate_content_async.side_effect = google_exceptions.ResourceExhausted("quota")

        with pytest.raises(UpstreamRateLimitError) as exc_info:
            await service.generate_text("p", 500, 0.5)
        assert exc_info.value.status_code == 429

    @pytest.mark.asyncio
    async def test_invalid_argument_maps_to_validation_error(self, service):
        service.model.generate_content_async.side_effect = google_exceptions.InvalidArgument("bad")

        with pytest.raises(ValidationError) as exc_info:
            await service.generate_text("p", 500, 0.5)
        assert exc_info.value.status_code == 400

    @pytest.mark.asyncio
    async def test_other_api_errors_map_to_service_unavailable(self, service):
        service.model.generate_content_async.side_effect = google_exceptions.ServiceUnavailable("down")

        with pytest.raises(LLMServiceError) as exc_info:
            await service.generate_text("p", 500, 0.5)
        assert exc_info.value.status_code == 503

    @pytest.mark.asyncio
    async def test_transport_error_maps_to_service_unavailable(self, service):
        service.model.generate_content_async.side_effect = ConnectionError("reset")

        with pytest.raises(LLMServiceError):
            await service.generate_text("p", 500, 0.5)

    @pytest.mark.asyncio
    async def test_failure_is_not_retried(self, service):
        service.model.generate_content_async.side_effect = google_exceptions.ServiceUnavailable("down")

        with pytest.raises(LLMServiceError):
            await service.generate_text("p", 500, 0.5)
        assert service.model.generate_content_async.await_count == 1

    @pytest.mark.asyncio
    async def test_empty_text_is_an_ai_response_error(self, service):
        service.model.generate_content_async.return_value = MagicMock(text="   ")

        with pytest.raises(AIResponseError):
            await service.generate_text("p", 500, 0.5)

    @pytest.mark.asyncio
    async def test_blocked_candidate_is_an_ai_response_error(self, service):
        service.model.generate_content_async.return_value = _BlockedResponse()

        with pytest.raises(AIResponseError):
            await service.generate_text("p", 500, 0.5)


class TestHealthCheck:

    @pytest.mark.asyncio
    async def test_reachable(self):
        with patch("app.services.gemini_service.genai") as mock_genai:
            model = MagicMock()
            model.name = "models/gemini-2.0-flash"
            mock_genai.list_models.return_value = [model]
            assert await GeminiService().health_check() is True

    @pytest.mark.asyncio
    async def test_unreachable(self):
        with patch("app.services.gemini_service.genai") as mock_genai:
            mock_genai.list_models.side_effect = ConnectionError("offline")
            assert await GeminiService().health_check() is False
