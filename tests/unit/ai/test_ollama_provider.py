"""Tests for OllamaClassificationProvider."""

import json
from decimal import Decimal
from unittest.mock import AsyncMock, patch

import httpx
import pytest
from fincore_ml.exceptions import AIProviderError
from fincore_ml.inference._models import (
    AIClassificationRequest,
    OllamaClassificationProvider,
)


@pytest.fixture
def provider() -> OllamaClassificationProvider:
    """Default provider instance."""
    return OllamaClassificationProvider(
        model="qwen2.5:3b",
        base_url="http://localhost:11434/",
        timeout=10.0,
    )


@pytest.fixture
def sample_request(categories, cost_centers) -> AIClassificationRequest:
    """Expense request for an Uber ride."""
    return AIClassificationRequest(
        description="UBER* TRIP 4821",
        amount=Decimal("32.90"),
        transaction_type="expense",
        categories=categories[:3],
        cost_centers=cost_centers,
    )


def _mock_transport(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(
        base_url="http://localhost:11434", transport=httpx.MockTransport(handler)
    )


class TestOllamaProviderInit:
    """Tests for provider initialization."""

    def test_default_initialization(self):
        """Test default provider settings."""
        provider = OllamaClassificationProvider()

        assert provider.model_name == "qwen2.5:3b"
        assert provider.backend == "ollama"
        assert provider._base_url == "http://localhost:11434"
        assert provider._timeout == 20.0

    def test_strips_trailing_slash(self, provider):
        assert provider._base_url == "http://localhost:11434"


class TestOllamaProviderClassify:
    """Tests for classification requests."""

    @pytest.mark.asyncio
    async def test_successful_classification(
        self, provider, sample_request, categories
    ):
        """Test a well-formed model answer is parsed into a suggestion."""
        transport = categories[0]
        answer = json.dumps(
            {
                "category_id": str(transport.id),
                "category_name": "Transport",
                "confidence": 0.88,
                "reasoning": "Ride-hailing service",
            }
        )

        with patch.object(
            provider, "_call_ollama", new_callable=AsyncMock, return_value=answer
        ):
            suggestion = await provider.classify(sample_request)

        assert suggestion.category_id == transport.id
        assert suggestion.confidence == pytest.approx(0.88)

    @pytest.mark.asyncio
    async def test_payload_sent_to_generate_endpoint(self, provider, sample_request):
        """Test the request body asks for JSON output without streaming."""
        captured = {}

        def handler(request: httpx.Request) -> httpx.Response:
            captured["path"] = request.url.path
            captured["body"] = json.loads(request.content)
            return httpx.Response(
                200, json={"response": '{"category_name": "Transport"}'}
            )

        provider._client = _mock_transport(handler)
        await provider.classify(sample_request)

        assert captured["path"] == "/api/generate"
        assert captured["body"]["model"] == "qwen2.5:3b"
        assert captured["body"]["format"] == "json"
        assert captured["body"]["stream"] is False
        assert "UBER* TRIP 4821" in captured["body"]["prompt"]

    @pytest.mark.asyncio
    async def test_empty_response(self, provider, sample_request):
        with patch.object(
            provider, "_call_ollama", new_callable=AsyncMock, return_value=""
        ):
            with pytest.raises(AIProviderError, match="empty response"):
                await provider.classify(sample_request)

    @pytest.mark.asyncio
    async def test_timeout_is_translated(self, provider, sample_request):
        """Test httpx timeouts surface as AIProviderError."""
        with patch.object(
            provider,
            "_call_ollama",
            new_callable=AsyncMock,
            side_effect=httpx.ReadTimeout("slow"),
        ):
            with pytest.raises(AIProviderError) as exc_info:
                await provider.classify(sample_request)

        assert "timed out" in exc_info.value.reason

    @pytest.mark.asyncio
    async def test_connection_error_is_translated(self, provider, sample_request):
        with patch.object(
            provider,
            "_call_ollama",
            new_callable=AsyncMock,
            side_effect=httpx.ConnectError("refused"),
        ):
            with pytest.raises(AIProviderError, match="could not connect"):
                await provider.classify(sample_request)

    @pytest.mark.asyncio
    async def test_rate_limit_is_translated(self, provider, sample_request):
        provider._client = _mock_transport(lambda request: httpx.Response(429))

        with pytest.raises(AIProviderError, match="rate limited"):
            await provider.classify(sample_request)


class TestOllamaProviderHealthCheck:
    """Tests for health checks."""

    @pytest.mark.asyncio
    async def test_model_available(self, provider):
        provider._client = _mock_transport(
            lambda request: httpx.Response(
                200, json={"models": [{"name": "qwen2.5:3b"}, {"name": "llama3"}]}
            )
        )

        assert await provider.health_check() is True

    @pytest.mark.asyncio
    async def test_model_missing(self, provider):
        provider._client = _mock_transport(
            lambda request: httpx.Response(200, json={"models": [{"name": "llama3"}]})
        )

        assert await provider.health_check() is False

    @pytest.mark.asyncio
    async def test_server_unreachable(self, provider):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        provider._client = _mock_transport(handler)

        assert await provider.health_check() is False

    @pytest.mark.asyncio
    async def test_close_releases_client(self, provider):
        provider._client = _mock_transport(lambda request: httpx.Response(200))

        await provider.close()

        assert provider._client is None
