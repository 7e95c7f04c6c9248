"""Tests for OpenAICompatibleProvider and the provider factory."""

import json
from decimal import Decimal

import httpx
import pytest
from fincore_ml.config.settings import Settings
from fincore_ml.exceptions import AIProviderError
from fincore_ml.inference._models import (
    AIClassificationRequest,
    OllamaClassificationProvider,
    OpenAICompatibleProvider,
    create_ai_provider,
)


@pytest.fixture
def provider() -> OpenAICompatibleProvider:
    return OpenAICompatibleProvider(
        model="gpt-4o-mini", base_url="https://llm.example.com/v1", api_key="sk-test"
    )


@pytest.fixture
def sample_request(categories) -> AIClassificationRequest:
    return AIClassificationRequest(
        description="GOOGLE WORKSPACE",
        amount=Decimal("54.00"),
        transaction_type="expense",
        categories=categories[:3],
    )


def _install(provider, handler) -> None:
    provider._client = httpx.AsyncClient(
        base_url=provider._base_url,
        headers=provider._headers(),
        transport=httpx.MockTransport(handler),
    )


class TestOpenAICompatibleProvider:
    def test_bearer_header(self, provider):
        assert provider._headers()["Authorization"] == "Bearer sk-test"
        assert provider.backend == "openai"

    def test_no_key_no_header(self):
        provider = OpenAICompatibleProvider(model="local")

        assert "Authorization" not in provider._headers()

    @pytest.mark.asyncio
    async def test_chat_completion(self, provider, sample_request, categories):
        """Test the first choice's message content is parsed."""
        software = categories[1]
        captured = {}

        def handler(request: httpx.Request) -> httpx.Response:
            captured["url"] = str(request.url)
            captured["auth"] = request.headers.get("Authorization")
            captured["body"] = json.loads(request.content)
            content = json.dumps({"category_id": str(software.id), "confidence": 0.7})
            return httpx.Response(
                200, json={"choices": [{"message": {"content": content}}]}
            )

        _install(provider, handler)
        suggestion = await provider.classify(sample_request)

        assert suggestion.category_id == software.id
        assert captured["url"] == "https://llm.example.com/v1/chat/completions"
        assert captured["auth"] == "Bearer sk-test"
        assert captured["body"]["messages"][0]["role"] == "system"

    @pytest.mark.asyncio
    async def test_no_choices(self, provider, sample_request):
        _install(provider, lambda request: httpx.Response(200, json={"choices": []}))

        with pytest.raises(AIProviderError, match="empty response"):
            await provider.classify(sample_request)

    @pytest.mark.asyncio
    async def test_server_error(self, provider, sample_request):
        _install(provider, lambda request: httpx.Response(503))

        with pytest.raises(AIProviderError, match="HTTP 503"):
            await provider.classify(sample_request)

    @pytest.mark.asyncio
    async def test_health_check(self, provider):
        _install(provider, lambda request: httpx.Response(200, json={"data": []}))

        assert await provider.health_check() is True


class TestCreateAIProvider:
    def test_ollama(self):
        settings = Settings(_env_file=None, ai_backend="ollama", ai_model="llama3.2:3b")

        provider = create_ai_provider(settings)

        assert isinstance(provider, OllamaClassificationProvider)
        assert provider.model_name == "llama3.2:3b"

    def test_openai(self):
        settings = Settings(
            _env_file=None,
            ai_backend="openai",
            ai_model="gpt-4o-mini",
            ai_base_url="https://api.openai.com/v1",
            ai_api_key="sk-test",
        )

        provider = create_ai_provider(settings)

        assert isinstance(provider, OpenAICompatibleProvider)
        assert provider._base_url == "https://api.openai.com/v1"
