"""OpenAI-compatible chat completions provider.

Works with any server implementing ``POST {base_url}/chat/completions`` with
bearer authentication (OpenAI, OpenRouter, vLLM, LiteLLM, ...). The base URL
should include the API version prefix, e.g. ``https://api.openai.com/v1``.
"""

import logging

import httpx

from fincore_ml.exceptions import AIProviderError

from ._http import HTTPProviderMixin
from .prompt import (
    DEFAULT_PROMPT_TEMPLATE,
    SYSTEM_PROMPT,
    build_prompt,
    parse_suggestion,
)
from .protocol import AIClassificationProvider, AIClassificationRequest, AISuggestion

logger = logging.getLogger(__name__)


class OpenAICompatibleProvider(HTTPProviderMixin, AIClassificationProvider):
    """AI provider for hosted OpenAI-compatible chat completion APIs."""

    def __init__(
        self,
        model: str,
        base_url: str = "https://api.openai.com/v1",
        api_key: str | None = None,
        timeout: float = 20.0,
        temperature: float = 0.3,
        prompt_template: str | None = None,
    ):
        self._model = model
        self._base_url = base_url.rstrip("/")
        self._api_key = api_key
        self._timeout = timeout
        self._temperature = temperature
        self._prompt_template = prompt_template or DEFAULT_PROMPT_TEMPLATE
        self._client = None

    @property
    def model_name(self) -> str:
        return self._model

    @property
    def backend(self) -> str:
        return "openai"

    def _headers(self) -> dict[str, str]:
        headers = super()._headers()
        if self._api_key:
            headers["Authorization"] = f"Bearer {self._api_key}"
        return headers

    async def classify(self, request: AIClassificationRequest) -> AISuggestion:
        prompt = build_prompt(request, self._prompt_template)
        logger.debug("AI Prompt:\n%s", prompt)

        try:
            response_text = await self._call_chat_completions(prompt)
        except httpx.HTTPError as e:
            raise self._translate_error(e) from e

        if not response_text:
            raise AIProviderError("empty response")

        logger.debug("AI Response: %s", response_text)
        return parse_suggestion(response_text, request)

    async def _call_chat_completions(self, prompt: str) -> str:
        payload = {
            "model": self._model,
            "messages": [
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": prompt},
            ],
            "temperature": self._temperature,
        }

        client = await self._get_client()
        response = await client.post("/chat/completions", json=payload)
        response.raise_for_status()

        choices = response.json().get("choices") or []
        if not choices:
            return ""
        return (choices[0].get("message") or {}).get("content") or ""

    async def health_check(self) -> bool:
        try:
            client = await self._get_client()
            response = await client.get("/models", timeout=5.0)
            return response.status_code == 200
        except httpx.HTTPError as e:
            logger.debug("AI health check failed: %s", str(e))
            return False
