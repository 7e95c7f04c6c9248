"""Ollama-based AI provider for transaction classification.

Ollama is a self-hosted LLM runtime. Small instruction-tuned models are
enough for picking one category out of an organization's chart:

- qwen2.5:1.5b  (1GB)  - Fast, acceptable quality
- qwen2.5:3b    (2GB)  - Default, better accuracy
- llama3.2:3b   (2GB)  - Alternative with good multilingual support
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


class OllamaClassificationProvider(HTTPProviderMixin, AIClassificationProvider):
    """AI provider using a local Ollama instance."""

    def __init__(
        self,
        model: str = "qwen2.5:3b",
        base_url: str = "http://localhost:11434",
        timeout: float = 20.0,
        temperature: float = 0.1,
        prompt_template: str | None = None,
    ):
        self._model = model
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._temperature = temperature
        self._prompt_template = prompt_template or DEFAULT_PROMPT_TEMPLATE
        self._client = None

    @property
    def model_name(self) -> str:
        return self._model

    @property
    def backend(self) -> str:
        return "ollama"

    async def classify(self, request: AIClassificationRequest) -> AISuggestion:
        prompt = build_prompt(request, self._prompt_template)
        logger.debug("AI Prompt:\n%s", prompt)

        try:
            response_text = await self._call_ollama(prompt)
        except httpx.HTTPError as e:
            raise self._translate_error(e) from e

        if not response_text:
            raise AIProviderError("empty response")

        logger.debug("AI Response: %s", response_text)
        return parse_suggestion(response_text, request)

    async def _call_ollama(self, prompt: str) -> str:
        payload = {
            "model": self._model,
            "system": SYSTEM_PROMPT,
            "prompt": prompt,
            "stream": False,
            "format": "json",
            "options": {
                "temperature": self._temperature,
                "num_predict": 300,  # Limit response length
            },
        }

        client = await self._get_client()
        response = await client.post("/api/generate", json=payload)
        response.raise_for_status()
        return response.json().get("response", "")

    async def health_check(self) -> bool:
        try:
            client = await self._get_client()
            response = await client.get("/api/tags", timeout=5.0)
            if response.status_code != 200:
                return False
            return self._is_model_in_list(response.json())
        except httpx.HTTPError as e:
            logger.debug("Ollama health check failed: %s", str(e))
            return False

    def _is_model_in_list(self, data: dict) -> bool:
        models = [m.get("name", "") for m in data.get("models", [])]

        # Exact match, or a tag of the same model family
        model_available = any(
            self._model in model or model.startswith(self._model.split(":")[0])
            for model in models
        )

        if not model_available:
            logger.warning(
                "Model '%s' not found in Ollama. Available: %s",
                self._model,
                models,
            )

        return model_available
