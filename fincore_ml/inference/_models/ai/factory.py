"""AI provider factory for creating providers based on configuration."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from .ollama import OllamaClassificationProvider
from .openai import OpenAICompatibleProvider
from .protocol import AIClassificationProvider

if TYPE_CHECKING:
    from fincore_ml.config.settings import Settings

logger = logging.getLogger(__name__)


def create_ai_provider(settings: Settings) -> AIClassificationProvider:
    """Create an AI provider based on settings.

    Parameters
    ----------
    settings
        Application settings containing AI configuration.

    Returns
    -------
    AIClassificationProvider
        Configured provider instance.

    Raises
    ------
    ValueError
        If the AI backend is not supported.
    """
    backend = settings.ai_backend
    model = settings.ai_model

    logger.info("Creating AI provider: backend=%s, model=%s", backend, model)

    if backend == "ollama":
        return OllamaClassificationProvider(
            model=model,
            base_url=settings.ai_base_url,
            timeout=settings.ai_timeout_seconds,
            temperature=settings.ai_temperature,
        )

    if backend == "openai":
        return OpenAICompatibleProvider(
            model=model,
            base_url=settings.ai_base_url,
            api_key=settings.ai_api_key,
            timeout=settings.ai_timeout_seconds,
            temperature=settings.ai_temperature,
        )

    msg = f"Unknown AI backend: {backend}"
    raise ValueError(msg)
