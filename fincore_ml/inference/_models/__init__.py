"""Model backends (private module).

- AI: LLM providers used as the last classification fallback
"""

from .ai import (
    AIClassificationProvider,
    AIClassificationRequest,
    AISuggestion,
    OllamaClassificationProvider,
    OpenAICompatibleProvider,
    create_ai_provider,
)

__all__ = [
    "AIClassificationProvider",
    "AIClassificationRequest",
    "AISuggestion",
    "OllamaClassificationProvider",
    "OpenAICompatibleProvider",
    "create_ai_provider",
]
