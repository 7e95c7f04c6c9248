from .factory import create_ai_provider
from .ollama import OllamaClassificationProvider
from .openai import OpenAICompatibleProvider
from .protocol import AIClassificationProvider, AIClassificationRequest, AISuggestion

__all__ = [
    "AIClassificationProvider",
    "AIClassificationRequest",
    "AISuggestion",
    "OllamaClassificationProvider",
    "OpenAICompatibleProvider",
    "create_ai_provider",
]
