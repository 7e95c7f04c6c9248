"""Exceptions raised by the classification service."""


class ClassificationError(Exception):
    """Base class for classification failures."""


class AIProviderError(ClassificationError):
    """The AI backend could not produce a usable suggestion."""

    def __init__(self, reason: str) -> None:
        super().__init__(reason)
        self.reason = reason
