"""AI classification provider interface."""

from abc import ABC, abstractmethod
from collections.abc import Sequence
from dataclasses import dataclass, field
from decimal import Decimal
from uuid import UUID

from fincore_ml_contracts import TransactionType

from fincore_ml.data_models import CategoryOption, CostCenterOption


@dataclass(frozen=True)
class AIClassificationRequest:
    """Everything the model is shown about one transaction."""

    description: str
    amount: Decimal
    transaction_type: TransactionType
    categories: Sequence[CategoryOption]
    cost_centers: Sequence[CostCenterOption] = field(default_factory=tuple)


@dataclass(frozen=True)
class AISuggestion:
    """Parsed model answer, validated against the offered options."""

    category_id: UUID | None
    confidence: float
    cost_center_id: UUID | None = None
    is_transfer: bool = False
    reasoning: str | None = None

    def __post_init__(self) -> None:
        if not 0.0 <= self.confidence <= 1.0:
            msg = f"Confidence must be between 0 and 1, got {self.confidence}"
            raise ValueError(msg)


class AIClassificationProvider(ABC):
    """Abstract interface for LLM-backed transaction classification."""

    @abstractmethod
    async def classify(self, request: AIClassificationRequest) -> AISuggestion:
        """
        Suggest a category for a transaction.

        Parameters
        ----------
        request
            The transaction and the category/cost center options to pick from.

        Returns
        -------
        AISuggestion with the chosen options and the model's confidence.

        Raises
        ------
        AIProviderError
            If the backend is unreachable, errors, or answers with
            something that cannot be parsed.
        """

    @property
    @abstractmethod
    def model_name(self) -> str:
        """Model identifier, e.g. "qwen2.5:3b" or "gpt-4o-mini"."""

    @property
    @abstractmethod
    def backend(self) -> str:
        """Backend identifier, e.g. "ollama"."""

    @abstractmethod
    async def health_check(self) -> bool:
        """True if the backend is reachable and serves the configured model."""

    async def close(self) -> None:  # noqa: B027
        """Release pooled connections."""
