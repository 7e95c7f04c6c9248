"""Classification match and result types."""

from dataclasses import dataclass
from typing import Literal
from uuid import UUID

from fincore_ml_contracts import ClassificationSource

MatchSource = Literal["rule", "pattern", "ai"]


@dataclass
class ClassificationMatch:
    """Candidate produced by one strategy, before the decision policy."""

    source: MatchSource
    confidence: float
    reasoning: str
    category_id: UUID | None = None
    category_name: str | None = None
    cost_center_id: UUID | None = None
    cost_center_name: str | None = None
    score: float | None = None
    is_transfer: bool = False
    auto_validate_allowed: bool = True
    occurrences: int | None = None

    @property
    def is_actionable(self) -> bool:
        """Whether the match proposes anything at all."""
        return self.category_id is not None or self.is_transfer


@dataclass(frozen=True)
class ClassificationResult:
    """Final classification decision for a transaction."""

    transaction_id: UUID | None
    confidence: float
    reasoning: str
    source: ClassificationSource
    auto_validated: bool = False
    is_transfer: bool = False
    category_id: UUID | None = None
    category_name: str | None = None
    cost_center_id: UUID | None = None
    cost_center_name: str | None = None
    normalized_description: str = ""

    @property
    def validation_status(self) -> str:
        return "validated" if self.auto_validated else "pending"

    @property
    def is_classified(self) -> bool:
        return self.source != "none"
