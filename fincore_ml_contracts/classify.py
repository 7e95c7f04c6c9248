"""Classification request/response models."""

from decimal import Decimal
from typing import Literal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

TransactionType = Literal["income", "expense"]
ClassificationSource = Literal["rule", "pattern", "ai", "none"]


class TransactionInput(BaseModel):
    """Transaction data for classification.

    Without ``organization_id`` the service runs stateless: no rules, learned
    patterns or account aliases are consulted. Without ``transaction_id`` the
    decision is returned but not persisted. The direction travels as ``type``
    on the wire.
    """

    model_config = ConfigDict(populate_by_name=True)

    description: str = Field(..., min_length=1)
    amount: Decimal = Field(..., ge=0)
    transaction_type: TransactionType = Field(..., alias="type")
    transaction_id: UUID | None = None
    organization_id: UUID | None = None

    @field_validator("description")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("description must not be blank")
        return value


class ClassifyBatchRequest(BaseModel):
    """A batch of transactions belonging to one organization."""

    organization_id: UUID | None = None
    transactions: list[TransactionInput] = Field(..., min_length=1, max_length=1000)

    @model_validator(mode="after")
    def _single_organization(self) -> "ClassifyBatchRequest":
        for txn in self.transactions:
            if txn.organization_id is None:
                continue
            if self.organization_id is None:
                self.organization_id = txn.organization_id
            elif txn.organization_id != self.organization_id:
                msg = "all transactions must belong to the same organization"
                raise ValueError(msg)
        return self


class Classification(BaseModel):
    """Classification decision for a single transaction."""

    transaction_id: UUID | None = None
    category_id: UUID | None = None
    category_name: str | None = None
    cost_center_id: UUID | None = None
    cost_center_name: str | None = None
    confidence: float = Field(..., ge=0.0, le=1.0)
    is_transfer: bool = False
    reasoning: str
    source: ClassificationSource
    auto_validated: bool = False
    normalized_description: str | None = None


class ClassificationStats(BaseModel):
    """Aggregate statistics for a batch."""

    total: int
    by_source: dict[ClassificationSource, int]
    by_confidence: dict[Literal["high", "medium", "low"], int]
    auto_validated: int
    transfers_detected: int


class ClassifyBatchResponse(BaseModel):
    classifications: list[Classification]
    stats: ClassificationStats
    processing_time_ms: int = Field(..., ge=0)
