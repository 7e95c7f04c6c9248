"""Classification rule domain model."""

from datetime import datetime
from decimal import Decimal
from typing import Literal
from uuid import UUID

from fincore_ml_contracts import TransactionType
from pydantic import BaseModel, Field

RuleMatchType = Literal["exact", "contains", "similar"]


class Rule(BaseModel):
    """Organization-authored mapping from a description pattern to a category.

    ``transaction_type`` of None applies the rule to both directions. When
    ``amount`` is set, transactions within the configured tolerance of it get
    a score boost. ``match_threshold`` can only tighten the global threshold.
    """

    id: UUID
    description: str
    category_id: UUID
    category_name: str
    cost_center_id: UUID | None = None
    cost_center_name: str | None = None
    match_type: RuleMatchType = "similar"
    transaction_type: TransactionType | None = None
    amount: Decimal | None = None
    match_threshold: float | None = Field(default=None, ge=0.0, le=1.0)
    created_at: datetime
    is_active: bool = True

    def applies_to(self, transaction_type: TransactionType) -> bool:
        if self.transaction_type is None:
            return True
        return self.transaction_type == transaction_type
