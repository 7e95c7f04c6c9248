"""Categorized history models used to learn description patterns."""

from datetime import datetime
from decimal import Decimal
from uuid import UUID

from fincore_ml_contracts import TransactionType
from pydantic import BaseModel, Field


class HistoricalTransaction(BaseModel):
    """A previously validated, categorized transaction."""

    description: str
    transaction_type: TransactionType
    amount: Decimal | None = None
    category_id: UUID
    category_name: str
    cost_center_id: UUID | None = None
    cost_center_name: str | None = None
    seen_at: datetime | None = None


class HistoricalPattern(BaseModel):
    """Normalized description aggregated over its categorized occurrences."""

    normalized_description: str
    transaction_type: TransactionType
    category_id: UUID
    category_name: str
    cost_center_id: UUID | None = None
    cost_center_name: str | None = None
    occurrences: int = Field(default=1, ge=1)
    last_seen_at: datetime | None = None
