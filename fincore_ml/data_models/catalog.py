"""Category and cost center options offered to the AI fallback."""

from uuid import UUID

from fincore_ml_contracts import TransactionType
from pydantic import BaseModel


class CategoryOption(BaseModel):
    id: UUID
    name: str
    transaction_type: TransactionType | None = None


class CostCenterOption(BaseModel):
    id: UUID
    name: str
