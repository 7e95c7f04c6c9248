from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from fincore_ml.data_models import HistoricalTransaction
from fincore_ml.storage.sqlalchemy.tables import (
    CategoryTable,
    CostCenterTable,
    TransactionTable,
)


class HistoryRepository:
    """Repository for validated, categorized transactions."""

    def __init__(self, session: AsyncSession, organization_id: UUID):
        self._session = session
        self._organization_id = organization_id

    async def find_categorized(self, limit: int = 5000) -> list[HistoricalTransaction]:
        """Most recent validated transactions that carry a category."""
        stmt = (
            select(
                TransactionTable.description,
                TransactionTable.type,
                TransactionTable.amount,
                TransactionTable.category_id,
                CategoryTable.name.label("category_name"),
                TransactionTable.cost_center_id,
                CostCenterTable.name.label("cost_center_name"),
                TransactionTable.validated_at,
                TransactionTable.created_at,
            )
            .join(CategoryTable, TransactionTable.category_id == CategoryTable.id)
            .outerjoin(
                CostCenterTable, TransactionTable.cost_center_id == CostCenterTable.id
            )
            .where(
                TransactionTable.organization_id == self._organization_id,
                TransactionTable.validation_status == "validated",
                TransactionTable.is_transfer.is_(False),
            )
            .order_by(TransactionTable.created_at.desc())
            .limit(limit)
        )
        result = await self._session.execute(stmt)

        return [
            HistoricalTransaction(
                description=row.description,
                transaction_type=row.type,
                amount=row.amount,
                category_id=row.category_id,
                category_name=row.category_name,
                cost_center_id=row.cost_center_id,
                cost_center_name=row.cost_center_name,
                seen_at=row.validated_at or row.created_at,
            )
            for row in result.all()
        ]
