from uuid import UUID

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from fincore_ml.data_models import CategoryOption, CostCenterOption
from fincore_ml.storage.sqlalchemy.tables import CategoryTable, CostCenterTable

TRANSACTION_TYPES = ("income", "expense")


class CatalogRepository:
    """Repository for the categories and cost centers an organization can use.

    Shared defaults (rows without an organization) are always included.
    """

    def __init__(self, session: AsyncSession, organization_id: UUID | None):
        self._session = session
        self._organization_id = organization_id

    def _scope(self, column):
        if self._organization_id is None:
            return column.is_(None)
        return or_(column.is_(None), column == self._organization_id)

    async def categories(self) -> list[CategoryOption]:
        stmt = (
            select(CategoryTable)
            .where(self._scope(CategoryTable.organization_id))
            .order_by(CategoryTable.name)
        )
        result = await self._session.execute(stmt)

        return [
            CategoryOption(
                id=row.id,
                name=row.name,
                transaction_type=row.type if row.type in TRANSACTION_TYPES else None,
            )
            for row in result.scalars().all()
        ]

    async def cost_centers(self) -> list[CostCenterOption]:
        stmt = (
            select(CostCenterTable)
            .where(self._scope(CostCenterTable.organization_id))
            .order_by(CostCenterTable.name)
        )
        result = await self._session.execute(stmt)
        return [
            CostCenterOption(id=row.id, name=row.name)
            for row in result.scalars().all()
        ]
