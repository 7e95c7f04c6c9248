from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from fincore_ml.data_models import Rule
from fincore_ml.storage.sqlalchemy.tables import (
    CategoryTable,
    ClassificationRuleTable,
    CostCenterTable,
)


class RuleRepository:
    """Repository for an organization's classification rules."""

    def __init__(self, session: AsyncSession, organization_id: UUID):
        self._session = session
        self._organization_id = organization_id

    async def find_active(self) -> list[Rule]:
        """Active rules with category and cost center names, newest first."""
        stmt = (
            select(ClassificationRuleTable, CategoryTable.name, CostCenterTable.name)
            .join(
                CategoryTable, ClassificationRuleTable.category_id == CategoryTable.id
            )
            .outerjoin(
                CostCenterTable,
                ClassificationRuleTable.cost_center_id == CostCenterTable.id,
            )
            .where(
                ClassificationRuleTable.organization_id == self._organization_id,
                ClassificationRuleTable.is_active.is_(True),
            )
            .order_by(ClassificationRuleTable.created_at.desc())
        )
        result = await self._session.execute(stmt)

        return [
            Rule(
                id=row.id,
                description=row.description,
                match_type=row.match_type,
                category_id=row.category_id,
                category_name=category_name,
                cost_center_id=row.cost_center_id,
                cost_center_name=cost_center_name,
                transaction_type=row.transaction_type,
                amount=row.amount,
                match_threshold=row.match_threshold,
                created_at=row.created_at,
                is_active=row.is_active,
            )
            for row, category_name, cost_center_name in result.all()
        ]
