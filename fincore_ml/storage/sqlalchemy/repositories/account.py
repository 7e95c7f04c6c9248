from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from fincore_ml.data_models import InternalAccount
from fincore_ml.storage.sqlalchemy.tables import InternalAccountTable


class AccountRepository:
    """Repository for the organization's own bank accounts."""

    def __init__(self, session: AsyncSession, organization_id: UUID):
        self._session = session
        self._organization_id = organization_id

    async def find_all(self) -> list[InternalAccount]:
        stmt = select(InternalAccountTable).where(
            InternalAccountTable.organization_id == self._organization_id
        )
        result = await self._session.execute(stmt)

        return [
            InternalAccount(
                id=row.id,
                name=row.name,
                account_number=row.account_number,
                # aliases is stored as JSONB, ensure it's a list of strings
                aliases=[str(a) for a in row.aliases]
                if isinstance(row.aliases, list)
                else [],
            )
            for row in result.scalars().all()
        ]
