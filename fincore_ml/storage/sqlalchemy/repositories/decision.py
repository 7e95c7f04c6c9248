from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import TYPE_CHECKING
from uuid import UUID

from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession

from fincore_ml.storage.sqlalchemy.tables import TransactionTable

if TYPE_CHECKING:
    from fincore_ml.inference.classification.result import ClassificationResult

logger = logging.getLogger(__name__)


class DecisionRepository:
    """Writes classification decisions back onto an organization's transactions."""

    def __init__(self, session: AsyncSession, organization_id: UUID | None):
        self._session = session
        self._organization_id = organization_id

    async def save(self, result: ClassificationResult) -> bool:
        """Persist a decision.

        Returns False if the transaction does not exist in the organization,
        or when there is no organization to scope the update to. A failed
        write rolls the session back so later writes in the same session
        still go through.
        """
        if result.transaction_id is None:
            return False
        if self._organization_id is None:
            logger.warning(
                "Refusing to persist %s without an organization",
                result.transaction_id,
            )
            return False

        values = {
            "category_id": result.category_id,
            "cost_center_id": result.cost_center_id,
            "is_transfer": result.is_transfer,
            "classification_source": result.source,
            "classification_confidence": result.confidence,
            "classification_reasoning": result.reasoning,
            "normalized_description": result.normalized_description,
            "validation_status": result.validation_status,
            "validated_at": datetime.now(UTC) if result.auto_validated else None,
        }

        stmt = (
            update(TransactionTable)
            .where(TransactionTable.id == result.transaction_id)
            .where(TransactionTable.organization_id == self._organization_id)
            .values(**values)
        )

        try:
            cursor = await self._session.execute(stmt)
            await self._session.commit()
        except Exception:
            await self._session.rollback()
            raise
        return bool(cursor.rowcount)
