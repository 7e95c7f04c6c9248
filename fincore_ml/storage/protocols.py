"""Storage layer protocols.

The classification pipeline only depends on these; the SQLAlchemy
repositories implement them for production, and the offline evaluation
runner implements them in memory.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from uuid import UUID

    from fincore_ml.data_models import (
        CategoryOption,
        CostCenterOption,
        HistoricalTransaction,
        InternalAccount,
        Rule,
    )
    from fincore_ml.inference.classification.result import ClassificationResult


class RuleStore(Protocol):
    async def find_active(self) -> list[Rule]: ...


class HistoryStore(Protocol):
    async def find_categorized(self, limit: int = 5000) -> list[HistoricalTransaction]:
        ...


class AccountStore(Protocol):
    async def find_all(self) -> list[InternalAccount]: ...


class CatalogStore(Protocol):
    async def categories(self) -> list[CategoryOption]: ...

    async def cost_centers(self) -> list[CostCenterOption]: ...


class DecisionStore(Protocol):
    async def save(self, result: ClassificationResult) -> bool: ...


class ClassificationRepositories(Protocol):
    """Organization-scoped access to everything classification reads and writes."""

    @property
    def organization_id(self) -> UUID | None: ...

    @property
    def rules(self) -> RuleStore: ...

    @property
    def history(self) -> HistoryStore: ...

    @property
    def accounts(self) -> AccountStore: ...

    @property
    def catalog(self) -> CatalogStore: ...

    @property
    def decisions(self) -> DecisionStore: ...
