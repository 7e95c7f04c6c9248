"""Repository factory for classification storage."""

from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from .sqlalchemy.repositories import (
    AccountRepository,
    CatalogRepository,
    DecisionRepository,
    HistoryRepository,
    RuleRepository,
)


class RepositoryFactory:
    """Factory for organization-scoped repositories sharing one database session.

    Rule, history and account repositories require an organization; without
    one the pipeline runs stateless and never asks for them.
    """

    def __init__(self, session: AsyncSession, organization_id: UUID | None = None):
        self._session = session
        self._organization_id = organization_id

    @property
    def organization_id(self) -> UUID | None:
        return self._organization_id

    def _require_organization(self) -> UUID:
        if self._organization_id is None:
            msg = "This repository requires an organization"
            raise ValueError(msg)
        return self._organization_id

    @property
    def rules(self) -> RuleRepository:
        """Get classification rule repository."""
        return RuleRepository(self._session, self._require_organization())

    @property
    def history(self) -> HistoryRepository:
        """Get categorized history repository."""
        return HistoryRepository(self._session, self._require_organization())

    @property
    def accounts(self) -> AccountRepository:
        """Get internal account repository."""
        return AccountRepository(self._session, self._require_organization())

    @property
    def catalog(self) -> CatalogRepository:
        """Get category and cost center repository."""
        return CatalogRepository(self._session, self._organization_id)

    @property
    def decisions(self) -> DecisionRepository:
        """Get classification decision repository."""
        return DecisionRepository(self._session, self._organization_id)
