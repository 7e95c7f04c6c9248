"""Classification storage layer.

This module provides:
- `sqlalchemy`: PostgreSQL persistence layer (tables, repositories)
- `cache`: per-organization cache for learned patterns

Note: Domain models are in `fincore_ml.data_models`.
"""

from .cache import OrganizationCache
from .factory import RepositoryFactory
from .protocols import ClassificationRepositories
from .sqlalchemy import (
    AccountRepository,
    Base,
    CatalogRepository,
    DecisionRepository,
    HistoryRepository,
    RuleRepository,
    check_database,
    get_engine,
    get_session,
    get_session_context,
    get_session_maker,
)

__all__ = [
    # Cache
    "OrganizationCache",
    # Database
    "Base",
    "check_database",
    "get_engine",
    "get_session",
    "get_session_context",
    "get_session_maker",
    # Repositories
    "AccountRepository",
    "CatalogRepository",
    "ClassificationRepositories",
    "DecisionRepository",
    "HistoryRepository",
    "RepositoryFactory",
    "RuleRepository",
]
