"""SQLAlchemy persistence layer for classification storage."""

from .engine import (
    check_database,
    get_engine,
    get_session,
    get_session_context,
    get_session_maker,
)
from .repositories import (
    AccountRepository,
    CatalogRepository,
    DecisionRepository,
    HistoryRepository,
    RuleRepository,
)
from .tables import (
    Base,
    CategoryTable,
    ClassificationRuleTable,
    CostCenterTable,
    InternalAccountTable,
    TransactionTable,
)

__all__ = [
    # Engine
    "check_database",
    "get_engine",
    "get_session",
    "get_session_context",
    "get_session_maker",
    # Tables
    "Base",
    "CategoryTable",
    "ClassificationRuleTable",
    "CostCenterTable",
    "InternalAccountTable",
    "TransactionTable",
    # Repositories
    "AccountRepository",
    "CatalogRepository",
    "DecisionRepository",
    "HistoryRepository",
    "RuleRepository",
]
