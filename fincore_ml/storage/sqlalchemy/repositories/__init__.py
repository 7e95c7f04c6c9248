"""Database repositories for classification storage."""

from .account import AccountRepository
from .catalog import CatalogRepository
from .decision import DecisionRepository
from .history import HistoryRepository
from .rule import RuleRepository

__all__ = [
    "AccountRepository",
    "CatalogRepository",
    "DecisionRepository",
    "HistoryRepository",
    "RuleRepository",
]
