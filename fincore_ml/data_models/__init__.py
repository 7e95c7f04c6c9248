"""Pydantic domain models for classification storage."""

from .account import InternalAccount
from .catalog import CategoryOption, CostCenterOption
from .history import HistoricalPattern, HistoricalTransaction
from .rule import Rule, RuleMatchType

__all__ = [
    "CategoryOption",
    "CostCenterOption",
    "HistoricalPattern",
    "HistoricalTransaction",
    "InternalAccount",
    "Rule",
    "RuleMatchType",
]
