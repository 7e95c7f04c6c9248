from .ai import AIClassifier, AIFailure
from .pattern import PatternIndex, PatternMatcher, aggregate_patterns
from .rule import CompiledRule, RuleMatcher, compile_rules

__all__ = [
    "AIClassifier",
    "AIFailure",
    "CompiledRule",
    "PatternIndex",
    "PatternMatcher",
    "RuleMatcher",
    "aggregate_patterns",
    "compile_rules",
]
