"""Classification pipeline module.

Exports:
- Orchestrator: ClassificationOrchestrator for production API use
- Components: Individual pipeline components for evaluation/testing
- Context: TransactionContext, PipelineContext for data flow
- Result: ClassificationMatch, ClassificationResult for output
"""

from .classifiers import (
    AIClassifier,
    AIFailure,
    PatternIndex,
    PatternMatcher,
    RuleMatcher,
    aggregate_patterns,
    compile_rules,
)
from .context import PipelineContext, TransactionContext
from .orchestrator import ClassificationOrchestrator
from .policy import DecisionPolicy
from .preprocessing import TransferDetector, TransferMatch, normalize
from .result import ClassificationMatch, ClassificationResult
from .tiers import AIStrategy, MatchStrategy, PatternStrategy, RuleStrategy

__all__ = [
    # Orchestrator
    "ClassificationOrchestrator",
    # Components (for evaluation)
    "normalize",
    "TransferDetector",
    "RuleMatcher",
    "PatternMatcher",
    "PatternIndex",
    "AIClassifier",
    "DecisionPolicy",
    "aggregate_patterns",
    "compile_rules",
    # Strategies
    "MatchStrategy",
    "RuleStrategy",
    "PatternStrategy",
    "AIStrategy",
    # Context
    "PipelineContext",
    "TransactionContext",
    # Result
    "AIFailure",
    "ClassificationMatch",
    "ClassificationResult",
    "TransferMatch",
]
