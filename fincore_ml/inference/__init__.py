"""Inference module.

Orchestrator (for API layer):
- ClassificationOrchestrator: Coordinates the full classification pipeline

Pipeline Components (for evaluation & testing):
- normalize, TransferDetector: Preprocessing
- RuleMatcher, PatternMatcher, AIClassifier: Classification
- DecisionPolicy: Auto-validate / suggest / unclassified decision
- TransactionContext, PipelineContext: Data flow
"""

from __future__ import annotations

from .classification import (
    AIClassifier,
    ClassificationMatch,
    ClassificationOrchestrator,
    ClassificationResult,
    DecisionPolicy,
    PatternIndex,
    PatternMatcher,
    PipelineContext,
    RuleMatcher,
    TransactionContext,
    TransferDetector,
    normalize,
)
from .shared import SharedInfrastructure

__all__ = [
    # Orchestrator (API layer)
    "ClassificationOrchestrator",
    "SharedInfrastructure",
    # Classification components (evaluation)
    "normalize",
    "TransferDetector",
    "RuleMatcher",
    "PatternMatcher",
    "PatternIndex",
    "AIClassifier",
    "DecisionPolicy",
    # Classification types
    "ClassificationMatch",
    "ClassificationResult",
    "PipelineContext",
    "TransactionContext",
]
