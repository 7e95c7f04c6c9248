"""Match strategies, tried in priority order for each transaction."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Protocol

from .classifiers import AIClassifier, AIFailure, PatternMatcher, RuleMatcher

if TYPE_CHECKING:
    from fincore_ml.inference.shared import SharedInfrastructure

    from .context import PipelineContext, TransactionContext
    from .result import ClassificationMatch

logger = logging.getLogger(__name__)


class MatchStrategy(Protocol):
    """Interface for match strategies.

    A strategy proposes at most one match for a transaction. Whether the
    match is good enough to stop the search is decided by the policy.
    """

    name: str

    async def attempt_match(
        self, txn: TransactionContext, pipeline: PipelineContext
    ) -> ClassificationMatch | None:
        """Return the strategy's best match, or None."""
        ...


class RuleStrategy:
    """Organization-authored rules."""

    name = "rule"

    def __init__(self, matcher: RuleMatcher):
        self._matcher = matcher

    async def attempt_match(
        self, txn: TransactionContext, pipeline: PipelineContext
    ) -> ClassificationMatch | None:
        if not pipeline.rules:
            return None
        return self._matcher.match(
            txn.normalized, txn.amount, txn.transaction_type, pipeline.rules
        )


class PatternStrategy:
    """Patterns learned from the organization's validated history."""

    name = "pattern"

    def __init__(self, matcher: PatternMatcher):
        self._matcher = matcher

    async def attempt_match(
        self, txn: TransactionContext, pipeline: PipelineContext
    ) -> ClassificationMatch | None:
        return self._matcher.match(
            txn.normalized, txn.transaction_type, pipeline.pattern_index
        )


class AIStrategy:
    """LLM fallback. Records the failure reason on the transaction."""

    name = "ai"

    def __init__(self, classifier: AIClassifier):
        self._classifier = classifier

    async def attempt_match(
        self, txn: TransactionContext, pipeline: PipelineContext
    ) -> ClassificationMatch | None:
        categories, cost_centers = await pipeline.catalog()
        outcome = await self._classifier.classify(
            txn.description,
            txn.amount,
            txn.transaction_type,
            categories,
            cost_centers,
        )
        if isinstance(outcome, AIFailure):
            logger.debug("AI fallback failed for #%d: %s", txn.index, outcome.reason)
            txn.ai_failure = outcome.reason
            return None
        return outcome


def build_strategies(infra: SharedInfrastructure) -> list[MatchStrategy]:
    """Strategies in priority order: rules, learned patterns, then AI."""
    settings = infra.settings
    strategies: list[MatchStrategy] = [
        RuleStrategy(
            RuleMatcher(
                similarity=settings.similarity_metric,
                accept_threshold=settings.rule_similarity_threshold,
                amount_tolerance=settings.rule_amount_tolerance,
                amount_boost=settings.rule_amount_boost,
            )
        ),
        PatternStrategy(
            PatternMatcher(
                similarity=settings.similarity_metric,
                accept_threshold=settings.pattern_similarity_threshold,
                tie_break=settings.pattern_tie_break,
                tie_epsilon=settings.pattern_tie_epsilon,
                max_candidates=settings.pattern_max_candidates,
                min_occurrences=settings.pattern_min_occurrences,
                confidence_cap=settings.pattern_confidence_cap,
            )
        ),
    ]

    if settings.ai_enabled and infra.ai_provider is not None:
        strategies.append(
            AIStrategy(
                AIClassifier(
                    provider=infra.ai_provider,
                    semaphore=infra.ai_semaphore,
                    timeout=settings.ai_timeout_seconds,
                    confidence_cap=settings.ai_confidence_cap,
                )
            )
        )

    return strategies
