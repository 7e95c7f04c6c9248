"""Rule-based classification.

Rules are organization-authored: a description pattern mapped to a category
and optional cost center. ``exact`` rules require the normalized texts to be
equal, ``contains`` rules require the pattern as whole words, and ``similar``
rules (the default) take the best of containment and the configured
similarity metric.
"""

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from decimal import Decimal

from fincore_ml_contracts import TransactionType

from fincore_ml.data_models import Rule

from ..preprocessing import normalize
from ..result import ClassificationMatch
from ..similarity import SimilarityFn, containment_score, get_similarity

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CompiledRule:
    """A rule with its pattern normalized once per batch."""

    rule: Rule
    pattern: str


def compile_rules(rules: Iterable[Rule]) -> list[CompiledRule]:
    compiled = []
    for rule in rules:
        if not rule.is_active:
            continue
        pattern = normalize(rule.description)
        if not pattern:
            logger.debug("Skipping rule %s: empty pattern after normalization", rule.id)
            continue
        compiled.append(CompiledRule(rule=rule, pattern=pattern))
    return compiled


class RuleMatcher:
    """Scores transactions against an organization's active rules."""

    name = "rule"

    def __init__(
        self,
        similarity: SimilarityFn | str = "token_overlap",
        accept_threshold: float = 0.80,
        amount_tolerance: float = 0.01,
        amount_boost: float = 0.10,
    ) -> None:
        self._similarity = (
            get_similarity(similarity) if isinstance(similarity, str) else similarity
        )
        self._accept_threshold = accept_threshold
        self._amount_tolerance = amount_tolerance
        self._amount_boost = amount_boost

    def score(self, compiled: CompiledRule, normalized: str, amount: Decimal) -> float:
        """Match score of a single rule, including the amount boost."""
        pattern = compiled.pattern
        match_type = compiled.rule.match_type

        if match_type == "exact":
            score = 1.0 if normalized == pattern else 0.0
        elif match_type == "contains":
            score = containment_score(normalized, pattern)
        else:
            score = max(
                containment_score(normalized, pattern),
                self._similarity(normalized, pattern),
            )

        if score > 0.0 and self._amount_matches(compiled.rule.amount, amount):
            score = min(score + self._amount_boost, 1.0)
        return score

    def _amount_matches(self, expected: Decimal | None, amount: Decimal) -> bool:
        if expected is None:
            return False
        tolerance = abs(expected) * Decimal(str(self._amount_tolerance))
        return abs(abs(amount) - abs(expected)) <= tolerance

    def threshold_for(self, rule: Rule) -> float:
        if rule.match_threshold is None:
            return self._accept_threshold
        return max(self._accept_threshold, rule.match_threshold)

    def match(
        self,
        normalized: str,
        amount: Decimal,
        transaction_type: TransactionType,
        rules: Sequence[CompiledRule],
    ) -> ClassificationMatch | None:
        """Best rule at or above its threshold; ties go to the newest rule."""
        if not normalized:
            return None

        best: CompiledRule | None = None
        best_score = 0.0
        for compiled in rules:
            rule = compiled.rule
            if not rule.applies_to(transaction_type):
                continue
            score = self.score(compiled, normalized, amount)
            if score < self.threshold_for(rule):
                continue
            if (
                best is None
                or score > best_score
                or (score == best_score and rule.created_at > best.rule.created_at)
            ):
                best = compiled
                best_score = score

        if best is None:
            return None

        rule = best.rule
        return ClassificationMatch(
            source="rule",
            confidence=best_score,
            score=best_score,
            category_id=rule.category_id,
            category_name=rule.category_name,
            cost_center_id=rule.cost_center_id,
            cost_center_name=rule.cost_center_name,
            reasoning=(
                f'Rule "{rule.description}" ({rule.match_type}) matched '
                f"with score {best_score:.2f}."
            ),
        )
