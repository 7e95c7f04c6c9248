"""Learned-pattern classification.

Validated history is aggregated into patterns keyed by normalized
description, transaction type, category and cost center. An inverted token
index narrows the candidates for each transaction so that scoring stays
bounded as history grows.
"""

import logging
from collections import Counter, defaultdict
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from uuid import UUID

import numpy as np
from fincore_ml_contracts import TransactionType

from fincore_ml.data_models import HistoricalPattern, HistoricalTransaction

from ..preprocessing import normalize, tokenize
from ..result import ClassificationMatch
from ..similarity import SimilarityFn, get_similarity

logger = logging.getLogger(__name__)

MIN_PATTERN_LENGTH = 3

PatternKey = tuple[str, str, UUID, UUID | None]


def aggregate_patterns(
    transactions: Iterable[HistoricalTransaction],
) -> list[HistoricalPattern]:
    """Group categorized history into patterns, most recent first."""
    groups: dict[PatternKey, HistoricalPattern] = {}

    for txn in transactions:
        text = normalize(txn.description)
        if len(text) < MIN_PATTERN_LENGTH:
            continue

        key = (txn.transaction_type, text, txn.category_id, txn.cost_center_id)
        pattern = groups.get(key)
        if pattern is None:
            groups[key] = HistoricalPattern(
                normalized_description=text,
                transaction_type=txn.transaction_type,
                category_id=txn.category_id,
                category_name=txn.category_name,
                cost_center_id=txn.cost_center_id,
                cost_center_name=txn.cost_center_name,
                occurrences=1,
                last_seen_at=txn.seen_at,
            )
            continue

        pattern.occurrences += 1
        if txn.seen_at is not None and (
            pattern.last_seen_at is None or txn.seen_at > pattern.last_seen_at
        ):
            pattern.last_seen_at = txn.seen_at

    return sorted(groups.values(), key=_recency_key, reverse=True)


def _recency_key(pattern: HistoricalPattern) -> float:
    if pattern.last_seen_at is None:
        return float("-inf")
    return pattern.last_seen_at.timestamp()


@dataclass
class PatternIndex:
    """Patterns with an inverted index from (type, token) to pattern positions."""

    patterns: list[HistoricalPattern] = field(default_factory=list)
    postings: dict[tuple[str, str], list[int]] = field(default_factory=dict)

    @classmethod
    def build(cls, patterns: Sequence[HistoricalPattern]) -> "PatternIndex":
        postings: dict[tuple[str, str], list[int]] = defaultdict(list)
        for position, pattern in enumerate(patterns):
            for token in set(tokenize(pattern.normalized_description)):
                postings[(pattern.transaction_type, token)].append(position)
        return cls(patterns=list(patterns), postings=dict(postings))

    def __len__(self) -> int:
        return len(self.patterns)

    def candidates(
        self,
        tokens: Iterable[str],
        transaction_type: TransactionType,
        limit: int,
    ) -> list[HistoricalPattern]:
        """Patterns sharing the most tokens with the transaction.

        Ties keep index order, which is most recent first.
        """
        overlap: Counter[int] = Counter()
        for token in set(tokens):
            overlap.update(self.postings.get((transaction_type, token), ()))
        ranked = sorted(overlap.items(), key=lambda item: (-item[1], item[0]))
        return [self.patterns[position] for position, _ in ranked[:limit]]


class PatternMatcher:
    """Matches normalized descriptions against learned patterns.

    Confidence grows with the number of prior occurrences:
    ``min(similarity * support * 1.2, cap)`` where
    ``support = min(0.99, 0.5 + 0.05 * occurrences)``. Patterns seen fewer
    than ``min_occurrences`` times can only be suggested, never
    auto-validated.
    """

    name = "pattern"

    def __init__(
        self,
        similarity: SimilarityFn | str = "token_overlap",
        accept_threshold: float = 0.80,
        tie_break: str = "frequency",
        tie_epsilon: float = 0.02,
        max_candidates: int = 200,
        min_occurrences: int = 3,
        confidence_cap: float = 0.95,
    ) -> None:
        if tie_break not in ("frequency", "recency"):
            msg = f"Unknown tie-break policy: {tie_break}"
            raise ValueError(msg)
        self._similarity = (
            get_similarity(similarity) if isinstance(similarity, str) else similarity
        )
        self._accept_threshold = accept_threshold
        self._tie_break = tie_break
        self._tie_epsilon = tie_epsilon
        self._max_candidates = max_candidates
        self._min_occurrences = min_occurrences
        self._confidence_cap = confidence_cap

    def confidence(self, similarity: float, occurrences: int) -> float:
        support = min(0.99, 0.5 + occurrences * 0.05)
        return min(similarity * support * 1.2, self._confidence_cap)

    def match(
        self,
        normalized: str,
        transaction_type: TransactionType,
        index: PatternIndex,
    ) -> ClassificationMatch | None:
        if not normalized or not len(index):
            return None

        candidates = index.candidates(
            tokenize(normalized), transaction_type, self._max_candidates
        )
        if not candidates:
            return None

        texts = [p.normalized_description for p in candidates]
        scores = np.fromiter(
            (self._similarity(normalized, text) for text in texts),
            dtype=np.float64,
            count=len(candidates),
        )
        best_score = float(scores.max())
        if best_score < self._accept_threshold:
            return None

        near = np.flatnonzero(
            (scores >= best_score - self._tie_epsilon)
            & (scores >= self._accept_threshold)
        )
        tied = [(candidates[i], float(scores[i])) for i in near]
        chosen, score = self._break_tie(tied)

        # Support counts every pattern of the chosen category in the tie
        occurrences = sum(
            p.occurrences
            for p, _ in tied
            if (p.category_id, p.cost_center_id)
            == (chosen.category_id, chosen.cost_center_id)
        )
        confidence = self.confidence(score, occurrences)
        auto_allowed = occurrences >= self._min_occurrences

        if len({(p.category_id, p.cost_center_id) for p, _ in tied}) > 1:
            logger.debug(
                "Pattern tie for %r resolved by %s: %s",
                normalized,
                self._tie_break,
                chosen.category_name,
            )

        reasoning = (
            f'Learned pattern "{chosen.normalized_description}" matched with '
            f"similarity {score:.2f} across {occurrences} prior "
            f"transaction{'s' if occurrences != 1 else ''}."
        )
        return ClassificationMatch(
            source="pattern",
            confidence=confidence,
            score=score,
            category_id=chosen.category_id,
            category_name=chosen.category_name,
            cost_center_id=chosen.cost_center_id,
            cost_center_name=chosen.cost_center_name,
            reasoning=reasoning,
            auto_validate_allowed=auto_allowed,
            occurrences=occurrences,
        )

    def _break_tie(
        self, tied: list[tuple[HistoricalPattern, float]]
    ) -> tuple[HistoricalPattern, float]:
        """Pick among candidates within epsilon of the best score.

        Candidates arrive ordered most recent first, so ``max`` keeps the
        earliest (most recent) entry among equals.
        """
        if self._tie_break == "recency":
            return max(tied, key=lambda item: (_recency_key(item[0]), item[1]))

        totals: Counter[tuple[UUID, UUID | None]] = Counter()
        for pattern, _ in tied:
            totals[(pattern.category_id, pattern.cost_center_id)] += pattern.occurrences
        return max(
            tied,
            key=lambda item: (
                totals[(item[0].category_id, item[0].cost_center_id)],
                item[1],
                _recency_key(item[0]),
            ),
        )
