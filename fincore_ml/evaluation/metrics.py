"""Evaluation metrics computation."""

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Protocol

TRANSFER_LABEL = "transfer"


class ClassificationLike(Protocol):
    """Protocol for classification results used in metrics."""

    category_name: str | None
    source: str
    auto_validated: bool
    is_transfer: bool


@dataclass
class EvaluationMetrics:
    """Computed evaluation metrics."""

    total: int = 0
    correct: int = 0
    unclassified: int = 0
    auto_validated: int = 0
    auto_validated_correct: int = 0
    by_source: dict[str, dict[str, int]] = field(default_factory=dict)

    @property
    def accuracy(self) -> float:
        """Share of all transactions classified correctly."""
        return self.correct / self.total if self.total > 0 else 0.0

    @property
    def coverage(self) -> float:
        """Share of transactions that received any classification."""
        if self.total == 0:
            return 0.0
        return (self.total - self.unclassified) / self.total

    @property
    def precision(self) -> float:
        """Accuracy among classified transactions."""
        classified = self.total - self.unclassified
        return self.correct / classified if classified > 0 else 0.0

    @property
    def auto_validated_precision(self) -> float:
        """Accuracy among auto-validated transactions; should stay near 1."""
        if self.auto_validated == 0:
            return 0.0
        return self.auto_validated_correct / self.auto_validated


def predicted_label(clf: ClassificationLike) -> str | None:
    if clf.is_transfer:
        return TRANSFER_LABEL
    return clf.category_name


def compute_metrics(
    classifications: Sequence[ClassificationLike],
    expected_labels: Sequence[str],
) -> EvaluationMetrics:
    """Compute evaluation metrics from classifications and ground truth.

    Args:
        classifications: Classification results
        expected_labels: Expected category name (or "transfer") per transaction

    Returns:
        EvaluationMetrics with accuracy and breakdown by source
    """
    metrics = EvaluationMetrics(total=len(classifications))

    for clf, expected in zip(classifications, expected_labels, strict=True):
        bucket = metrics.by_source.setdefault(clf.source, {"correct": 0, "total": 0})
        bucket["total"] += 1

        if clf.source == "none":
            metrics.unclassified += 1
            continue

        predicted = predicted_label(clf) or ""
        is_correct = predicted.casefold() == expected.casefold()
        if is_correct:
            metrics.correct += 1
            bucket["correct"] += 1

        if clf.auto_validated:
            metrics.auto_validated += 1
            if is_correct:
                metrics.auto_validated_correct += 1

    return metrics


def aggregate_metrics(results: Sequence[EvaluationMetrics]) -> EvaluationMetrics:
    """Sum metrics across folds."""
    total = EvaluationMetrics()
    for m in results:
        total.total += m.total
        total.correct += m.correct
        total.unclassified += m.unclassified
        total.auto_validated += m.auto_validated
        total.auto_validated_correct += m.auto_validated_correct
        for source, counts in m.by_source.items():
            bucket = total.by_source.setdefault(source, {"correct": 0, "total": 0})
            bucket["correct"] += counts["correct"]
            bucket["total"] += counts["total"]
    return total
