"""Tests for evaluation metrics."""

from dataclasses import dataclass

import pytest
from fincore_ml.evaluation.metrics import aggregate_metrics, compute_metrics


@dataclass
class FakeClassification:
    category_name: str | None
    source: str = "rule"
    auto_validated: bool = False
    is_transfer: bool = False


class TestComputeMetrics:
    def test_counts(self) -> None:
        classifications = [
            FakeClassification("Transport", auto_validated=True),
            FakeClassification("software", source="pattern", auto_validated=True),
            FakeClassification("Transport", source="pattern"),
            FakeClassification(None, source="none"),
            FakeClassification(None, is_transfer=True, auto_validated=True),
        ]
        labels = ["Transport", "Software", "Office Rent", "Sales", "transfer"]

        metrics = compute_metrics(classifications, labels)

        assert metrics.total == 5
        assert metrics.correct == 3
        assert metrics.unclassified == 1
        assert metrics.accuracy == pytest.approx(0.6)
        assert metrics.coverage == pytest.approx(0.8)
        assert metrics.precision == pytest.approx(0.75)
        assert metrics.auto_validated_precision == 1.0
        assert metrics.by_source["pattern"] == {"correct": 1, "total": 2}

    def test_empty(self) -> None:
        metrics = compute_metrics([], [])

        assert metrics.accuracy == 0.0
        assert metrics.coverage == 0.0

    def test_length_mismatch(self) -> None:
        with pytest.raises(ValueError):
            compute_metrics([FakeClassification("Transport")], [])


def test_aggregate_metrics() -> None:
    first = compute_metrics([FakeClassification("Transport")], ["Transport"])
    second = compute_metrics([FakeClassification(None, source="none")], ["Sales"])

    total = aggregate_metrics([first, second])

    assert total.total == 2
    assert total.correct == 1
    assert total.by_source == {
        "rule": {"correct": 1, "total": 1},
        "none": {"correct": 0, "total": 1},
    }
