"""Tests for DecisionPolicy."""

from decimal import Decimal
from uuid import uuid4

import pytest
from fincore_ml.inference.classification import (
    ClassificationMatch,
    DecisionPolicy,
    TransactionContext,
)
from fincore_ml.inference.classification.preprocessing import TransferMatch


@pytest.fixture
def policy() -> DecisionPolicy:
    return DecisionPolicy(auto_validate_confidence=0.85, suggest_confidence=0.60)


def _txn(**kwargs) -> TransactionContext:
    txn = TransactionContext(
        index=0,
        description="UBER* TRIP 4821",
        amount=Decimal("32.90"),
        transaction_type="expense",
        transaction_id=uuid4(),
    )
    txn.normalized = "uber trip"
    for name, value in kwargs.items():
        setattr(txn, name, value)
    return txn


def _match(source="rule", confidence=0.9, **kwargs) -> ClassificationMatch:
    kwargs.setdefault("category_id", uuid4())
    kwargs.setdefault("category_name", "Transport")
    return ClassificationMatch(
        source=source, confidence=confidence, reasoning="Matched.", **kwargs
    )


class TestTier:
    @pytest.mark.parametrize(
        ("confidence", "tier"),
        [
            (0.95, "auto"),
            (0.85, "auto"),
            (0.84, "suggest"),
            (0.60, "suggest"),
            (0.59, "unclassified"),
        ],
    )
    def test_boundaries(self, policy, confidence, tier) -> None:
        assert policy.tier(confidence) == tier

    def test_thresholds_must_be_ordered(self) -> None:
        with pytest.raises(ValueError, match="suggest_confidence"):
            DecisionPolicy(auto_validate_confidence=0.5, suggest_confidence=0.7)


class TestAccepts:
    def test_confident_match(self, policy) -> None:
        assert policy.accepts(_match(confidence=0.7))

    def test_low_confidence_match(self, policy) -> None:
        assert not policy.accepts(_match(confidence=0.5))

    def test_match_without_category(self, policy) -> None:
        assert not policy.accepts(_match(confidence=0.9, category_id=None))


class TestDecide:
    def test_transfer(self, policy) -> None:
        transfer = TransferMatch(kind="phrase", matched="pagamento fatura")

        result = policy.decide(_txn(transfer=transfer))

        assert result.source == "rule"
        assert result.confidence == 1.0
        assert result.auto_validated
        assert result.is_transfer
        assert result.category_id is None
        assert result.reasoning.startswith("Internal transfer")

    def test_auto_validated(self, policy) -> None:
        match = _match(confidence=0.9)

        result = policy.decide(_txn(match=match))

        assert result.auto_validated
        assert result.validation_status == "validated"
        assert result.category_id == match.category_id
        assert result.normalized_description == "uber trip"
        assert result.reasoning == "Matched. Auto-validated (confidence 0.90 >= 0.85)."

    def test_suggested(self, policy) -> None:
        result = policy.decide(_txn(match=_match(confidence=0.7)))

        assert not result.auto_validated
        assert result.validation_status == "pending"
        assert "Suggested for review (confidence 0.70 < 0.85)" in result.reasoning

    def test_ai_is_never_auto_validated(self, policy) -> None:
        match = _match("ai", 0.9, auto_validate_allowed=False)

        result = policy.decide(_txn(match=match))

        assert result.source == "ai"
        assert not result.auto_validated
        assert "AI suggestions are never auto-validated" in result.reasoning

    def test_rare_pattern_is_only_suggested(self, policy) -> None:
        match = _match("pattern", 0.9, auto_validate_allowed=False, occurrences=2)

        result = policy.decide(_txn(match=match))

        assert not result.auto_validated
        assert "only 2 prior occurrences" in result.reasoning

    def test_nothing_matched(self, policy) -> None:
        result = policy.decide(_txn())

        assert result.source == "none"
        assert result.confidence == 0.0
        assert result.category_id is None
        assert not result.is_classified
        assert result.reasoning == (
            "No rule or learned pattern matched. Manual review required."
        )

    def test_rejected_candidate_is_explained(self, policy) -> None:
        rejected = [_match("pattern", 0.45), _match("ai", 0.55)]

        result = policy.decide(_txn(rejected=rejected, ai_failure=None))

        assert result.source == "none"
        assert result.reasoning.startswith(
            "Best candidate (ai) had confidence 0.55, below 0.60"
        )

    def test_ai_failure_is_explained(self, policy) -> None:
        result = policy.decide(_txn(ai_failure="timed out after 20s"))

        assert "AI fallback failed: timed out after 20s." in result.reasoning
