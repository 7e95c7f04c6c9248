"""Decision policy: turns the winning match into a final classification.

- confidence >= auto_validate_confidence, and the match allows it:
  auto-validated
- confidence >= suggest_confidence: suggested, pending review
- otherwise: left unclassified for manual review
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Literal

from .result import ClassificationMatch, ClassificationResult

if TYPE_CHECKING:
    from .context import TransactionContext

ConfidenceTier = Literal["auto", "suggest", "unclassified"]


class DecisionPolicy:
    def __init__(
        self,
        auto_validate_confidence: float = 0.85,
        suggest_confidence: float = 0.60,
    ):
        if suggest_confidence > auto_validate_confidence:
            msg = "suggest_confidence must not exceed auto_validate_confidence"
            raise ValueError(msg)
        self._auto = auto_validate_confidence
        self._suggest = suggest_confidence

    def tier(self, confidence: float) -> ConfidenceTier:
        if confidence >= self._auto:
            return "auto"
        if confidence >= self._suggest:
            return "suggest"
        return "unclassified"

    def accepts(self, match: ClassificationMatch) -> bool:
        """Whether a match is good enough to stop trying further strategies."""
        return match.is_actionable and match.confidence >= self._suggest

    def decide(self, txn: TransactionContext) -> ClassificationResult:
        if txn.transfer is not None:
            return ClassificationResult(
                transaction_id=txn.transaction_id,
                confidence=1.0,
                reasoning=f"{txn.transfer.reasoning}.",
                source="rule",
                auto_validated=True,
                is_transfer=True,
                normalized_description=txn.normalized,
            )

        if txn.match is not None:
            return self._classified(txn, txn.match)

        return self._unclassified(txn)

    def _classified(
        self, txn: TransactionContext, match: ClassificationMatch
    ) -> ClassificationResult:
        confidence = match.confidence
        auto = match.auto_validate_allowed and self.tier(confidence) == "auto"

        threshold = f"{self._auto:.2f}"
        if auto:
            note = f"Auto-validated (confidence {confidence:.2f} >= {threshold})."
        elif self.tier(confidence) != "auto":
            note = f"Suggested for review (confidence {confidence:.2f} < {threshold})."
        elif match.source == "ai":
            note = "Suggested for review: AI suggestions are never auto-validated."
        else:
            note = (
                f"Suggested for review: only {match.occurrences} prior "
                f"occurrence{'s' if match.occurrences != 1 else ''}."
            )

        return ClassificationResult(
            transaction_id=txn.transaction_id,
            confidence=confidence,
            reasoning=f"{match.reasoning} {note}",
            source=match.source,
            auto_validated=auto,
            is_transfer=match.is_transfer,
            category_id=match.category_id,
            category_name=match.category_name,
            cost_center_id=match.cost_center_id,
            cost_center_name=match.cost_center_name,
            normalized_description=txn.normalized,
        )

    def _unclassified(self, txn: TransactionContext) -> ClassificationResult:
        parts = []
        if txn.rejected:
            best = max(txn.rejected, key=lambda m: m.confidence)
            parts.append(
                f"Best candidate ({best.source}) had confidence "
                f"{best.confidence:.2f}, below {self._suggest:.2f}: {best.reasoning}"
            )
        else:
            parts.append("No rule or learned pattern matched.")
        if txn.ai_failure is not None:
            parts.append(f"AI fallback failed: {txn.ai_failure}.")
        parts.append("Manual review required.")

        return ClassificationResult(
            transaction_id=txn.transaction_id,
            confidence=0.0,
            reasoning=" ".join(parts),
            source="none",
            normalized_description=txn.normalized,
        )
