"""AI fallback classification.

Wraps an ``AIClassificationProvider`` with the service's concurrency limit
and timeout. Failures never propagate: they are reported as ``AIFailure`` so
the decision policy can explain why the transaction was left unclassified.
"""

import asyncio
import logging
from collections.abc import Sequence
from dataclasses import dataclass
from decimal import Decimal
from uuid import UUID

from fincore_ml_contracts import TransactionType

from fincore_ml.data_models import CategoryOption, CostCenterOption
from fincore_ml.exceptions import AIProviderError
from fincore_ml.inference._models import (
    AIClassificationProvider,
    AIClassificationRequest,
    AISuggestion,
)

from ..result import ClassificationMatch

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AIFailure:
    reason: str


class AIClassifier:
    """Rate-limited, time-boxed access to the AI provider."""

    name = "ai"

    def __init__(
        self,
        provider: AIClassificationProvider,
        semaphore: asyncio.Semaphore,
        timeout: float = 20.0,
        confidence_cap: float = 0.75,
    ) -> None:
        self._provider = provider
        self._semaphore = semaphore
        self._timeout = timeout
        self._confidence_cap = confidence_cap

    @property
    def model_name(self) -> str:
        return self._provider.model_name

    async def classify(
        self,
        description: str,
        amount: Decimal,
        transaction_type: TransactionType,
        categories: Sequence[CategoryOption],
        cost_centers: Sequence[CostCenterOption],
    ) -> ClassificationMatch | AIFailure:
        offered = [
            c
            for c in categories
            if c.transaction_type is None or c.transaction_type == transaction_type
        ]
        if not offered:
            return AIFailure("no categories available")

        request = AIClassificationRequest(
            description=description,
            amount=amount,
            transaction_type=transaction_type,
            categories=offered,
            cost_centers=cost_centers,
        )

        try:
            async with self._semaphore:
                suggestion = await asyncio.wait_for(
                    self._provider.classify(request), timeout=self._timeout
                )
        except TimeoutError:
            logger.warning("AI request timed out after %.1fs", self._timeout)
            return AIFailure(f"timed out after {self._timeout:.0f}s")
        except AIProviderError as e:
            return AIFailure(e.reason)
        except Exception as e:
            logger.warning(
                "AI classification failed: %s (type: %s)",
                str(e) or repr(e),
                type(e).__name__,
            )
            return AIFailure(f"unexpected error ({type(e).__name__})")

        return self._to_match(suggestion, offered, cost_centers)

    def _to_match(
        self,
        suggestion: AISuggestion,
        categories: Sequence[CategoryOption],
        cost_centers: Sequence[CostCenterOption],
    ) -> ClassificationMatch:
        category_names: dict[UUID | None, str] = {c.id: c.name for c in categories}
        cost_center_names: dict[UUID | None, str] = {
            c.id: c.name for c in cost_centers
        }
        confidence = min(suggestion.confidence, self._confidence_cap)

        if suggestion.is_transfer:
            detail = "internal transfer"
        elif suggestion.category_id is not None:
            detail = category_names.get(suggestion.category_id, "an unknown category")
        else:
            detail = "no matching category"
        reasoning = f"AI ({self.model_name}) suggested {detail}"
        if suggestion.reasoning:
            reasoning = f"{reasoning}: {suggestion.reasoning}"
        if not reasoning.endswith("."):
            reasoning += "."

        return ClassificationMatch(
            source="ai",
            confidence=confidence,
            reasoning=reasoning,
            category_id=suggestion.category_id,
            category_name=category_names.get(suggestion.category_id),
            cost_center_id=suggestion.cost_center_id,
            cost_center_name=cost_center_names.get(suggestion.cost_center_id),
            is_transfer=suggestion.is_transfer,
            auto_validate_allowed=False,
        )
