"""Pipeline context for transaction classification."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from decimal import Decimal
from typing import TYPE_CHECKING, TypeVar
from uuid import UUID

from fincore_ml.config.patterns import TRANSFER_PHRASES

from .classifiers import CompiledRule, PatternIndex, aggregate_patterns, compile_rules
from .preprocessing import TransferDetector, TransferMatch

if TYPE_CHECKING:
    from fincore_ml_contracts import TransactionInput, TransactionType

    from fincore_ml.data_models import CategoryOption, CostCenterOption
    from fincore_ml.inference.shared import SharedInfrastructure
    from fincore_ml.storage.protocols import ClassificationRepositories

    from .result import ClassificationMatch

logger = logging.getLogger(__name__)

T = TypeVar("T")


async def _safe_load(what: str, load: Callable[[], Awaitable[T]], default: T) -> T:
    """Store reads never fail a classification: log and continue without."""
    try:
        return await load()
    except Exception as e:
        logger.warning("Failed to load %s, continuing without: %s", what, e)
        return default


@dataclass
class TransactionContext:
    """State for a single transaction through the pipeline."""

    index: int
    description: str
    amount: Decimal
    transaction_type: TransactionType
    transaction_id: UUID | None = None

    normalized: str = ""
    transfer: TransferMatch | None = None
    match: ClassificationMatch | None = None
    rejected: list[ClassificationMatch] = field(default_factory=list)
    ai_failure: str | None = None

    @classmethod
    def from_input(cls, index: int, txn: TransactionInput) -> TransactionContext:
        return cls(
            index=index,
            description=txn.description,
            amount=txn.amount,
            transaction_type=txn.transaction_type,
            transaction_id=txn.transaction_id,
        )


@dataclass
class PipelineContext:
    """Organization data shared by every transaction in a batch.

    Rules, learned patterns and accounts are loaded once up front. The
    category catalog is only needed by the AI fallback and is loaded on first
    use. ``store_lock`` serializes access to the request's database session,
    which the concurrent per-transaction tasks share.
    """

    organization_id: UUID | None
    rules: list[CompiledRule] = field(default_factory=list)
    pattern_index: PatternIndex = field(default_factory=PatternIndex)
    transfer_detector: TransferDetector = field(default_factory=TransferDetector)
    repositories: ClassificationRepositories | None = None
    store_lock: asyncio.Lock = field(default_factory=asyncio.Lock)
    _catalog: tuple[list[CategoryOption], list[CostCenterOption]] | None = None

    @classmethod
    async def load(
        cls,
        repos: ClassificationRepositories,
        infra: SharedInfrastructure,
    ) -> PipelineContext:
        settings = infra.settings
        organization_id = repos.organization_id
        phrases = TRANSFER_PHRASES if settings.transfer_phrases_enabled else ()

        if organization_id is None:
            logger.debug("No organization: classifying without rules or patterns")
            return cls(
                organization_id=None,
                transfer_detector=TransferDetector(phrases=phrases),
                repositories=repos,
            )

        rules = await _safe_load("rules", repos.rules.find_active, [])
        accounts = await _safe_load("accounts", repos.accounts.find_all, [])

        async def load_patterns() -> PatternIndex:
            history = await repos.history.find_categorized(
                limit=settings.pattern_history_limit
            )
            return PatternIndex.build(aggregate_patterns(history))

        pattern_index = await _safe_load(
            "learned patterns",
            lambda: infra.pattern_cache.get_or_load(organization_id, load_patterns),
            PatternIndex(),
        )

        ctx = cls(
            organization_id=organization_id,
            rules=compile_rules(rules),
            pattern_index=pattern_index,
            transfer_detector=TransferDetector(accounts, phrases=phrases),
            repositories=repos,
        )
        logger.debug(
            "Loaded organization %s: %d rules, %d patterns, %d account aliases",
            organization_id,
            len(ctx.rules),
            len(ctx.pattern_index),
            ctx.transfer_detector.alias_count,
        )
        return ctx

    async def catalog(self) -> tuple[list[CategoryOption], list[CostCenterOption]]:
        """Categories and cost centers, loaded once per batch."""
        async with self.store_lock:
            if self._catalog is None:
                if self.repositories is None:
                    self._catalog = ([], [])
                else:
                    catalog = self.repositories.catalog
                    categories = await _safe_load("categories", catalog.categories, [])
                    cost_centers = await _safe_load(
                        "cost centers", catalog.cost_centers, []
                    )
                    self._catalog = (categories, cost_centers)
            return self._catalog
