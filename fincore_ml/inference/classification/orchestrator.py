"""Classification pipeline orchestrator.

This module provides the ClassificationOrchestrator, an application service
that coordinates the full classification pipeline for production use.

For evaluation and testing, use the pipeline components directly:
- normalize, TransferDetector (preprocessing)
- RuleMatcher, PatternMatcher, AIClassifier (classifiers)
- DecisionPolicy (policy)
"""

from __future__ import annotations

import asyncio
import logging
from collections import Counter
from collections.abc import Sequence
from typing import TYPE_CHECKING
from uuid import UUID

from fincore_ml.exceptions import ClassificationError

from .context import PipelineContext, TransactionContext
from .policy import DecisionPolicy
from .preprocessing import normalize
from .tiers import MatchStrategy, build_strategies

if TYPE_CHECKING:
    from fincore_ml_contracts import TransactionInput

    from fincore_ml.inference.shared import SharedInfrastructure
    from fincore_ml.storage.protocols import ClassificationRepositories

    from .result import ClassificationResult

logger = logging.getLogger(__name__)


class ClassificationOrchestrator:
    """Application service for classification.

    For each transaction, in order:
    1. Normalize the description
    2. Transfer detection (own accounts and known phrases), which short-circuits
    3. Rules, learned patterns, then the AI fallback; the first match the
       policy accepts wins
    4. Decision policy (auto-validate / suggest / leave unclassified)
    5. Persist the decision when the transaction has an id

    Transactions of a batch run as independent tasks: one failing or slow
    transaction does not hold up the others. Only the AI fallback actually
    waits on I/O, bounded by the shared AI semaphore.

    Usage:
        # Created once at app startup
        orchestrator = ClassificationOrchestrator(infra)

        # Called per request with organization-scoped repositories
        results = await orchestrator.classify_batch(repos, transactions)
    """

    def __init__(
        self,
        infra: SharedInfrastructure,
        strategies: Sequence[MatchStrategy] | None = None,
    ) -> None:
        settings = infra.settings
        self._infra = infra
        self._strategies = (
            list(strategies) if strategies is not None else build_strategies(infra)
        )
        self._policy = DecisionPolicy(
            auto_validate_confidence=settings.auto_validate_confidence,
            suggest_confidence=settings.suggest_confidence,
        )

    @property
    def strategy_names(self) -> list[str]:
        return [strategy.name for strategy in self._strategies]

    def invalidate(self, organization_id: UUID) -> bool:
        """Drop cached learned patterns after the organization's history changed."""
        return self._infra.pattern_cache.invalidate(organization_id)

    async def classify(
        self,
        repos: ClassificationRepositories,
        transaction: TransactionInput,
    ) -> ClassificationResult:
        """Classify a single transaction."""
        results = await self.classify_batch(repos, [transaction])
        result = results[0]
        if result is None:
            msg = "Classification did not complete"
            raise ClassificationError(msg)
        return result

    async def classify_batch(
        self,
        repos: ClassificationRepositories,
        transactions: Sequence[TransactionInput],
        cancel_event: asyncio.Event | None = None,
    ) -> list[ClassificationResult | None]:
        """Classify a batch of transactions of one organization.

        Results keep the input order. When ``cancel_event`` is set before the
        batch completes, outstanding work (including in-flight AI requests)
        is cancelled; results already produced are returned and the remaining
        slots are None.
        """
        n_txns = len(transactions)
        results: list[ClassificationResult | None] = [None] * n_txns
        if n_txns == 0:
            return results

        logger.info(
            "Starting classification: organization=%s, transactions=%d",
            repos.organization_id,
            n_txns,
        )

        pipeline_ctx = await PipelineContext.load(repos, self._infra)
        contexts = [
            TransactionContext.from_input(index, txn)
            for index, txn in enumerate(transactions)
        ]

        tasks = {
            asyncio.create_task(self._classify_one(pipeline_ctx, ctx)): ctx.index
            for ctx in contexts
        }
        pending: set[asyncio.Task] = set(tasks)
        cancel_waiter = None
        if cancel_event is not None:
            cancel_waiter = asyncio.create_task(cancel_event.wait())

        try:
            while pending:
                waitables = set(pending)
                if cancel_waiter is not None:
                    waitables.add(cancel_waiter)
                done, _ = await asyncio.wait(
                    waitables, return_when=asyncio.FIRST_COMPLETED
                )

                for task in done:
                    if task is cancel_waiter:
                        continue
                    pending.discard(task)
                    results[tasks[task]] = task.result()

                if cancel_waiter is not None and cancel_waiter.done():
                    break
        finally:
            for task in pending:
                task.cancel()
            if pending:
                await asyncio.gather(*pending, return_exceptions=True)
            if cancel_waiter is not None:
                cancel_waiter.cancel()

        completed = [r for r in results if r is not None]
        if pending:
            logger.info(
                "Classification cancelled: %d/%d completed",
                len(completed),
                n_txns,
            )
        else:
            by_source = Counter(r.source for r in completed)
            logger.info(
                "Classification complete: %d transactions, sources=%s",
                n_txns,
                dict(by_source),
            )
        return results

    async def _classify_one(
        self, pipeline: PipelineContext, txn: TransactionContext
    ) -> ClassificationResult:
        txn.normalized = normalize(txn.description)
        detector = pipeline.transfer_detector
        txn.transfer = detector.detect(txn.description, txn.normalized)

        if txn.transfer is None:
            await self._run_strategies(pipeline, txn)

        result = self._policy.decide(txn)
        logger.debug(
            "  #%d %r -> %s (%.2f)",
            txn.index,
            txn.normalized,
            result.source,
            result.confidence,
        )

        repos = pipeline.repositories
        if result.transaction_id is None or repos is None:
            return result
        if repos.organization_id is None:
            logger.info(
                "Stateless request, classification for %s not persisted",
                result.transaction_id,
            )
            return result
        await self._persist(repos, pipeline.store_lock, result)
        return result

    async def _run_strategies(
        self, pipeline: PipelineContext, txn: TransactionContext
    ) -> None:
        for strategy in self._strategies:
            try:
                match = await strategy.attempt_match(txn, pipeline)
            except Exception as e:
                logger.warning(
                    "%s strategy failed for #%d: %s (type: %s)",
                    strategy.name,
                    txn.index,
                    str(e) or repr(e),
                    type(e).__name__,
                )
                continue

            if match is None:
                continue
            if self._policy.accepts(match):
                txn.match = match
                return
            txn.rejected.append(match)

    async def _persist(
        self,
        repos: ClassificationRepositories,
        lock: asyncio.Lock,
        result: ClassificationResult,
    ) -> None:
        """Write the decision. Failures are logged; the result still stands."""
        try:
            async with lock:
                saved = await repos.decisions.save(result)
        except Exception as e:
            logger.warning(
                "Failed to persist classification for %s: %s",
                result.transaction_id,
                e,
            )
            return

        if not saved:
            logger.warning(
                "Transaction %s not found, classification not persisted",
                result.transaction_id,
            )
