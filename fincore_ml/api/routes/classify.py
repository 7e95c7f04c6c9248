"""Classification endpoints."""

import asyncio
import logging
import time
from collections import Counter

from fastapi import APIRouter, Request
from fincore_ml_contracts import (
    Classification,
    ClassificationStats,
    ClassifyBatchRequest,
    ClassifyBatchResponse,
    TransactionInput,
)

from fincore_ml.api.dependencies import (
    OrchestratorDep,
    RepositoryBuilderDep,
    SettingsDep,
)
from fincore_ml.config.settings import Settings
from fincore_ml.inference import ClassificationResult

logger = logging.getLogger(__name__)

router = APIRouter()

DISCONNECT_POLL_SECONDS = 0.5


def _to_classification(result: ClassificationResult) -> Classification:
    """Convert ClassificationResult to Classification contract model."""
    return Classification(
        transaction_id=result.transaction_id,
        category_id=result.category_id,
        category_name=result.category_name,
        cost_center_id=result.cost_center_id,
        cost_center_name=result.cost_center_name,
        confidence=result.confidence,
        is_transfer=result.is_transfer,
        reasoning=result.reasoning,
        source=result.source,
        auto_validated=result.auto_validated,
        normalized_description=result.normalized_description or None,
    )


def _compute_stats(
    classifications: list[Classification], settings: Settings
) -> ClassificationStats:
    """Compute classification statistics."""
    source_counts: dict[str, int] = dict(Counter(c.source for c in classifications))

    confidence_buckets: dict[str, int] = dict(
        Counter(
            "high"
            if c.confidence >= settings.auto_validate_confidence
            else "medium"
            if c.confidence >= settings.suggest_confidence
            else "low"
            for c in classifications
        )
    )

    return ClassificationStats(
        total=len(classifications),
        by_source=source_counts,  # type: ignore[arg-type]
        by_confidence=confidence_buckets,  # type: ignore[arg-type]
        auto_validated=sum(1 for c in classifications if c.auto_validated),
        transfers_detected=sum(1 for c in classifications if c.is_transfer),
    )


async def _watch_disconnect(http_request: Request, cancel_event: asyncio.Event) -> None:
    """Cancel the batch if the client goes away."""
    while not cancel_event.is_set():
        if await http_request.is_disconnected():
            logger.info("Client disconnected, cancelling batch")
            cancel_event.set()
            return
        await asyncio.sleep(DISCONNECT_POLL_SECONDS)


@router.post("/classify", response_model=Classification)
async def classify_transaction(
    request: TransactionInput,
    orchestrator: OrchestratorDep,
    build_repositories: RepositoryBuilderDep,
) -> Classification:
    """Classify a single transaction."""
    logger.info(
        "POST /classify: organization=%s, transaction=%s",
        request.organization_id,
        request.transaction_id,
    )
    repos = build_repositories(request.organization_id)
    result = await orchestrator.classify(repos, request)
    return _to_classification(result)


@router.post("/classify/batch", response_model=ClassifyBatchResponse)
async def classify_transactions(
    request: ClassifyBatchRequest,
    http_request: Request,
    orchestrator: OrchestratorDep,
    build_repositories: RepositoryBuilderDep,
    settings: SettingsDep,
) -> ClassifyBatchResponse:
    """Classify a batch of transactions of one organization."""
    start_time = time.perf_counter()
    logger.info(
        "POST /classify/batch: organization=%s, transactions=%d",
        request.organization_id,
        len(request.transactions),
    )

    repos = build_repositories(request.organization_id)
    cancel_event = asyncio.Event()
    watcher = asyncio.create_task(_watch_disconnect(http_request, cancel_event))
    try:
        results = await orchestrator.classify_batch(
            repos, request.transactions, cancel_event=cancel_event
        )
    finally:
        watcher.cancel()

    # Cancelled slots only occur when the client is gone
    classifications = [_to_classification(r) for r in results if r is not None]
    stats = _compute_stats(classifications, settings)
    elapsed_ms = int((time.perf_counter() - start_time) * 1000)
    logger.info(
        "Classification complete: %d transactions in %dms, sources=%s",
        len(classifications),
        elapsed_ms,
        stats.by_source,
    )

    return ClassifyBatchResponse(
        classifications=classifications,
        stats=stats,
        processing_time_ms=elapsed_ms,
    )
