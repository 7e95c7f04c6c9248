"""Organization cache management endpoints."""

import logging
from uuid import UUID

from fastapi import APIRouter
from fincore_ml_contracts import CacheInvalidationResponse

from fincore_ml.api.dependencies import OrchestratorDep

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    "/organizations/{organization_id}/cache/invalidate",
    response_model=CacheInvalidationResponse,
)
async def invalidate_cache(
    organization_id: UUID,
    orchestrator: OrchestratorDep,
) -> CacheInvalidationResponse:
    """Drop cached learned patterns.

    The dashboard calls this after users validate or recategorize
    transactions so that the next classification sees the new history.
    """
    invalidated = orchestrator.invalidate(organization_id)
    logger.info(
        "Cache invalidation for organization %s: %s",
        organization_id,
        "dropped" if invalidated else "nothing cached",
    )
    return CacheInvalidationResponse(
        organization_id=organization_id, invalidated=invalidated
    )
