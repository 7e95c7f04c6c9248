"""Health check endpoint."""

from fastapi import APIRouter
from fincore_ml_contracts import HealthResponse

from fincore_ml import __version__
from fincore_ml.api.dependencies import InfraDep

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
async def health_check(infra: InfraDep) -> HealthResponse:
    """Check service health and AI backend status."""
    settings = infra.settings
    provider = infra.ai_provider if settings.ai_enabled else None

    ai_reachable = await provider.health_check() if provider is not None else None

    return HealthResponse(
        status="degraded" if ai_reachable is False else "ok",
        version=__version__,
        ai_enabled=provider is not None,
        ai_backend=provider.backend if provider is not None else None,
        ai_model=provider.model_name if provider is not None else None,
        ai_reachable=ai_reachable,
        cached_organizations=len(infra.pattern_cache),
    )
