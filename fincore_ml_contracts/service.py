"""Health and cache management contracts."""

from uuid import UUID

from pydantic import BaseModel


class HealthResponse(BaseModel):
    status: str
    version: str
    ai_enabled: bool
    ai_backend: str | None = None
    ai_model: str | None = None
    ai_reachable: bool | None = None
    cached_organizations: int = 0


class CacheInvalidationResponse(BaseModel):
    """Response after dropping an organization's cached patterns."""

    organization_id: UUID
    invalidated: bool
