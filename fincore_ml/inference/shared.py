"""Shared infrastructure for the classification orchestrator.

This module defines the resources that are created once at app startup and
shared across all requests. Organization data is loaded from the database
per request, with learned patterns cached for a short time.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import TYPE_CHECKING

from fincore_ml.storage.cache import OrganizationCache

if TYPE_CHECKING:
    from fincore_ml.config.settings import Settings
    from fincore_ml.inference._models import AIClassificationProvider
    from fincore_ml.inference.classification.classifiers import PatternIndex


@dataclass
class SharedInfrastructure:
    """Long-lived resources shared across all requests (singleton in app lifespan).

    - settings: Application settings
    - pattern_cache: Learned pattern indexes per organization
    - ai_provider: Optional LLM backend for the last fallback
    - ai_semaphore: Bounds concurrent AI requests across all batches
    """

    settings: Settings
    pattern_cache: OrganizationCache[PatternIndex]
    ai_semaphore: asyncio.Semaphore
    ai_provider: AIClassificationProvider | None = None

    @classmethod
    def create(
        cls,
        settings: Settings,
        ai_provider: AIClassificationProvider | None = None,
    ) -> SharedInfrastructure:
        """Create shared infrastructure from settings."""
        return cls(
            settings=settings,
            pattern_cache=OrganizationCache(
                ttl_seconds=settings.pattern_cache_ttl_seconds,
                max_entries=settings.pattern_cache_max_entries,
            ),
            ai_semaphore=asyncio.Semaphore(settings.ai_max_concurrency),
            ai_provider=ai_provider,
        )

    async def close(self) -> None:
        if self.ai_provider is not None:
            await self.ai_provider.close()
        self.pattern_cache.clear()
