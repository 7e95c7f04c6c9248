"""FastAPI dependencies."""

from collections.abc import Callable
from functools import partial
from typing import Annotated
from uuid import UUID

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from fincore_ml.config.settings import Settings, get_settings
from fincore_ml.inference import ClassificationOrchestrator, SharedInfrastructure
from fincore_ml.storage import (
    ClassificationRepositories,
    RepositoryFactory,
    get_session,
)

RepositoryBuilder = Callable[[UUID | None], ClassificationRepositories]


def get_orchestrator(request: Request) -> ClassificationOrchestrator:
    return request.app.state.classification


def get_infra(request: Request) -> SharedInfrastructure:
    return request.app.state.infra


def get_repository_builder(
    session: AsyncSession = Depends(get_session),
) -> RepositoryBuilder:
    """Organization-scoped repositories bound to the request's session."""
    return partial(RepositoryFactory, session)


SettingsDep = Annotated[Settings, Depends(get_settings)]
OrchestratorDep = Annotated[ClassificationOrchestrator, Depends(get_orchestrator)]
InfraDep = Annotated[SharedInfrastructure, Depends(get_infra)]
RepositoryBuilderDep = Annotated[RepositoryBuilder, Depends(get_repository_builder)]
