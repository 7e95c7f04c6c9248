"""Shared test fixtures for the classification service."""

import asyncio
from collections.abc import Generator, Iterable
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock
from uuid import UUID, uuid4

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from fincore_ml import __version__
from fincore_ml.api.dependencies import get_repository_builder
from fincore_ml.api.routes import classify, health, organizations
from fincore_ml.config.settings import Settings, get_settings
from fincore_ml.data_models import (
    CategoryOption,
    CostCenterOption,
    HistoricalTransaction,
    InternalAccount,
    Rule,
)
from fincore_ml.exceptions import AIProviderError
from fincore_ml.inference import ClassificationOrchestrator, SharedInfrastructure
from fincore_ml.inference._models import (
    AIClassificationProvider,
    AIClassificationRequest,
    AISuggestion,
)


BASE_TIME = datetime(2026, 1, 15, 12, 0, tzinfo=UTC)


class FakeAIProvider(AIClassificationProvider):
    """Scripted AI provider that records calls."""

    def __init__(
        self,
        suggestion: AISuggestion | None = None,
        error: Exception | None = None,
        delay: float = 0.0,
        delays: dict[str, float] | None = None,
    ):
        self.suggestion = suggestion
        self.error = error
        self.delay = delay
        self.delays = delays or {}
        self.requests: list[AIClassificationRequest] = []
        self.in_flight = 0
        self.max_in_flight = 0
        self.cancelled = 0

    @property
    def model_name(self) -> str:
        return "fake-model"

    @property
    def backend(self) -> str:
        return "fake"

    async def classify(self, request: AIClassificationRequest) -> AISuggestion:
        self.requests.append(request)
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(self.delays.get(request.description, self.delay))
        except asyncio.CancelledError:
            self.cancelled += 1
            raise
        finally:
            self.in_flight -= 1

        if self.error is not None:
            raise self.error
        if self.suggestion is not None:
            return self.suggestion
        # Default: pick the first offered category
        return AISuggestion(
            category_id=request.categories[0].id,
            confidence=0.9,
            reasoning="Looks like it",
        )

    async def health_check(self) -> bool:
        return self.error is None or not isinstance(self.error, AIProviderError)


@pytest.fixture
def settings() -> Settings:
    """Default settings, isolated from any local .env file."""
    return Settings(_env_file=None)


@pytest.fixture
def organization_id() -> UUID:
    return uuid4()


@pytest.fixture
def categories() -> list[CategoryOption]:
    return [
        CategoryOption(id=uuid4(), name="Transport", transaction_type="expense"),
        CategoryOption(id=uuid4(), name="Software", transaction_type="expense"),
        CategoryOption(id=uuid4(), name="Office Rent", transaction_type="expense"),
        CategoryOption(id=uuid4(), name="Sales", transaction_type="income"),
    ]


@pytest.fixture
def cost_centers() -> list[CostCenterOption]:
    return [
        CostCenterOption(id=uuid4(), name="Operations"),
        CostCenterOption(id=uuid4(), name="Engineering"),
    ]


def make_rule(
    description: str,
    category: CategoryOption | None = None,
    created_at: datetime = BASE_TIME,
    **kwargs,
) -> Rule:
    category = category or CategoryOption(id=uuid4(), name="Transport")
    return Rule(
        id=uuid4(),
        description=description,
        category_id=category.id,
        category_name=category.name,
        created_at=created_at,
        **kwargs,
    )


def make_history(
    description: str,
    category: CategoryOption,
    count: int = 1,
    transaction_type: str = "expense",
    start: datetime = BASE_TIME,
    cost_center: CostCenterOption | None = None,
) -> list[HistoricalTransaction]:
    return [
        HistoricalTransaction(
            description=description,
            transaction_type=transaction_type,
            amount=Decimal("25.00"),
            category_id=category.id,
            category_name=category.name,
            cost_center_id=cost_center.id if cost_center else None,
            cost_center_name=cost_center.name if cost_center else None,
            seen_at=start - timedelta(days=i),
        )
        for i in range(count)
    ]


def make_repositories(
    organization_id: UUID | None = None,
    rules: Iterable[Rule] = (),
    history: Iterable[HistoricalTransaction] = (),
    accounts: Iterable[InternalAccount] = (),
    categories: Iterable[CategoryOption] = (),
    cost_centers: Iterable[CostCenterOption] = (),
) -> MagicMock:
    """Organization repositories with AsyncMock methods."""
    repos = MagicMock()
    repos.organization_id = organization_id
    repos.rules.find_active = AsyncMock(return_value=list(rules))
    repos.history.find_categorized = AsyncMock(return_value=list(history))
    repos.accounts.find_all = AsyncMock(return_value=list(accounts))
    repos.catalog.categories = AsyncMock(return_value=list(categories))
    repos.catalog.cost_centers = AsyncMock(return_value=list(cost_centers))
    repos.decisions.save = AsyncMock(return_value=True)
    return repos


@dataclass
class OrganizationData:
    """In-memory stand-in for an organization's database rows."""

    rules: list = field(default_factory=list)
    history: list = field(default_factory=list)
    accounts: list = field(default_factory=list)
    categories: list[CategoryOption] = field(default_factory=list)
    built: list[MagicMock] = field(default_factory=list)

    def build(self, organization_id: UUID | None) -> MagicMock:
        repos = make_repositories(
            organization_id,
            rules=self.rules,
            history=self.history,
            accounts=self.accounts,
            categories=self.categories,
        )
        self.built.append(repos)
        return repos


@pytest.fixture
def ai_provider() -> FakeAIProvider:
    return FakeAIProvider()


@pytest.fixture
def api_settings() -> Settings:
    """Settings with the AI fallback enabled."""
    return Settings(_env_file=None, ai_enabled=True)


@pytest.fixture
def organization_data(categories) -> OrganizationData:
    """Rules, history and an own account for a small company."""
    transport, software = categories[0], categories[1]
    return OrganizationData(
        rules=[make_rule("Uber", transport)],
        history=make_history("NETFLIX.COM", software, 5),
        accounts=[
            InternalAccount(
                id=UUID("00000000-0000-4000-8000-000000000001"),
                name="Itau Empresas",
                account_number="12345-6",
            )
        ],
        categories=categories,
    )


@pytest.fixture
def test_client(
    api_settings: Settings,
    ai_provider: FakeAIProvider,
    organization_data: OrganizationData,
) -> Generator[TestClient, None, None]:
    """Create a test client with in-memory repositories."""
    # Create app without lifespan to avoid connecting to the database
    app = FastAPI(title="fincore Classification Service (Test)", version=__version__)

    app.include_router(health.router)
    app.include_router(classify.router)
    app.include_router(organizations.router)

    infra = SharedInfrastructure.create(api_settings, ai_provider=ai_provider)
    app.state.infra = infra
    app.state.classification = ClassificationOrchestrator(infra)

    app.dependency_overrides[get_settings] = lambda: api_settings
    app.dependency_overrides[get_repository_builder] = lambda: organization_data.build

    with TestClient(app) as client:
        yield client
