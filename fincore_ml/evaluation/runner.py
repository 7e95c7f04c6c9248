"""Evaluation pipeline runner.

Replays a labelled CSV export through the production orchestrator. For
each fold, the other folds play the role of the organization's validated
history, so learned patterns are scored on descriptions they have not seen.
Repositories are in-memory; the AI fallback is always disabled.

CSV columns: ``description``, ``amount``, ``type`` (income/expense) and
``category``, where ``category`` is the expected category name or
"transfer". An optional ``date`` column orders the history.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from pathlib import Path
from typing import TYPE_CHECKING
from uuid import NAMESPACE_URL, UUID, uuid4, uuid5

import pandas as pd
from fincore_ml_contracts import TransactionInput

from fincore_ml.data_models import (
    CategoryOption,
    CostCenterOption,
    HistoricalTransaction,
    InternalAccount,
    Rule,
)
from fincore_ml.evaluation.metrics import (
    TRANSFER_LABEL,
    EvaluationMetrics,
    compute_metrics,
)
from fincore_ml.inference import (
    ClassificationOrchestrator,
    ClassificationResult,
    SharedInfrastructure,
)

if TYPE_CHECKING:
    from fincore_ml.config.settings import Settings


@dataclass
class LabelledTransaction:
    transaction: TransactionInput
    label: str
    seen_at: datetime | None = None


@dataclass
class EvaluationResult:
    """Result from an evaluation run."""

    scenario: str
    metrics: EvaluationMetrics
    classifications: list[ClassificationResult]


def category_id_for(name: str) -> UUID:
    """Stable id for a category name, so folds agree on identities."""
    return uuid5(NAMESPACE_URL, f"fincore-category:{name.casefold()}")


def load_evaluation_data(csv_path: Path) -> list[LabelledTransaction]:
    """Load a labelled transaction export."""
    df = pd.read_csv(csv_path)
    missing = {"description", "amount", "type", "category"} - set(df.columns)
    if missing:
        msg = f"Missing columns in {csv_path}: {', '.join(sorted(missing))}"
        raise ValueError(msg)

    rows = []
    for _, row in df.iterrows():
        description = row.get("description")
        if description is None or str(description) == "nan" or not str(description):
            continue

        seen_at = None
        raw_date = row.get("date")
        if raw_date is not None and str(raw_date) != "nan":
            seen_at = pd.Timestamp(raw_date).to_pydatetime()

        rows.append(
            LabelledTransaction(
                transaction=TransactionInput(
                    description=str(description),
                    amount=abs(Decimal(str(row["amount"]))),
                    transaction_type=str(row["type"]).strip().lower(),
                ),
                label=str(row["category"]).strip(),
                seen_at=seen_at,
            )
        )
    return rows


@dataclass
class _Rules:
    items: list[Rule] = field(default_factory=list)

    async def find_active(self) -> list[Rule]:
        return self.items


@dataclass
class _History:
    items: list[HistoricalTransaction] = field(default_factory=list)

    async def find_categorized(self, limit: int = 5000) -> list[HistoricalTransaction]:
        return self.items[:limit]


@dataclass
class _Accounts:
    items: list[InternalAccount] = field(default_factory=list)

    async def find_all(self) -> list[InternalAccount]:
        return self.items


@dataclass
class _Catalog:
    items: list[CategoryOption] = field(default_factory=list)

    async def categories(self) -> list[CategoryOption]:
        return self.items

    async def cost_centers(self) -> list[CostCenterOption]:
        return []


class _Decisions:
    async def save(self, result: ClassificationResult) -> bool:
        return False


@dataclass
class InMemoryRepositories:
    """Organization repositories backed by plain lists."""

    organization_id: UUID | None = field(default_factory=uuid4)
    rules: _Rules = field(default_factory=_Rules)
    history: _History = field(default_factory=_History)
    accounts: _Accounts = field(default_factory=_Accounts)
    catalog: _Catalog = field(default_factory=_Catalog)
    decisions: _Decisions = field(default_factory=_Decisions)


def _to_history(rows: list[LabelledTransaction]) -> list[HistoricalTransaction]:
    history = [
        HistoricalTransaction(
            description=row.transaction.description,
            transaction_type=row.transaction.transaction_type,
            amount=row.transaction.amount,
            category_id=category_id_for(row.label),
            category_name=row.label,
            seen_at=row.seen_at,
        )
        for row in rows
        if row.label.casefold() != TRANSFER_LABEL
    ]
    # Most recent first, like the database query
    history.sort(
        key=lambda h: h.seen_at.timestamp() if h.seen_at else 0.0, reverse=True
    )
    return history


async def _classify(
    settings: Settings,
    repos: InMemoryRepositories,
    transactions: list[TransactionInput],
) -> list[ClassificationResult]:
    infra = SharedInfrastructure.create(settings=settings)
    orchestrator = ClassificationOrchestrator(infra)
    results = await orchestrator.classify_batch(repos, transactions)
    return [r for r in results if r is not None]


def run_replay(
    rows: list[LabelledTransaction],
    settings: Settings,
    n_folds: int = 5,
) -> list[EvaluationResult]:
    """Run k-fold replay; fold ``i`` is classified against the other folds."""
    if n_folds < 2:
        msg = "n_folds must be at least 2"
        raise ValueError(msg)
    settings = settings.model_copy(update={"ai_enabled": False})

    results = []
    for fold in range(n_folds):
        test = [row for i, row in enumerate(rows) if i % n_folds == fold]
        train = [row for i, row in enumerate(rows) if i % n_folds != fold]
        if not test:
            continue

        repos = InMemoryRepositories(history=_History(_to_history(train)))
        classifications = asyncio.run(
            _classify(settings, repos, [row.transaction for row in test])
        )
        metrics = compute_metrics(classifications, [row.label for row in test])
        results.append(
            EvaluationResult(
                scenario=f"fold_{fold + 1}",
                metrics=metrics,
                classifications=classifications,
            )
        )
    return results
