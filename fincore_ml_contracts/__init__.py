"""Classification service API contracts.

This package defines the API contract between the dashboard backend and the
classification service.
"""

from fincore_ml_contracts.classify import (
    Classification,
    ClassificationSource,
    ClassificationStats,
    ClassifyBatchRequest,
    ClassifyBatchResponse,
    TransactionInput,
    TransactionType,
)
from fincore_ml_contracts.service import CacheInvalidationResponse, HealthResponse

__all__ = [
    # Classification
    "TransactionType",
    "TransactionInput",
    "ClassifyBatchRequest",
    "Classification",
    "ClassificationSource",
    "ClassificationStats",
    "ClassifyBatchResponse",
    # Service
    "CacheInvalidationResponse",
    "HealthResponse",
]
