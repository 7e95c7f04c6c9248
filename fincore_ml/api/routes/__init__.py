"""API route handlers."""

from fincore_ml.api.routes import classify, health, organizations

__all__ = ["classify", "health", "organizations"]
