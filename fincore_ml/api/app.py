"""FastAPI application with lifespan management."""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from fincore_ml import __version__
from fincore_ml.config.settings import get_settings
from fincore_ml.inference import ClassificationOrchestrator, SharedInfrastructure
from fincore_ml.inference._models import AIClassificationProvider, create_ai_provider
from fincore_ml.storage import check_database, get_engine


def configure_logging() -> None:
    """Configure logging for the classification service."""
    settings = get_settings()
    log_level = getattr(logging, settings.log_level.upper(), logging.INFO)

    logging.basicConfig(
        level=log_level,
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    # Set level for our package specifically
    logging.getLogger("fincore_ml").setLevel(log_level)

    # Quiet noisy third-party libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)


configure_logging()
logger = logging.getLogger(__name__)


def _log_settings() -> None:
    """Log current settings for debugging."""
    settings = get_settings()

    logger.info("=" * 60)
    logger.info("fincore Classification Service Configuration")
    logger.info("=" * 60)
    logger.info("  Log level: %s", settings.log_level)
    logger.info("  Database: %s", settings.database_url.split("@")[-1])  # Hide password
    logger.info("  Thresholds:")
    logger.info("    Rule match: %.2f", settings.rule_similarity_threshold)
    logger.info("    Pattern match: %.2f", settings.pattern_similarity_threshold)
    logger.info("    Auto-validate: %.2f", settings.auto_validate_confidence)
    logger.info("    Suggest: %.2f", settings.suggest_confidence)
    logger.info("  Similarity metric: %s", settings.similarity_metric)
    logger.info("  Patterns:")
    logger.info("    Tie-break: %s", settings.pattern_tie_break)
    logger.info("    Min occurrences: %d", settings.pattern_min_occurrences)
    logger.info("    Cache TTL: %.0fs", settings.pattern_cache_ttl_seconds)
    logger.info("  AI fallback:")
    logger.info("    Enabled: %s", settings.ai_enabled)
    if settings.ai_enabled:
        logger.info("    Backend: %s", settings.ai_backend)
        logger.info("    Model: %s", settings.ai_model)
        logger.info("    URL: %s", settings.ai_base_url)
        logger.info("    Timeout: %.1fs", settings.ai_timeout_seconds)
        logger.info("    Max concurrency: %d", settings.ai_max_concurrency)
    logger.info("=" * 60)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Create shared resources at startup, release them at shutdown."""
    settings = get_settings()

    # Log configuration
    _log_settings()

    # Database tables belong to the dashboard; only check connectivity
    engine = get_engine()
    if await check_database(engine):
        logger.info("Database reachable")
    else:
        logger.warning("Database unreachable; classifications will run without data")
    app.state.db_engine = engine

    # AI fallback (if enabled)
    ai_provider: AIClassificationProvider | None = None
    if settings.ai_enabled:
        ai_provider = create_ai_provider(settings)
        if await ai_provider.health_check():
            logger.info("AI provider ready: %s", ai_provider.model_name)
        else:
            logger.warning(
                "AI provider %s not reachable at %s; requests will fall back",
                ai_provider.model_name,
                settings.ai_base_url,
            )
    else:
        logger.info("AI fallback disabled")

    # Create shared infrastructure and orchestrator
    infra = SharedInfrastructure.create(settings=settings, ai_provider=ai_provider)
    app.state.infra = infra
    app.state.classification = ClassificationOrchestrator(infra)

    logger.info(
        "Classification service ready - strategies: %s",
        ", ".join(app.state.classification.strategy_names),
    )
    yield

    logger.info("Shutting down")
    del app.state.classification
    await infra.close()
    del app.state.infra

    # Close database connections
    await app.state.db_engine.dispose()
    del app.state.db_engine


def create_app() -> FastAPI:
    """Create FastAPI application."""
    from fincore_ml.api.routes import classify, health, organizations

    app = FastAPI(
        title="fincore Classification Service",
        description="Transaction classification service",
        version=__version__,
        lifespan=lifespan,
    )

    app.include_router(health.router, tags=["health"])
    app.include_router(classify.router, tags=["classification"])
    app.include_router(organizations.router, tags=["organizations"])

    return app


# For uvicorn
app = create_app()
