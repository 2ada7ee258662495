"""
Startup and shutdown for the single Tablefront process (REST + /ws).
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI

from shared.config.logging import setup_logging, rest_api_logger as logger
from shared.config.settings import settings
from shared.infrastructure.db import engine
from rest_api.models import Base
from ws_gateway.notifier import notifier


def check_configuration() -> None:
    """
    Refuse to start in production with default secrets; elsewhere only warn.

    Raises:
        RuntimeError: Production with insecure configuration.
    """
    problems = settings.validate_production_secrets()
    for problem in problems:
        logger.error("Configuration error", error=problem)
    if problems and settings.environment == "production":
        raise RuntimeError("Refusing to start: " + "; ".join(problems))


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()
    check_configuration()

    # Schema is created in place; there are no migrations
    Base.metadata.create_all(bind=engine)
    logger.info(
        "Tablefront started",
        port=settings.port,
        env=settings.environment,
        database=engine.url.get_backend_name(),
        strict_transitions=settings.strict_status_transitions,
    )

    yield

    stats = await notifier.registry.stats()
    logger.info("Tablefront stopping", open_connections=stats["connections"])
    engine.dispose()
