"""
Liveness and readiness checks. No credentials required.
"""

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from shared.config.logging import rest_api_logger as logger
from shared.config.settings import settings


router = APIRouter(prefix="/api", tags=["health"])

SERVICE_NAME = "rest-api"


@router.get("/health")
def health_check():
    """Liveness: the process answers, dependencies are not touched."""
    return {"status": "healthy", "service": SERVICE_NAME, "environment": settings.environment}


@router.get("/health/detailed")
def detailed_health_check(request: Request):
    """Readiness: runs `SELECT 1` against the database, 503 when it fails."""
    try:
        with request.app.state.session_factory() as db:
            db.execute(text("SELECT 1"))
        database = {"status": "healthy"}
    except SQLAlchemyError as e:
        logger.error("Database health check failed", error=str(e))
        database = {"status": "unhealthy", "error": type(e).__name__}

    healthy = database["status"] == "healthy"
    body = {
        "status": "healthy" if healthy else "degraded",
        "service": SERVICE_NAME,
        "environment": settings.environment,
        "dependencies": {"database": database},
    }
    return body if healthy else JSONResponse(content=body, status_code=503)
