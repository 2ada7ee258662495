"""
CORS for the diner menu and staff dashboards, which are served from other origins.
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from shared.config.settings import settings


# Used when ALLOWED_ORIGINS is empty (development)
DEV_ORIGINS = [
    "http://localhost:3000",
    "http://localhost:5173",
    "http://127.0.0.1:3000",
    "http://127.0.0.1:5173",
]


def allowed_origins() -> list[str]:
    configured = [o.strip() for o in settings.allowed_origins.split(",") if o.strip()]
    if configured:
        return configured
    # The QR landing page always has to reach the API
    return sorted({*DEV_ORIGINS, settings.frontend_url.rstrip("/")})


def configure_cors(app: FastAPI) -> None:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=allowed_origins(),
        allow_credentials=True,
        allow_methods=["GET", "POST", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["Authorization", "Content-Type", "X-Table-Token", "X-Request-ID"],
        expose_headers=["X-Request-ID"],
        max_age=0 if settings.environment == "development" else 600,
    )
