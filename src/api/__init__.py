"""HTTP health surface: a small FastAPI app served by uvicorn inside the bot's loop."""

from __future__ import annotations

from fastapi import FastAPI

from src.api.middleware import ErrorHandlingMiddleware, RequestLoggingMiddleware
from src.api.routes import router
from src.api.schemas import ErrorResponse, HealthResponse
from src.services.status_service import StatusService


def create_app(status_service: StatusService) -> FastAPI:
    """Build the health app around an already-constructed StatusService."""
    application = FastAPI(
        title="Cyclone health",
        version="1.0.0",
        docs_url=None,
        redoc_url=None,
    )
    application.state.status_service = status_service
    application.add_middleware(ErrorHandlingMiddleware)
    application.add_middleware(RequestLoggingMiddleware)
    application.include_router(router)
    return application


__all__ = [
    "ErrorHandlingMiddleware",
    "ErrorResponse",
    "HealthResponse",
    "RequestLoggingMiddleware",
    "create_app",
    "router",
]
