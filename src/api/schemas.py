"""Pydantic response schemas for the bot's HTTP health surface."""

from __future__ import annotations

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    """Liveness payload for uptime monitors and container health checks."""

    status: str
    uptime_seconds: float = Field(ge=0.0)
    bot_ready: bool
    cache_keys: int = Field(ge=0)


class ErrorResponse(BaseModel):
    """Standard error response body."""

    error: str
    detail: str | None = None
