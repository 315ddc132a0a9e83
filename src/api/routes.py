"""Health routes served next to the bot.

# Endpoint    Method  Description
# ──────────────────────────────────────────────
# /           GET     Liveness for the hosting platform's pinger
# /health     GET     Same payload, conventional path
#
# The StatusService is read from ``app.state`` (set by create_app()).
"""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Request

from src.api.schemas import HealthResponse
from src.services.status_service import StatusService

router = APIRouter()


def _get_status_service(request: Request) -> StatusService:
    return request.app.state.status_service


@router.get("/", response_model=HealthResponse, summary="Bot liveness")
@router.get("/health", response_model=HealthResponse, summary="Bot health check")
async def health_check(
    status_service: Annotated[StatusService, Depends(_get_status_service)],
) -> HealthResponse:
    return HealthResponse(**status_service.health())
