"""Service health endpoint."""

from datetime import datetime, timezone

from fastapi import APIRouter

from speechcoach.controllers.dependencies import ResultStoreDep
from speechcoach.views import HealthResponse

router = APIRouter(prefix="/api", tags=["health"])


@router.get("/health", response_model=HealthResponse)
async def health_check(store: ResultStoreDep) -> HealthResponse:
    return HealthResponse(
        status="healthy",
        timestamp=datetime.now(timezone.utc),
        activeAnalyses=len(store),
    )
