from datetime import datetime, timezone

from fastapi import APIRouter
from pydantic import BaseModel

from auditionapi.config import settings

router = APIRouter(tags=["health"])


class HealthCheckResponse(BaseModel):
    status: str = "ok"
    service: str = settings.APP_NAME
    environment: str = settings.ENVIRONMENT
    timestamp: datetime


@router.get("/health", response_model=HealthCheckResponse)
async def health_check() -> HealthCheckResponse:
    """Liveness probe"""
    return HealthCheckResponse(timestamp=datetime.now(timezone.utc))
