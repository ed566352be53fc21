"""Common response schemas."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel


class ErrorResponse(BaseModel):
    error: str
    message: Optional[str] = None
    details: Optional[str] = None


class HealthResponse(BaseModel):
    status: str
    timestamp: datetime
    activeAnalyses: int
