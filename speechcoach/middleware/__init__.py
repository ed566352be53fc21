"""Application middleware package."""

from .logging import StructuredLoggingMiddleware
from .telemetry import TelemetryMiddleware
from .upload_limit import UploadLimitMiddleware

__all__ = ["StructuredLoggingMiddleware", "TelemetryMiddleware", "UploadLimitMiddleware"]
