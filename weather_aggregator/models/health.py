"""Health check response models."""

from enum import Enum

from pydantic import BaseModel


class ServiceStatus(str, Enum):
    """Availability status for dependencies."""

    available = "available"
    not_available = "not_available"


class HealthResponse(BaseModel):
    """API health response payload, keyed by provider name."""

    status: str
    dependencies: dict[str, ServiceStatus]
