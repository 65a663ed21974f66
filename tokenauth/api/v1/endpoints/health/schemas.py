"""Health check API schemas."""

from typing import Any, Dict

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    """Basic health check response schema."""

    status: str = Field(
        ...,
        description="Service health status",
        examples=["healthy"]
    )
    timestamp: str = Field(
        ...,
        description="Response timestamp",
        examples=["2025-01-01T12:00:00Z"]
    )


class ReadinessResponse(BaseModel):
    """Readiness check response schema."""

    ready: bool = Field(
        ...,
        description="Whether the service can serve auth requests",
        examples=[True]
    )
    checks: Dict[str, Dict[str, Any]] = Field(
        ...,
        description="Per-dependency check results",
        examples=[{
            "database": {"status": "ready", "latency_ms": 1.52},
            "redis": {"status": "degraded"},
        }]
    )


class LivenessResponse(BaseModel):
    """Liveness check response schema."""

    alive: bool = Field(..., examples=[True])
    timestamp: str = Field(
        ...,
        description="Response timestamp",
        examples=["2025-01-01T12:00:00Z"]
    )
