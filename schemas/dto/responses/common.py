"""
Common response DTOs shared across multiple endpoints.

ErrorResponse        — standard error shape from AppError.to_dict()
RateLimitedResponse  — 429 body from ThrottleDeniedError.to_dict()
HealthResponse       — GET /health
"""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict


class ErrorResponse(BaseModel):
    """Standard error JSON body produced by the AppError exception handler."""

    model_config = ConfigDict(populate_by_name=True)

    error: str
    code: str
    field: Optional[str] = None
    details: Optional[Any] = None


class RateLimitedResponse(ErrorResponse):
    """Body of a 429 RATE_LIMITED response."""

    locked_until: str  # ISO 8601, UTC
    retry_after_minutes: int


class HealthResponse(BaseModel):
    """Response body for GET /health."""

    model_config = ConfigDict(populate_by_name=True)

    status: str
    checks: dict[str, Any]
