"""
Health check endpoint.

GET /health — reports the login defense layer's readiness.
Rules:
- captcha secret missing with bypass off → "degraded" (logins fail closed).
- bypass on → "bypassed"; still "healthy", bypass is refused in production.
- no credential verifier wired → "degraded" (login answers 503).
"""

from __future__ import annotations

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from schemas.dto.responses.common import HealthResponse

router = APIRouter(tags=["health"])


@router.get("/health", response_model=HealthResponse)
async def health_check(request: Request) -> JSONResponse:
    checks: dict[str, object] = {}
    overall = "healthy"

    settings = request.app.state.settings
    gate = request.app.state.verification_gate
    if settings.captcha_bypass_enabled:
        checks["captcha"] = "bypassed"
    elif gate.configured:
        checks["captcha"] = "ok"
    else:
        checks["captcha"] = "not_configured"
        overall = "degraded"

    throttle = request.app.state.login_throttle
    checks["throttle_store"] = {"tracked_identities": len(throttle.store)}

    if getattr(request.app.state, "credential_verifier", None) is None:
        checks["credentials"] = "not_configured"
        overall = "degraded"
    else:
        checks["credentials"] = "ok"

    return JSONResponse(
        status_code=200,
        content={"status": overall, "checks": checks},
    )
