"""
FastAPI dependency providers.

Everything the login flow needs is built once in create_app() and parked
on app.state; these functions hand it to route handlers through Depends().
"""

from __future__ import annotations

from fastapi import Request

from config import AppSettings
from errors import ServiceUnavailableError
from services.login_service import LoginService
from services.verification_gate import VerificationContext
from shared.ip_utils import get_client_ip


def get_settings(request: Request) -> AppSettings:
    """Return the AppSettings instance stored on app.state."""
    return request.app.state.settings


def get_verification_context(request: Request) -> VerificationContext:
    """Build the per-request gate context (bypass switch + caller IP)."""
    settings = get_settings(request)
    return VerificationContext(
        bypass=settings.captcha_bypass_enabled,
        remote_ip=get_client_ip(request) or None,
    )


def get_login_service(request: Request) -> LoginService:
    """Compose a LoginService; 503 when no credential verifier is wired."""
    credentials = getattr(request.app.state, "credential_verifier", None)
    if credentials is None:
        raise ServiceUnavailableError("Login is not available.")
    return LoginService(
        gate=request.app.state.verification_gate,
        throttle=request.app.state.login_throttle,
        credentials=credentials,
    )
