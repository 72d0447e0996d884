"""
Application error hierarchy and FastAPI exception handlers.

AppError is the base for all typed errors. The global exception handler
converts AppError subclasses to consistent JSON responses.

Login-defense errors use upper-case codes (RECAPTCHA_REQUIRED,
INVALID_RECAPTCHA, RATE_LIMITED, ...) in the "code" field; the
human-readable message goes in "error".

Non-AppError exceptions bubble up as 500s (with Sentry reporting in production).
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from shared.logging import get_logger

log = get_logger(__name__)


class AppError(Exception):
    """Base application error. All typed errors inherit from this."""

    status_code: int = 500
    error_code: str = "internal_error"

    def __init__(
        self,
        message: str,
        *,
        field: Optional[str] = None,
        details: Optional[Any] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.field = field
        self.details = details

    def to_dict(self) -> dict:
        payload: dict = {"error": self.message, "code": self.error_code}
        if self.field is not None:
            payload["field"] = self.field
        if self.details is not None:
            payload["details"] = self.details
        return payload

    def headers(self) -> Optional[dict[str, str]]:
        return None


class RateLimitError(AppError):
    status_code = 429
    error_code = "rate_limit_exceeded"


class ServiceUnavailableError(AppError):
    status_code = 503
    error_code = "service_unavailable"


# ── Human verification ───────────────────────────────────────────────────────


class VerificationError(AppError):
    """Base for every failure raised by the verification gate."""

    status_code = 400
    error_code = "verification_error"


class TokenMissingError(VerificationError):
    """No verification token was supplied. The caller should resubmit with one."""

    error_code = "RECAPTCHA_REQUIRED"

    def __init__(self, message: str = "reCAPTCHA verification failed", **kwargs: Any) -> None:
        super().__init__(message, field="recaptchaToken", **kwargs)


class VerificationRejectedError(VerificationError):
    """The verification service explicitly rejected the token."""

    error_code = "INVALID_RECAPTCHA"

    def __init__(self, message: str = "reCAPTCHA verification failed", **kwargs: Any) -> None:
        super().__init__(message, **kwargs)


class VerificationServiceError(VerificationError):
    """The verification service could not be reached or answered garbage.

    Transient. Never to be treated as a pass.
    """

    status_code = 500
    error_code = "RECAPTCHA_ERROR"

    def __init__(self, message: str = "reCAPTCHA verification error", **kwargs: Any) -> None:
        super().__init__(message, **kwargs)


# ── Login ────────────────────────────────────────────────────────────────────


class ThrottleDeniedError(RateLimitError):
    """The identity is locked out; carries the remaining lockout time."""

    error_code = "RATE_LIMITED"

    def __init__(
        self,
        locked_until: datetime,
        retry_after_minutes: int,
        retry_after_seconds: int,
    ) -> None:
        super().__init__(
            "Too many failed login attempts. "
            f"Account locked for {retry_after_minutes} more minutes."
        )
        self.locked_until = locked_until
        self.retry_after_minutes = retry_after_minutes
        self.retry_after_seconds = retry_after_seconds

    def to_dict(self) -> dict:
        payload = super().to_dict()
        payload["locked_until"] = self.locked_until.isoformat()
        payload["retry_after_minutes"] = self.retry_after_minutes
        return payload

    def headers(self) -> Optional[dict[str, str]]:
        return {"Retry-After": str(self.retry_after_seconds)}


class InvalidCredentialsError(AppError):
    status_code = 400
    error_code = "INVALID_CREDENTIALS"

    def __init__(self, message: str = "Invalid credentials", **kwargs: Any) -> None:
        super().__init__(message, **kwargs)


def register_error_handlers(app: FastAPI) -> None:
    """Register global exception handlers on the FastAPI app."""

    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content=exc.to_dict(),
            headers=exc.headers(),
        )

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(
        request: Request, exc: Exception
    ) -> JSONResponse:
        # Sentry integration: if sentry_sdk is initialized it will auto-capture
        # unhandled exceptions before this handler fires.
        log.error(
            "unhandled_exception",
            path=request.url.path,
            error=str(exc),
            error_type=type(exc).__name__,
        )
        return JSONResponse(
            status_code=500,
            content={"error": "An internal server error occurred.", "code": "internal_error"},
        )
