"""
Authentication endpoints.

POST /auth/login — captcha gate, per-email lockout, then credential check.

Error bodies come from the AppError handler:
- 400 RECAPTCHA_REQUIRED / INVALID_RECAPTCHA / INVALID_CREDENTIALS
- 429 RATE_LIMITED (with locked_until, retry_after_minutes, Retry-After)
- 500 RECAPTCHA_ERROR
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from dependencies import get_login_service, get_verification_context
from schemas.dto.requests.auth import LoginRequest
from schemas.dto.responses.auth import LoginResponse, UserResponse
from schemas.dto.responses.common import ErrorResponse, RateLimitedResponse
from services.login_service import LoginService
from services.verification_gate import VerificationContext

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post(
    "/login",
    response_model=LoginResponse,
    responses={
        400: {"model": ErrorResponse},
        429: {"model": RateLimitedResponse},
        500: {"model": ErrorResponse},
    },
)
async def login(
    body: LoginRequest,
    service: LoginService = Depends(get_login_service),
    context: VerificationContext = Depends(get_verification_context),
) -> LoginResponse:
    result = await service.login(
        identity=body.email,
        credential=body.password,
        verification_token=body.recaptcha_token,
        context=context,
    )
    user = result.user
    return LoginResponse(
        user=UserResponse(
            id=user.id, email=user.email, name=user.name, username=user.username
        ),
        throttled=result.throttled,
    )
