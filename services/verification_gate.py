"""
Human-verification gate run before any credential check.

verify() returns None on success and raises a VerificationError subclass
otherwise:

- TokenMissingError          — no token supplied (400, RECAPTCHA_REQUIRED)
- VerificationRejectedError  — provider said the token is invalid (400)
- VerificationServiceError   — provider unreachable, timed out, answered
                               garbage, or the provider call was cancelled (500)

The gate fails closed: nothing but an explicit provider "success" (or the
development-only bypass) lets a request through.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Optional

from errors import (
    TokenMissingError,
    VerificationRejectedError,
    VerificationServiceError,
)
from infrastructure.captcha.protocol import CaptchaOutcome, CaptchaProvider
from shared.logging import get_logger

log = get_logger(__name__)


@dataclass(frozen=True)
class VerificationContext:
    bypass: bool = False
    remote_ip: Optional[str] = None


class VerificationGate:
    def __init__(
        self, provider: CaptchaProvider, timeout: Optional[float] = None
    ) -> None:
        self._provider = provider
        self._timeout = timeout

    @property
    def provider_name(self) -> str:
        return self._provider.name

    @property
    def configured(self) -> bool:
        return self._provider.configured

    async def verify(
        self, token: Optional[str], context: VerificationContext
    ) -> None:
        if context.bypass:
            log.warning("captcha_bypassed", provider=self._provider.name)
            return

        if not token or not token.strip():
            log.info("captcha_token_missing")
            raise TokenMissingError()

        try:
            verdict = await asyncio.wait_for(
                self._provider.verify(token, remote_ip=context.remote_ip),
                timeout=self._timeout,
            )
        except asyncio.TimeoutError as e:
            log.error(
                "captcha_service_error",
                provider=self._provider.name,
                reason="timeout",
            )
            raise VerificationServiceError() from e
        except asyncio.CancelledError as e:
            task = asyncio.current_task()
            if task is not None and task.cancelling():
                # The request itself is being cancelled, not just the provider call.
                raise
            log.error(
                "captcha_service_error",
                provider=self._provider.name,
                reason="cancelled",
            )
            raise VerificationServiceError() from e

        if verdict.outcome is CaptchaOutcome.PASSED:
            return
        if verdict.outcome is CaptchaOutcome.REJECTED:
            log.info(
                "captcha_rejected",
                provider=self._provider.name,
                error_codes=verdict.error_codes,
            )
            raise VerificationRejectedError(
                details={"error_codes": verdict.error_codes} if verdict.error_codes else None
            )

        log.error(
            "captcha_service_error",
            provider=self._provider.name,
            reason=verdict.detail,
        )
        raise VerificationServiceError()
