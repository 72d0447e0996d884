"""Shared "siteverify" client used by reCAPTCHA and hCaptcha.

Both services accept a form POST of ``secret`` + ``response`` (+ optional
``remoteip``) and answer with JSON carrying a boolean ``success`` and an
optional ``error-codes`` list.

Never raises for transport or payload problems: every failure is folded
into a CaptchaVerdict so the caller decides how to fail.
"""

from typing import Any, Optional

import httpx

from infrastructure.captcha.protocol import CaptchaOutcome, CaptchaVerdict
from infrastructure.http_client import HttpClient
from shared.logging import get_logger

log = get_logger(__name__)


class SiteVerifyProvider:
    name: str = "siteverify"
    verify_url: str = ""

    def __init__(
        self,
        secret: str,
        http_client: HttpClient,
        timeout: Optional[float] = None,
    ) -> None:
        self._secret = secret
        self._http = http_client
        self._timeout = timeout

    @property
    def configured(self) -> bool:
        return bool(self._secret)

    async def verify(
        self, token: str, remote_ip: Optional[str] = None
    ) -> CaptchaVerdict:
        if not self._secret:
            log.error("captcha_secret_not_configured", provider=self.name)
            return CaptchaVerdict(CaptchaOutcome.UNAVAILABLE, detail="secret not configured")

        form = {"secret": self._secret, "response": token}
        if remote_ip:
            form["remoteip"] = remote_ip

        try:
            response = await self._http.post(
                self.verify_url, data=form, timeout=self._timeout
            )
        except httpx.TimeoutException as e:
            log.error("captcha_request_timeout", provider=self.name, error=str(e))
            return CaptchaVerdict(CaptchaOutcome.UNAVAILABLE, detail="timeout")
        except Exception as e:
            log.error(
                "captcha_request_failed",
                provider=self.name,
                error=str(e),
                error_type=type(e).__name__,
            )
            return CaptchaVerdict(CaptchaOutcome.UNAVAILABLE, detail=type(e).__name__)

        if response.status_code != 200:
            log.error(
                "captcha_api_error",
                provider=self.name,
                status_code=response.status_code,
                response_text=response.text[:200],
            )
            return CaptchaVerdict(
                CaptchaOutcome.UNAVAILABLE, detail=f"status {response.status_code}"
            )

        try:
            data: Any = response.json()
        except ValueError:
            log.error(
                "captcha_malformed_response",
                provider=self.name,
                response_text=response.text[:200],
            )
            return CaptchaVerdict(CaptchaOutcome.UNAVAILABLE, detail="malformed payload")

        return self._interpret(data)

    def _interpret(self, data: Any) -> CaptchaVerdict:
        if not isinstance(data, dict):
            log.warning("captcha_unexpected_payload", provider=self.name)
            return CaptchaVerdict(CaptchaOutcome.REJECTED, detail="unexpected payload")

        error_codes = data.get("error-codes") or []
        if not isinstance(error_codes, list):
            error_codes = [str(error_codes)]

        if data.get("success") is True:
            return CaptchaVerdict(CaptchaOutcome.PASSED)

        log.warning(
            "captcha_verification_failed",
            provider=self.name,
            error_codes=error_codes,
        )
        return CaptchaVerdict(CaptchaOutcome.REJECTED, error_codes=error_codes)
