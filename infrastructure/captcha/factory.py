"""Select the configured CaptchaProvider implementation."""

from typing import Optional

from infrastructure.captcha.hcaptcha import HCaptchaProvider
from infrastructure.captcha.protocol import CaptchaProvider
from infrastructure.captcha.recaptcha import RecaptchaProvider
from infrastructure.captcha.siteverify import SiteVerifyProvider
from infrastructure.http_client import HttpClient

_PROVIDERS: dict[str, type[SiteVerifyProvider]] = {
    RecaptchaProvider.name: RecaptchaProvider,
    HCaptchaProvider.name: HCaptchaProvider,
}


def build_captcha_provider(
    name: str,
    secret: str,
    http_client: HttpClient,
    timeout: Optional[float] = None,
) -> CaptchaProvider:
    """Instantiate the provider registered under *name*."""
    try:
        provider_cls = _PROVIDERS[name]
    except KeyError:
        raise ValueError(f"unknown captcha provider: {name!r}") from None
    return provider_cls(secret=secret, http_client=http_client, timeout=timeout)
