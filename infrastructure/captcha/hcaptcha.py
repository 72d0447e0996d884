"""hCaptcha implementation of CaptchaProvider."""

from infrastructure.captcha.siteverify import SiteVerifyProvider


class HCaptchaProvider(SiteVerifyProvider):
    name = "hcaptcha"
    verify_url = "https://hcaptcha.com/siteverify"
