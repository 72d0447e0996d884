"""Google reCAPTCHA implementation of CaptchaProvider.

Default provider; the web client ships the reCAPTCHA widget and posts its
response as ``recaptchaToken``.
"""

from infrastructure.captcha.siteverify import SiteVerifyProvider


class RecaptchaProvider(SiteVerifyProvider):
    name = "recaptcha"
    verify_url = "https://www.google.com/recaptcha/api/siteverify"
