"""
FastAPI application factory.
create_app() is the single entry point for building the app.

It is also the composition root of the login defense layer: the HTTP
client, captcha provider, verification gate and login throttle (with its
attempt store) are constructed once here and shared through app.state.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

import sentry_sdk
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from config import AppSettings
from errors import register_error_handlers
from infrastructure.captcha.factory import build_captcha_provider
from infrastructure.captcha.protocol import CaptchaProvider
from infrastructure.credentials.protocol import CredentialVerifier
from infrastructure.http_client import HttpClient
from routes.auth_routes import router as auth_router
from routes.health_routes import router as health_router
from services.login_throttle import LoginThrottle
from services.verification_gate import VerificationGate
from shared.logging import get_logger, setup_logging

log = get_logger(__name__)


def create_app(
    settings: Optional[AppSettings] = None,
    *,
    credential_verifier: Optional[CredentialVerifier] = None,
    captcha_provider: Optional[CaptchaProvider] = None,
    login_throttle: Optional[LoginThrottle] = None,
) -> FastAPI:
    """Create and return a fully configured FastAPI application.

    ``credential_verifier`` is the external password check; without one the
    login endpoint answers 503. ``captcha_provider`` and ``login_throttle``
    replace the settings-built defaults (tests, embedding).
    """
    if settings is None:
        settings = AppSettings()

    setup_logging(
        log_level=settings.logging.log_level,
        log_format=settings.logging.log_format,
        env=settings.env,
    )

    # Initialise Sentry before anything else so it captures startup errors
    if settings.sentry.sentry_dsn:
        sentry_sdk.init(
            dsn=settings.sentry.sentry_dsn,
            send_default_pii=settings.sentry.sentry_send_pii,
            traces_sample_rate=settings.sentry.sentry_traces_sample_rate,
            profiles_sample_rate=settings.sentry.sentry_profile_sample_rate,
        )

    if settings.captcha.skip_recaptcha and not settings.captcha_bypass_enabled:
        log.warning("captcha_bypass_ignored", env=settings.env)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        # ── Startup ──────────────────────────────────────────────────────────
        http_client = HttpClient(timeout=settings.captcha.captcha_timeout_seconds)
        provider = captcha_provider or build_captcha_provider(
            settings.captcha.captcha_provider,
            secret=settings.captcha.secret,
            http_client=http_client,
        )

        app.state.settings = settings
        app.state.http_client = http_client
        app.state.verification_gate = VerificationGate(
            provider,
            # Outer bound; the HTTP client enforces the same limit per request
            timeout=settings.captcha.captcha_timeout_seconds + 1.0,
        )
        app.state.login_throttle = login_throttle or LoginThrottle.from_settings(
            settings.throttle
        )
        app.state.credential_verifier = credential_verifier

        if not provider.configured and not settings.captcha_bypass_enabled:
            log.warning("captcha_secret_not_configured", provider=provider.name)

        yield

        # ── Shutdown ─────────────────────────────────────────────────────────
        await http_client.aclose()

    app = FastAPI(
        title=settings.app_name,
        version="1.0.0",
        docs_url=settings.docs_url,
        redoc_url=None,
        lifespan=lifespan,
    )

    # all origins allowed with credentials support.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_error_handlers(app)
    app.include_router(health_router)
    app.include_router(auth_router)

    return app
