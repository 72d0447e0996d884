"""Shared fixtures: controllable clock, scripted captcha provider, fake user store."""

from datetime import datetime, timedelta, timezone
from typing import Optional

import pytest

from infrastructure.captcha.protocol import CaptchaOutcome, CaptchaVerdict
from infrastructure.credentials.protocol import AuthenticatedUser
from infrastructure.throttle.store import InMemoryThrottleStore
from services.login_throttle import LoginThrottle


class FakeClock:
    def __init__(self, start: Optional[datetime] = None) -> None:
        self.now = start or datetime(2024, 9, 2, 12, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


class ScriptedCaptchaProvider:
    """CaptchaProvider that answers with a fixed verdict and records calls."""

    name = "scripted"

    def __init__(self, verdict: Optional[CaptchaVerdict] = None, configured: bool = True) -> None:
        self.verdict = verdict or CaptchaVerdict(CaptchaOutcome.PASSED)
        self._configured = configured
        self.calls: list[tuple[str, Optional[str]]] = []

    @property
    def configured(self) -> bool:
        return self._configured

    async def verify(self, token: str, remote_ip: Optional[str] = None) -> CaptchaVerdict:
        self.calls.append((token, remote_ip))
        return self.verdict


class FakeCredentialVerifier:
    """Accepts exactly one email/password pair."""

    def __init__(self, email: str = "a@x.edu", password: str = "correct-horse") -> None:
        self.email = email
        self.password = password
        self.calls: list[str] = []

    async def verify(self, identity: str, credential: str) -> Optional[AuthenticatedUser]:
        self.calls.append(identity)
        if identity == self.email and credential == self.password:
            return AuthenticatedUser(
                id="u-1", email=self.email, name="Ada", username="ada"
            )
        return None


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def throttle(clock) -> LoginThrottle:
    return LoginThrottle(
        store=InMemoryThrottleStore(),
        max_attempts=3,
        lockout_duration=timedelta(minutes=15),
        clock=clock,
    )


@pytest.fixture
def captcha() -> ScriptedCaptchaProvider:
    return ScriptedCaptchaProvider()


@pytest.fixture
def credentials() -> FakeCredentialVerifier:
    return FakeCredentialVerifier()
