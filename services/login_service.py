"""
Login orchestration: verification gate → throttle → credential check → report.

A gate or throttle error short-circuits before the credential verifier is
called. Exactly one of report_success / report_failure follows every
credential check that returns; if the verifier itself raises, the outcome
is unknown and nothing is reported.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from errors import InvalidCredentialsError, ThrottleDeniedError
from infrastructure.credentials.protocol import AuthenticatedUser, CredentialVerifier
from services.login_throttle import Denied, LoginThrottle, Unthrottled, normalize_identity
from services.verification_gate import VerificationContext, VerificationGate
from shared.logging import get_logger, hash_identity, log_with_context

log = get_logger(__name__)


@dataclass(frozen=True)
class LoginResult:
    user: AuthenticatedUser
    throttled: bool


class LoginService:
    def __init__(
        self,
        gate: VerificationGate,
        throttle: LoginThrottle,
        credentials: CredentialVerifier,
    ) -> None:
        self._gate = gate
        self._throttle = throttle
        self._credentials = credentials

    async def login(
        self,
        identity: Optional[str],
        credential: str,
        verification_token: Optional[str],
        context: VerificationContext,
    ) -> LoginResult:
        supplied = identity.strip() if identity else ""
        key = normalize_identity(identity)
        request_log = log_with_context(
            log, identity=hash_identity(key) if key else None
        )

        await self._gate.verify(verification_token, context)

        async with self._throttle.attempt(key) as decision:
            if isinstance(decision, Denied):
                raise ThrottleDeniedError(
                    locked_until=decision.locked_until,
                    retry_after_minutes=decision.retry_after_minutes,
                    retry_after_seconds=decision.retry_after_seconds,
                )

            user = await self._credentials.verify(supplied, credential)
            if user is None:
                self._throttle.report_failure(key)
                request_log.info("login_failed")
                raise InvalidCredentialsError()

            self._throttle.report_success(key)
            request_log.info("login_succeeded", user_id=user.id)
            return LoginResult(user=user, throttled=not isinstance(decision, Unthrottled))
