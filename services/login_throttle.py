"""
Per-identity failed-login throttle with timed lockout.

State per identity: Clear → Accumulating → LockedOut → Clear again on a
reported success or once the lockout has expired (reclaimed lazily by the
next evaluate()).

Usage from a request handler::

    async with throttle.attempt(email) as decision:
        if isinstance(decision, Denied):
            ...  # 429
        ok = await check_credentials(...)
        if ok:
            throttle.report_success(email)
        else:
            throttle.report_failure(email)

attempt() holds a per-identity asyncio.Lock for the whole block so two
concurrent logins for the same identity cannot both pass evaluate() before
either failure is counted. Record mutations are also guarded by a
threading.Lock, so the synchronous methods are safe from worker threads.
"""

from __future__ import annotations

import asyncio
import threading
import weakref
from contextlib import asynccontextmanager
from dataclasses import dataclass, replace
from datetime import datetime, timedelta
from typing import AsyncIterator, Callable, Optional, Union

from config import ThrottleSettings
from infrastructure.throttle.protocol import ThrottleStore
from infrastructure.throttle.store import AttemptRecord, InMemoryThrottleStore
from shared.datetime_utils import ceil_minutes, ceil_seconds, utc_now
from shared.logging import get_logger, hash_identity

log = get_logger(__name__)

DEFAULT_MAX_ATTEMPTS = 3
DEFAULT_LOCKOUT_DURATION = timedelta(minutes=15)


@dataclass(frozen=True)
class Allow:
    allowed = True


@dataclass(frozen=True)
class Unthrottled:
    """No identity was supplied, so no throttling was applied."""

    allowed = True


@dataclass(frozen=True)
class Denied:
    locked_until: datetime
    retry_after: timedelta

    allowed = False

    @property
    def retry_after_minutes(self) -> int:
        return ceil_minutes(self.retry_after)

    @property
    def retry_after_seconds(self) -> int:
        return ceil_seconds(self.retry_after)


Decision = Union[Allow, Denied, Unthrottled]


def normalize_identity(identity: Optional[str]) -> Optional[str]:
    """Trim and lower-case *identity*; ``None`` when nothing is left."""
    if identity is None:
        return None
    key = identity.strip().lower()
    return key or None


class LoginThrottle:
    def __init__(
        self,
        store: Optional[ThrottleStore] = None,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        lockout_duration: timedelta = DEFAULT_LOCKOUT_DURATION,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if lockout_duration <= timedelta(0):
            raise ValueError("lockout_duration must be positive")
        self.store = store if store is not None else InMemoryThrottleStore()
        self.max_attempts = max_attempts
        self.lockout_duration = lockout_duration
        self._clock = clock
        self._mutex = threading.Lock()
        self._identity_locks: weakref.WeakValueDictionary[str, asyncio.Lock] = (
            weakref.WeakValueDictionary()
        )

    @classmethod
    def from_settings(
        cls,
        settings: ThrottleSettings,
        clock: Callable[[], datetime] = utc_now,
    ) -> "LoginThrottle":
        store = InMemoryThrottleStore(
            idle_ttl=settings.idle_ttl,
            max_records=settings.throttle_max_records,
        )
        return cls(
            store=store,
            max_attempts=settings.login_max_attempts,
            lockout_duration=settings.lockout_duration,
            clock=clock,
        )

    def evaluate(self, identity: Optional[str]) -> Decision:
        """Decide whether *identity* may attempt a login right now.

        Never changes the failure count except to reclaim an expired lockout.
        """
        key = normalize_identity(identity)
        if key is None:
            log.warning("login_unthrottled", reason="missing_identity")
            return Unthrottled()

        now = self._clock()
        with self._mutex:
            record = self.store.get_or_create(key, now)
            record.last_attempt_at = now

            if record.locked_until is not None:
                if now < record.locked_until:
                    decision = Denied(
                        locked_until=record.locked_until,
                        retry_after=record.locked_until - now,
                    )
                    log.info(
                        "login_denied",
                        identity=hash_identity(key),
                        locked_until=record.locked_until.isoformat(),
                        retry_after_minutes=decision.retry_after_minutes,
                    )
                    return decision

                record.failure_count = 0
                record.locked_until = None
                log.info("login_lockout_expired", identity=hash_identity(key))

        return Allow()

    def report_success(self, identity: Optional[str]) -> None:
        """Reset the record for *identity*. Never creates one."""
        key = normalize_identity(identity)
        if key is None:
            return
        with self._mutex:
            record = self.store.get(key)
            if record is None:
                return
            record.failure_count = 0
            record.locked_until = None
            self.store.touch(key, self._clock())

    def report_failure(self, identity: Optional[str]) -> None:
        """Count a failed attempt; lock the identity once the threshold is hit."""
        key = normalize_identity(identity)
        if key is None:
            return
        now = self._clock()
        with self._mutex:
            record = self.store.get(key)
            if record is None:
                log.warning(
                    "login_failure_without_evaluate", identity=hash_identity(key)
                )
                return

            record.failure_count += 1
            if record.failure_count >= self.max_attempts:
                record.locked_until = now + self.lockout_duration
                log.warning(
                    "login_locked_out",
                    identity=hash_identity(key),
                    failure_count=record.failure_count,
                    locked_until=record.locked_until.isoformat(),
                )
            self.store.touch(key, now)

    def snapshot(self, identity: Optional[str]) -> Optional[AttemptRecord]:
        """Return a copy of the record for *identity*, if any."""
        key = normalize_identity(identity)
        if key is None:
            return None
        with self._mutex:
            record = self.store.get(key)
            return replace(record) if record is not None else None

    @asynccontextmanager
    async def attempt(self, identity: Optional[str]) -> AsyncIterator[Decision]:
        """Evaluate *identity* and hold its lock until the block exits.

        The caller reports the outcome inside the block.
        """
        key = normalize_identity(identity)
        if key is None:
            yield self.evaluate(None)
            return

        lock = self._identity_lock(key)
        async with lock:
            yield self.evaluate(key)

    def _identity_lock(self, key: str) -> asyncio.Lock:
        with self._mutex:
            lock = self._identity_locks.get(key)
            if lock is None:
                lock = asyncio.Lock()
                self._identity_locks[key] = lock
            return lock
