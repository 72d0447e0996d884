"""Unit tests for LoginThrottle."""

import asyncio
from datetime import timedelta

import pytest

from config import ThrottleSettings
from infrastructure.throttle.store import InMemoryThrottleStore
from services.login_throttle import (
    Allow,
    Denied,
    LoginThrottle,
    Unthrottled,
    normalize_identity,
)

EMAIL = "a@x.edu"


def _fail(throttle, identity=EMAIL, times=1):
    for _ in range(times):
        assert isinstance(throttle.evaluate(identity), Allow)
        throttle.report_failure(identity)


# ── Construction ─────────────────────────────────────────────────────────────


class TestConstruction:
    def test_defaults(self):
        t = LoginThrottle()
        assert t.max_attempts == 3
        assert t.lockout_duration == timedelta(minutes=15)
        assert isinstance(t.store, InMemoryThrottleStore)

    @pytest.mark.parametrize(
        "kwargs",
        [{"max_attempts": 0}, {"lockout_duration": timedelta(0)}],
        ids=["zero_attempts", "zero_lockout"],
    )
    def test_rejects_invalid_config(self, kwargs):
        with pytest.raises(ValueError):
            LoginThrottle(**kwargs)

    def test_from_settings(self, clock):
        settings = ThrottleSettings(
            login_max_attempts=5,
            login_lockout_seconds=60,
            throttle_idle_ttl_seconds=120,
            throttle_max_records=10,
        )
        t = LoginThrottle.from_settings(settings, clock=clock)
        assert t.max_attempts == 5
        assert t.lockout_duration == timedelta(seconds=60)
        assert t.store.idle_ttl == timedelta(seconds=120)
        assert t.store.max_records == 10


# ── evaluate ─────────────────────────────────────────────────────────────────


class TestEvaluate:
    def test_first_evaluation_creates_clear_record(self, throttle, clock):
        assert isinstance(throttle.evaluate(EMAIL), Allow)
        record = throttle.snapshot(EMAIL)
        assert record.failure_count == 0
        assert record.locked_until is None
        assert record.last_attempt_at == clock.now

    @pytest.mark.parametrize("identity", [None, "", "   "])
    def test_missing_identity_is_unthrottled(self, throttle, identity):
        decision = throttle.evaluate(identity)
        assert isinstance(decision, Unthrottled)
        assert decision.allowed is True
        assert len(throttle.store) == 0

    def test_identity_is_normalized(self, throttle):
        _fail(throttle, "  A@X.EDU ", times=1)
        assert throttle.snapshot(EMAIL).failure_count == 1

    def test_stamps_last_attempt(self, throttle, clock):
        throttle.evaluate(EMAIL)
        clock.advance(seconds=30)
        throttle.evaluate(EMAIL)
        assert throttle.snapshot(EMAIL).last_attempt_at == clock.now

    def test_repeated_evaluate_changes_nothing(self, throttle):
        _fail(throttle, times=2)
        for _ in range(10):
            assert isinstance(throttle.evaluate(EMAIL), Allow)
        assert throttle.snapshot(EMAIL).failure_count == 2
        assert throttle.snapshot(EMAIL).locked_until is None

    def test_repeated_evaluate_while_locked_keeps_lock(self, throttle):
        _fail(throttle, times=3)
        locked_until = throttle.snapshot(EMAIL).locked_until
        for _ in range(5):
            assert isinstance(throttle.evaluate(EMAIL), Denied)
        assert throttle.snapshot(EMAIL).locked_until == locked_until
        assert throttle.snapshot(EMAIL).failure_count == 3


# ── Lockout ──────────────────────────────────────────────────────────────────


class TestLockout:
    def test_scenario_three_failures_lock_for_fifteen_minutes(self, throttle, clock):
        for expected in (1, 2, 3):
            assert isinstance(throttle.evaluate(EMAIL), Allow)
            throttle.report_failure(EMAIL)
            assert throttle.snapshot(EMAIL).failure_count == expected

        assert throttle.snapshot(EMAIL).locked_until == clock.now + timedelta(minutes=15)

        decision = throttle.evaluate(EMAIL)
        assert isinstance(decision, Denied)
        assert decision.allowed is False
        assert decision.retry_after_minutes == 15
        assert decision.retry_after_seconds == 900
        assert decision.locked_until == clock.now + timedelta(minutes=15)

    def test_boundary_one_below_threshold_still_allows(self, throttle):
        _fail(throttle, times=2)
        assert isinstance(throttle.evaluate(EMAIL), Allow)
        throttle.report_failure(EMAIL)
        assert isinstance(throttle.evaluate(EMAIL), Denied)

    def test_retry_after_rounds_up_to_whole_minutes(self, throttle, clock):
        _fail(throttle, times=3)
        clock.advance(minutes=14, seconds=1)
        decision = throttle.evaluate(EMAIL)
        assert isinstance(decision, Denied)
        assert decision.retry_after_minutes == 1
        assert decision.retry_after_seconds == 59

    def test_expired_lockout_is_reclaimed(self, throttle, clock):
        _fail(throttle, times=3)
        clock.advance(minutes=15)
        assert isinstance(throttle.evaluate(EMAIL), Allow)
        record = throttle.snapshot(EMAIL)
        assert record.failure_count == 0
        assert record.locked_until is None

    def test_after_expiry_full_budget_is_available_again(self, throttle, clock):
        _fail(throttle, times=3)
        clock.advance(minutes=16)
        _fail(throttle, times=2)
        assert isinstance(throttle.evaluate(EMAIL), Allow)

    def test_lockout_parks_the_record_in_the_store(self, throttle):
        _fail(throttle, times=3)
        assert throttle.store.locked_count == 1
        throttle.report_success(EMAIL)
        assert throttle.store.locked_count == 0

    def test_identities_are_independent(self, throttle):
        _fail(throttle, times=3)
        assert isinstance(throttle.evaluate("b@x.edu"), Allow)

    def test_custom_threshold_and_duration(self, clock):
        t = LoginThrottle(max_attempts=1, lockout_duration=timedelta(seconds=30), clock=clock)
        _fail(t, times=1)
        decision = t.evaluate(EMAIL)
        assert isinstance(decision, Denied)
        assert decision.retry_after_minutes == 1
        clock.advance(seconds=30)
        assert isinstance(t.evaluate(EMAIL), Allow)


# ── report_success / report_failure ──────────────────────────────────────────


class TestReports:
    def test_success_resets_failures(self, throttle):
        _fail(throttle, times=2)
        throttle.evaluate(EMAIL)
        throttle.report_success(EMAIL)
        assert throttle.snapshot(EMAIL).failure_count == 0

    def test_success_clears_active_lockout(self, throttle):
        _fail(throttle, times=3)
        throttle.report_success(EMAIL)
        assert isinstance(throttle.evaluate(EMAIL), Allow)
        record = throttle.snapshot(EMAIL)
        assert record.failure_count == 0
        assert record.locked_until is None

    def test_success_without_record_creates_nothing(self, throttle):
        throttle.report_success(EMAIL)
        assert throttle.snapshot(EMAIL) is None
        assert len(throttle.store) == 0

    def test_failure_without_record_is_a_noop(self, throttle):
        throttle.report_failure(EMAIL)
        assert throttle.snapshot(EMAIL) is None
        assert len(throttle.store) == 0

    @pytest.mark.parametrize("identity", [None, ""])
    def test_reports_ignore_missing_identity(self, throttle, identity):
        throttle.report_failure(identity)
        throttle.report_success(identity)
        assert len(throttle.store) == 0

    def test_snapshot_is_a_copy(self, throttle):
        throttle.evaluate(EMAIL)
        snap = throttle.snapshot(EMAIL)
        snap.failure_count = 99
        assert throttle.snapshot(EMAIL).failure_count == 0


# ── attempt() ────────────────────────────────────────────────────────────────


class TestAttempt:
    async def test_yields_decision(self, throttle):
        async with throttle.attempt(EMAIL) as decision:
            assert isinstance(decision, Allow)
            throttle.report_failure(EMAIL)
        assert throttle.snapshot(EMAIL).failure_count == 1

    async def test_yields_unthrottled_without_identity(self, throttle):
        async with throttle.attempt(None) as decision:
            assert isinstance(decision, Unthrottled)

    async def test_concurrent_attempts_are_serialized(self, throttle):
        """Racing failures for one identity cannot both slip past the threshold."""
        decisions = []

        async def failing_login():
            async with throttle.attempt(EMAIL) as decision:
                decisions.append(decision)
                if isinstance(decision, Allow):
                    await asyncio.sleep(0)
                    throttle.report_failure(EMAIL)

        await asyncio.gather(*(failing_login() for _ in range(5)))

        assert sum(isinstance(d, Allow) for d in decisions) == 3
        assert sum(isinstance(d, Denied) for d in decisions) == 2
        assert throttle.snapshot(EMAIL).failure_count == 3


def test_normalize_identity():
    assert normalize_identity(" A@X.Edu ") == "a@x.edu"
    assert normalize_identity("   ") is None
    assert normalize_identity(None) is None
