"""Tests for ResiliencePolicy: rate limiter composed with retry.

Covers:
- Success on the first attempt and after transient failures
- Exhaustion wrapping the last failure
- One permit per attempt, rate-limit rejection never retried
- Retry notifications and listener isolation
- Fixed wait between attempts
"""

import logging
import time

import pytest

from resilient_http import (
    RateLimiter,
    RateLimitExceeded,
    ResiliencePolicy,
    RetryExhausted,
    RetryPolicy,
    TransportError,
)


class FlakyOperation:
    """Fails ``failures`` times, then returns ``result``"""

    def __init__(self, failures: int, result="ok", error_factory=lambda n: TransportError(f"failure #{n}")):
        self.failures = failures
        self.result = result
        self.error_factory = error_factory
        self.calls = 0

    def __call__(self):
        self.calls += 1
        if self.calls <= self.failures:
            raise self.error_factory(self.calls)
        return self.result


def no_wait_policy(max_attempts=5, rate_limiter=None, **kwargs):
    return ResiliencePolicy(
        retry_policy=RetryPolicy(max_attempts=max_attempts, wait_between_attempts=0.0, **kwargs),
        rate_limiter=rate_limiter,
    )


class TestRetryLoop:
    def test_success_on_first_attempt(self):
        operation = FlakyOperation(failures=0)
        events = []
        policy = no_wait_policy()
        policy.add_retry_listener(events.append)

        assert policy.execute(operation, "op") == "ok"
        assert operation.calls == 1
        assert events == []

    def test_success_after_transient_failures(self):
        operation = FlakyOperation(failures=4)
        policy = no_wait_policy(max_attempts=5)

        assert policy.execute(operation, "op") == "ok"
        assert operation.calls == 5

    def test_exhaustion_wraps_last_failure(self):
        operation = FlakyOperation(failures=10)
        policy = no_wait_policy(max_attempts=3)

        with pytest.raises(RetryExhausted) as exc_info:
            policy.execute(operation, "GET /brands")

        error = exc_info.value
        assert operation.calls == 3
        assert error.attempts == 3
        assert error.operation == "GET /brands"
        assert str(error.last_error) == "failure #3"
        assert error.__cause__ is error.last_error

    def test_single_attempt_policy_does_not_retry(self):
        operation = FlakyOperation(failures=1)

        with pytest.raises(RetryExhausted):
            ResiliencePolicy.disabled().execute(operation)

        assert operation.calls == 1

    def test_exceptions_outside_retry_on_propagate_immediately(self):
        operation = FlakyOperation(failures=3, error_factory=lambda n: KeyError(n))
        policy = no_wait_policy(retry_on=(TransportError,))

        with pytest.raises(KeyError):
            policy.execute(operation)

        assert operation.calls == 1


class TestRateLimiterComposition:
    def test_one_permit_per_attempt(self):
        limiter = RateLimiter(permits_per_period=100, period=60.0, acquire_timeout=0.0)
        policy = no_wait_policy(max_attempts=4, rate_limiter=limiter)

        with pytest.raises(RetryExhausted):
            policy.execute(FlakyOperation(failures=10))

        assert limiter.get_stats()["granted_total"] == 4

    def test_rate_limit_rejection_is_not_retried(self):
        limiter = RateLimiter(permits_per_period=2, period=60.0, acquire_timeout=0.0)
        operation = FlakyOperation(failures=10)
        policy = no_wait_policy(max_attempts=5, rate_limiter=limiter)

        with pytest.raises(RateLimitExceeded):
            policy.execute(operation)

        # Two permitted attempts ran, the third was refused before running
        assert operation.calls == 2

    def test_rejection_before_first_attempt_never_runs_operation(self):
        limiter = RateLimiter(permits_per_period=1, period=60.0, acquire_timeout=0.0)
        limiter.try_acquire()
        operation = FlakyOperation(failures=0)

        with pytest.raises(RateLimitExceeded):
            no_wait_policy(rate_limiter=limiter).execute(operation)

        assert operation.calls == 0


class TestRetryNotifications:
    def test_one_event_per_retry(self):
        events = []
        policy = no_wait_policy(max_attempts=5)
        policy.add_retry_listener(events.append)

        policy.execute(FlakyOperation(failures=4), "op")

        assert [event.attempt_number for event in events] == [1, 2, 3, 4]
        assert all(event.max_attempts == 5 for event in events)
        assert all(event.operation == "op" for event in events)
        assert str(events[0].error) == "failure #1"

    def test_no_event_after_final_attempt(self):
        events = []
        policy = no_wait_policy(max_attempts=3)
        policy.add_retry_listener(events.append)

        with pytest.raises(RetryExhausted):
            policy.execute(FlakyOperation(failures=10))

        assert len(events) == 2

    def test_failing_listener_does_not_change_control_flow(self, caplog):
        def broken_listener(event):
            raise RuntimeError("listener bug")

        operation = FlakyOperation(failures=2)
        policy = no_wait_policy()
        policy.add_retry_listener(broken_listener)

        with caplog.at_level(logging.WARNING, logger="resilient_http.resilience.policy"):
            assert policy.execute(operation) == "ok"

        assert operation.calls == 3
        assert "listener bug" in caplog.text

    def test_retries_are_logged(self, caplog):
        with caplog.at_level(logging.INFO, logger="resilient_http.resilience.policy"):
            no_wait_policy().execute(FlakyOperation(failures=1), "GET /x")

        assert "GET /x attempt 1/5 failed" in caplog.text
        assert "succeeded on attempt 2/5" in caplog.text


class TestWaitBetweenAttempts:
    def test_fixed_wait_via_injected_sleep(self):
        sleeps = []
        policy = ResiliencePolicy(
            retry_policy=RetryPolicy(max_attempts=4, wait_between_attempts=1.5),
            sleep=sleeps.append,
        )

        policy.execute(FlakyOperation(failures=3))

        assert sleeps == [1.5, 1.5, 1.5]

    def test_real_wait_separates_attempts(self):
        call_times = []

        def operation():
            call_times.append(time.monotonic())
            if len(call_times) < 3:
                raise TransportError("not yet")
            return "ok"

        policy = ResiliencePolicy(retry_policy=RetryPolicy(max_attempts=3, wait_between_attempts=0.05))
        policy.execute(operation)

        gaps = [later - earlier for earlier, later in zip(call_times, call_times[1:])]
        assert all(gap >= 0.05 for gap in gaps)


class TestDecorate:
    def test_decorated_function_is_retried(self):
        calls = []
        policy = no_wait_policy(max_attempts=3)

        @policy.decorate
        def fetch(value):
            calls.append(value)
            if len(calls) < 2:
                raise TransportError("flaky")
            return value * 2

        assert fetch(21) == 42
        assert calls == [21, 21]
        assert fetch.__name__ == "fetch"
