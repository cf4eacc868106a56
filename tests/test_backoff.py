"""Tests for the backoff retry executor."""

from unittest.mock import MagicMock

import pytest
import requests
from clipping.intelligence.backoff import BackoffExecutor, is_rate_limited


def http_error(status: int) -> requests.HTTPError:
    response = MagicMock()
    response.status_code = status
    return requests.HTTPError(f"{status} error", response=response)


class Flaky:
    """Fails a fixed number of times, then returns 'ok'."""

    def __init__(self, failures: int, exc_factory=lambda: ConnectionError("reset")) -> None:
        self.failures = failures
        self.exc_factory = exc_factory
        self.calls = 0

    def __call__(self):
        self.calls += 1
        if self.calls <= self.failures:
            raise self.exc_factory()
        return "ok"


class TestIsRateLimited:
    def test_429_is_rate_limited(self):
        assert is_rate_limited(http_error(429))

    def test_500_is_not(self):
        assert not is_rate_limited(http_error(500))

    def test_other_exceptions_are_not(self):
        assert not is_rate_limited(ValueError("x"))
        assert not is_rate_limited(requests.ConnectionError("down"))


class TestRun:
    def test_success_first_try(self, backoff, sleeps):
        op = Flaky(0)
        assert backoff.run(op) == "ok"
        assert op.calls == 1
        assert sleeps == []

    @pytest.mark.parametrize("failures", [1, 2])
    def test_recovers_after_k_failures(self, backoff, sleeps, failures):
        op = Flaky(failures)
        assert backoff.run(op) == "ok"
        assert op.calls == failures + 1
        assert len(sleeps) == failures

    def test_raises_after_max_attempts(self, backoff, sleeps):
        op = Flaky(10)
        with pytest.raises(ConnectionError):
            backoff.run(op)
        assert op.calls == 3
        # No sleep after the final attempt
        assert len(sleeps) == 2

    def test_per_call_attempt_override(self, backoff):
        op = Flaky(10)
        with pytest.raises(ConnectionError):
            backoff.run(op, max_attempts=5)
        assert op.calls == 5

    def test_zero_attempts_rejected(self, backoff):
        op = Flaky(0)
        with pytest.raises(ValueError):
            backoff.run(op, max_attempts=0)
        assert op.calls == 0

    def test_last_error_is_raised(self, backoff):
        errors = iter([ValueError("first"), ValueError("second"), ValueError("third")])

        def op():
            raise next(errors)

        with pytest.raises(ValueError, match="third"):
            backoff.run(op)


class TestDelays:
    def test_linear_delay_for_ordinary_failures(self, backoff, sleeps):
        with pytest.raises(ConnectionError):
            backoff.run(Flaky(10))
        assert sleeps == [2.0, 4.0]

    def test_exponential_delay_for_rate_limits(self, sleeps):
        executor = BackoffExecutor(max_attempts=3, sleep=sleeps.append, jitter=lambda: 0.5)
        op = Flaky(2, exc_factory=lambda: http_error(429))
        assert executor.run(op) == "ok"
        assert sleeps == [1.5, 2.5]

    def test_rate_limit_delay_is_capped(self):
        executor = BackoffExecutor(base_delay=1.0, max_delay=10.0, jitter=lambda: 0.9)
        assert executor.delay_for(5, http_error(429)) == 10.0

    def test_from_config(self, fresh_config):
        executor = BackoffExecutor.from_config(fresh_config, sleep=lambda s: None)
        assert executor.max_attempts == 3
        assert executor.max_delay == 10.0
