"""Tests for the retry helper and retry policy"""

import pytest

from site_deploy.api.exceptions import NetworkOperationError
from site_deploy.models import RetryPolicy
from site_deploy.utils import async_utils
from site_deploy.utils.async_utils import retry_async, run_async


class Flaky:
    """Async callable failing ``failures`` times before succeeding"""

    def __init__(self, failures, error=ConnectionError("connection reset")):
        self.failures = failures
        self.error = error
        self.calls = 0

    async def __call__(self, value):
        self.calls += 1
        if self.calls <= self.failures:
            raise self.error
        return value


@pytest.fixture
def sleeps(monkeypatch):
    recorded = []

    async def fake_sleep(delay):
        recorded.append(delay)

    monkeypatch.setattr(async_utils.asyncio, "sleep", fake_sleep)
    return recorded


class TestRetryAsync:

    def test_returns_first_success_without_sleeping(self, sleeps):
        op = Flaky(failures=0)

        assert run_async(retry_async(op, "ok", step="Upload")) == "ok"
        assert op.calls == 1
        assert sleeps == []

    def test_recovers_after_transient_failure(self, sleeps):
        op = Flaky(failures=1)

        assert run_async(retry_async(op, "ok", step="Upload")) == "ok"
        assert op.calls == 2
        assert sleeps == [5]

    def test_gives_up_after_max_attempts(self, sleeps):
        op = Flaky(failures=10)

        with pytest.raises(NetworkOperationError) as exc_info:
            run_async(retry_async(op, "ok", policy=RetryPolicy(max_attempts=3, delay=5), step="Upload app.js"))

        error = exc_info.value
        assert op.calls == 3
        assert sleeps == [5, 5]
        assert error.step == "Upload app.js"
        assert error.attempts == 3
        assert isinstance(error.cause, ConnectionError)
        assert "Upload app.js" in str(error)
        assert error.error_code == "SD006"

    def test_only_listed_exceptions_are_retried(self, sleeps):
        op = Flaky(failures=1, error=KeyError("boom"))

        with pytest.raises(KeyError):
            run_async(retry_async(op, "ok", exceptions=(ConnectionError,)))
        assert op.calls == 1


class TestRetryPolicy:

    def test_defaults(self):
        policy = RetryPolicy()

        assert policy.max_attempts == 3
        assert policy.get_retry_delay(1) == 5
        assert policy.get_retry_delay(2) == 5

    def test_backoff_is_capped(self):
        policy = RetryPolicy(delay=10, backoff_multiplier=10, max_delay=60)

        assert policy.get_retry_delay(1) == 10
        assert policy.get_retry_delay(3) == 60

    def test_rejects_invalid_values(self):
        with pytest.raises(ValueError):
            RetryPolicy(max_attempts=0)
        with pytest.raises(ValueError):
            RetryPolicy(delay=-1)
