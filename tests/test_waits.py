# tests/test_waits.py
"""
Tests for wait utilities.
"""

import pytest
import time
from uiauto_core.waits import (
    ConditionSpec,
    clamp_schedule,
    wait_until,
    wait_until_condition,
    wait_until_passes,
    wait_until_not,
    wait_for_any,
    retry
)
from uiauto_core.exceptions import (ConditionTimeout, MalformedConditionError,
                                    SessionLostError)
from uiauto_core.timings import MIN_POLL_INTERVAL


class TestWaitUntil:
    """Tests for wait_until function."""

    def test_returns_immediately_when_true(self):
        """Should return immediately when predicate is true."""
        result = wait_until(lambda: True, timeout=5)
        assert result is True

    def test_returns_truthy_value(self):
        """Should return the truthy value from predicate."""
        result = wait_until(lambda: "hello", timeout=5)
        assert result == "hello"

    def test_waits_for_condition(self):
        """Should wait until condition becomes true."""
        start = time.time()
        counter = {"value": 0}

        def predicate():
            counter["value"] += 1
            return counter["value"] >= 3

        result = wait_until(predicate, timeout=5, interval=0.1)
        elapsed = time.time() - start

        assert result is True
        assert elapsed >= 0.2  # At least 2 intervals
        assert elapsed < 1.0   # But not too long

    def test_timeout_raises_error(self):
        """Should raise ConditionTimeout when timeout expires."""
        with pytest.raises(ConditionTimeout) as exc_info:
            wait_until(lambda: False, timeout=0.3, interval=0.1)

        assert "Timed out" in str(exc_info.value)
        assert exc_info.value.timeout == 0.3

    def test_preserves_exception(self):
        """Should preserve the last exception in ConditionTimeout."""
        def failing_predicate():
            raise ValueError("test error")

        with pytest.raises(ConditionTimeout) as exc_info:
            wait_until(failing_predicate, timeout=0.3, interval=0.1)

        assert exc_info.value.original_exception is not None
        assert isinstance(exc_info.value.original_exception, ValueError)
        assert "test error" in str(exc_info.value.original_exception)


class TestPollingContract:
    """Evaluation counts and sleep pattern, on a virtual clock."""

    def test_true_after_n_false_ticks_is_evaluated_n_plus_one_times(self, clock):
        calls = {"n": 0}

        def predicate():
            calls["n"] += 1
            return calls["n"] > 3

        assert wait_until(predicate, timeout=10, interval=0.25) is True
        assert calls["n"] == 4
        assert clock.sleeps == [0.25, 0.25, 0.25]

    def test_last_sleep_is_capped_by_remaining_time(self, clock):
        with pytest.raises(ConditionTimeout) as exc_info:
            wait_until(lambda: False, timeout=1.0, interval=0.375)

        assert clock.sleeps == [0.375, 0.375, 0.25]
        assert exc_info.value.elapsed_time >= 1.0
        assert exc_info.value.attempt_count == 4

    def test_timeout_never_reported_before_budget_is_spent(self, clock):
        with pytest.raises(ConditionTimeout) as exc_info:
            wait_until(lambda: None, timeout=2.0, interval=0.5)

        assert clock.now >= 2.0
        assert exc_info.value.elapsed_time >= exc_info.value.timeout

    def test_transient_faults_are_absorbed(self, clock):
        outcomes = [RuntimeError("flaky"), RuntimeError("flaky"), "ready"]

        def predicate():
            item = outcomes.pop(0)
            if isinstance(item, Exception):
                raise item
            return item

        assert wait_until(predicate, timeout=5, interval=0.5) == "ready"
        assert len(clock.sleeps) == 2

    def test_session_lost_propagates_immediately(self, clock):
        calls = {"n": 0}

        def predicate():
            calls["n"] += 1
            raise SessionLostError("gone")

        with pytest.raises(SessionLostError):
            wait_until(predicate, timeout=5, interval=0.5)

        assert calls["n"] == 1
        assert clock.sleeps == []

    def test_wait_until_condition_accepts_spec(self, clock):
        spec = ConditionSpec(lambda: 42, timeout=1.0, interval=0.5, description="answer")
        assert wait_until_condition(spec) == 42


class TestConditionSpecValidation:
    """Malformed specs are rejected before any evaluation."""

    @pytest.mark.parametrize("timeout,interval", [
        (1.0, 0.0),
        (1.0, -0.5),
        (0.1, 0.2),
    ])
    def test_malformed_spec_rejected(self, timeout, interval):
        calls = {"n": 0}

        def predicate():
            calls["n"] += 1
            return True

        with pytest.raises(MalformedConditionError):
            wait_until(predicate, timeout=timeout, interval=interval)
        assert calls["n"] == 0

    def test_non_callable_predicate_rejected(self):
        with pytest.raises(MalformedConditionError):
            ConditionSpec("not callable", timeout=1.0, interval=0.5)

    def test_timeout_equal_to_interval_is_valid(self):
        spec = ConditionSpec(lambda: True, timeout=0.5, interval=0.5)
        assert spec.timeout == spec.interval


class TestClampSchedule:
    """Caller-supplied timing is floored so it always yields a valid spec."""

    @pytest.mark.parametrize("timeout,interval,expected", [
        (0, 0.5, (MIN_POLL_INTERVAL, MIN_POLL_INTERVAL)),
        (0.1, 0.5, (0.1, 0.1)),
        (1.0, 0.001, (1.0, MIN_POLL_INTERVAL)),
        (10.0, 0.5, (10.0, 0.5)),
    ])
    def test_clamped(self, timeout, interval, expected):
        assert clamp_schedule(timeout, interval) == expected

    def test_clamped_schedule_is_accepted(self):
        timeout, interval = clamp_schedule(0, 0)
        spec = ConditionSpec(lambda: True, timeout=timeout, interval=interval)
        assert wait_until_condition(spec) is True


class TestWaitUntilPasses:
    """Tests for wait_until_passes function."""

    def test_returns_immediately_on_success(self):
        """Should return immediately when function succeeds."""
        result = wait_until_passes(
            lambda: "success",
            timeout=5,
            description="test"
        )
        assert result == "success"

    def test_retries_on_exception(self):
        """Should retry when function raises exception."""
        counter = {"value": 0}

        def flaky_func():
            counter["value"] += 1
            if counter["value"] < 3:
                raise ValueError("not yet")
            return "success"

        result = wait_until_passes(
            flaky_func,
            timeout=5,
            interval=0.1,
            exceptions=(ValueError,),
            description="flaky function"
        )

        assert result == "success"
        assert counter["value"] == 3

    def test_timeout_with_exception_info(self):
        """Should include exception info in ConditionTimeout."""
        def always_fails():
            raise RuntimeError("always fails")

        with pytest.raises(ConditionTimeout) as exc_info:
            wait_until_passes(
                always_fails,
                timeout=0.3,
                interval=0.1,
                exceptions=(RuntimeError,),
                description="failing operation"
            )

        error = exc_info.value
        assert error.original_exception is not None
        assert isinstance(error.original_exception, RuntimeError)
        assert error.attempt_count >= 1
        assert "failing operation" in str(error)

    def test_with_args_and_kwargs(self):
        """Should pass kwargs to function."""
        def add(a, b, multiplier=1):
            return (a + b) * multiplier

        result = wait_until_passes(
            add,
            timeout=5,
            description="addition",
            a=2, b=3,
            multiplier=2
        )

        assert result == 10

    def test_only_catches_specified_exceptions(self):
        """Should only catch specified exception types."""
        def raises_type_error():
            raise TypeError("wrong type")

        with pytest.raises(TypeError):
            wait_until_passes(
                raises_type_error,
                timeout=1,
                exceptions=(ValueError,),
                description="test"
            )


class TestWaitUntilNot:
    """Tests for wait_until_not function."""

    def test_returns_when_falsy(self):
        """Should return when predicate becomes falsy."""
        counter = {"value": 3}

        def predicate():
            counter["value"] -= 1
            return counter["value"] > 0

        wait_until_not(predicate, timeout=5, interval=0.1)
        assert counter["value"] == 0

    def test_timeout_when_always_truthy(self):
        """Should timeout when predicate stays truthy."""
        with pytest.raises(ConditionTimeout):
            wait_until_not(lambda: True, timeout=0.3, interval=0.1)


class TestWaitForAny:
    """Tests for wait_for_any function."""

    def test_returns_first_truthy_index(self):
        """Should return index of first truthy predicate."""
        predicates = [
            lambda: False,
            lambda: True,
            lambda: False,
        ]

        result = wait_for_any(predicates, timeout=5)
        assert result == 1

    def test_index_zero_is_returned(self, clock):
        assert wait_for_any([lambda: True, lambda: True], timeout=1.0, interval=0.5) == 0

    def test_handles_delayed_success(self):
        """Should handle predicates that become true later."""
        counter = {"value": 0}

        def delayed_predicate():
            counter["value"] += 1
            return counter["value"] >= 3

        predicates = [
            lambda: False,
            delayed_predicate,
        ]

        result = wait_for_any(predicates, timeout=5, interval=0.1)
        assert result == 1

    def test_timeout_when_none_succeed(self, clock):
        """Should timeout when no predicate succeeds."""
        predicates = [lambda: False, lambda: False]

        with pytest.raises(ConditionTimeout) as exc_info:
            wait_for_any(predicates, timeout=1.0, interval=0.5)

        assert hasattr(exc_info.value, 'original_exceptions')

    def test_empty_predicate_list_rejected(self):
        with pytest.raises(MalformedConditionError):
            wait_for_any([], timeout=1.0)


class TestRetry:
    """Tests for retry function."""

    def test_succeeds_on_first_attempt(self):
        """Should return immediately on first success."""
        result = retry(lambda: "success", max_attempts=3)
        assert result == "success"

    def test_retries_on_failure(self, clock):
        """Should retry up to max_attempts times."""
        counter = {"value": 0}

        def flaky():
            counter["value"] += 1
            if counter["value"] < 2:
                raise ValueError("not yet")
            return "success"

        result = retry(flaky, max_attempts=3, interval=0.1)
        assert result == "success"
        assert counter["value"] == 2
        assert clock.sleeps == [0.1]

    def test_raises_after_max_attempts(self, clock):
        """Should raise after max_attempts failures."""
        counter = {"value": 0}

        def always_fails():
            counter["value"] += 1
            raise ValueError("always fails")

        with pytest.raises(ConditionTimeout) as exc_info:
            retry(always_fails, max_attempts=3, interval=0.1)

        assert counter["value"] == 3
        assert exc_info.value.attempt_count == 3

    def test_session_lost_is_not_retried(self, clock):
        counter = {"value": 0}

        def lost():
            counter["value"] += 1
            raise SessionLostError("gone")

        with pytest.raises(SessionLostError):
            retry(lost, max_attempts=3, interval=0.1)
        assert counter["value"] == 1


class TestConditionTimeoutAttributes:
    """Tests for ConditionTimeout attributes."""

    def test_get_root_cause(self):
        """Should get root cause from nested exceptions."""
        inner = ValueError("root cause")

        error = ConditionTimeout("outer error")
        error.original_exception = inner

        root = error.get_root_cause()
        assert root is inner
        assert str(root) == "root cause"

    def test_get_traceback_str(self):
        """Should get formatted traceback string."""
        try:
            raise ValueError("test error")
        except ValueError as e:
            error = ConditionTimeout("timeout")
            error.original_exception = e

            tb_str = error.get_traceback_str()
            assert "ValueError" in tb_str
            assert "test error" in tb_str


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
