"""
Tests for future combinators (combinators.py).

Tests:
- run_serially: ordered, one-at-a-time processing with fail-fast
- first_settled: first success wins, aggregate failure
- when_all: wait for every input
- race: first settlement wins
- delay: timer-backed futures
"""

import random

import pytest

from pledge.core import Future, Reactor, delay, first_settled, race, run_serially, when_all
from pledge.core.exceptions import (
    AggregateError, FutureNotReadyError, NoCandidatesError, RejectedError
)


# =============================================================================
# Test Fixtures and Helpers
# =============================================================================

def delayed_success(value, seconds: float = 0.05) -> Future:
    """Future fulfilled by a timer."""
    return delay(seconds, value)


def delayed_failure(reason, seconds: float = 0.05) -> Future:
    """Future rejected by a timer."""
    return Future(lambda resolve, reject: Reactor.current().call_later(seconds, reject, reason))


class CountingThenable:
    """Continuable that records how often it was asked for its value."""

    def __init__(self, value):
        self.value = value
        self.calls = 0

    def then(self, on_success=None, on_failure=None):
        self.calls += 1
        on_success(self.value)


def random_int(min_val: int = -1000, max_val: int = 1000) -> int:
    """Generate a random integer."""
    return random.randint(min_val, max_val)


# =============================================================================
# run_serially Tests
# =============================================================================

class TestRunSerially:
    """Tests for run_serially combinator."""

    def test_delivers_in_order(self):
        """Test values are delivered in list order, one settled item at a time."""
        first = delayed_success(1)
        seen = []

        result = run_serially([first, 2, 3], on_item=lambda v: seen.append((v, first.is_ready())))

        assert result.get() == [1, 2, 3]
        assert seen == [(1, True), (2, True), (3, True)]

    def test_slow_item_blocks_faster_ones(self):
        """Test a fast later item waits for a slow earlier one."""
        seen = []
        result = run_serially(
            [delayed_success("slow", 0.2), delayed_success("fast", 0.01)],
            on_item=seen.append,
        )

        assert result.get() == ["slow", "fast"]
        assert seen == ["slow", "fast"]

    def test_fail_fast(self):
        """Test the first rejection stops processing."""
        seen = []
        result = run_serially([delayed_failure("boom"), 99], on_item=seen.append)

        with pytest.raises(RejectedError) as exc_info:
            result.get()

        assert exc_info.value.reason == "boom"
        assert result.reason == "boom"
        assert seen == []

    def test_later_rejected_item_observed_lazily(self, reactor):
        """Test a rejected item behind a slow one is unhandled until its turn."""
        reports = []
        Reactor.set_unhandled_rejection_hook(lambda future, reason: reports.append(reason))

        result = run_serially([delayed_success(1), Future.rejected("x")])
        reactor.run_microtasks()
        assert reports == ["x"]

        with pytest.raises(RejectedError) as exc_info:
            result.get()
        assert exc_info.value.reason == "x"

    def test_later_rejected_item_with_handler_not_reported(self, reactor):
        """Test attaching a handler up front keeps a later rejection quiet."""
        reports = []
        Reactor.set_unhandled_rejection_hook(lambda future, reason: reports.append(reason))
        late = Future.rejected("x")
        late.catch(lambda e: None)

        result = run_serially([delayed_success(1), late])

        with pytest.raises(RejectedError):
            result.get()
        assert reports == []

    def test_failure_in_middle(self):
        """Test items before the failure are delivered and the reason is unchanged."""
        error = ValueError("second item failed")
        seen = []
        failing = Future.rejected(error)
        result = run_serially([1, failing, 3], on_item=seen.append)

        with pytest.raises(ValueError) as exc_info:
            result.get()

        assert exc_info.value is error
        assert seen == [1]

    def test_later_continuables_never_started(self, reactor):
        """Test items after a failure are never adopted."""
        later = CountingThenable("unused")
        result = run_serially([delayed_failure("boom"), later])
        result.catch(lambda reason: None)
        reactor.run()

        assert result.is_rejected()
        assert later.calls == 0

    def test_observer_error_stops_processing(self):
        """Test a raising observer fails the run."""
        seen = []

        def observer(value):
            if value == 2:
                raise RuntimeError("observer failed")
            seen.append(value)

        with pytest.raises(RuntimeError, match="observer failed"):
            run_serially([1, 2, 3], on_item=observer).get()

        assert seen == [1]

    def test_empty(self):
        """Test with empty list."""
        assert run_serially([]).get() == []

    def test_random_values(self):
        """Test mixed random values and futures keep their order."""
        values = [random_int() for _ in range(10)]
        items = [delayed_success(v, random.random()) if i % 2 else v
                 for i, v in enumerate(values)]

        assert run_serially(iter(items)).get() == values


# =============================================================================
# first_settled Tests
# =============================================================================

class TestFirstSettled:
    """Tests for first_settled combinator."""

    def test_plain_value_wins(self):
        """Test a plain value beats inputs that need the reactor."""
        result = first_settled([Future.rejected(ValueError("no")), delayed_success("late"), 42])
        assert result.get() == 42

    def test_settlement_time_not_position(self):
        """Test the earliest success wins regardless of position."""
        result = first_settled([delayed_success("slow", 0.2), delayed_success("fast", 0.01)])
        assert result.get() == "fast"

    def test_success_after_failures(self):
        """Test a late success still wins over earlier failures."""
        result = first_settled([delayed_failure("a", 0.01), delayed_success("ok", 0.1)])
        assert result.get() == "ok"

    def test_all_fail(self):
        """Test every input failing rejects with reasons in settlement order."""
        result = first_settled([delayed_failure("a", 0.1), delayed_failure("b", 0.01)])

        with pytest.raises(AggregateError) as exc_info:
            result.get()

        assert exc_info.value.errors == ["b", "a"]

    def test_empty(self):
        """Test empty input rejects immediately."""
        result = first_settled([])

        assert result.is_rejected()
        assert isinstance(result.reason, NoCandidatesError)
        assert isinstance(result.reason, AggregateError)
        assert result.reason.errors == []

    def test_losers_run_to_completion(self, reactor):
        """Test losing inputs are not cancelled."""
        slow = delayed_success("slow", 0.1)
        result = first_settled([slow, 1])

        assert result.get() == 1
        reactor.run()
        assert slow.is_fulfilled()
        assert result.get() == 1

    def test_already_settled_tie(self):
        """Test ties between settled inputs go to the earlier input."""
        assert first_settled([1, 2, Future.resolved(3)]).get() == 1


# =============================================================================
# when_all / race Tests
# =============================================================================

class TestWhenAll:
    """Tests for when_all combinator."""

    def test_input_order(self):
        """Test results keep input order, not settlement order."""
        result = when_all([delayed_success("a", 0.2), "b", delayed_success("c", 0.01)])
        assert result.get() == ["a", "b", "c"]

    def test_first_rejection(self):
        """Test the earliest rejection wins."""
        result = when_all([delayed_failure("late", 0.2), delayed_failure("early", 0.01), 1])

        with pytest.raises(RejectedError) as exc_info:
            result.get()

        assert exc_info.value.reason == "early"

    def test_empty(self):
        """Test with empty list."""
        assert when_all([]).get() == []


class TestRace:
    """Tests for race combinator."""

    def test_first_success(self):
        """Test the first settlement wins."""
        assert race([delayed_success("slow", 0.2), delayed_success("fast", 0.01)]).get() == "fast"

    def test_first_failure(self):
        """Test a rejection that settles first wins."""
        result = race([delayed_success("slow", 0.2), delayed_failure("fast", 0.01)])

        with pytest.raises(RejectedError):
            result.get()

    def test_empty_stays_pending(self, reactor):
        """Test an empty race never settles."""
        result = race([])
        reactor.run()

        assert result.is_pending()
        with pytest.raises(FutureNotReadyError):
            result.get()


class TestDelay:
    """Tests for delay."""

    def test_advances_virtual_time(self, reactor):
        """Test the reactor clock advances to the timer."""
        assert delay(0.25, "x").get() == "x"
        assert reactor.time() == pytest.approx(0.25)

    def test_negative_delay_rejects(self):
        """Test a negative delay rejects instead of raising."""
        f = delay(-1)
        assert f.is_rejected()
