"""
Future Combinators

Utilities for composing mixed lists of plain values and futures.

Every input is normalized with ``Future.resolved``: futures pass through,
other continuables are adopted, plain values become already-fulfilled
futures.
"""

import logging
from functools import partial
from typing import Any, Callable, Iterable, List, Optional

from .exceptions import AggregateError, NoCandidatesError
from .future import Future
from .reactor import Reactor

logger = logging.getLogger(__name__)


def run_serially(items: Iterable[Any],
                 on_item: Optional[Callable[[Any], Any]] = None) -> Future:
    """
    Process values and futures one at a time, in order.

    Item ``i + 1`` is only looked at once item ``i`` has settled. The first
    rejection stops processing; later items are never delivered.

    Items are normalized only when their turn comes, so a future that is
    already rejected further down the list counts as unhandled until then.
    Attach a handler to such a future first if it must not be reported.

    Args:
        items: Plain values and futures
        on_item: Observer called with each resolved value, in list order.
            If it raises, processing stops with that error.

    Returns:
        Future of the list of resolved values, or rejected with the first
        failure reason unchanged

    Example:
        run_serially([delay(0.05, 1), 2, 3], on_item=print)  # 1, 2, 3
    """
    pending = list(items)
    results: List[Any] = []

    def process(index: int) -> Any:
        if index == len(pending):
            return results
        return Future.resolved(pending[index]).chain(
            partial(deliver, index),
            partial(halt, index),
        )

    def deliver(index: int, value: Any) -> Any:
        results.append(value)
        if on_item is not None:
            on_item(value)
        return process(index + 1)

    def halt(index: int, reason: Any) -> Future:
        skipped = len(pending) - index - 1
        logger.debug(f"Serial run stopped at item {index}, skipping {skipped}: {reason!r}")
        return Future.rejected(reason)

    return Future(lambda resolve, _: resolve(process(0)))


def first_settled(items: Iterable[Any]) -> Future:
    """
    Settle with the first success among values and futures.

    All inputs are observed at once. The first to fulfill, by settlement time,
    wins; the others keep running and their outcomes are discarded. Plain
    values are already fulfilled, so they beat any input that still has to
    wait on the reactor. Ties between already-settled inputs go to the
    earlier input.

    Args:
        items: Plain values and futures

    Returns:
        Future of the winning value. Rejects with AggregateError (reasons in
        settlement order) if every input rejects, or with NoCandidatesError
        if there are no inputs.

    Example:
        first_settled([Future.rejected(err), delay(0.05, 1), 42])  # 42
    """
    candidates = [Future.resolved(item) for item in items]
    if not candidates:
        return Future.rejected(NoCandidatesError())

    def executor(resolve, reject):
        errors: List[Any] = []

        def on_failure(reason: Any) -> None:
            errors.append(reason)
            if len(errors) == len(candidates):
                reject(AggregateError(errors))

        for candidate in candidates:
            candidate.chain(resolve, on_failure)

    return Future(executor)


def when_all(items: Iterable[Any]) -> Future:
    """
    Wait for all values and futures.

    Args:
        items: Plain values and futures

    Returns:
        Future of the list of values in input order; rejects with the first
        rejection by settlement time

    Example:
        when_all([fetch_user(), fetch_orders(), 3]).chain(render)
    """
    candidates = [Future.resolved(item) for item in items]
    if not candidates:
        return Future.resolved([])

    def executor(resolve, reject):
        results: List[Any] = [None] * len(candidates)
        remaining = len(candidates)

        def fulfilled(index: int, value: Any) -> None:
            nonlocal remaining
            results[index] = value
            remaining -= 1
            if remaining == 0:
                resolve(results)

        for index, candidate in enumerate(candidates):
            candidate.chain(partial(fulfilled, index), reject)

    return Future(executor)


def race(items: Iterable[Any]) -> Future:
    """
    Settle like the first input to settle, success or failure.

    An empty input gives a future that never settles.
    """
    candidates = [Future.resolved(item) for item in items]

    def executor(resolve, reject):
        for candidate in candidates:
            candidate.chain(resolve, reject)

    return Future(executor)


def delay(seconds: float = 0.05, value: Any = None) -> Future:
    """
    Future fulfilled with ``value`` by a timer on the lower-priority queue.

    Args:
        seconds: Virtual delay
        value: Fulfillment value

    Returns:
        Future that settles once the reactor reaches the timer
    """
    return Future(lambda resolve, _: Reactor.current().call_later(seconds, resolve, value))
