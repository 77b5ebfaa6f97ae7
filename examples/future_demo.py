"""
Future Chaining Demo

Demonstrates futures, the callback adapter and the combinators, driven by the
reactor's virtual clock.
"""

import asyncio
import logging

from pledge import (
    Future, Reactor, ReactorConfig, adapt, configure_logging,
    delay, first_settled, run_serially, when_all
)


# Example 1: Explicit chaining
def example_explicit_chaining():
    """Demo of explicit continuation chains."""
    print("\n=== Example 1: Explicit Chaining ===")

    result = (Future.resolved(10)
              .chain(lambda x: x * 2)           # 20
              .chain(lambda x: x + 5)           # 25
              .chain(lambda x: f"Result: {x}")  # "Result: 25"
              .get())

    print(f"Chained result: {result}")


# Example 2: Serial processing of values and futures
def example_serial():
    """Print values in order, each after the previous one settled."""
    print("\n=== Example 2: Serial Processing ===")

    items = [delay(0.05).chain(lambda _: 1), Future.resolved(2), 3]
    values = run_serially(items, on_item=print).get()

    print(f"Delivered: {values}")


# Example 3: Lifting a callback API
def do_async(val, callback):
    """Error-first callback API, failing when val is 0."""
    error = None
    if val == 0:
        error = ValueError('Error message!')
    Reactor.current().call_later(0.05, callback, error, val)


def example_adapter():
    """Demo of adapt()."""
    print("\n=== Example 3: Callback Adapter ===")

    promise_aware = adapt(do_async)
    promise_aware(1).chain(print)
    promise_aware(0).catch(lambda reason: print(f"Error: {reason}"))
    Reactor.current().run()


# Example 4: First success among several sources
def example_first_settled():
    """Demo of first_settled()."""
    print("\n=== Example 4: First Settled ===")

    cache = Future.rejected(KeyError("cache miss"))
    database = delay(0.2, "from database")
    replica = delay(0.05, "from replica")

    winner = first_settled([cache, database, replica]).get()
    print(f"Winner: {winner}")


# Example 5: Awaiting futures from asyncio code
async def example_await():
    """Demo of awaiting futures."""
    print("\n=== Example 5: Await ===")

    results = await when_all([delay(0.01, "a"), "b", delay(0.02, "c")])
    print(f"All results: {results}")


def main():
    configure_logging(logging.DEBUG)
    Reactor.initialize(ReactorConfig.from_env())

    example_explicit_chaining()
    example_serial()
    example_adapter()
    example_first_settled()
    asyncio.run(example_await())

    Reactor.shutdown()


if __name__ == "__main__":
    main()
