"""pytest configuration and fixtures."""

from typing import Iterator

import pytest

from pledge.core import Reactor


@pytest.fixture(autouse=True)
def reactor() -> Iterator[Reactor]:
    """Give every test a fresh process-wide reactor and no rejection hook."""
    Reactor.shutdown()
    Reactor.set_unhandled_rejection_hook(None)
    active = Reactor.initialize()

    yield active

    Reactor.set_unhandled_rejection_hook(None)
    Reactor.shutdown()
