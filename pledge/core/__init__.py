"""
Pledge Core

Single-assignment futures, the reactor that schedules their continuations,
and combinators over mixed lists of values and futures.
"""

from .future import Future, FutureState, Continuable, Thenable
from .reactor import Reactor
from .adapter import adapt
from .combinators import run_serially, first_settled, when_all, race, delay

__all__ = [
    'Future',
    'FutureState',
    'Continuable',
    'Thenable',
    'Reactor',
    'adapt',
    'run_serially',
    'first_settled',
    'when_all',
    'race',
    'delay',
]
