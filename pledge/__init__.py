"""
Pledge - Deferred values for single-threaded code

Futures with chained continuations, driven by an explicit two-queue reactor.

Features:
- Single-assignment futures with continuation chaining
- Adoption of any object exposing ``chain``/``then``
- Cycle detection for self-adopting futures
- Error-first callback adapter
- Serial and first-success combinators
- Unhandled rejection reporting
"""

from .config import ReactorConfig, configure_logging
from .core import (
    Future, FutureState, Continuable, Thenable, Reactor, adapt,
    run_serially, first_settled, when_all, race, delay
)
from .core.exceptions import (
    PledgeError, AdapterError, CycleError, AggregateError, NoCandidatesError,
    RejectedError, FutureNotReadyError, ReactorError
)

__version__ = "0.1.0"

__all__ = [
    'ReactorConfig',
    'configure_logging',
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
    # Errors
    'PledgeError',
    'AdapterError',
    'CycleError',
    'AggregateError',
    'NoCandidatesError',
    'RejectedError',
    'FutureNotReadyError',
    'ReactorError',
]
