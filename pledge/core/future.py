"""
Future

Single-assignment deferred value with chained continuations.

Supports explicit ``.chain()`` continuations, adoption of any continuable
(an object exposing ``chain`` or ``then``), and a synchronous/awaitable
bridge that drives the reactor until the future settles.

Examples:
    # Explicit chaining
    Future.resolved(10).chain(lambda x: x * 2).chain(print)

    # Executor style
    f = Future(lambda resolve, reject: reactor.call_later(0.05, resolve, 42))
    assert f.get() == 42
"""

import logging
import types
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Generic, List, Optional, Protocol, Tuple, TypeVar, runtime_checkable

from .exceptions import CycleError, FutureNotReadyError, RejectedError
from .reactor import Reactor

logger = logging.getLogger(__name__)

T = TypeVar('T')

Resolve = Callable[..., None]
Reject = Callable[[Any], None]
Executor = Callable[[Resolve, Reject], Any]


class FutureState(Enum):
    """Lifecycle states."""
    PENDING = "pending"
    SETTLING = "settling"
    FULFILLED = "fulfilled"
    REJECTED = "rejected"


_SETTLED = (FutureState.FULFILLED, FutureState.REJECTED)


@runtime_checkable
class Continuable(Protocol):
    """Anything that registers continuations through ``chain``."""

    def chain(self, on_success: Optional[Callable] = None,
              on_failure: Optional[Callable] = None) -> Any:
        ...


@runtime_checkable
class Thenable(Protocol):
    """Anything that registers continuations through ``then``."""

    def then(self, on_success: Optional[Callable] = None,
             on_failure: Optional[Callable] = None) -> Any:
        ...


def continuation_of(value: Any) -> Optional[Callable]:
    """
    Get the continuation-registration operation ``value`` exposes.

    ``Continuable`` and ``Thenable`` describe the accepted shapes. Lookup
    goes through ``getattr`` so members provided by ``__getattr__`` count.
    Classes and modules are never continuables.

    Args:
        value: Any object

    Returns:
        The bound ``chain``/``then`` operation, or None for plain values

    Raises:
        Whatever the attribute lookup raises, other than AttributeError
    """
    if isinstance(value, Future):
        return value.chain
    if isinstance(value, (type, types.ModuleType)):
        return None

    for name in ("chain", "then"):
        operation = getattr(value, name, None)
        if callable(operation):
            return operation

    return None


@dataclass
class _Reaction:
    """Handlers plus the resolving functions of the downstream future."""
    on_success: Optional[Callable[[Any], Any]]
    on_failure: Optional[Callable[[Any], Any]]
    resolve: Resolve
    reject: Reject


class Future(Generic[T]):
    """
    Eventually-available success value or failure reason.

    A future settles at most once. Continuations registered with ``chain``
    run from the reactor's high-priority queue, never inline, in the order
    they were registered.
    """

    def __init__(self, executor: Executor):
        """
        Create a future.

        Args:
            executor: Called immediately with ``(resolve, reject)``. If it
                raises, the future rejects with the raised error.
        """
        self._state = FutureState.PENDING
        self._value: Optional[T] = None
        self._reason: Any = None
        self._reactions: List[_Reaction] = []
        self._handled = False
        self._adopting: Optional['Future'] = None

        resolve, reject = self._resolvers()
        try:
            executor(resolve, reject)
        except Exception as e:
            reject(e)

    # -- inspection -------------------------------------------------------------

    @property
    def state(self) -> FutureState:
        return self._state

    @property
    def value(self) -> Optional[T]:
        """Fulfillment value (None until fulfilled)."""
        return self._value

    @property
    def reason(self) -> Any:
        """Rejection reason (None until rejected)."""
        return self._reason

    def is_pending(self) -> bool:
        """Check if the future has not settled yet (pending or settling)."""
        return self._state not in _SETTLED

    def is_ready(self) -> bool:
        """Check if the future has settled."""
        return self._state in _SETTLED

    def is_fulfilled(self) -> bool:
        return self._state is FutureState.FULFILLED

    def is_rejected(self) -> bool:
        return self._state is FutureState.REJECTED

    def is_handled(self) -> bool:
        """Check if any continuation or consumer has observed this future."""
        return self._handled

    def __repr__(self) -> str:
        if self._state is FutureState.FULFILLED:
            return f"<Future fulfilled value={self._value!r}>"
        if self._state is FutureState.REJECTED:
            return f"<Future rejected reason={self._reason!r}>"
        return f"<Future {self._state.value}>"

    # -- continuations ----------------------------------------------------------

    def chain(self, on_success: Optional[Callable[[T], Any]] = None,
              on_failure: Optional[Callable[[Any], Any]] = None) -> 'Future':
        """
        Register continuations.

        Args:
            on_success: Called with the value on fulfillment
            on_failure: Called with the reason on rejection

        Returns:
            New future settled by the handler's outcome. A missing handler
            passes the outcome through unchanged.

        Example:
            future.chain(lambda x: x * 2).chain(lambda y: str(y))
        """
        downstream, resolve, reject = Future.with_resolvers()
        reaction = _Reaction(on_success, on_failure, resolve, reject)
        self._handled = True

        if self.is_ready():
            Reactor.current().queue_microtask(self._run_reaction, reaction)
        else:
            self._reactions.append(reaction)

        return downstream

    then = chain

    def catch(self, on_failure: Callable[[Any], Any]) -> 'Future':
        """
        Handle a rejection.

        Args:
            on_failure: Error handler that receives the reason

        Returns:
            New future with error handling
        """
        return self.chain(None, on_failure)

    # -- synchronous and async bridges --------------------------------------------

    def get(self) -> T:
        """
        Get the value, running the reactor until the future settles.

        Only use at the top level, outside continuations.

        Returns:
            The future's value

        Raises:
            The rejection reason (wrapped in RejectedError when it is not
            an exception), or FutureNotReadyError if nothing is left that
            could settle the future
        """
        self._handled = True
        if self.is_pending():
            Reactor.current().run_until_settled(self)

        if self._state is FutureState.FULFILLED:
            return self._value
        if self._state is FutureState.REJECTED:
            if isinstance(self._reason, BaseException):
                raise self._reason
            raise RejectedError(self._reason)

        raise FutureNotReadyError("Future not ready")

    def __await__(self):
        """
        Make future awaitable.

        The reactor is driven until the future settles, then the value is
        returned or the reason raised, as with ``get()``.
        """
        async def _await_impl():
            return self.get()

        return _await_impl().__await__()

    # -- constructors ----------------------------------------------------------------

    @staticmethod
    def with_resolvers() -> Tuple['Future', Resolve, Reject]:
        """
        Create a pending future along with its resolving functions.

        Returns:
            (future, resolve, reject)
        """
        captured: List[Callable] = []
        future: Future = Future(lambda resolve, reject: captured.extend((resolve, reject)))
        resolve, reject = captured
        return future, resolve, reject

    @staticmethod
    def resolved(value: Any = None) -> 'Future':
        """
        Normalize a value to a future.

        A Future is returned as is. Any other continuable is adopted by a
        new future; plain values produce an already-fulfilled future.
        """
        if isinstance(value, Future):
            return value
        return Future(lambda resolve, _: resolve(value))

    @staticmethod
    def rejected(reason: Any) -> 'Future':
        """Create a future that's already rejected."""
        return Future(lambda _, reject: reject(reason))

    # -- settlement --------------------------------------------------------------------

    def _resolvers(self) -> Tuple[Resolve, Reject]:
        """One-shot resolve/reject pair. The first call of either wins."""
        called = False

        def resolve(value: Any = None) -> None:
            nonlocal called
            if called:
                return
            called = True
            self._resolve_with(value)

        def reject(reason: Any = None) -> None:
            nonlocal called
            if called:
                return
            called = True
            self._reject(reason)

        return resolve, reject

    def _resolve_with(self, value: Any) -> None:
        if value is self:
            logger.debug(f"{self!r} resolved with itself")
            self._reject(CycleError())
            return

        try:
            operation = continuation_of(value)
        except Exception as e:
            self._reject(e)
            return

        if operation is None:
            self._fulfill(value)
            return

        if isinstance(value, Future) and value._adoption_reaches(self):
            logger.debug(f"{self!r} would adopt a future that already depends on it")
            self._reject(CycleError())
            return

        self._state = FutureState.SETTLING
        self._adopting = value if isinstance(value, Future) else None
        resolve, reject = self._resolvers()
        Reactor.current().queue_microtask(self._adopt, operation, resolve, reject)

    def _adoption_reaches(self, target: 'Future') -> bool:
        """Check if following adoption links from this future reaches target."""
        seen = set()
        node: Optional[Future] = self
        while node is not None and id(node) not in seen:
            if node is target:
                return True
            seen.add(id(node))
            node = node._adopting
        return False

    @staticmethod
    def _adopt(operation: Callable, resolve: Resolve, reject: Reject) -> None:
        try:
            operation(resolve, reject)
        except Exception as e:
            reject(e)

    def _fulfill(self, value: Any) -> None:
        if self.is_ready():
            return
        self._state = FutureState.FULFILLED
        self._value = value
        self._adopting = None
        self._schedule_reactions()

    def _reject(self, reason: Any) -> None:
        if self.is_ready():
            return
        self._state = FutureState.REJECTED
        self._reason = reason
        self._adopting = None
        if not self._handled:
            Reactor.current().track_rejection(self)
        self._schedule_reactions()

    def _schedule_reactions(self) -> None:
        reactions, self._reactions = self._reactions, []
        reactor = Reactor.current()
        for reaction in reactions:
            reactor.queue_microtask(self._run_reaction, reaction)

    def _run_reaction(self, reaction: _Reaction) -> None:
        if self._state is FutureState.FULFILLED:
            handler, payload, passthrough = reaction.on_success, self._value, reaction.resolve
        else:
            handler, payload, passthrough = reaction.on_failure, self._reason, reaction.reject

        if handler is None:
            passthrough(payload)
            return

        try:
            result = handler(payload)
        except Exception as e:
            reaction.reject(e)
            return

        reaction.resolve(result)
