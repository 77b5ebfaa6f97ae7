"""
Reactor

Cooperative single-threaded scheduler behind every future.

Two queues feed the reactor:
- a high-priority FIFO of settlement and continuation jobs (microtasks)
- a lower-priority queue of externally scheduled completions (timers, I/O
  callbacks), ordered by virtual due time and then by insertion

The high-priority queue is always drained completely before the next
lower-priority callback runs.
"""

import heapq
import itertools
import logging
from collections import deque
from contextlib import contextmanager
from typing import Any, Callable, Deque, Iterator, List, Optional, Tuple

from ..config import ReactorConfig
from .exceptions import ReactorError

logger = logging.getLogger(__name__)

UnhandledRejectionHook = Callable[[Any, Any], None]


class Reactor:
    """
    Process-wide event queue manager.

    The active reactor is created lazily by ``current()`` or explicitly with
    ``initialize()``; ``shutdown()`` discards it together with its queues.
    """

    _instance: Optional['Reactor'] = None
    _unhandled_rejection_hook: Optional[UnhandledRejectionHook] = None

    def __init__(self, config: Optional[ReactorConfig] = None):
        self.config = config or ReactorConfig()
        self._microtasks: Deque[Tuple[Callable, tuple]] = deque()
        self._macrotasks: List[Tuple[float, int, Callable, tuple]] = []
        self._sequence = itertools.count()
        self._clock = 0.0
        self._rejections: List[Any] = []
        self._running = False
        self._tasks_run = 0

    # -- process-wide lifecycle ---------------------------------------------

    @classmethod
    def initialize(cls, config: Optional[ReactorConfig] = None) -> 'Reactor':
        """
        Install the process-wide reactor.

        Args:
            config: Reactor settings (defaults to ``ReactorConfig()``)

        Returns:
            The active reactor. An already initialized reactor is kept.
        """
        if cls._instance is None:
            cls._instance = cls(config)
            logger.debug("Reactor initialized")
        return cls._instance

    @classmethod
    def shutdown(cls) -> None:
        """Drop the process-wide reactor and any work still queued on it."""
        if cls._instance is None:
            return

        reactor = cls._instance
        dropped = len(reactor._microtasks) + len(reactor._macrotasks)
        if dropped:
            logger.debug(f"Reactor shut down with {dropped} queued tasks discarded")
        cls._instance = None

    @classmethod
    def current(cls) -> 'Reactor':
        """Get the active reactor, initializing it on first use."""
        if cls._instance is None:
            cls.initialize()
        return cls._instance

    @classmethod
    def is_initialized(cls) -> bool:
        """Check if a reactor is installed."""
        return cls._instance is not None

    @classmethod
    def set_unhandled_rejection_hook(cls, hook: Optional[UnhandledRejectionHook]) -> None:
        """
        Register the process-wide unhandled rejection hook.

        The hook is called as ``hook(future, reason)`` for each future that
        rejected with no reaction registered by the time the high-priority
        queue is drained. Pass None to restore the default logging report.
        """
        cls._unhandled_rejection_hook = hook

    # -- scheduling -----------------------------------------------------------

    def time(self) -> float:
        """Current virtual time in seconds."""
        return self._clock

    def queue_microtask(self, callback: Callable, *args: Any) -> None:
        """Append a job to the high-priority queue."""
        self._microtasks.append((callback, args))

    def call_soon(self, callback: Callable, *args: Any) -> None:
        """Schedule an external completion on the lower-priority queue."""
        self.call_later(0, callback, *args)

    def call_later(self, delay: float, callback: Callable, *args: Any) -> None:
        """
        Schedule an external completion after ``delay`` virtual seconds.

        Raises:
            ReactorError: If delay is negative
        """
        if delay < 0:
            raise ReactorError(f"Delay must be non-negative, got {delay}")
        entry = (self._clock + delay, next(self._sequence), callback, args)
        heapq.heappush(self._macrotasks, entry)

    def track_rejection(self, future: Any) -> None:
        """Remember a future that rejected before anyone observed it."""
        self._rejections.append(future)

    def has_pending_work(self) -> bool:
        """Check if either queue holds work."""
        return bool(self._microtasks or self._macrotasks)

    # -- running ----------------------------------------------------------------

    def run_microtasks(self) -> None:
        """Drain the high-priority queue, then report unhandled rejections."""
        with self._running_scope():
            self._drain_microtasks()

    def run_once(self) -> bool:
        """
        Drain microtasks, run one lower-priority callback, drain again.

        Returns:
            False if there was no lower-priority callback to run
        """
        with self._running_scope():
            return self._step()

    def run(self) -> None:
        """Run until both queues are empty."""
        with self._running_scope():
            while self._step():
                pass

    def run_until_settled(self, future: Any) -> bool:
        """
        Run until ``future`` settles or no work remains.

        Returns:
            True if the future is settled
        """
        with self._running_scope():
            self._drain_microtasks()
            while not future.is_ready():
                if not self._step():
                    break
        return future.is_ready()

    def _step(self) -> bool:
        self._drain_microtasks()
        if not self._macrotasks:
            return False

        due, _, callback, args = heapq.heappop(self._macrotasks)
        self._clock = max(self._clock, due)
        self._count_task()
        try:
            callback(*args)
        except Exception as e:
            logger.error(f"Scheduled callback {callback!r} raised: {e!r}", exc_info=True)

        self._drain_microtasks()
        return True

    def _drain_microtasks(self) -> None:
        while True:
            while self._microtasks:
                callback, args = self._microtasks.popleft()
                self._count_task()
                callback(*args)
            self._report_unhandled()
            if not self._microtasks:
                break

    def _count_task(self) -> None:
        self._tasks_run += 1
        limit = self.config.max_tasks
        if limit is not None and self._tasks_run > limit:
            raise ReactorError(f"Task budget of {limit} exceeded")

    def _report_unhandled(self) -> None:
        rejections, self._rejections = self._rejections, []
        for future in rejections:
            if future.is_handled():
                continue
            hook = Reactor._unhandled_rejection_hook
            if hook is not None:
                try:
                    hook(future, future.reason)
                except Exception as e:
                    logger.error(f"Unhandled rejection hook raised: {e!r}")
            elif self.config.report_unhandled_rejections:
                logger.log(
                    self.config.log_level,
                    f"Unhandled future rejection: {future.reason!r}"
                )

    @contextmanager
    def _running_scope(self) -> Iterator[None]:
        """Guard against re-entrant runs and reset the per-run task budget."""
        if self._running:
            raise ReactorError("Reactor is already running")
        self._running = True
        self._tasks_run = 0
        try:
            yield
        finally:
            self._running = False
