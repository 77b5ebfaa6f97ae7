"""Future and scheduler exception hierarchy."""

from typing import Any, List, Optional


class PledgeError(Exception):
    """Base exception for all future and reactor errors."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class AdapterError(PledgeError):
    """Non-exception error value passed to an adapted callback."""

    def __init__(self, error: Any):
        self.error = error
        super().__init__(str(error))


class CycleError(PledgeError, TypeError):
    """Future was resolved with itself, directly or through its adoption path."""

    def __init__(self, message: str = "Chaining cycle detected for future"):
        super().__init__(message)


class AggregateError(PledgeError):
    """Every input failed. ``errors`` holds the reasons in settlement order."""

    def __init__(self, errors: List[Any], message: Optional[str] = None):
        self.errors = list(errors)
        super().__init__(message or f"All {len(self.errors)} candidates were rejected")


class NoCandidatesError(AggregateError):
    """A first-success combinator was given no inputs."""

    def __init__(self):
        super().__init__([], "No candidates to settle")


class RejectedError(PledgeError):
    """Raised when a future rejected with a reason that is not an exception."""

    def __init__(self, reason: Any):
        self.reason = reason
        super().__init__(f"Future rejected with {reason!r}")


class FutureNotReadyError(PledgeError):
    """Future is still pending and no scheduled work remains to settle it."""
    pass


class ReactorError(PledgeError):
    """Scheduler misuse (bad delay, task budget exceeded)."""
    pass
