"""
Callback Adapter

Lifts error-first callback APIs into futures.
"""

import logging
from functools import wraps
from typing import Any, Callable

from .exceptions import AdapterError
from .future import Future

logger = logging.getLogger(__name__)


def adapt(fn: Callable[..., Any]) -> Callable[..., Future]:
    """
    Wrap an error-first callback function so it returns a future.

    ``fn`` is called as ``fn(*args, callback, **kwargs)`` and must eventually
    call ``callback(error, result)``. A non-None error rejects the future
    (error values that are not exceptions are wrapped in AdapterError);
    otherwise the future fulfills with ``result``. Only the first callback
    invocation counts.

    Args:
        fn: Callback-style function

    Returns:
        Function with the same arguments (minus the callback) returning a Future

    Example:
        def do_async(value, callback):
            reactor.call_later(0.05, callback, None, value)

        read = adapt(do_async)
        read(1).chain(print)
    """
    name = getattr(fn, "__name__", repr(fn))

    @wraps(fn)
    def adapted(*args: Any, **kwargs: Any) -> Future:
        def executor(resolve, reject):
            calls = 0

            def callback(error: Any = None, result: Any = None) -> None:
                nonlocal calls
                calls += 1
                if calls > 1:
                    logger.debug(f"{name} invoked its callback {calls} times; ignoring")
                    return

                if error is None:
                    resolve(result)
                elif isinstance(error, BaseException):
                    reject(error)
                else:
                    reject(AdapterError(error))

            fn(*args, callback, **kwargs)

        return Future(executor)

    return adapted
