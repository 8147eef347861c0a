"""
Deadline guard for completion callbacks.

The callback runs on a daemon thread; the caller waits at most `timeout`
seconds. When the deadline passes the guard stops waiting and returns an
incomplete result carrying a single ActiveHelp warning. The abandoned thread
is not killed; whatever it eventually returns is discarded.

Exceptions raised by the callback before the deadline are re-raised in the
caller, where the completion engine turns them into a help-only result.
"""
import functools
import logging
import threading

from .completion import CompletionResult
from .utils import Unset, rename

logger = logging.getLogger(__name__)

TIMEOUT = 2.0
MESSAGE = "⚠️  Completion timed out - results may be incomplete. Try a more specific prefix."


def with_timeout(callback=Unset, /, timeout=TIMEOUT):
    """
    Bound a completion callback's running time.

    Forms
    - with_timeout(callback, timeout=0.5) -> wrapped callback
    - @with_timeout(timeout=0.5) -> decorator

    Parameters
    - callback: Callable[[Context, str], CompletionResult | Iterable].
    - timeout: deadline in seconds (2 by default).
    """
    if not isinstance(timeout, int | float) or isinstance(timeout, bool) or timeout <= 0:
        raise ValueError("with_timeout() timeout must be a positive number")

    @rename("with_timeout")
    def decorator(callback, /):
        if not callable(callback):
            raise TypeError("@with_timeout() must be applied to a callable")

        @functools.wraps(callback)
        def wrapper(ctx, prefix, /):
            outcome = {}

            def target():
                try:
                    outcome["result"] = callback(ctx, prefix)
                except Exception as exception:
                    outcome["error"] = exception

            worker = threading.Thread(target=target, name=f"completion-{getattr(callback, "__name__", "callback")}", daemon=True)
            worker.start()
            worker.join(timeout)

            if worker.is_alive():
                logger.debug("completion callback %r exceeded %.3fs", callback, timeout)
                return CompletionResult(incomplete=True).help(MESSAGE)
            if "error" in outcome:
                raise outcome["error"]
            return CompletionResult.coerce(outcome.get("result"))

        return wrapper

    return decorator(callback) if callback is not Unset else decorator


__all__ = (
    "with_timeout",
)
