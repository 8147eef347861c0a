"""
In-process TTL cache for dynamic completion results.

Completion callbacks that hit a network API or walk a large tree can be slow;
repeated TAB presses with the same command line within a short window should
not pay that cost twice. The cache keys entries on (command path, prefix,
positional arguments, flag snapshot) and keeps them for `ttl` seconds.

Concurrency
- get/put/sweep/clear take one lock, so a reader never observes a half-written
  entry and insert-or-replace is atomic.
- Expired entries are never returned: get() evicts them on access, put()
  sweeps opportunistically, and an optional daemon thread sweeps periodically.

Composition
    cache = CompletionCache(ttl=5.0)

    @cached(cache)
    @with_timeout(timeout=1.0)
    def pods(ctx, prefix):
        ...

The cache sits outside the timeout guard; results marked incomplete (timeouts)
are returned but never stored.
"""
import functools
import hashlib
import logging
import threading
import time

from .completion import CompletionResult
from .utils import Unset, rename

logger = logging.getLogger(__name__)

TTL = 5.0


def make_key(path, prefix, flags, /, args=()):
    """
    Build a deterministic cache key.

    The key hashes the command path, the prefix, the positional arguments typed
    so far and the flag snapshot sorted by name, so identical requests map to
    the same key whatever the order flags were given in.
    """
    parts = [*path, f"__prefix:{prefix}"]
    parts.extend(f"__arg:{arg}" for arg in args)
    parts.extend(f"{name}={value!r}" for name, value in sorted(dict(flags).items()))
    return hashlib.sha256("\x1f".join(parts).encode("utf-8")).hexdigest()


class CompletionCache:
    """
    Thread-safe TTL map from cache keys to CompletionResult objects.

    Parameters
    - ttl: lifetime of an entry in seconds (5 by default).
    - clock: monotonic time source; injectable for tests.
    """

    def __init__(self, ttl=TTL, /, *, clock=time.monotonic):
        if not isinstance(ttl, int | float) or isinstance(ttl, bool) or ttl <= 0:
            raise ValueError("completion cache ttl must be a positive number")
        if not callable(clock):
            raise TypeError("completion cache clock must be callable")
        self.ttl = ttl
        self._clock = clock
        self._entries = {}
        self._lock = threading.Lock()
        self._stopped = threading.Event()
        self._sweeper = None

    def get(self, key, /):
        """Return the live entry for `key`, or None when missing or expired."""
        with self._lock:
            try:
                value, expiry = self._entries[key]
            except KeyError:
                return None
            if self._clock() >= expiry:
                del self._entries[key]
                return None
            return value

    def put(self, key, value, /):
        """Store `value` until now + ttl, replacing any previous entry."""
        if not isinstance(value, CompletionResult):
            raise TypeError("completion cache values must be completion results")
        with self._lock:
            now = self._clock()
            self._entries[key] = (value, now + self.ttl)
            self._evict(now)

    def sweep(self):
        """Drop every expired entry; return how many were removed."""
        with self._lock:
            return self._evict(self._clock())

    def clear(self):
        with self._lock:
            self._entries.clear()

    def __len__(self):
        with self._lock:
            return len(self._entries)

    def __contains__(self, key):
        return self.get(key) is not None

    def _evict(self, now, /):
        expired = [key for key, (_, expiry) in self._entries.items() if now >= expiry]
        for key in expired:
            del self._entries[key]
        return len(expired)

    def start(self, interval=Unset, /):
        """
        Start a daemon thread sweeping every `interval` seconds (ttl by default).

        Useful for long-running completion servers; short-lived CLI processes
        do not need it.
        """
        if self._sweeper is not None:
            raise RuntimeError("completion cache sweeper is already running")
        interval = self.ttl if interval is Unset else interval
        self._stopped.clear()

        def sweeper():
            while not self._stopped.wait(interval):
                if removed := self.sweep():
                    logger.debug("swept %d expired completion entries", removed)

        self._sweeper = threading.Thread(target=sweeper, name="completion-cache-sweeper", daemon=True)
        self._sweeper.start()

    def stop(self):
        """Stop the sweeper thread (no-op when it is not running)."""
        if self._sweeper is None:
            return
        self._stopped.set()
        self._sweeper.join()
        self._sweeper = None

    def __repr__(self):
        return f"completion-cache(ttl={self.ttl!r}, entries={len(self)})"


def cached(cache, /):
    """
    Decorate a completion callback so results are served from `cache`.

    The wrapped callback keeps the (ctx, prefix) shape. Incomplete results are
    passed through without being stored.
    """
    if not isinstance(cache, CompletionCache):
        raise TypeError("cached() argument must be a completion cache")

    @rename("cached")
    def decorator(callback, /):
        if not callable(callback):
            raise TypeError("@cached() must be applied to a callable")

        @functools.wraps(callback)
        def wrapper(ctx, prefix, /):
            key = make_key(ctx.path, prefix, ctx.flags, args=ctx.args)
            if (result := cache.get(key)) is not None:
                logger.debug("completion cache hit for %r", ctx.path)
                return result
            logger.debug("completion cache miss for %r", ctx.path)
            result = CompletionResult.coerce(callback(ctx, prefix))
            if not result.incomplete:
                cache.put(key, result)
            return result

        return wrapper

    return decorator


__all__ = (
    "CompletionCache",
    "cached",
    "make_key",
)
