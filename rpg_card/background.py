"""Fire-and-forget work that must not delay the HTTP response."""

from __future__ import annotations

import threading
from concurrent.futures import Future, ThreadPoolExecutor, wait

from .log import get_logger

logger = get_logger(__name__)

MAX_WORKERS = 4

# ThreadPoolExecutor joins its workers at interpreter exit, so queued writes still finish.
_executor = ThreadPoolExecutor(max_workers=MAX_WORKERS, thread_name_prefix="rpg-card-bg")
_pending: set[Future] = set()
_lock = threading.Lock()


def _on_done(future: Future) -> None:
    with _lock:
        _pending.discard(future)
    if future.cancelled():
        return
    exc = future.exception()
    if exc is not None:
        logger.warning("background_task_failed", error=repr(exc))


def submit(fn, *args, **kwargs) -> Future:
    """Run `fn` off the request path. Callers are not expected to wait on the result."""
    future = _executor.submit(fn, *args, **kwargs)
    with _lock:
        _pending.add(future)
    future.add_done_callback(_on_done)
    return future


def drain(timeout: float | None = 5.0) -> bool:
    """Wait for everything submitted so far. Returns False if the timeout elapsed first."""
    with _lock:
        futures = list(_pending)
    if not futures:
        return True
    _, not_done = wait(futures, timeout=timeout)
    return not not_done
