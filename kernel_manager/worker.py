"""
Background execution of long-running operations.

Catalog builds, commits, checkout preparation and builds run on one worker
thread in submission order. Cancellation is cooperative: operations check
their token at safe points and stop there.
"""

from __future__ import annotations

import inspect
import threading
from collections.abc import Callable
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Any

from archinstall import debug, error


class CancellationToken:
    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()


def _accepts_cancel(fn: Callable[..., Any]) -> bool:
    try:
        return "cancel" in inspect.signature(fn).parameters
    except (TypeError, ValueError):
        return False


class BackgroundWorker:
    """Single worker thread for operations that must not overlap."""

    def __init__(self) -> None:
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="kernel-manager")
        self._current: CancellationToken | None = None
        self._lock = threading.Lock()

    def submit(self, fn: Callable[..., Any], *args: Any, on_done: Callable[[Future[Any]], None] | None = None) -> Future[Any]:
        """Queue fn to run after every previously submitted job.

        If fn takes a ``cancel`` keyword it receives a fresh CancellationToken.
        """
        token = CancellationToken()

        def run() -> Any:
            with self._lock:
                self._current = token
            try:
                if _accepts_cancel(fn):
                    return fn(*args, cancel=token)
                return fn(*args)
            except Exception as e:
                error(f"Background job {getattr(fn, '__name__', fn)} failed: {e}")
                raise
            finally:
                with self._lock:
                    self._current = None

        future = self._executor.submit(run)
        if on_done is not None:
            future.add_done_callback(on_done)
        return future

    def cancel_current(self) -> bool:
        """Request cancellation of the running job, if any."""
        with self._lock:
            if self._current is None:
                return False
            debug("Cancellation requested for running job")
            self._current.cancel()
            return True

    def shutdown(self, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait)

    def __enter__(self) -> BackgroundWorker:
        return self

    def __exit__(self, *exc: object) -> None:
        self.shutdown()
