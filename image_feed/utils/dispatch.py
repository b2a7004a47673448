"""Execution contexts that completions are delivered on."""

import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from typing import Callable

logger = logging.getLogger(__name__)


class CallbackContext:
    """A single designated context that all completions run on."""

    def dispatch(self, work: Callable[[], None]) -> None:
        raise NotImplementedError


class ImmediateContext(CallbackContext):
    """Runs work inline on the calling thread."""

    def dispatch(self, work: Callable[[], None]) -> None:
        work()


class SerialContext(CallbackContext):
    """Runs work in submission order on one dedicated worker thread.

    This plays the role of a UI thread: every mutation of shared service
    state and every result delivered to callers happens on this thread.
    """

    def __init__(self, name: str = "image-feed-main"):
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix=name)
        self._lock = threading.Lock()
        self._closed = False

    def dispatch(self, work: Callable[[], None]) -> None:
        """Queue work; work arriving after shutdown() is dropped."""
        with self._lock:
            if self._closed:
                logger.debug("Dropping work dispatched after shutdown: %r", work)
                return
            future = self._executor.submit(work)
        future.add_done_callback(_log_failure)

    def shutdown(self, wait: bool = True) -> None:
        """Stop accepting work and optionally wait for queued work to finish."""
        with self._lock:
            self._closed = True
        self._executor.shutdown(wait=wait)


def _log_failure(future) -> None:
    if not future.cancelled() and future.exception() is not None:
        logger.error("Unhandled error in dispatched work", exc_info=future.exception())
