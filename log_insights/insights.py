"""Background summarization runner, decoupled from the numeric views."""

import logging
import threading
from concurrent.futures import ThreadPoolExecutor

from log_insights.summarizer import FAILURE_MARKUP

logger = logging.getLogger(__name__)

IDLE = "idle"
RUNNING = "running"
DONE = "done"
CANCELLED = "cancelled"


class InsightRunner:
    """Runs one summarization at a time on a worker thread.

    Submitting a new dataset supersedes the previous job: a queued job is
    cancelled outright, a running one has its result discarded.
    """

    def __init__(self, summarizer):
        self._summarizer = summarizer
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="insight")
        self._lock = threading.Lock()
        self._future = None
        self._version = None
        self._cancelled = False

    def submit(self, records, version):
        """Start summarizing `records` for dataset `version`.

        Returns False, doing nothing, if a newer version was already submitted.
        """
        with self._lock:
            if self._version is not None and version < self._version:
                logger.info("Ignoring summarization for stale dataset v%d", version)
                return False
            self._cancel_locked()
            self._cancelled = False
            self._version = version
            self._future = self._executor.submit(self._summarizer.summarize, records)
        logger.info("Submitted summarization for dataset v%d (%d records)", version, len(records))
        return True

    def cancel(self):
        """Cancel the current job. Returns True if there was one to cancel."""
        with self._lock:
            return self._cancel_locked()

    def _cancel_locked(self):
        if self._future is None or self._future.done() or self._cancelled:
            return False
        self._future.cancel()
        self._cancelled = True
        logger.info("Cancelled summarization for dataset v%s", self._version)
        return True

    def status(self):
        """Current job state as a dict: status, version and (when done) markup."""
        with self._lock:
            future, version, cancelled = self._future, self._version, self._cancelled

        if future is None:
            return {"status": IDLE, "version": None, "markup": None}
        if cancelled or future.cancelled():
            return {"status": CANCELLED, "version": version, "markup": None}
        if not future.done():
            return {"status": RUNNING, "version": version, "markup": None}
        exc = future.exception()
        if exc is not None:
            logger.error("Summarization for dataset v%s failed: %s", version, exc)
            return {"status": DONE, "version": version, "markup": FAILURE_MARKUP}
        return {"status": DONE, "version": version, "markup": future.result()}

    def wait(self, timeout=None):
        """Block until the current job finishes; returns status()."""
        with self._lock:
            future = self._future
        if future is not None and not future.cancelled():
            future.exception(timeout=timeout)
        return self.status()

    def shutdown(self):
        self._executor.shutdown(wait=False, cancel_futures=True)
