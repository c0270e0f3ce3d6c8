"""Reporter wrapper that keeps slow observers off the worker threads.

Events are pushed onto an unbounded queue and replayed, in order, on a
single dispatcher thread. ``close()`` drains the queue before returning.
"""

import logging
import queue
import threading
from typing import Any, Optional

from garage_cli.reporters.base import Reporter

logger = logging.getLogger(__name__)

_STOP = object()


class ReporterError(Exception):
    """Raised from ``close()`` when the wrapped reporter failed."""


class BufferedReporter(Reporter):
    """Forward events to another reporter from a background thread.

    The first exception raised by the wrapped reporter is re-raised from
    ``close()`` as a ``ReporterError``; later events are still delivered.

    Args:
        inner: Reporter that receives the events
    """

    def __init__(self, inner: Reporter):
        self.inner = inner
        self._queue: "queue.Queue[Any]" = queue.Queue()
        self._error: Optional[BaseException] = None
        self._thread = threading.Thread(
            target=self._dispatch, name="garage-reporter", daemon=True
        )
        self._closed = False
        self._thread.start()

    def _dispatch(self) -> None:
        while True:
            event = self._queue.get()
            if event is _STOP:
                return
            name, args = event
            try:
                getattr(self.inner, name)(*args)
            except Exception as e:
                logger.debug("Reporter %s.%s failed", type(self.inner).__name__, name, exc_info=True)
                if self._error is None:
                    self._error = e

    def _emit(self, name: str, *args: Any) -> None:
        if self._closed:
            raise RuntimeError("Reporter is closed")
        self._queue.put((name, args))

    def close(self) -> None:
        """Deliver every pending event and stop the dispatcher thread."""
        if self._closed:
            return
        self._closed = True
        self._queue.put(_STOP)
        self._thread.join()
        if self._error is not None:
            raise ReporterError(str(self._error)) from self._error

    def __enter__(self) -> "BufferedReporter":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> bool:
        if exc_type is None:
            self.close()
        else:
            # Don't mask the original exception with a reporter error
            try:
                self.close()
            except ReporterError:
                logger.debug("Reporter error while unwinding", exc_info=True)
        return False

    def on_command_start(self, command, item_count):
        self._emit("on_command_start", command, item_count)

    def on_item_start(self, item):
        self._emit("on_item_start", item)

    def on_item_progress(self, item, advance, total):
        self._emit("on_item_progress", item, advance, total)

    def on_item_complete(self, outcome):
        self._emit("on_item_complete", outcome)

    def on_dry_run(self, objects):
        self._emit("on_dry_run", list(objects))

    def on_listing(self, listing):
        self._emit("on_listing", listing)

    def on_presigned(self, url):
        self._emit("on_presigned", url)

    def on_command_complete(self, result):
        self._emit("on_command_complete", result)
