"""Bounded worker pool for running independent work items.

A fixed set of worker threads drains a shared queue. Each worker takes
the next item only after its current one has finished, so no more than
``limit`` operations are ever in flight. Failures are recorded per item
and never stop the other workers.
"""

import logging
import threading
import time
from collections import deque
from typing import Any, Callable, Iterable, Optional

from garage_cli.models import OutcomeStatus, TransferOutcome, WorkItem

logger = logging.getLogger(__name__)


def _notify(reporter: Optional[Any], event: str, *args: Any) -> None:
    """Send an event to the reporter; observer errors never reach the worker."""
    if not reporter:
        return
    try:
        getattr(reporter, event)(*args)
    except Exception:
        logger.warning("Reporter %s failed", event, exc_info=True)


def _execute(
    item: WorkItem,
    op: Callable[[WorkItem], Any],
    reporter: Optional[Any],
) -> TransferOutcome:
    """Run one item and turn its result or exception into an outcome."""
    _notify(reporter, "on_item_start", item)

    start_time = time.time()
    try:
        op(item)
    except Exception as e:
        logger.debug("Item %s failed", item.key, exc_info=True)
        outcome = TransferOutcome(
            item=item,
            status=OutcomeStatus.FAILURE,
            error_message=str(e) or type(e).__name__,
            duration_seconds=time.time() - start_time,
        )
    else:
        outcome = TransferOutcome(
            item=item,
            status=OutcomeStatus.SUCCESS,
            duration_seconds=time.time() - start_time,
        )

    return outcome


def run_bounded(
    items: Iterable[WorkItem],
    limit: int,
    op: Callable[[WorkItem], Any],
    reporter: Optional[Any] = None,
) -> list[TransferOutcome]:
    """Run op over every item with at most ``limit`` running at once.

    Args:
        items: Work items to process
        limit: Number of worker threads (hard ceiling on concurrency)
        op: Callable run once per item; an exception marks the item failed
        reporter: Optional reporter receiving item start/complete events

    Returns:
        One TransferOutcome per input item, in completion order.

    Raises:
        ValueError: If limit is less than 1.
    """
    if limit < 1:
        raise ValueError(f"limit must be at least 1, got {limit}")

    pending = deque(items)
    outcomes: list[TransferOutcome] = []
    lock = threading.Lock()

    logger.debug("Running %d items with %d workers", len(pending), limit)

    def worker() -> None:
        while True:
            with lock:
                if not pending:
                    return
                item = pending.popleft()

            outcome = _execute(item, op, reporter)

            with lock:
                outcomes.append(outcome)

            _notify(reporter, "on_item_complete", outcome)

    threads = [
        threading.Thread(target=worker, name=f"garage-worker-{i}", daemon=True)
        for i in range(limit)
    ]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    return outcomes
