"""
Polling helpers for asynchronous EC2 resources.

Snapshots and volumes are created asynchronously; these helpers poll a
status function until the resource is ready, fails, or a deadline passes.
"""

import threading
import time
from concurrent.futures import FIRST_EXCEPTION, ThreadPoolExecutor, wait
from typing import Callable, Iterable, List, Optional

from fleet_ops.utils.exceptions import PollError, PollTimeout
from fleet_ops.utils.logger import setup_logger

logger = setup_logger(__name__, "waiters.log")


def wait_until(
    check: Callable[[], str],
    resource_id: str,
    success: str,
    failures: Iterable[str] = ("error",),
    interval: float = 15,
    timeout: Optional[float] = None,
    sleep: Callable[[float], None] = time.sleep,
    clock: Callable[[], float] = time.monotonic,
    cancel: Optional[threading.Event] = None,
) -> str:
    """
    Poll ``check`` until it returns ``success``.

    Args:
        check: Returns the current status of the resource
        resource_id: Identifier used in log lines and errors
        success: Status that ends the wait
        failures: Statuses that abort the wait with PollError
        interval: Seconds to sleep between checks
        timeout: Seconds before giving up with PollTimeout (None waits forever)
        cancel: Event checked after every sleep; when set the wait stops early

    Returns:
        The last observed status. This is ``success`` unless ``cancel`` was set.
    """
    failures = set(failures)
    deadline = None if timeout is None else clock() + timeout

    while True:
        status = check()
        logger.debug(f"{resource_id} status: {status}")

        if status == success:
            return status
        if status in failures:
            logger.error(f"{resource_id} reached failure state '{status}'")
            raise PollError(resource_id, status)

        if deadline is not None:
            remaining = deadline - clock()
            if remaining <= 0:
                raise PollTimeout(resource_id, timeout, status)
            sleep(min(interval, remaining))
        else:
            sleep(interval)

        if cancel is not None and cancel.is_set():
            logger.debug(f"Stopped waiting for {resource_id}")
            return status


def wait_for_all(
    waits: List[Callable[[Optional[threading.Event]], str]], parallel: bool = True
) -> List[str]:
    """
    Run several waits and block until every one is ready or one fails.

    Each wait receives a cancel event (or None when run sequentially). With
    ``parallel`` each wait gets its own worker thread; on the first failure the
    remaining waits are cancelled and the failure is re-raised.
    """
    if not waits:
        return []

    if not parallel or len(waits) == 1:
        return [run(None) for run in waits]

    cancel = threading.Event()
    with ThreadPoolExecutor(max_workers=len(waits)) as executor:
        futures = [executor.submit(run, cancel) for run in waits]
        done, _ = wait(futures, return_when=FIRST_EXCEPTION)
        failed = [future for future in futures if future in done and future.exception()]
        if failed:
            cancel.set()
            raise failed[0].exception()
    return [future.result() for future in futures]
