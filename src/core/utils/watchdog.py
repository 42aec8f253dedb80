"""Slow-operation watchdog.

Fires once when a block runs longer than its interval. It only reports;
the wrapped work is never cancelled.
"""

import os
import threading
from collections.abc import Callable
from types import TracebackType

from aws_lambda_powertools import Logger

from core.utils.constants import DEFAULT_SLOW_OPERATION_SECONDS, ENV_SLOW_OPERATION_SECONDS

logger = Logger(UTC=True)


def slow_operation_seconds() -> float:
    return float(os.getenv(ENV_SLOW_OPERATION_SECONDS, DEFAULT_SLOW_OPERATION_SECONDS))


class SlowOperationWatchdog:
    def __init__(
        self,
        operation: str,
        *,
        seconds: float | None = None,
        on_timeout: Callable[[str], None] | None = None,
    ) -> None:
        self.operation = operation
        self.seconds = seconds if seconds is not None else slow_operation_seconds()
        self._on_timeout = on_timeout
        self._timer: threading.Timer | None = None
        self.fired = threading.Event()

    def _fire(self) -> None:
        self.fired.set()
        logger.warning(
            "Operation is taking too long",
            extra={"operation": self.operation, "seconds": self.seconds},
        )
        if self._on_timeout is not None:
            self._on_timeout(self.operation)

    def __enter__(self) -> "SlowOperationWatchdog":
        self._timer = threading.Timer(self.seconds, self._fire)
        self._timer.daemon = True
        self._timer.start()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        if self._timer is not None:
            self._timer.cancel()
