import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Optional

from uiflow.errors import WaitTimeoutError

LOGGER = logging.getLogger("uiflow.polling")


class Clock:
    """Monotonic milliseconds. Tests swap in a clock whose sleep advances time."""

    def now_ms(self) -> float:
        return time.monotonic() * 1000.0

    def sleep_ms(self, ms: float) -> None:
        time.sleep(ms / 1000.0)


@dataclass
class PollResult:
    value: Any
    elapsed_ms: float


def poll(
    predicate: Callable[[], Any],
    timeout_ms: float,
    interval_ms: float,
    clock: Optional[Clock] = None,
    description: str = "condition",
) -> PollResult:
    """
    Evaluates predicate every interval_ms until it returns a truthy value.
    The last evaluation happens exactly at the deadline, so a timeout is
    reported at elapsed >= timeout_ms and < timeout_ms + interval_ms.
    """
    if interval_ms <= 0:
        raise ValueError("interval_ms must be positive")
    clock = clock or Clock()
    start = clock.now_ms()
    attempts = 0
    while True:
        value = predicate()
        attempts += 1
        elapsed = clock.now_ms() - start
        if value:
            LOGGER.debug("%s met after %.0fms (%d polls)", description, elapsed, attempts)
            return PollResult(value, elapsed)
        if elapsed >= timeout_ms:
            LOGGER.debug("%s not met after %.0fms (%d polls)", description, elapsed, attempts)
            raise WaitTimeoutError(description, elapsed)
        clock.sleep_ms(min(interval_ms, timeout_ms - elapsed))
