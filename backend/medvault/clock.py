"""Wall clock in whole epoch seconds."""

import time
from typing import Callable

Clock = Callable[[], int]


def now() -> int:
    """Current time as seconds since the epoch, fraction truncated."""
    return int(time.time())
