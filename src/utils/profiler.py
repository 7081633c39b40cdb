"""Wall-clock timing for approximation runs.

Provides:
    - timer(): time one block, report through a sink or the log
    - TimerAccumulator: total / count / mean over many short blocks

The CLI wraps the whole run in timer(); the driver accumulates per-disk
timings and reports the mean in its closing INFO line.
"""

import logging
import time
from contextlib import contextmanager
from typing import Callable, Iterator, Optional

logger = logging.getLogger(__name__)


@contextmanager
def timer(name: str, sink: Optional[Callable[[str, float], None]] = None) -> Iterator[None]:
    """Time the enclosed block.

    Parameters
    ----------
    name : str
        Label passed to the sink (or logged)
    sink : Optional[Callable[[str, float], None]]
        Receives (name, elapsed_seconds); when None the timing is logged at
        DEBUG, never printed, because stdout may carry image data

    Examples
    --------
    >>> timings = {}
    >>> with timer("approximate", sink=timings.__setitem__):
    ...     approximate(source, canvas, 0.75, disks)
    """
    start = time.perf_counter()
    try:
        yield
    finally:
        elapsed = time.perf_counter() - start
        if sink is None:
            logger.debug(f"{name}: {elapsed:.3f} s")
        else:
            sink(name, elapsed)


class TimerAccumulator:
    """Sum repeated measurements of the same block."""

    def __init__(self, name: str):
        self.name = name
        self.total_time = 0.0
        self.count = 0

    @contextmanager
    def measure(self) -> Iterator[None]:
        start = time.perf_counter()
        try:
            yield
        finally:
            self.total_time += time.perf_counter() - start
            self.count += 1

    def mean(self) -> float:
        """Seconds per measurement (0.0 before the first one)."""
        if self.count == 0:
            return 0.0
        return self.total_time / self.count

    def reset(self) -> None:
        self.total_time, self.count = 0.0, 0

    def __repr__(self) -> str:
        return f"TimerAccumulator({self.name!r}, count={self.count}, mean={self.mean():.6f}s)"
