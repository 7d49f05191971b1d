"""Stage timing for the validation pipeline.

Each gate, and the validator around them, runs inside :func:`stage_timer`.
The yielded :class:`StageTimer` reads live while the block runs and is
frozen when the block exits, so a duration stored on a result after the
block matches the one that was logged.
"""

from __future__ import annotations

import time
from collections.abc import Iterator
from contextlib import contextmanager

from puregate.kernel.logging import get_logger

logger = get_logger(__name__)


class StageTimer:
    """Elapsed-time reading for one named pipeline stage.

    Parameters
    ----------
    stage : str
        Stage name used in log records (``"syntax"``, ``"purity"``, ...)

    Examples
    --------
    >>> with stage_timer("syntax") as t:
    ...     pass  # do work
    >>> t.stopped
    True
    """

    __slots__ = ("stage", "_start", "_end")

    def __init__(self, stage: str) -> None:
        self.stage = stage
        self._start = time.perf_counter()
        self._end: float | None = None

    @property
    def stopped(self) -> bool:
        return self._end is not None

    def stop(self) -> float:
        """Freeze the reading and return it; later calls keep the first value."""
        if self._end is None:
            self._end = time.perf_counter()
        return self.duration_ms

    @property
    def duration_ms(self) -> float:
        """Milliseconds from start to stop, or to now while still running."""
        end = self._end if self._end is not None else time.perf_counter()
        return (end - self._start) * 1000

    @property
    def duration_str(self) -> str:
        """Elapsed time formatted with 2 decimal places."""
        return f"{self.duration_ms:.2f}"

    def __repr__(self) -> str:
        state = "stopped" if self.stopped else "running"
        return f"StageTimer({self.stage!r}, {self.duration_str}ms, {state})"


@contextmanager
def stage_timer(stage: str) -> Iterator[StageTimer]:
    """Time one stage; the timer is stopped when the block exits, even on error."""
    timer = StageTimer(stage)
    try:
        yield timer
    finally:
        timer.stop()
        logger.trace("Stage {stage} took {ms}ms", stage=stage, ms=timer.duration_str)
