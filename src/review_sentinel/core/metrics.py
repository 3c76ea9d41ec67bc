"""Timing and memory measurement for a single analysis run.

One ``RunTimer`` per run; nothing here is shared across runs.
"""

import time
from collections.abc import Iterator
from contextlib import contextmanager

import psutil
from loguru import logger


def get_current_memory_mb() -> float:
    """Resident memory of the current process in megabytes."""
    return psutil.Process().memory_info().rss / (1024 * 1024)


class RunTimer:
    """Records wall-clock phase durations and the memory delta of a run.

    Example:
        timer = RunTimer()
        with timer.phase("scan"):
            ...
        timer.elapsed_ms("scan")
    """

    def __init__(self) -> None:
        self._start = time.perf_counter()
        self._start_memory_mb = get_current_memory_mb()
        self._phases: dict[str, float] = {}

    @contextmanager
    def phase(self, name: str) -> Iterator[None]:
        """Time the enclosed block; the duration is kept even if it raises."""
        start = time.perf_counter()
        try:
            yield
        finally:
            duration_ms = (time.perf_counter() - start) * 1000
            self._phases[name] = self._phases.get(name, 0.0) + duration_ms
            logger.debug(f"{name} phase took {duration_ms:.1f}ms")

    def elapsed_ms(self, name: str | None = None) -> float:
        """Duration of a phase, or total time since construction if ``name`` is None."""
        if name is None:
            return (time.perf_counter() - self._start) * 1000
        return self._phases.get(name, 0.0)

    def memory_delta_mb(self) -> float:
        return get_current_memory_mb() - self._start_memory_mb
