"""Worker pool sizing."""

from __future__ import annotations

import math
import os

from seu_weibull.exceptions import ConfigValidationError


def clamp_workers(max_workers: int | None, n_tasks: int | None = None) -> int:
    """Return the worker count for the bootstrap pool.

    Defaults to the available cores; never exceeds the number of tasks.
    """

    cpu_count = os.cpu_count() or 1
    if max_workers is not None and max_workers <= 0:
        raise ConfigValidationError("max_workers must be > 0")
    workers = cpu_count if max_workers is None else min(max_workers, cpu_count)
    if n_tasks is not None:
        workers = min(workers, max(n_tasks, 1))
    return max(1, workers)


def split_batches(n_items: int, batch_size: int) -> list[range]:
    """Split ``range(n_items)`` into contiguous batches of at most ``batch_size``."""

    if batch_size <= 0:
        raise ConfigValidationError("batch_size must be > 0")
    n_batches = math.ceil(n_items / batch_size) if n_items else 0
    return [range(i * batch_size, min((i + 1) * batch_size, n_items)) for i in range(n_batches)]


__all__ = ["clamp_workers", "split_batches"]
