"""Replicate failure bookkeeping for the bootstrap engine."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional, Tuple

from seu_weibull.exceptions import BootstrapFailureRateError
from seu_weibull.utils.logging import get_logger

log = get_logger(__name__, component="bootstrap_errors")


@dataclass(frozen=True)
class ReplicateOutcome:
    index: int
    params: Optional[Tuple[float, float, float, float]]
    error: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.params is not None


def record_replicate_failure(index: int, *, error: Exception | str, seed: int) -> ReplicateOutcome:
    """Log diagnostics for a failed replicate refit and return a discarded outcome."""

    message = str(error)
    log.debug(
        "Bootstrap replicate failed to refit",
        extra={"stage": "bootstrap", "replicate": index, "seed": seed, "error": message},
    )
    return ReplicateOutcome(index=index, params=None, error=message)


def max_allowed_failures(n_requested: int, max_failure_rate: float) -> int:
    return int(math.floor(max_failure_rate * n_requested))


def check_failure_rate(n_failed: int, n_requested: int, max_failure_rate: float, *, completed: int) -> None:
    """Raise once failures exceed the allowed share of requested replicates."""

    if n_failed > max_allowed_failures(n_requested, max_failure_rate):
        log.error(
            "Bootstrap failure rate exceeded",
            extra={"stage": "bootstrap", "n_failed": n_failed, "n_requested": n_requested, "completed": completed},
        )
        raise BootstrapFailureRateError(
            f"{n_failed} of {n_requested} bootstrap replicates failed to refit",
            stage="bootstrap",
            values={
                "n_failed": n_failed,
                "n_requested": n_requested,
                "completed": completed,
                "max_failure_rate": max_failure_rate,
            },
        )


__all__ = ["ReplicateOutcome", "check_failure_rate", "max_allowed_failures", "record_replicate_failure"]
