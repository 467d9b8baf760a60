"""Diagnostic statistics computed from the raw observation counts."""

from __future__ import annotations

import math
from typing import Sequence

import numpy as np

from seu_weibull.exceptions import InsufficientDataError
from seu_weibull.models import CharacterizationReport, Observation
from seu_weibull.utils.logging import get_logger

log = get_logger(__name__, component="characterization")

N_WEIBULL_PARAMETERS = 4


def characterize(observations: Sequence[Observation]) -> CharacterizationReport:
    """Summarize count dispersion, zero inflation and sample size.

    Raises InsufficientDataError when there are fewer observations than
    free Weibull parameters.
    """

    n = len(observations)
    if n < N_WEIBULL_PARAMETERS:
        raise InsufficientDataError(
            f"Insufficient data: need >= {N_WEIBULL_PARAMETERS} LET points, got {n}",
            stage="characterize",
            values={"n_observations": n, "required": N_WEIBULL_PARAMETERS},
        )

    counts = np.array([obs.count for obs in observations], dtype=float)
    mean_count = float(counts.mean())
    if mean_count > 0:
        dispersion_ratio: float | None = float(counts.var(ddof=1) / mean_count)
    else:
        dispersion_ratio = None

    n_zeros = int(np.count_nonzero(counts == 0))
    expected_zeros = n * math.exp(-mean_count)
    excess_zero_fraction = max((n_zeros - expected_zeros) / n, 0.0)

    report = CharacterizationReport(
        dispersion_ratio=dispersion_ratio,
        excess_zero_fraction=float(excess_zero_fraction),
        sample_to_parameter_ratio=n / N_WEIBULL_PARAMETERS,
        mean_count=mean_count,
        degrees_of_freedom=max(n - N_WEIBULL_PARAMETERS, 0),
        has_zero_observations=n_zeros > 0,
        n_observations=n,
        min_count=int(counts.min()),
    )
    log.debug(
        "Characterized dataset",
        extra={"stage": "characterize", "n": n, "zeros": n_zeros, "dispersion": dispersion_ratio},
    )
    return report


__all__ = ["N_WEIBULL_PARAMETERS", "characterize"]
