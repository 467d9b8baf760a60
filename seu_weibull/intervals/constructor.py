"""Confidence intervals for the four Weibull parameters."""

from __future__ import annotations

from typing import Optional, Tuple

import numpy as np

from seu_weibull.exceptions import DegenerateIntervalError
from seu_weibull.intervals.bca import bca_bounds
from seu_weibull.intervals.percentile import percentile_bounds
from seu_weibull.models import (
    PARAMETER_NAMES,
    BootstrapEnsemble,
    CIMethod,
    ConfidenceInterval,
    WeibullParameters,
)
from seu_weibull.utils.logging import get_logger

log = get_logger(__name__, component="intervals")


def construct_intervals(
    ensemble: BootstrapEnsemble,
    point: WeibullParameters,
    method: CIMethod,
    confidence_level: float = 0.95,
    *,
    jackknife: Optional[np.ndarray] = None,
) -> Tuple[ConfidenceInterval, ...]:
    """Build one interval per parameter.

    BCA intervals that turn out numerically degenerate fall back to the
    percentile interval for that parameter; the fallback is recorded on the
    interval and never raised.
    """

    values = ensemble.values()
    if values.shape[0] == 0:
        raise ValueError("cannot build intervals from an empty bootstrap ensemble")
    estimates = point.as_array()

    intervals = []
    for j, name in enumerate(PARAMETER_NAMES):
        column = values[:, j]
        method_used = method
        fallback_reason = None
        if method is CIMethod.BCA:
            jack = None if jackknife is None else jackknife[:, j]
            try:
                lower, upper = bca_bounds(column, estimates[j], confidence_level, jackknife=jack)
            except DegenerateIntervalError as exc:
                log.warning(
                    "BCA interval degenerate; falling back to percentile",
                    extra={"stage": "construct_ci", "parameter": name, "error": str(exc)},
                )
                lower, upper = percentile_bounds(column, confidence_level)
                method_used = CIMethod.PERCENTILE
                fallback_reason = str(exc)
        else:
            lower, upper = percentile_bounds(column, confidence_level)

        intervals.append(
            ConfidenceInterval(
                parameter=name,
                lower=lower,
                upper=upper,
                point_estimate=float(estimates[j]),
                method_used=method_used,
                confidence_level=confidence_level,
                fallback_reason=fallback_reason,
            )
        )
    return tuple(intervals)


__all__ = ["construct_intervals"]
