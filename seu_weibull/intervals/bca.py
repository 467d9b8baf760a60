"""Bias-corrected and accelerated (BCa) bootstrap intervals.

Uses the Efron-Tibshirani construction: bias correction ``z0`` from the share
of replicates below the point estimate (ties count half) and acceleration
``a = sum(d^3) / (6 * sum(d^2)^1.5)`` over jackknife deviations
``d = mean(theta_(-i)) - theta_(-i)``. Without jackknife values the
acceleration falls back to ``skewness / 6`` of the bootstrap sample.
"""

from __future__ import annotations

import math
from typing import Optional

import numpy as np
from scipy import stats

from seu_weibull.exceptions import DegenerateIntervalError


def bias_correction(values: np.ndarray, point_estimate: float) -> float:
    prop = (np.sum(values < point_estimate) + 0.5 * np.sum(values == point_estimate)) / values.size
    if prop <= 0.0 or prop >= 1.0:
        return math.copysign(math.inf, prop - 0.5)
    return float(stats.norm.ppf(prop))


def acceleration_from_jackknife(jackknife: np.ndarray) -> float:
    jack = np.asarray(jackknife, dtype=float)
    diff = jack.mean() - jack
    denominator = 6.0 * np.sum(diff**2) ** 1.5
    if denominator == 0.0 or not np.isfinite(denominator):
        return 0.0
    return float(np.sum(diff**3) / denominator)


def acceleration_from_bootstrap(values: np.ndarray) -> float:
    if values.size < 3 or np.ptp(values) == 0.0:
        return 0.0
    return float(stats.skew(values, bias=False) / 6.0)


def adjusted_levels(z0: float, acceleration: float, confidence_level: float) -> tuple[float, float]:
    """Return BCa quantile levels; raises DegenerateIntervalError if unusable."""

    alpha = 1.0 - confidence_level
    levels = []
    for z_quant in (stats.norm.ppf(alpha / 2.0), stats.norm.ppf(1.0 - alpha / 2.0)):
        shifted = z0 + z_quant
        denom = 1.0 - acceleration * shifted
        if not math.isfinite(shifted) or denom <= 0.0:
            raise DegenerateIntervalError(
                "BCA adjustment is degenerate",
                stage="construct_ci",
                values={"z0": z0, "acceleration": acceleration},
            )
        level = float(stats.norm.cdf(z0 + shifted / denom))
        if not 0.0 < level < 1.0:
            raise DegenerateIntervalError(
                "BCA quantile level outside (0, 1)",
                stage="construct_ci",
                values={"z0": z0, "acceleration": acceleration, "level": level},
            )
        levels.append(level)
    return levels[0], levels[1]


def bca_bounds(
    values: np.ndarray,
    point_estimate: float,
    confidence_level: float = 0.95,
    *,
    jackknife: Optional[np.ndarray] = None,
) -> tuple[float, float]:
    """BCa interval with one retry at zero acceleration.

    Raises DegenerateIntervalError when every attempt yields unusable levels.
    """

    values = np.asarray(values, dtype=float)
    if values.size == 0:
        raise ValueError("BCA interval requires at least one replicate")
    z0 = bias_correction(values, point_estimate)
    if jackknife is not None and np.asarray(jackknife).size > 1:
        acceleration = acceleration_from_jackknife(jackknife)
    else:
        acceleration = acceleration_from_bootstrap(values)

    reasons = []
    for accel in (acceleration, 0.0):
        try:
            lower_level, upper_level = adjusted_levels(z0, accel, confidence_level)
        except DegenerateIntervalError as exc:
            reasons.append(exc.message)
            continue
        lower, upper = np.quantile(values, [lower_level, upper_level], method="linear")
        return float(lower), float(upper)

    raise DegenerateIntervalError(
        "BCA indices out of range on all attempts",
        stage="construct_ci",
        values={"z0": z0, "acceleration": acceleration, "reasons": "; ".join(reasons)},
    )


__all__ = [
    "acceleration_from_bootstrap",
    "acceleration_from_jackknife",
    "adjusted_levels",
    "bca_bounds",
    "bias_correction",
]
