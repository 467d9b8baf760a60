"""Percentile bootstrap intervals."""

from __future__ import annotations

import numpy as np


def percentile_bounds(values: np.ndarray, confidence_level: float = 0.95) -> tuple[float, float]:
    """Return the alpha/2 and 1-alpha/2 quantiles of the replicate values."""
    values = np.asarray(values, dtype=float)
    if values.size == 0:
        raise ValueError("percentile interval requires at least one replicate")
    alpha = 1.0 - confidence_level
    lower, upper = np.quantile(values, [alpha / 2.0, 1.0 - alpha / 2.0], method="linear")
    return float(lower), float(upper)


__all__ = ["percentile_bounds"]
