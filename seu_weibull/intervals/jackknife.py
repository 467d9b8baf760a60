"""Leave-one-LET-out refits used for the BCa acceleration."""

from __future__ import annotations

from typing import Optional

import numpy as np

from seu_weibull.exceptions import FitConvergenceError
from seu_weibull.fitting.mle_fitter import WeibullMLEFitter
from seu_weibull.models import MLEVariant, WeibullFit
from seu_weibull.utils.logging import get_logger

log = get_logger(__name__, component="jackknife")


def jackknife_estimates(
    fit: WeibullFit,
    lets: np.ndarray,
    fluences: np.ndarray,
    counts: np.ndarray,
    *,
    seed: int = 0,
) -> Optional[np.ndarray]:
    """Return an (n, 4) array of leave-one-out estimates, or None if any refit fails."""

    lets = np.asarray(lets, dtype=float)
    fluences = np.asarray(fluences, dtype=float)
    counts = np.asarray(counts, dtype=float)
    n = lets.size
    if n <= fit.parameters.as_array().size:
        return None

    fitter = WeibullMLEFitter(MLEVariant.SMALL_SAMPLE)
    estimates = np.empty((n, 4))
    for i in range(n):
        keep = np.arange(n) != i
        try:
            refit = fitter.refit(
                lets[keep],
                fluences[keep],
                counts[keep],
                bounds=fit.bounds,
                guess=fit.parameters,
                seed=seed + i,
            )
        except FitConvergenceError as exc:
            log.warning(
                "Jackknife refit failed; using bootstrap skewness for acceleration",
                extra={"stage": "construct_ci", "left_out": i, "error": str(exc)},
            )
            return None
        estimates[i] = refit.parameters.as_array()
    return estimates


__all__ = ["jackknife_estimates"]
