"""Bootstrap confidence interval constructors."""

from seu_weibull.intervals.bca import bca_bounds
from seu_weibull.intervals.constructor import construct_intervals
from seu_weibull.intervals.jackknife import jackknife_estimates
from seu_weibull.intervals.percentile import percentile_bounds

__all__ = ["bca_bounds", "construct_intervals", "jackknife_estimates", "percentile_bounds"]
