"""Dataset characterization and zero-count handling."""

from seu_weibull.characterization.characterizer import N_WEIBULL_PARAMETERS, characterize
from seu_weibull.characterization.zero_events import (
    ZeroSplit,
    split_zero_observations,
    upper_limit_violations,
)

__all__ = [
    "N_WEIBULL_PARAMETERS",
    "ZeroSplit",
    "characterize",
    "split_zero_observations",
    "upper_limit_violations",
]
