"""Goodness-of-fit and parameter admissibility checks."""

from seu_weibull.validation.goodness_of_fit import evaluate_goodness_of_fit, poisson_deviance
from seu_weibull.validation.parameter_validator import validate_parameters
from seu_weibull.validation.ranges import SHAPE_RANGE, WIDTH_RANGE

__all__ = [
    "SHAPE_RANGE",
    "WIDTH_RANGE",
    "evaluate_goodness_of_fit",
    "poisson_deviance",
    "validate_parameters",
]
