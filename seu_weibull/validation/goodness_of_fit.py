"""Poisson deviance goodness-of-fit test."""

from __future__ import annotations

from typing import Optional, Sequence

import numpy as np
from scipy import stats
from scipy.special import xlogy

from seu_weibull.characterization.characterizer import N_WEIBULL_PARAMETERS
from seu_weibull.decision.engine import GOF_MIN_DOF
from seu_weibull.fitting.likelihood import LAMBDA_FLOOR, expected_counts
from seu_weibull.models import (
    GoodnessOfFitResult,
    Observation,
    ValidationVerdict,
    VerdictStatus,
    WeibullParameters,
)

CHECK_NAME = "goodness_of_fit"
PASS_P_VALUE = 0.05
WARNING_P_VALUE = 0.01


def poisson_deviance(counts: np.ndarray, expected: np.ndarray) -> float:
    """D = 2*sum(N*ln(N/lambda) - (N - lambda)); N=0 terms contribute 2*lambda."""
    counts = np.asarray(counts, dtype=float)
    lam = np.maximum(np.asarray(expected, dtype=float), LAMBDA_FLOOR)
    return float(2.0 * np.sum(xlogy(counts, counts / lam) - (counts - lam)))


def classify_p_value(p_value: float) -> VerdictStatus:
    if p_value >= PASS_P_VALUE:
        return VerdictStatus.PASS
    if p_value >= WARNING_P_VALUE:
        return VerdictStatus.WARNING
    return VerdictStatus.FAIL


def not_applicable(reason: str, degrees_of_freedom: int = 0, **detail) -> GoodnessOfFitResult:
    return GoodnessOfFitResult(
        deviance=None,
        degrees_of_freedom=degrees_of_freedom,
        p_value=None,
        pearson_dispersion=None,
        verdict=ValidationVerdict(
            CHECK_NAME,
            VerdictStatus.NA,
            {"reason": reason, "degrees_of_freedom": degrees_of_freedom, **detail},
        ),
    )


def evaluate_goodness_of_fit(
    params: WeibullParameters,
    fit_observations: Sequence[Observation],
    *,
    run: bool = True,
    characterized_dof: Optional[int] = None,
) -> GoodnessOfFitResult:
    """Compare the deviance against chi-squared with (fitted rows - 4) dof.

    ``characterized_dof`` is the dof the method selection was based on (all
    rows); when zero-count rows were excluded the effective dof is smaller, and
    both figures are reported in the verdict detail.
    """

    dof = max(len(fit_observations) - N_WEIBULL_PARAMETERS, 0)
    context = {}
    if characterized_dof is not None:
        context = {
            "characterized_degrees_of_freedom": characterized_dof,
            "below_selection_minimum": dof < GOF_MIN_DOF,
        }
    if not run:
        return not_applicable("degrees of freedom below goodness-of-fit minimum", dof, **context)
    if dof < 1:
        return not_applicable("no residual degrees of freedom after excluding zero counts", dof, **context)

    lets = np.array([obs.let for obs in fit_observations], dtype=float)
    fluences = np.array([obs.fluence for obs in fit_observations], dtype=float)
    counts = np.array([obs.count for obs in fit_observations], dtype=float)
    lam = np.maximum(expected_counts(params.as_array(), lets, fluences), LAMBDA_FLOOR)

    deviance = poisson_deviance(counts, lam)
    p_value = float(stats.chi2.sf(deviance, dof))
    pearson = float(np.sum((counts - lam) ** 2 / lam) / dof)
    status = classify_p_value(p_value)
    verdict = ValidationVerdict(
        CHECK_NAME,
        status,
        {
            "deviance": deviance,
            "degrees_of_freedom": dof,
            "p_value": p_value,
            "pearson_dispersion": pearson,
            **context,
        },
    )
    return GoodnessOfFitResult(
        deviance=deviance,
        degrees_of_freedom=dof,
        p_value=p_value,
        pearson_dispersion=pearson,
        verdict=verdict,
    )


__all__ = ["classify_p_value", "not_applicable", "poisson_deviance", "evaluate_goodness_of_fit"]
