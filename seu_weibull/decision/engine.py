"""Threshold table selecting fit, bootstrap and interval methods."""

from __future__ import annotations

from seu_weibull.models import (
    BootstrapVariant,
    CharacterizationReport,
    CIMethod,
    MethodSelection,
    MLEVariant,
)

LARGE_SAMPLE_MIN_N = 50
FULL_BOOTSTRAP_MIN_COUNT = 5
GOF_MIN_DOF = 3


def select_methods(report: CharacterizationReport, has_zeros: bool) -> MethodSelection:
    """Pick every method variant for the run from the characterization alone."""

    large_sample = report.n_observations >= LARGE_SAMPLE_MIN_N

    if has_zeros:
        mle_variant = MLEVariant.WITH_ZEROS
    elif large_sample:
        mle_variant = MLEVariant.STANDARD
    else:
        mle_variant = MLEVariant.SMALL_SAMPLE

    if large_sample and report.min_count >= FULL_BOOTSTRAP_MIN_COUNT:
        bootstrap_variant = BootstrapVariant.FULL
    else:
        bootstrap_variant = BootstrapVariant.CONSERVATIVE

    ci_method = CIMethod.BCA if large_sample and not has_zeros else CIMethod.PERCENTILE

    return MethodSelection(
        mle_variant=mle_variant,
        bootstrap_variant=bootstrap_variant,
        ci_method=ci_method,
        run_goodness_of_fit=report.degrees_of_freedom >= GOF_MIN_DOF,
    )


__all__ = ["FULL_BOOTSTRAP_MIN_COUNT", "GOF_MIN_DOF", "LARGE_SAMPLE_MIN_N", "select_methods"]
