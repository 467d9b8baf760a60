"""Physical and statistical admissibility checks on a fitted Weibull curve.

Findings are returned as verdicts, never raised: a FAIL is a meaningful outcome
of the pipeline, not a software error.
"""

from __future__ import annotations

from typing import List, Optional, Sequence

import numpy as np

from seu_weibull.characterization.zero_events import upper_limit_violations
from seu_weibull.models import (
    PARAMETER_NAMES,
    BootstrapEnsemble,
    ConfidenceInterval,
    GoodnessOfFitResult,
    Observation,
    ParameterBounds,
    ValidationReport,
    ValidationVerdict,
    VerdictStatus,
    WeibullFit,
    WeibullParameters,
    ZeroUpperLimit,
)
from seu_weibull.validation.goodness_of_fit import not_applicable
from seu_weibull.validation.ranges import SHAPE_RANGE, WIDTH_RANGE

BOUND_PROXIMITY = 0.01
# Optimizer resolution at the edge of the 1% band.
BOUND_PROXIMITY_SLACK = 1e-3
MAX_SHAPE_WIDTH_CORRELATION = 0.9
CI_WIDTH_WARNING = 0.5
CI_WIDTH_FAIL = 1.0
MIN_REPLICATES_FOR_CORRELATION = 3

PASS = VerdictStatus.PASS
WARNING = VerdictStatus.WARNING
FAIL = VerdictStatus.FAIL
NA = VerdictStatus.NA


def check_positivity(params: WeibullParameters) -> ValidationVerdict:
    ok = params.sigma_sat > 0 and params.shape > 0 and params.width > 0 and params.let_th >= 0
    return ValidationVerdict("parameter_positivity", PASS if ok else FAIL, params.to_dict())


def _bound_tolerance(bound: float, lower: float, upper: float) -> float:
    scale = abs(bound) if bound != 0.0 else upper - lower
    return BOUND_PROXIMITY * (1.0 + BOUND_PROXIMITY_SLACK) * scale


def check_bound_interior(params: WeibullParameters, bounds: ParameterBounds) -> List[ValidationVerdict]:
    """FAIL for any parameter within 1% of an optimizer bound."""

    verdicts = []
    values = params.to_dict()
    for name in PARAMETER_NAMES:
        lower, upper = bounds.for_parameter(name)
        value = values[name]
        near = []
        if value - lower <= _bound_tolerance(lower, lower, upper):
            near.append("lower")
        if upper - value <= _bound_tolerance(upper, lower, upper):
            near.append("upper")
        verdicts.append(
            ValidationVerdict(
                f"bound_interior[{name}]",
                FAIL if near else PASS,
                {"value": value, "lower": lower, "upper": upper, "near_bound": near},
            )
        )
    return verdicts


def check_saturation(params: WeibullParameters, observations: Sequence[Observation]) -> ValidationVerdict:
    max_xs = max(obs.cross_section for obs in observations)
    status = PASS if params.sigma_sat >= max_xs else FAIL
    return ValidationVerdict(
        "saturation_covers_data", status, {"sigma_sat": params.sigma_sat, "max_cross_section": max_xs}
    )


def check_threshold(params: WeibullParameters, observations: Sequence[Observation]) -> ValidationVerdict:
    event_lets = [obs.let for obs in observations if obs.count > 0]
    if not event_lets:
        return ValidationVerdict("threshold_below_data", NA, {"reason": "no observation with events"})
    min_let = min(event_lets)
    status = PASS if params.let_th < min_let else FAIL
    return ValidationVerdict("threshold_below_data", status, {"let_th": params.let_th, "min_event_let": min_let})


def check_plausibility(params: WeibullParameters) -> List[ValidationVerdict]:
    return [
        ValidationVerdict(
            "shape_plausibility",
            SHAPE_RANGE.classify(params.shape),
            {"shape": params.shape, "typical": SHAPE_RANGE.typical, "tolerable": SHAPE_RANGE.tolerable},
        ),
        ValidationVerdict(
            "width_plausibility",
            WIDTH_RANGE.classify(params.width),
            {"width": params.width, "typical": WIDTH_RANGE.typical, "tolerable": WIDTH_RANGE.tolerable},
        ),
    ]


def check_upper_limits(params: WeibullParameters, zero_limits: Sequence[ZeroUpperLimit]) -> ValidationVerdict:
    if not zero_limits:
        return ValidationVerdict("upper_limit_consistency", NA, {"reason": "no zero-count observations"})
    violations = upper_limit_violations(params, zero_limits)
    return ValidationVerdict(
        "upper_limit_consistency",
        FAIL if violations else PASS,
        {"n_limits": len(zero_limits), "violations": violations},
    )


def check_shape_width_correlation(ensemble: BootstrapEnsemble) -> ValidationVerdict:
    if ensemble.n_success < MIN_REPLICATES_FOR_CORRELATION:
        return ValidationVerdict(
            "shape_width_correlation", NA, {"reason": "too few bootstrap replicates", "n": ensemble.n_success}
        )
    corr = ensemble.to_frame().corr()
    rho = corr.loc["shape", "width"]
    pairwise = {
        f"{a}:{b}": (None if np.isnan(corr.loc[a, b]) else float(corr.loc[a, b]))
        for i, a in enumerate(PARAMETER_NAMES)
        for b in PARAMETER_NAMES[i + 1 :]
    }
    if np.isnan(rho):
        return ValidationVerdict(
            "shape_width_correlation", NA, {"reason": "constant shape or width across replicates", "pairwise": pairwise}
        )
    status = FAIL if abs(rho) >= MAX_SHAPE_WIDTH_CORRELATION else PASS
    return ValidationVerdict("shape_width_correlation", status, {"rho": float(rho), "pairwise": pairwise})


def check_interval_widths(intervals: Sequence[ConfidenceInterval]) -> List[ValidationVerdict]:
    verdicts = []
    for ci in intervals:
        name = f"relative_ci_width[{ci.parameter}]"
        width = ci.relative_width
        if width is None:
            verdicts.append(ValidationVerdict(name, NA, {"reason": "point estimate is zero"}))
            continue
        if width > CI_WIDTH_FAIL:
            status = FAIL
        elif width > CI_WIDTH_WARNING:
            status = WARNING
        else:
            status = PASS
        verdicts.append(
            ValidationVerdict(
                name,
                status,
                {"relative_width": width, "lower": ci.lower, "upper": ci.upper, "method": ci.method_used.value},
            )
        )
    return verdicts


def check_interval_fallbacks(intervals: Sequence[ConfidenceInterval]) -> List[ValidationVerdict]:
    return [
        ValidationVerdict(f"bca_fallback[{ci.parameter}]", WARNING, {"reason": ci.fallback_reason})
        for ci in intervals
        if ci.fallback_reason is not None
    ]


def validate_parameters(
    fit: WeibullFit,
    intervals: Sequence[ConfidenceInterval],
    observations: Sequence[Observation],
    ensemble: BootstrapEnsemble,
    *,
    zero_limits: Sequence[ZeroUpperLimit] = (),
    goodness_of_fit: Optional[GoodnessOfFitResult] = None,
) -> ValidationReport:
    """Run every admissibility rule and return the ordered report."""

    params = fit.parameters
    verdicts: List[ValidationVerdict] = [check_positivity(params)]
    verdicts.extend(check_bound_interior(params, fit.bounds))
    verdicts.append(check_saturation(params, observations))
    verdicts.append(check_threshold(params, observations))
    verdicts.extend(check_plausibility(params))
    verdicts.append(check_upper_limits(params, zero_limits))
    verdicts.append(check_shape_width_correlation(ensemble))
    verdicts.extend(check_interval_widths(intervals))
    verdicts.extend(check_interval_fallbacks(intervals))
    gof = goodness_of_fit if goodness_of_fit is not None else not_applicable("goodness-of-fit not run")
    verdicts.append(gof.verdict)
    return ValidationReport(verdicts=tuple(verdicts))


__all__ = [
    "BOUND_PROXIMITY",
    "BOUND_PROXIMITY_SLACK",
    "CI_WIDTH_FAIL",
    "CI_WIDTH_WARNING",
    "MAX_SHAPE_WIDTH_CORRELATION",
    "check_bound_interior",
    "check_interval_fallbacks",
    "check_interval_widths",
    "check_plausibility",
    "check_positivity",
    "check_saturation",
    "check_shape_width_correlation",
    "check_threshold",
    "check_upper_limits",
    "validate_parameters",
]
