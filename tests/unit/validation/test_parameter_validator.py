import numpy as np
import pytest

from seu_weibull.models import (
    BootstrapEnsemble,
    BootstrapVariant,
    CIMethod,
    ConfidenceInterval,
    Observation,
    ParameterBounds,
    VerdictStatus,
    WeibullFit,
    WeibullParameters,
    ZeroUpperLimit,
)
from seu_weibull.validation import validate_parameters
from seu_weibull.validation.goodness_of_fit import evaluate_goodness_of_fit
from seu_weibull.validation.parameter_validator import (
    check_bound_interior,
    check_interval_fallbacks,
    check_interval_widths,
    check_plausibility,
    check_saturation,
    check_shape_width_correlation,
    check_threshold,
    check_upper_limits,
)

PASS = VerdictStatus.PASS
WARNING = VerdictStatus.WARNING
FAIL = VerdictStatus.FAIL
NA = VerdictStatus.NA

BOUNDS = ParameterBounds(lower=(1e-12, 0.0, 0.1, 0.01), upper=(1e-5, 2.997, 10.0, 600.0))
POINT = WeibullParameters(sigma_sat=1e-6, let_th=1.5, shape=2.0, width=25.0)


def _fit(params=POINT, bounds=BOUNDS):
    return WeibullFit(
        parameters=params,
        log_likelihood=-100.0,
        bounds=bounds,
        initial_guess=params,
        attempts=1,
        n_observations=10,
    )


def _ensemble(rows):
    return BootstrapEnsemble(
        replicates=tuple(WeibullParameters.from_array(r) for r in rows),
        n_failed=0,
        n_requested=len(rows),
        variant=BootstrapVariant.FULL,
        base_seed=0,
    )


def _independent_ensemble(n=200, seed=0):
    rng = np.random.default_rng(seed)
    rows = rng.normal(POINT.as_array(), [2e-8, 0.05, 0.05, 0.5], size=(n, 4))
    return _ensemble(rows)


def _ci(name, lower, upper, point, fallback=None):
    method = CIMethod.PERCENTILE if fallback else CIMethod.BCA
    return ConfidenceInterval(name, lower, upper, point, method, 0.95, fallback)


def _tight_intervals(params=POINT):
    return tuple(
        _ci(name, value * 0.9, value * 1.1, value) for name, value in params.to_dict().items()
    )


@pytest.fixture
def observations():
    return [
        Observation(let=float(let), fluence=1e8, count=int(round(1e8 * POINT.cross_section(let))))
        for let in (3, 6, 10, 15, 20, 30, 45, 60, 80, 100)
    ]


def test_interior_point_passes_bound_checks():
    verdicts = check_bound_interior(POINT, BOUNDS)
    assert [v.check_name for v in verdicts] == [
        "bound_interior[sigma_sat]",
        "bound_interior[let_th]",
        "bound_interior[shape]",
        "bound_interior[width]",
    ]
    assert all(v.status is PASS for v in verdicts)


def test_shape_at_upper_bound_fails():
    params = WeibullParameters(sigma_sat=1e-6, let_th=1.5, shape=9.9, width=25.0)
    verdicts = {v.check_name: v for v in check_bound_interior(params, BOUNDS)}
    assert verdicts["bound_interior[shape]"].status is FAIL
    assert verdicts["bound_interior[shape]"].detail["near_bound"] == ["upper"]
    assert verdicts["bound_interior[width]"].status is PASS


@pytest.mark.parametrize(
    "shape,expected",
    [(9.8999942, FAIL), (9.89995, FAIL), (9.85, PASS)],
)
def test_shape_on_edge_of_bound_band(shape, expected):
    params = WeibullParameters(sigma_sat=1e-6, let_th=1.5, shape=shape, width=25.0)
    verdicts = {v.check_name: v for v in check_bound_interior(params, BOUNDS)}
    assert verdicts["bound_interior[shape]"].status is expected


def test_zero_lower_bound_uses_range_tolerance():
    near_zero = WeibullParameters(sigma_sat=1e-6, let_th=0.02, shape=2.0, width=25.0)
    away = WeibullParameters(sigma_sat=1e-6, let_th=0.05, shape=2.0, width=25.0)
    assert {v.check_name: v for v in check_bound_interior(near_zero, BOUNDS)}["bound_interior[let_th]"].status is FAIL
    assert {v.check_name: v for v in check_bound_interior(away, BOUNDS)}["bound_interior[let_th]"].status is PASS


def test_saturation_must_reach_observed_cross_section(observations):
    assert check_saturation(POINT, observations).status is PASS
    low = WeibullParameters(sigma_sat=1e-7, let_th=1.5, shape=2.0, width=25.0)
    assert check_saturation(low, observations).status is FAIL


def test_threshold_must_sit_below_first_event(observations):
    assert check_threshold(POINT, observations).status is PASS
    high = WeibullParameters(sigma_sat=1e-6, let_th=7.0, shape=2.0, width=25.0)
    assert check_threshold(high, observations).status is FAIL


@pytest.mark.parametrize(
    "shape,width,expected_shape,expected_width",
    [
        (2.0, 25.0, PASS, PASS),
        (0.7, 150.0, WARNING, WARNING),
        (9.0, 0.1, FAIL, FAIL),
    ],
)
def test_plausibility_ranges(shape, width, expected_shape, expected_width):
    params = WeibullParameters(sigma_sat=1e-6, let_th=1.5, shape=shape, width=width)
    shape_verdict, width_verdict = check_plausibility(params)
    assert shape_verdict.status is expected_shape
    assert width_verdict.status is expected_width


def test_upper_limit_consistency():
    assert check_upper_limits(POINT, ()).status is NA
    below_threshold = ZeroUpperLimit(let=1.0, fluence=1e7, upper_limit=3.7e-7)
    assert check_upper_limits(POINT, (below_threshold,)).status is PASS
    violated = ZeroUpperLimit(let=60.0, fluence=1e9, upper_limit=3.7e-9)
    verdict = check_upper_limits(POINT, (below_threshold, violated))
    assert verdict.status is FAIL
    assert verdict.detail["violations"][0]["let"] == 60.0


def test_strong_shape_width_correlation_fails():
    rng = np.random.default_rng(3)
    shape = rng.normal(2.0, 0.1, 300)
    width = 25.0 + 40.0 * (shape - 2.0) + rng.normal(0.0, 0.1, 300)
    rows = np.column_stack([np.full(300, 1e-6), np.full(300, 1.5), shape, width])
    verdict = check_shape_width_correlation(_ensemble(rows))
    assert verdict.status is FAIL
    assert verdict.detail["rho"] > 0.9


def test_independent_shape_and_width_pass():
    verdict = check_shape_width_correlation(_independent_ensemble())
    assert verdict.status is PASS
    assert abs(verdict.detail["rho"]) < 0.9
    assert set(verdict.detail["pairwise"]) >= {"shape:width", "sigma_sat:let_th"}


def test_correlation_na_for_tiny_or_constant_ensembles():
    assert check_shape_width_correlation(_ensemble([POINT.as_array()] * 2)).status is NA
    assert check_shape_width_correlation(_ensemble([POINT.as_array()] * 10)).status is NA


@pytest.mark.parametrize(
    "lower,upper,expected",
    [(1.6, 2.4, PASS), (0.9, 3.1, WARNING), (0.0, 4.5, FAIL)],
)
def test_relative_interval_width(lower, upper, expected):
    (verdict,) = check_interval_widths([_ci("shape", lower, upper, 2.0)])
    assert verdict.check_name == "relative_ci_width[shape]"
    assert verdict.status is expected


def test_relative_interval_width_na_at_zero_estimate():
    (verdict,) = check_interval_widths([_ci("let_th", 0.0, 0.3, 0.0)])
    assert verdict.status is NA


def test_fallback_intervals_produce_warnings():
    intervals = [_ci("shape", 1.8, 2.2, 2.0), _ci("let_th", 1.0, 2.0, 1.5, fallback="BCA indices out of range")]
    verdicts = check_interval_fallbacks(intervals)
    assert len(verdicts) == 1
    assert verdicts[0].check_name == "bca_fallback[let_th]"
    assert verdicts[0].status is WARNING


def test_full_report_passes_for_consistent_fit(observations):
    fit_obs = [o for o in observations if o.count > 0]
    gof = evaluate_goodness_of_fit(POINT, fit_obs)
    report = validate_parameters(
        _fit(), _tight_intervals(), observations, _independent_ensemble(), goodness_of_fit=gof
    )
    names = [v.check_name for v in report.verdicts]
    assert names[0] == "parameter_positivity"
    assert names[-1] == "goodness_of_fit"
    assert "shape_width_correlation" in names
    assert report.by_name("upper_limit_consistency").status is NA
    assert report.aggregate_status is PASS


def test_aggregate_is_worst_verdict(observations):
    params = WeibullParameters(sigma_sat=1e-6, let_th=1.5, shape=0.7, width=25.0)
    report = validate_parameters(_fit(params), _tight_intervals(params), observations, _independent_ensemble())
    assert report.by_name("shape_plausibility").status is WARNING
    assert report.by_name("goodness_of_fit").status is NA
    assert report.aggregate_status in (WARNING, FAIL)
    assert report.aggregate_status.severity >= WARNING.severity


def test_report_serializes_statuses(observations):
    report = validate_parameters(_fit(), _tight_intervals(), observations, _independent_ensemble())
    payload = report.to_dict()
    assert payload["aggregate_status"] == report.aggregate_status.value
    assert all(v["status"] in {"PASS", "WARNING", "FAIL", "NA"} for v in payload["verdicts"])


def test_report_filters_by_status(observations):
    params = WeibullParameters(sigma_sat=1e-7, let_th=1.5, shape=2.0, width=25.0)
    report = validate_parameters(_fit(params), _tight_intervals(params), observations, _independent_ensemble())
    failing = [v.check_name for v in report.with_status(FAIL)]
    assert "saturation_covers_data" in failing
    assert report.aggregate_status is FAIL
