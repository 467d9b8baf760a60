import numpy as np
import pytest
from scipy.stats import poisson

from seu_weibull.fitting.likelihood import (
    expected_counts,
    full_log_likelihood,
    negative_log_likelihood,
    negative_log_likelihood_gradient,
    numerical_hessian,
)


def _arrays(observations):
    lets = np.array([o.let for o in observations], dtype=float)
    fluences = np.array([o.fluence for o in observations], dtype=float)
    counts = np.array([o.count for o in observations], dtype=float)
    return lets, fluences, counts


def _central_difference(params, lets, fluences, counts):
    grad = np.zeros(4)
    for j in range(4):
        step = 1e-6 * abs(params[j])
        up = params.copy()
        down = params.copy()
        up[j] += step
        down[j] -= step
        grad[j] = (
            negative_log_likelihood(up, lets, fluences, counts)
            - negative_log_likelihood(down, lets, fluences, counts)
        ) / (2.0 * step)
    return grad


def test_full_log_likelihood_matches_scipy_poisson(small_observations, true_params):
    lets, fluences, counts = _arrays(small_observations)
    params = true_params.as_array()
    lam = expected_counts(params, lets, fluences)
    expected = poisson.logpmf(counts, lam).sum()
    assert full_log_likelihood(params, lets, fluences, counts) == pytest.approx(expected, rel=1e-10)


def test_negative_log_likelihood_differs_from_full_by_constant(small_observations, true_params):
    lets, fluences, counts = _arrays(small_observations)
    a = true_params.as_array()
    b = a * np.array([1.1, 0.9, 1.05, 0.95])
    diff_a = full_log_likelihood(a, lets, fluences, counts) + negative_log_likelihood(a, lets, fluences, counts)
    diff_b = full_log_likelihood(b, lets, fluences, counts) + negative_log_likelihood(b, lets, fluences, counts)
    assert diff_a == pytest.approx(diff_b, rel=1e-9)


def test_analytic_gradient_matches_finite_differences(small_observations):
    lets, fluences, counts = _arrays(small_observations)
    params = np.array([1.3e-6, 1.5, 2.2, 20.0])
    analytic = negative_log_likelihood_gradient(params, lets, fluences, counts)
    numeric = _central_difference(params, lets, fluences, counts)
    np.testing.assert_allclose(analytic, numeric, rtol=1e-4, atol=1e-3)


def test_gradient_is_zero_when_every_let_below_threshold():
    lets = np.array([1.0, 2.0, 3.0])
    grad = negative_log_likelihood_gradient(
        np.array([1e-6, 5.0, 2.0, 10.0]), lets, np.full(3, 1e7), np.zeros(3)
    )
    assert np.all(grad == 0.0)


def test_zero_counts_below_threshold_do_not_produce_nan():
    lets = np.array([1.0, 10.0, 20.0, 30.0])
    fluences = np.full(4, 1e7)
    counts = np.array([0.0, 5.0, 9.0, 10.0])
    params = np.array([1e-6, 2.0, 2.0, 10.0])
    assert np.isfinite(negative_log_likelihood(params, lets, fluences, counts))
    assert np.isfinite(full_log_likelihood(params, lets, fluences, counts))


def test_numerical_hessian_is_symmetric_positive_definite_at_truth(well_behaved_observations, true_params):
    lets, fluences, counts = _arrays(well_behaved_observations)
    params = true_params.as_array()
    hessian = numerical_hessian(params, lets, fluences, counts, scale=params)
    np.testing.assert_allclose(hessian, hessian.T)
    scaled = hessian * np.outer(params, params)
    assert np.all(np.linalg.eigvalsh(scaled) > 0)
