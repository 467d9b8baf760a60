"""Poisson log-likelihood of the Weibull cross-section model and its gradient."""

from __future__ import annotations

import numpy as np
from scipy.special import gammaln, xlogy

from seu_weibull.models import weibull_cross_section

LAMBDA_FLOOR = 1e-300


def expected_counts(params: np.ndarray, lets: np.ndarray, fluences: np.ndarray) -> np.ndarray:
    sigma_sat, let_th, shape, width = params
    return fluences * weibull_cross_section(lets, sigma_sat, let_th, shape, width)


def negative_log_likelihood(params: np.ndarray, lets: np.ndarray, fluences: np.ndarray, counts: np.ndarray) -> float:
    """-sum(N*log(lambda) - lambda), dropping the parameter-free log(N!) term."""
    lam = np.maximum(expected_counts(params, lets, fluences), LAMBDA_FLOOR)
    return float(np.sum(lam - xlogy(counts, lam)))


def full_log_likelihood(params: np.ndarray, lets: np.ndarray, fluences: np.ndarray, counts: np.ndarray) -> float:
    lam = np.maximum(expected_counts(params, lets, fluences), LAMBDA_FLOOR)
    return float(np.sum(xlogy(counts, lam) - lam - gammaln(counts + 1.0)))


def negative_log_likelihood_gradient(
    params: np.ndarray,
    lets: np.ndarray,
    fluences: np.ndarray,
    counts: np.ndarray,
) -> np.ndarray:
    """Analytic gradient of negative_log_likelihood w.r.t. (sigma_sat, let_th, shape, width)."""

    sigma_sat, let_th, shape, width = params
    grad = np.zeros(4)
    x = (lets - let_th) / width
    active = x > 0
    if not np.any(active):
        return grad

    xa = x[active]
    u = xa**shape
    survival = np.exp(-u)
    rise = -np.expm1(-u)
    phi = fluences[active]
    lam = np.maximum(phi * sigma_sat * rise, LAMBDA_FLOOR)
    # d(nll)/d(lambda)
    weight = 1.0 - counts[active] / lam
    dlam_du = phi * sigma_sat * survival

    grad[0] = np.sum(weight * phi * rise)
    grad[1] = np.sum(weight * dlam_du * (-shape * u / (xa * width)))
    grad[2] = np.sum(weight * dlam_du * u * np.log(xa))
    grad[3] = np.sum(weight * dlam_du * (-shape * u / width))
    return grad


def numerical_hessian(
    params: np.ndarray,
    lets: np.ndarray,
    fluences: np.ndarray,
    counts: np.ndarray,
    *,
    scale: np.ndarray,
    rel_step: float = 1e-5,
) -> np.ndarray:
    """Central finite differences of the analytic gradient, symmetrized."""

    k = len(params)
    hessian = np.zeros((k, k))
    for j in range(k):
        step = rel_step * max(abs(params[j]), 1e-3 * scale[j])
        forward = params.copy()
        backward = params.copy()
        forward[j] += step
        backward[j] -= step
        hessian[:, j] = (
            negative_log_likelihood_gradient(forward, lets, fluences, counts)
            - negative_log_likelihood_gradient(backward, lets, fluences, counts)
        ) / (2.0 * step)
    return 0.5 * (hessian + hessian.T)


__all__ = [
    "LAMBDA_FLOOR",
    "expected_counts",
    "full_log_likelihood",
    "negative_log_likelihood",
    "negative_log_likelihood_gradient",
    "numerical_hessian",
]
