"""Bounded maximum-likelihood fitter for the 4-parameter Weibull cross-section."""

from __future__ import annotations

from typing import List, Optional, Sequence

import numpy as np
from scipy.optimize import minimize

from seu_weibull.exceptions import FitConvergenceError
from seu_weibull.fitting.bounds import derive_bounds, initial_guess
from seu_weibull.fitting.likelihood import (
    full_log_likelihood,
    negative_log_likelihood,
    negative_log_likelihood_gradient,
    numerical_hessian,
)
from seu_weibull.models import MLEVariant, Observation, ParameterBounds, WeibullFit, WeibullParameters
from seu_weibull.utils.logging import get_logger

log = get_logger(__name__, component="mle_fitter")

DEFAULT_FTOL = 1e-10
DEFAULT_GTOL = 1e-6
DEFAULT_MAXITER = 1000
MAX_ATTEMPTS = 3
_PENALTY = 1e300


class WeibullMLEFitter:
    """Maximize the Poisson log-likelihood with L-BFGS-B and bounded retries.

    The first attempt starts from the heuristic initial guess; each further
    attempt starts from a point drawn uniformly within the bounds using a
    generator seeded by ``seed``, so the fitter stays a pure function of its
    inputs.
    """

    name = "weibull_4p"
    k = 4

    def __init__(
        self,
        variant: MLEVariant = MLEVariant.SMALL_SAMPLE,
        *,
        tolerance_scale: float = 1.0,
        max_attempts: int = MAX_ATTEMPTS,
        maxiter: int = DEFAULT_MAXITER,
    ) -> None:
        if tolerance_scale <= 0:
            raise ValueError("tolerance_scale must be > 0")
        if max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")
        self.variant = variant
        self.ftol = DEFAULT_FTOL * tolerance_scale
        self.gtol = DEFAULT_GTOL * tolerance_scale
        self.max_attempts = max_attempts
        self.maxiter = maxiter

    @property
    def computes_covariance(self) -> bool:
        return self.variant is MLEVariant.STANDARD

    def fit(self, observations: Sequence[Observation], *, seed: int = 0) -> WeibullFit:
        """Fit the observations, deriving bounds and the starting point from them."""

        if self.variant is MLEVariant.WITH_ZEROS:
            observations = [obs for obs in observations if obs.count > 0]
        bounds = derive_bounds(observations)
        guess = initial_guess(observations, bounds)
        lets = np.array([obs.let for obs in observations], dtype=float)
        fluences = np.array([obs.fluence for obs in observations], dtype=float)
        counts = np.array([obs.count for obs in observations], dtype=float)
        return self.refit(lets, fluences, counts, bounds=bounds, guess=guess, seed=seed)

    def refit(
        self,
        lets: np.ndarray,
        fluences: np.ndarray,
        counts: np.ndarray,
        *,
        bounds: ParameterBounds,
        guess: WeibullParameters,
        seed: int = 0,
    ) -> WeibullFit:
        """Fit arbitrary counts with fixed bounds and starting point."""

        scale = np.asarray(bounds.upper, dtype=float)
        lower = np.asarray(bounds.lower, dtype=float)
        upper = scale
        norm_bounds = list(zip(lower / scale, upper / scale))

        def objective(theta: np.ndarray) -> tuple[float, np.ndarray]:
            params = theta * scale
            value = negative_log_likelihood(params, lets, fluences, counts)
            grad = negative_log_likelihood_gradient(params, lets, fluences, counts) * scale
            if not np.isfinite(value) or not np.all(np.isfinite(grad)):
                return _PENALTY, np.zeros_like(theta)
            return value, grad

        rng: Optional[np.random.Generator] = None
        reasons: List[str] = []
        for attempt in range(1, self.max_attempts + 1):
            if attempt == 1:
                start = guess.as_array()
            else:
                if rng is None:
                    rng = np.random.default_rng(seed)
                start = rng.uniform(lower, upper)
            try:
                res = minimize(
                    objective,
                    start / scale,
                    jac=True,
                    method="L-BFGS-B",
                    bounds=norm_bounds,
                    options={"maxiter": self.maxiter, "ftol": self.ftol, "gtol": self.gtol},
                )
            except (ValueError, ArithmeticError) as exc:
                reasons.append(f"attempt {attempt}: {exc}")
                continue

            if not self._converged(res, norm_bounds):
                reasons.append(f"attempt {attempt}: {res.message}")
                continue

            params = np.clip(res.x * scale, lower, upper)
            covariance = None
            if self.computes_covariance:
                covariance = self._covariance(params, lets, fluences, counts, scale)
            return WeibullFit(
                parameters=WeibullParameters.from_array(params),
                log_likelihood=full_log_likelihood(params, lets, fluences, counts),
                bounds=bounds,
                initial_guess=guess,
                attempts=attempt,
                n_observations=int(lets.size),
                covariance=covariance,
                failure_reasons=tuple(reasons),
                message=str(res.message),
            )

        raise FitConvergenceError(
            "Optimizer did not converge from any starting point",
            stage="fit",
            values={"attempts": self.max_attempts, "n_observations": int(lets.size), "reasons": "; ".join(reasons)},
        )

    def _converged(self, res, norm_bounds) -> bool:
        if not np.all(np.isfinite(res.x)) or not np.isfinite(res.fun) or res.fun >= _PENALTY:
            return False
        if res.success:
            return True
        # status 2: line search stalled; accept only at a stationary point
        if res.status == 2:
            pg = _projected_gradient(res.x, res.jac, norm_bounds)
            return bool(np.max(np.abs(pg)) <= np.sqrt(self.gtol) * max(1.0, abs(res.fun)))
        return False

    def _covariance(self, params, lets, fluences, counts, scale):
        hessian = numerical_hessian(params, lets, fluences, counts, scale=scale)
        try:
            cov = np.linalg.inv(hessian)
        except np.linalg.LinAlgError:
            log.warning("Singular Hessian; covariance unavailable", extra={"stage": "fit"})
            return None
        if not np.all(np.isfinite(cov)) or np.any(np.diag(cov) <= 0):
            log.warning("Hessian not positive definite; covariance unavailable", extra={"stage": "fit"})
            return None
        return tuple(tuple(float(v) for v in row) for row in cov)


def _projected_gradient(theta: np.ndarray, grad: np.ndarray, bounds) -> np.ndarray:
    pg = np.array(grad, dtype=float)
    for i, (lo, hi) in enumerate(bounds):
        if theta[i] <= lo and pg[i] > 0:
            pg[i] = 0.0
        elif theta[i] >= hi and pg[i] < 0:
            pg[i] = 0.0
    return pg


def fit_weibull(
    observations: Sequence[Observation],
    variant: MLEVariant = MLEVariant.SMALL_SAMPLE,
    *,
    seed: int = 0,
) -> WeibullFit:
    return WeibullMLEFitter(variant).fit(observations, seed=seed)


__all__ = ["MAX_ATTEMPTS", "WeibullMLEFitter", "fit_weibull"]
