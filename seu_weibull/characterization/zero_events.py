"""Separation of zero-count observations into upper-limit constraints."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence, Tuple

from seu_weibull.characterization.characterizer import N_WEIBULL_PARAMETERS
from seu_weibull.exceptions import InsufficientNonZeroDataError
from seu_weibull.models import Observation, WeibullParameters, ZeroUpperLimit


@dataclass(frozen=True)
class ZeroSplit:
    fit_observations: Tuple[Observation, ...]
    zero_limits: Tuple[ZeroUpperLimit, ...]

    @property
    def has_zeros(self) -> bool:
        return bool(self.zero_limits)


def split_zero_observations(observations: Sequence[Observation]) -> ZeroSplit:
    """Partition into fit-eligible counts and zero-count upper limits."""

    fit_obs = tuple(obs for obs in observations if obs.count > 0)
    zero_limits = tuple(ZeroUpperLimit.from_observation(obs) for obs in observations if obs.count == 0)
    if len(fit_obs) < N_WEIBULL_PARAMETERS:
        raise InsufficientNonZeroDataError(
            f"Only {len(fit_obs)} LET points with events remain after excluding zero counts",
            stage="handle_zeros",
            values={"n_nonzero": len(fit_obs), "n_zero": len(zero_limits), "required": N_WEIBULL_PARAMETERS},
        )
    return ZeroSplit(fit_observations=fit_obs, zero_limits=zero_limits)


def upper_limit_violations(params: WeibullParameters, zero_limits: Sequence[ZeroUpperLimit]) -> list[dict]:
    """Return zero-count points where the fitted curve exceeds the 3.7/fluence limit."""

    violations = []
    for limit in zero_limits:
        fitted = float(params.cross_section(limit.let))
        if fitted > limit.upper_limit:
            violations.append({"let": limit.let, "fitted": fitted, "upper_limit": limit.upper_limit})
    return violations


__all__ = ["ZeroSplit", "split_zero_observations", "upper_limit_violations"]
