"""Shared models for the SEU Weibull fit pipeline."""

from __future__ import annotations

import math
from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence, Tuple

import numpy as np
import pandas as pd

PARAMETER_NAMES: Tuple[str, ...] = ("sigma_sat", "let_th", "shape", "width")

# 95% Poisson upper limit for zero events observed.
ZERO_EVENT_UPPER_LIMIT_COUNTS = 3.7


class MLEVariant(str, Enum):
    STANDARD = "standard"
    SMALL_SAMPLE = "small_sample"
    WITH_ZEROS = "with_zeros"


class BootstrapVariant(str, Enum):
    FULL = "full"
    CONSERVATIVE = "conservative"


class CIMethod(str, Enum):
    BCA = "bca"
    PERCENTILE = "percentile"


class VerdictStatus(str, Enum):
    PASS = "PASS"
    WARNING = "WARNING"
    FAIL = "FAIL"
    NA = "NA"

    @property
    def severity(self) -> int:
        return _SEVERITY[self]


_SEVERITY = {
    VerdictStatus.NA: 0,
    VerdictStatus.PASS: 1,
    VerdictStatus.WARNING: 2,
    VerdictStatus.FAIL: 3,
}


@dataclass(frozen=True)
class Observation:
    """Events counted at one LET value for a given fluence."""

    let: float
    fluence: float
    count: int

    @property
    def cross_section(self) -> float:
        return self.count / self.fluence


@dataclass(frozen=True)
class ZeroUpperLimit:
    """Upper-limit constraint derived from a zero-count observation."""

    let: float
    fluence: float
    upper_limit: float

    @classmethod
    def from_observation(cls, obs: Observation) -> "ZeroUpperLimit":
        return cls(let=obs.let, fluence=obs.fluence, upper_limit=ZERO_EVENT_UPPER_LIMIT_COUNTS / obs.fluence)


@dataclass(frozen=True)
class CharacterizationReport:
    dispersion_ratio: Optional[float]
    excess_zero_fraction: float
    sample_to_parameter_ratio: float
    mean_count: float
    degrees_of_freedom: int
    has_zero_observations: bool
    n_observations: int
    min_count: int


@dataclass(frozen=True)
class MethodSelection:
    """Method choice made once per run and consumed by every later stage."""

    mle_variant: MLEVariant
    bootstrap_variant: BootstrapVariant
    ci_method: CIMethod
    run_goodness_of_fit: bool

    def to_dict(self) -> Dict[str, Any]:
        return {
            "mle_variant": self.mle_variant.value,
            "bootstrap_variant": self.bootstrap_variant.value,
            "ci_method": self.ci_method.value,
            "run_goodness_of_fit": self.run_goodness_of_fit,
        }


@dataclass(frozen=True)
class WeibullParameters:
    """Fitted 4-parameter Weibull cross-section curve."""

    sigma_sat: float
    let_th: float
    shape: float
    width: float

    def cross_section(self, let: float | np.ndarray) -> float | np.ndarray:
        """Evaluate sigma(LET); zero at or below the threshold."""
        return weibull_cross_section(let, self.sigma_sat, self.let_th, self.shape, self.width)

    def as_array(self) -> np.ndarray:
        return np.array([self.sigma_sat, self.let_th, self.shape, self.width], dtype=float)

    @classmethod
    def from_array(cls, values: Sequence[float]) -> "WeibullParameters":
        sigma_sat, let_th, shape, width = (float(v) for v in values)
        return cls(sigma_sat=sigma_sat, let_th=let_th, shape=shape, width=width)

    def to_dict(self) -> Dict[str, float]:
        return asdict(self)


def weibull_cross_section(
    let: float | np.ndarray,
    sigma_sat: float,
    let_th: float,
    shape: float,
    width: float,
) -> float | np.ndarray:
    scalar = np.isscalar(let)
    x = np.clip((np.asarray(let, dtype=float) - let_th) / width, 0.0, None)
    sigma = sigma_sat * -np.expm1(-(x**shape))
    return float(sigma) if scalar else sigma


@dataclass(frozen=True)
class ParameterBounds:
    """Optimizer box constraints, ordered as PARAMETER_NAMES."""

    lower: Tuple[float, float, float, float]
    upper: Tuple[float, float, float, float]

    def clip(self, values: np.ndarray) -> np.ndarray:
        return np.clip(values, np.asarray(self.lower), np.asarray(self.upper))

    def for_parameter(self, name: str) -> Tuple[float, float]:
        idx = PARAMETER_NAMES.index(name)
        return self.lower[idx], self.upper[idx]


@dataclass(frozen=True)
class WeibullFit:
    """Result of a single converged maximum-likelihood fit."""

    parameters: WeibullParameters
    log_likelihood: float
    bounds: ParameterBounds
    initial_guess: WeibullParameters
    attempts: int
    n_observations: int
    covariance: Optional[Tuple[Tuple[float, ...], ...]] = None
    failure_reasons: Tuple[str, ...] = ()
    message: Optional[str] = None


@dataclass(frozen=True)
class BootstrapEnsemble:
    """Refit parameters from successful replicates, in replicate-index order."""

    replicates: Tuple[WeibullParameters, ...]
    n_failed: int
    n_requested: int
    variant: BootstrapVariant
    base_seed: int

    @property
    def n_success(self) -> int:
        return len(self.replicates)

    @property
    def failure_rate(self) -> float:
        return self.n_failed / self.n_requested if self.n_requested else 0.0

    def values(self) -> np.ndarray:
        if not self.replicates:
            return np.empty((0, len(PARAMETER_NAMES)))
        return np.vstack([p.as_array() for p in self.replicates])

    def to_frame(self) -> pd.DataFrame:
        return pd.DataFrame(self.values(), columns=list(PARAMETER_NAMES))

    def summary(self) -> Dict[str, Any]:
        return {
            "variant": self.variant.value,
            "n_requested": self.n_requested,
            "n_success": self.n_success,
            "n_failed": self.n_failed,
            "failure_rate": self.failure_rate,
            "base_seed": self.base_seed,
        }


@dataclass(frozen=True)
class ConfidenceInterval:
    parameter: str
    lower: float
    upper: float
    point_estimate: float
    method_used: CIMethod
    confidence_level: float = 0.95
    fallback_reason: Optional[str] = None

    @property
    def relative_width(self) -> Optional[float]:
        """Half-width relative to the point estimate; None when undefined."""
        if self.point_estimate == 0 or not math.isfinite(self.point_estimate):
            return None
        return (self.upper - self.lower) / (2.0 * abs(self.point_estimate))

    def contains(self, value: float) -> bool:
        return self.lower <= value <= self.upper

    def to_dict(self) -> Dict[str, Any]:
        payload = asdict(self)
        payload["method_used"] = self.method_used.value
        return payload


@dataclass(frozen=True)
class ValidationVerdict:
    check_name: str
    status: VerdictStatus
    detail: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {"check_name": self.check_name, "status": self.status.value, "detail": self.detail}


@dataclass(frozen=True)
class ValidationReport:
    verdicts: Tuple[ValidationVerdict, ...]

    @property
    def aggregate_status(self) -> VerdictStatus:
        return worst_status(v.status for v in self.verdicts)

    def by_name(self, check_name: str) -> ValidationVerdict:
        for verdict in self.verdicts:
            if verdict.check_name == check_name:
                return verdict
        raise KeyError(check_name)

    def with_status(self, status: VerdictStatus) -> List[ValidationVerdict]:
        return [v for v in self.verdicts if v.status is status]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "aggregate_status": self.aggregate_status.value,
            "verdicts": [v.to_dict() for v in self.verdicts],
        }


def worst_status(statuses) -> VerdictStatus:
    worst = VerdictStatus.NA
    for status in statuses:
        if status.severity > worst.severity:
            worst = status
    return worst


@dataclass(frozen=True)
class GoodnessOfFitResult:
    deviance: Optional[float]
    degrees_of_freedom: int
    p_value: Optional[float]
    pearson_dispersion: Optional[float]
    verdict: ValidationVerdict


@dataclass(frozen=True)
class FitResult:
    """Point estimates bundled with one interval per Weibull parameter."""

    parameters: WeibullParameters
    intervals: Tuple[ConfidenceInterval, ...]
    log_likelihood: float
    zero_upper_limits: Tuple[ZeroUpperLimit, ...] = ()
    covariance: Optional[Tuple[Tuple[float, ...], ...]] = None

    def interval(self, parameter: str) -> ConfidenceInterval:
        for ci in self.intervals:
            if ci.parameter == parameter:
                return ci
        raise KeyError(parameter)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "parameters": self.parameters.to_dict(),
            "intervals": [ci.to_dict() for ci in self.intervals],
            "log_likelihood": self.log_likelihood,
            "zero_upper_limits": [asdict(z) for z in self.zero_upper_limits],
            "covariance": [list(row) for row in self.covariance] if self.covariance else None,
        }


__all__ = [
    "BootstrapEnsemble",
    "BootstrapVariant",
    "CIMethod",
    "CharacterizationReport",
    "ConfidenceInterval",
    "FitResult",
    "GoodnessOfFitResult",
    "MLEVariant",
    "MethodSelection",
    "Observation",
    "PARAMETER_NAMES",
    "ParameterBounds",
    "ValidationReport",
    "ValidationVerdict",
    "VerdictStatus",
    "WeibullFit",
    "WeibullParameters",
    "ZERO_EVENT_UPPER_LIMIT_COUNTS",
    "ZeroUpperLimit",
    "weibull_cross_section",
    "worst_status",
]
