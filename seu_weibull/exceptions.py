"""Project-wide exception types."""

from __future__ import annotations

from typing import Any, Dict, Optional


class SeuWeibullError(Exception):
    """Base exception for all pipeline errors."""


class ConfigError(SeuWeibullError):
    """Raised when configuration is missing or malformed."""


class ConfigValidationError(ConfigError):
    """Raised when validation fails for supplied configuration."""


class SchemaError(SeuWeibullError):
    """Raised when observations violate the dataset invariants."""


class PipelineError(SeuWeibullError):
    """Abort raised by a mandatory pipeline stage.

    Carries the stage that raised, the numbers that triggered it and, where one
    exists, the recommended remediation.
    """

    default_remediation: Optional[str] = None

    def __init__(
        self,
        message: str,
        *,
        stage: Optional[str] = None,
        values: Optional[Dict[str, Any]] = None,
        remediation: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.stage = stage
        self.values: Dict[str, Any] = dict(values or {})
        self.remediation = remediation if remediation is not None else self.default_remediation

    def __str__(self) -> str:
        parts = []
        if self.stage:
            parts.append(f"[{self.stage}]")
        parts.append(self.message)
        if self.values:
            rendered = ", ".join(f"{k}={v}" for k, v in self.values.items())
            parts.append(f"({rendered})")
        if self.remediation:
            parts.append(f"Remediation: {self.remediation}")
        return " ".join(parts)


class InsufficientDataError(PipelineError):
    """Raised when fewer observations exist than free model parameters."""

    default_remediation = "collect at least 4 LET points before fitting"


class InsufficientNonZeroDataError(InsufficientDataError):
    """Raised when fewer than 4 observations remain after excluding zero counts."""

    default_remediation = "reduce to 3-parameter model or report as upper limit only"


class FitConvergenceError(PipelineError):
    """Raised when the optimizer exhausts every starting point without converging."""

    default_remediation = "inspect the data for outliers or reduce to 3-parameter model"


class BootstrapFailureRateError(PipelineError):
    """Raised when too many bootstrap replicates fail to refit."""

    default_remediation = "collect more events per LET point or report as upper limit only"


class DegenerateIntervalError(PipelineError):
    """Raised internally when BCA quantile levels are numerically degenerate."""


__all__ = [
    "BootstrapFailureRateError",
    "ConfigError",
    "ConfigValidationError",
    "DegenerateIntervalError",
    "FitConvergenceError",
    "InsufficientDataError",
    "InsufficientNonZeroDataError",
    "PipelineError",
    "SchemaError",
    "SeuWeibullError",
]
