"""Pipeline configuration schema and validation."""

from __future__ import annotations

from dataclasses import asdict, dataclass, fields
from typing import Optional

from seu_weibull.exceptions import ConfigValidationError
from seu_weibull.models import BootstrapVariant

DEFAULT_FULL_REPLICATES = 10_000
DEFAULT_CONSERVATIVE_REPLICATES = 20_000
DEFAULT_MAX_FAILURE_RATE = 0.10


@dataclass(frozen=True, slots=True)
class PipelineConfig:
    confidence_level: float = 0.95
    full_replicates: int = DEFAULT_FULL_REPLICATES
    conservative_replicates: int = DEFAULT_CONSERVATIVE_REPLICATES
    max_failure_rate: float = DEFAULT_MAX_FAILURE_RATE
    max_workers: Optional[int] = None
    batch_size: int = 250
    run_id: Optional[str] = None

    def __post_init__(self) -> None:
        if not 0.0 < self.confidence_level < 1.0:
            raise ConfigValidationError("confidence_level must be in (0, 1)")
        if self.full_replicates <= 0:
            raise ConfigValidationError("full_replicates must be > 0")
        if self.conservative_replicates <= 0:
            raise ConfigValidationError("conservative_replicates must be > 0")
        if not 0.0 <= self.max_failure_rate < 1.0:
            raise ConfigValidationError("max_failure_rate must be in [0, 1)")
        if self.max_workers is not None and self.max_workers <= 0:
            raise ConfigValidationError("max_workers must be positive when set")
        if self.batch_size <= 0:
            raise ConfigValidationError("batch_size must be > 0")

    def replicates_for(self, variant: BootstrapVariant) -> int:
        if variant is BootstrapVariant.FULL:
            return self.full_replicates
        return self.conservative_replicates

    @classmethod
    def from_dict(cls, data: dict) -> "PipelineConfig":
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigValidationError(f"Unknown config keys: {unknown}")
        return cls(**data)

    def to_dict(self) -> dict:
        return asdict(self)


__all__ = [
    "DEFAULT_CONSERVATIVE_REPLICATES",
    "DEFAULT_FULL_REPLICATES",
    "DEFAULT_MAX_FAILURE_RATE",
    "PipelineConfig",
]
