"""CLI input validation helpers."""

from __future__ import annotations

import json
from pathlib import Path

from seu_weibull.exceptions import ConfigValidationError
from seu_weibull.schema.run_config import PipelineConfig


def require_positive(name: str, value: int | float) -> None:
    if value <= 0:
        raise ConfigValidationError(f"{name} must be > 0")


def validate_fit_inputs(*, seed: int | None, max_workers: int | None = None) -> None:
    if seed is None:
        raise ConfigValidationError("seed is required for reproducibility")
    if seed < 0:
        raise ConfigValidationError("seed must be >= 0")
    if max_workers is not None:
        require_positive("max_workers", max_workers)


def load_config(path: Path | None, overrides: dict) -> PipelineConfig:
    """Merge an optional JSON config file with CLI overrides (CLI wins)."""

    data: dict = {}
    if path is not None:
        try:
            data = json.loads(Path(path).read_text())
        except (OSError, json.JSONDecodeError) as exc:
            raise ConfigValidationError(f"Cannot read config {path}: {exc}") from exc
        if not isinstance(data, dict):
            raise ConfigValidationError("config file must contain a JSON object")
    data.update({k: v for k, v in overrides.items() if v is not None})
    try:
        return PipelineConfig.from_dict(data)
    except TypeError as exc:
        raise ConfigValidationError(str(exc)) from exc


__all__ = ["load_config", "require_positive", "validate_fit_inputs"]
