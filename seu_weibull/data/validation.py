"""Dataset invariant checks for SEU test observations."""

from __future__ import annotations

import hashlib
import math
from typing import Iterable, List, Sequence

import pandas as pd

from seu_weibull.exceptions import SchemaError
from seu_weibull.models import Observation

REQUIRED_COLUMNS = ["let", "fluence", "count"]


def validate_observations(observations: Iterable[Observation]) -> List[Observation]:
    """Return the observations as a list after checking the dataset invariants.

    LET and fluence must be finite and positive, counts non-negative integers,
    and no LET value may appear twice.
    """

    checked: List[Observation] = []
    seen: set[float] = set()
    for idx, obs in enumerate(observations):
        if not isinstance(obs, Observation):
            raise SchemaError(f"Row {idx}: expected Observation, got {type(obs).__name__}")
        if not math.isfinite(obs.let) or obs.let <= 0:
            raise SchemaError(f"Row {idx}: LET must be > 0, got {obs.let}")
        if not math.isfinite(obs.fluence) or obs.fluence <= 0:
            raise SchemaError(f"Row {idx}: fluence must be > 0, got {obs.fluence}")
        if isinstance(obs.count, bool) or int(obs.count) != obs.count or obs.count < 0:
            raise SchemaError(f"Row {idx}: count must be a non-negative integer, got {obs.count}")
        if obs.let in seen:
            raise SchemaError(f"Row {idx}: duplicate LET value {obs.let}")
        seen.add(obs.let)
        checked.append(obs)
    return checked


def validate_frame(df: pd.DataFrame) -> None:
    missing = [c for c in REQUIRED_COLUMNS if c not in df.columns]
    if missing:
        raise SchemaError(f"Missing required columns: {missing}")
    if df[REQUIRED_COLUMNS].isna().any().any():
        raise SchemaError("Observation table contains missing values")
    if df["let"].duplicated().any():
        dupes = sorted(df.loc[df["let"].duplicated(), "let"].unique().tolist())
        raise SchemaError(f"Duplicate LET values: {dupes}")


def compute_fingerprint(observations: Sequence[Observation]) -> str:
    """Return SHA256 hash of the canonicalized observation table."""
    payload = "\n".join(f"{o.let!r},{o.fluence!r},{o.count}" for o in observations).encode()
    return hashlib.sha256(payload).hexdigest()


__all__ = ["REQUIRED_COLUMNS", "compute_fingerprint", "validate_frame", "validate_observations"]
