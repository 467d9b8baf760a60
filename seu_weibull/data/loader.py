"""Adapter from tidy LET/fluence/count tables to Observation sequences."""

from __future__ import annotations

from pathlib import Path
from typing import List

import numpy as np
import pandas as pd

from seu_weibull.data.validation import validate_frame, validate_observations
from seu_weibull.exceptions import SchemaError
from seu_weibull.models import Observation
from seu_weibull.utils.logging import get_logger

log = get_logger(__name__, component="data_loader")


def observations_from_frame(df: pd.DataFrame) -> List[Observation]:
    """Convert a DataFrame with ``let``, ``fluence`` and ``count`` columns."""

    frame = df.rename(columns=str.lower)
    validate_frame(frame)
    counts = frame["count"].to_numpy(dtype=float)
    if not np.all(np.isfinite(counts)) or np.any(counts != np.round(counts)):
        raise SchemaError("count column must contain whole numbers")
    frame = frame.sort_values("let", kind="mergesort")
    observations = [
        Observation(let=float(let), fluence=float(fluence), count=int(count))
        for let, fluence, count in zip(frame["let"], frame["fluence"], frame["count"])
    ]
    return validate_observations(observations)


def load_observations(path: Path | str) -> List[Observation]:
    """Read a CSV observation table from disk."""

    path = Path(path)
    if not path.exists():
        raise SchemaError(f"Observation file not found: {path}")
    df = pd.read_csv(path)
    observations = observations_from_frame(df)
    log.info("Loaded observations", extra={"stage": "load", "path": str(path), "rows": len(observations)})
    return observations


__all__ = ["load_observations", "observations_from_frame"]
