"""Physical parameter bounds and starting point for the Weibull fit."""

from __future__ import annotations

from typing import Sequence

import numpy as np

from seu_weibull.exceptions import InsufficientNonZeroDataError
from seu_weibull.models import Observation, ParameterBounds, WeibullParameters

SIGMA_SAT_UPPER_FACTOR = 10.0
SIGMA_SAT_GUESS_FACTOR = 1.2
WIDTH_UPPER_FACTOR = 10.0
SHAPE_BOUNDS = (0.1, 10.0)
SHAPE_GUESS = 2.0
# LET_th stays this fraction below the lowest tested LET.
LET_EPSILON_FRACTION = 1e-3
# Open lower ends of sigma_sat and width, relative to their scale.
POSITIVE_FLOOR_FRACTION = 1e-6


def _arrays(observations: Sequence[Observation]) -> tuple[np.ndarray, np.ndarray]:
    lets = np.array([obs.let for obs in observations], dtype=float)
    xs = np.array([obs.cross_section for obs in observations], dtype=float)
    return lets, xs


def derive_bounds(observations: Sequence[Observation]) -> ParameterBounds:
    """Box constraints from the observations being fitted."""

    lets, xs = _arrays(observations)
    max_xs = float(xs.max()) if xs.size else 0.0
    if max_xs <= 0:
        raise InsufficientNonZeroDataError(
            "No observation has events; the saturation cross-section is unconstrained",
            stage="fit",
            values={"n_observations": len(observations)},
        )
    let_min = float(lets.min())
    let_range = float(lets.max() - let_min)
    if let_range <= 0:
        let_range = let_min

    return ParameterBounds(
        lower=(
            POSITIVE_FLOOR_FRACTION * max_xs,
            0.0,
            SHAPE_BOUNDS[0],
            POSITIVE_FLOOR_FRACTION * let_range,
        ),
        upper=(
            SIGMA_SAT_UPPER_FACTOR * max_xs,
            let_min * (1.0 - LET_EPSILON_FRACTION),
            SHAPE_BOUNDS[1],
            WIDTH_UPPER_FACTOR * let_range,
        ),
    )


def initial_guess(observations: Sequence[Observation], bounds: ParameterBounds) -> WeibullParameters:
    """Heuristic start: 1.2x max cross-section, one LET step below first events."""

    lets, xs = _arrays(observations)
    sorted_lets = np.sort(lets)
    step = float(np.diff(sorted_lets).min()) if sorted_lets.size > 1 else 0.0
    with_events = lets[xs > 0]
    first_event_let = float(with_events.min()) if with_events.size else float(sorted_lets[0])
    let_range = float(sorted_lets[-1] - sorted_lets[0]) or float(sorted_lets[0])

    guess = np.array(
        [
            SIGMA_SAT_GUESS_FACTOR * float(xs.max()),
            first_event_let - step,
            SHAPE_GUESS,
            let_range / 2.0,
        ]
    )
    return WeibullParameters.from_array(bounds.clip(guess))


__all__ = [
    "LET_EPSILON_FRACTION",
    "SHAPE_BOUNDS",
    "derive_bounds",
    "initial_guess",
]
