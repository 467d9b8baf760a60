from __future__ import annotations

from typing import Callable, Sequence

import numpy as np
import pytest

from seu_weibull.models import Observation, WeibullParameters

TRUE_PARAMS = WeibullParameters(sigma_sat=1e-6, let_th=2.0, shape=1.8, width=25.0)
SMALL_LETS = [3.0, 5.0, 8.0, 12.0, 16.0, 20.0, 25.0, 30.0, 40.0, 50.0, 60.0, 80.0]


def build_observations(
    params: WeibullParameters,
    lets: Sequence[float],
    *,
    target_count: float = 200.0,
    rng: np.random.Generator | None = None,
) -> list[Observation]:
    """Fluence per LET chosen so the expected count equals target_count."""

    observations = []
    for let in lets:
        sigma = params.cross_section(let)
        fluence = target_count / sigma
        expected = sigma * fluence
        count = int(rng.poisson(expected)) if rng is not None else int(round(expected))
        observations.append(Observation(let=float(let), fluence=float(fluence), count=count))
    return observations


@pytest.fixture
def true_params() -> WeibullParameters:
    return TRUE_PARAMS


@pytest.fixture
def make_observations() -> Callable[..., list[Observation]]:
    return build_observations


@pytest.fixture
def small_observations() -> list[Observation]:
    return build_observations(TRUE_PARAMS, SMALL_LETS, rng=np.random.default_rng(11))


@pytest.fixture
def well_behaved_observations() -> list[Observation]:
    return build_observations(TRUE_PARAMS, np.arange(3.0, 63.0))


@pytest.fixture
def sparse_observations() -> list[Observation]:
    fluence = 1e7
    counts = {1.0: 0, 2.0: 0, 5.0: 5, 10.0: 27, 20.0: 70, 40.0: 98}
    return [Observation(let=let, fluence=fluence, count=count) for let, count in counts.items()]
