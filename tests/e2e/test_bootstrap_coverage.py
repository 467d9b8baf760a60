"""Repeated-sampling coverage of the bootstrap intervals."""

import numpy as np
import pytest

from seu_weibull import PipelineConfig, run_validation_pipeline
from seu_weibull.models import PARAMETER_NAMES, CIMethod

N_RUNS = 200
MIN_COVERAGE = 0.93
SMALL_LETS = [3.0, 5.0, 8.0, 12.0, 16.0, 20.0, 25.0, 30.0, 40.0, 50.0, 60.0, 80.0]
LARGE_LETS = list(np.arange(3.0, 63.0))


def _coverage(make_observations, true_params, lets, config, expected_method):
    rng = np.random.default_rng(2024)
    truth = true_params.to_dict()
    hits = {name: 0 for name in PARAMETER_NAMES}

    for run in range(N_RUNS):
        observations = make_observations(true_params, lets, rng=rng)
        result = run_validation_pipeline(observations, seed=run * 1000, config=config)
        assert result.method_selection.ci_method is expected_method
        for name in PARAMETER_NAMES:
            hits[name] += result.fit_result.interval(name).contains(truth[name])
    return {name: hits[name] / N_RUNS for name in PARAMETER_NAMES}


@pytest.mark.slow
def test_percentile_intervals_reach_nominal_coverage(make_observations, true_params):
    config = PipelineConfig(conservative_replicates=500, max_workers=None)
    coverage = _coverage(make_observations, true_params, SMALL_LETS, config, CIMethod.PERCENTILE)
    assert all(value >= MIN_COVERAGE for value in coverage.values()), coverage


@pytest.mark.slow
def test_bca_intervals_reach_nominal_coverage(make_observations, true_params):
    config = PipelineConfig(full_replicates=500, max_workers=None)
    coverage = _coverage(make_observations, true_params, LARGE_LETS, config, CIMethod.BCA)
    assert all(value >= MIN_COVERAGE for value in coverage.values()), coverage
