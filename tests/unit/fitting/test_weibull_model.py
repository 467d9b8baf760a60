import numpy as np
import pytest

from seu_weibull.models import WeibullParameters, weibull_cross_section


@pytest.fixture
def params():
    return WeibullParameters(sigma_sat=2e-7, let_th=4.0, shape=2.5, width=18.0)


def test_cross_section_is_zero_at_and_below_threshold(params):
    assert params.cross_section(4.0) == 0.0
    assert params.cross_section(1.0) == 0.0
    assert params.cross_section(0.0) == 0.0


def test_cross_section_rises_monotonically_to_saturation(params):
    lets = np.linspace(4.0, 400.0, 500)
    sigma = params.cross_section(lets)
    assert isinstance(sigma, np.ndarray)
    assert np.all(np.diff(sigma) >= 0.0)
    assert np.all(sigma <= params.sigma_sat)
    assert sigma[-1] == pytest.approx(params.sigma_sat, rel=1e-9)


def test_cross_section_matches_closed_form(params):
    let = 22.0
    expected = params.sigma_sat * (1.0 - np.exp(-(((let - params.let_th) / params.width) ** params.shape)))
    value = params.cross_section(let)
    assert isinstance(value, float)
    assert value == pytest.approx(expected, rel=1e-12)


def test_one_width_above_threshold_reaches_63_percent(params):
    value = weibull_cross_section(params.let_th + params.width, *params.as_array())
    assert value == pytest.approx(params.sigma_sat * (1.0 - np.exp(-1.0)))


def test_parameter_array_round_trip_preserves_order(params):
    arr = params.as_array()
    assert arr.tolist() == [2e-7, 4.0, 2.5, 18.0]
    assert WeibullParameters.from_array(arr) == params
