import pandas as pd
import pytest

from seu_weibull.data.loader import load_observations, observations_from_frame
from seu_weibull.data.validation import compute_fingerprint, validate_observations
from seu_weibull.exceptions import SchemaError
from seu_weibull.models import Observation


def test_load_observations_from_csv(tmp_path):
    path = tmp_path / "seu.csv"
    pd.DataFrame(
        {"LET": [10.0, 2.5, 5.0], "Fluence": [1e7, 1e7, 2e7], "Count": [40, 0, 12]}
    ).to_csv(path, index=False)

    observations = load_observations(path)
    assert [o.let for o in observations] == [2.5, 5.0, 10.0]
    assert observations[1] == Observation(let=5.0, fluence=2e7, count=12)
    assert isinstance(observations[0].count, int)


def test_missing_file_raises_schema_error(tmp_path):
    with pytest.raises(SchemaError):
        load_observations(tmp_path / "absent.csv")


def test_missing_column_raises():
    with pytest.raises(SchemaError, match="Missing required columns"):
        observations_from_frame(pd.DataFrame({"let": [1.0], "fluence": [1e7]}))


def test_fractional_counts_rejected():
    frame = pd.DataFrame({"let": [1.0, 2.0], "fluence": [1e7, 1e7], "count": [1.5, 2.0]})
    with pytest.raises(SchemaError, match="whole numbers"):
        observations_from_frame(frame)


def test_duplicate_let_in_frame_rejected():
    frame = pd.DataFrame({"let": [1.0, 1.0], "fluence": [1e7, 1e7], "count": [1, 2]})
    with pytest.raises(SchemaError, match="Duplicate LET"):
        observations_from_frame(frame)


@pytest.mark.parametrize(
    "observation",
    [
        Observation(let=0.0, fluence=1e7, count=1),
        Observation(let=float("nan"), fluence=1e7, count=1),
        Observation(let=1.0, fluence=0.0, count=1),
        Observation(let=1.0, fluence=1e7, count=-1),
        Observation(let=1.0, fluence=1e7, count=2.5),
    ],
)
def test_invalid_observations_rejected(observation):
    with pytest.raises(SchemaError):
        validate_observations([observation])


def test_duplicate_let_observations_rejected():
    with pytest.raises(SchemaError, match="duplicate LET"):
        validate_observations([Observation(1.0, 1e7, 1), Observation(1.0, 2e7, 3)])


def test_fingerprint_depends_on_content():
    a = [Observation(1.0, 1e7, 1), Observation(2.0, 1e7, 3)]
    b = [Observation(1.0, 1e7, 1), Observation(2.0, 1e7, 4)]
    assert compute_fingerprint(a) == compute_fingerprint(list(a))
    assert compute_fingerprint(a) != compute_fingerprint(b)
