from __future__ import annotations

import math

import pytest

from retrosfx.errors import ParameterValidationError
from retrosfx.params import (
    DEFAULT_PARAMETERS,
    PARAMETER_NAMES,
    PARAMETER_SPECS,
    SoundParameters,
    parameter_json_schema,
    validate_parameters,
)


def test_schema_covers_the_eight_parameters() -> None:
    assert PARAMETER_NAMES == (
        "waveType",
        "frequency_start",
        "frequency_slide",
        "attackTime",
        "sustainTime",
        "decayTime",
        "vibratoDepth",
        "vibratoSpeed",
    )
    assert PARAMETER_SPECS["decayTime"].expected_range == (0.03, 1.0)
    assert PARAMETER_SPECS["frequency_slide"].expected_range == (-0.5, 0.5)


def test_defaults_are_within_range() -> None:
    for name, value in DEFAULT_PARAMETERS.items():
        spec = PARAMETER_SPECS[name]
        assert spec.low <= value <= spec.high


def test_validate_accepts_in_range_values() -> None:
    validated = validate_parameters({"frequency_start": 0.7, "decayTime": 0.03, "waveType": 3})
    assert validated == {"frequency_start": 0.7, "decayTime": 0.03, "waveType": 3}


def test_wave_type_accepts_integral_float() -> None:
    validated = validate_parameters({"waveType": 11.0})
    assert validated["waveType"] == 11
    assert isinstance(validated["waveType"], int)


def test_decay_below_floor_is_rejected_not_clamped() -> None:
    with pytest.raises(ParameterValidationError) as excinfo:
        validate_parameters({"decayTime": 0})
    assert excinfo.value.field == "decayTime"
    assert excinfo.value.value == 0
    assert excinfo.value.expected_range == (0.03, 1.0)


@pytest.mark.parametrize(
    ("name", "value"),
    [
        ("waveType", 12),
        ("waveType", 2.5),
        ("waveType", True),
        ("frequency_start", 1.01),
        ("frequency_slide", -0.6),
        ("vibratoSpeed", math.nan),
        ("attackTime", math.inf),
        ("sustainTime", "0.5"),
    ],
)
def test_validate_rejects_bad_values(name: str, value: object) -> None:
    with pytest.raises(ParameterValidationError) as excinfo:
        validate_parameters({name: value})
    assert excinfo.value.field == name


def test_first_violation_aborts_the_whole_set() -> None:
    with pytest.raises(ParameterValidationError) as excinfo:
        validate_parameters({"frequency_start": 0.5, "decayTime": 0.0, "attackTime": 2.0})
    assert excinfo.value.field == "decayTime"


def test_unknown_keys_pass_through() -> None:
    validated = validate_parameters({"punch": 0.4, "frequency_start": 0.2})
    assert validated == {"punch": 0.4, "frequency_start": 0.2}


def test_sound_parameters_from_native_drops_engine_extras() -> None:
    native = dict(DEFAULT_PARAMETERS, punch=0.3, masterVolume=0.5)
    params = SoundParameters.from_native(native)
    assert params.model_dump() == dict(DEFAULT_PARAMETERS)
    assert params.wave_name == "square"


def test_json_schema_advertises_ranges() -> None:
    schema = parameter_json_schema()
    decay = schema["properties"]["decayTime"]
    assert decay["minimum"] == 0.03
    assert decay["maximum"] == 1.0
    assert schema["properties"]["waveType"]["type"] == "integer"
