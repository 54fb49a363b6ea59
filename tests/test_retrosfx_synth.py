from __future__ import annotations

import base64
import io
import math

import numpy as np
import pytest
import soundfile as sf

from retrosfx.errors import (
    ParameterValidationError,
    RenderError,
    UnknownPresetError,
    UnsupportedParameterError,
)
from retrosfx.params import DEFAULT_PARAMETERS, PARAMETER_NAMES, WAVE_NAMES, SoundParameters
from retrosfx.rng import LcgRandom
from retrosfx.synth import NATIVE_PARAMETERS, PRESET_ROUTINES, ChipSynth, expected_length


class _CountingSource:
    def __init__(self, value: float) -> None:
        self.value = value
        self.calls = 0

    def random(self) -> float:
        self.calls += 1
        return self.value


def test_defaults_match_parameter_schema() -> None:
    engine = ChipSynth()
    params = engine.parameters()
    assert {name: params[name] for name in PARAMETER_NAMES} == dict(DEFAULT_PARAMETERS)
    assert isinstance(params["waveType"], int)


def test_native_schema_is_a_superset() -> None:
    assert set(PARAMETER_NAMES) < set(NATIVE_PARAMETERS)
    engine = ChipSynth()
    for name in ("punch", "squareDuty", "lpFilterCutoff", "bitCrush"):
        assert engine.supports(name)
    assert not engine.supports("reverb")


def test_unknown_preset_tag_is_rejected() -> None:
    with pytest.raises(UnknownPresetError):
        ChipSynth().apply_preset("warp_drive")


def test_set_parameter_rejects_unknown_names_and_non_numbers() -> None:
    engine = ChipSynth()
    with pytest.raises(UnsupportedParameterError):
        engine.set_parameter("reverb", 0.5)
    with pytest.raises(ParameterValidationError):
        engine.set_parameter("punch", "loud")


@pytest.mark.parametrize("tag", sorted(PRESET_ROUTINES))
def test_presets_render_deterministically(tag: str) -> None:
    first = ChipSynth()
    first.apply_preset(tag)
    second = ChipSynth()
    second.apply_preset(tag)

    a = first.render()
    b = second.render()

    assert a.num_samples > 0
    assert np.array_equal(a.samples, b.samples)
    assert SoundParameters.from_native(first.parameters())


@pytest.mark.parametrize("wave", range(len(WAVE_NAMES)))
def test_every_wave_type_renders_bounded_audio(wave: int) -> None:
    engine = ChipSynth()
    engine.set_parameter("waveType", wave)
    engine.set_parameter("sustainTime", 0.1)
    engine.set_parameter("decayTime", 0.1)
    sound = engine.render()
    assert sound.num_samples == expected_length(engine.parameters())
    assert np.all(np.isfinite(sound.samples))
    assert float(np.max(np.abs(sound.samples))) <= 1.0
    assert float(np.max(np.abs(sound.samples))) > 0.0


def test_render_rejects_out_of_range_state() -> None:
    engine = ChipSynth()
    engine.set_parameter("decayTime", 0.0)
    with pytest.raises(RenderError):
        engine.render()

    engine.reset_to_defaults()
    engine.set_parameter("punch", 5.0)
    with pytest.raises(RenderError):
        engine.render()

    engine.reset_to_defaults()
    engine.set_parameter("waveType", 2.5)
    with pytest.raises(RenderError):
        engine.render()

    engine.reset_to_defaults()
    engine.set_parameter("vibratoSpeed", math.nan)
    with pytest.raises(RenderError):
        engine.render()


def test_render_respects_duration_limit() -> None:
    engine = ChipSynth(max_seconds=0.5)
    engine.set_parameter("sustainTime", 1.0)
    engine.set_parameter("decayTime", 1.0)
    with pytest.raises(RenderError, match="limit"):
        engine.render()


def test_sample_rate_scales_length() -> None:
    full = ChipSynth(sample_rate=44100).render()
    half = ChipSynth(sample_rate=22050).render()
    assert full.sample_rate == 44100
    assert half.sample_rate == 22050
    assert abs(full.duration - half.duration) < 0.01


def test_encode_produces_pcm16_wav() -> None:
    engine = ChipSynth()
    engine.apply_preset("pickup_coin")
    sound = engine.render()
    encoded = engine.encode(sound)

    assert encoded.mime_type == "audio/wav"
    assert encoded.data_uri.startswith("data:audio/wav;base64,")
    data = base64.b64decode(encoded.base64_payload)
    assert data[:4] == b"RIFF"
    assert data[8:12] == b"WAVE"

    samples, rate = sf.read(io.BytesIO(data), dtype="float32")
    info = sf.info(io.BytesIO(data))
    assert rate == 44100
    assert info.subtype == "PCM_16"
    assert info.channels == 1
    assert samples.shape[0] == sound.num_samples


def test_randomize_is_reproducible_per_source() -> None:
    a = ChipSynth()
    b = ChipSynth()
    a.randomize_all(LcgRandom(42))
    b.randomize_all(LcgRandom(42))
    assert a.parameters() == b.parameters()
    assert np.array_equal(a.render().samples, b.render().samples)

    c = ChipSynth()
    c.randomize_all(LcgRandom(43))
    assert c.parameters() != a.parameters()


@pytest.mark.parametrize("value", [0.0, 0.5, 0.999999])
def test_randomize_uses_fixed_number_of_draws(value: float) -> None:
    source = _CountingSource(value)
    engine = ChipSynth()
    engine.randomize_all(source)
    assert source.calls == 18
    SoundParameters.from_native(engine.parameters())


@pytest.mark.parametrize("seed", range(25))
def test_randomized_parameters_stay_renderable(seed: int) -> None:
    engine = ChipSynth()
    engine.randomize_all(LcgRandom(seed))
    params = SoundParameters.from_native(engine.parameters())
    assert params.decayTime >= 0.03
    assert engine.render().num_samples > 0
