# pyright: reportUnknownVariableType=false
# pyright: reportUnknownMemberType=false
# pyright: reportUnknownArgumentType=false

"""
Architecture:

1. Native parameters: the engine's own schema, a superset of the ParameterSet
2. Presets and randomization: routines that fill the native parameters
3. Renderer: parameters -> envelope, frequency curve, waveform, filters
4. Encoder: samples -> 16-bit PCM WAV -> base64 payload
"""

from __future__ import annotations

import base64
import io
import logging
import math
import numbers
from collections.abc import Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Callable, TypeAlias

import numpy as np
import soundfile as sf  # type: ignore[import]
from numpy.typing import NDArray
from pydantic import BaseModel, ConfigDict
from scipy.signal import lfilter  # type: ignore[import]

from .engine import EncodedSound
from .errors import (
    ParameterValidationError,
    RenderError,
    UnknownPresetError,
    UnsupportedParameterError,
)
from .params import PARAMETER_SPECS, WAVE_NAMES
from .rng import RandomSource

# =============================================================================
# CONSTANTS
# =============================================================================

SAMPLE_RATE = 44100
# Envelope and repeat lengths are defined in samples at 44.1 kHz.
_REFERENCE_RATE = 44100
_ENVELOPE_SAMPLES = 100_000
_PERIOD_HZ = 3528.0
_MIN_FREQ_HZ = 8.0
_NOISE_SEED = 0xB0F
_NOISE_STEPS = 32
_DECAY_FLOOR = PARAMETER_SPECS["decayTime"].low
_LOGGER = logging.getLogger("retrosfx.synth")

# Pink noise filter (Paul Kellet's economy coefficients).
_PINK_B = np.array([0.049922035, -0.095993537, 0.050612699, -0.004408786])
_PINK_A = np.array([1.0, -2.494956002, 2.017265875, -0.522189400])

FloatArray: TypeAlias = NDArray[np.float64]
PresetRoutine: TypeAlias = Callable[[dict[str, float]], None]


@dataclass(frozen=True, slots=True)
class NativeParameter:
    low: float
    high: float
    default: float
    integral: bool = False


def _core(name: str, *, low: float | None = None, high: float | None = None) -> NativeParameter:
    spec = PARAMETER_SPECS[name]
    return NativeParameter(
        low=spec.low if low is None else low,
        high=spec.high if high is None else high,
        default=spec.default,
        integral=spec.kind == "int",
    )


NATIVE_PARAMETERS: Mapping[str, NativeParameter] = MappingProxyType(
    {
        "waveType": _core("waveType"),
        "frequency_start": _core("frequency_start"),
        "frequency_slide": _core("frequency_slide", low=-1.0, high=1.0),
        "attackTime": _core("attackTime"),
        "sustainTime": _core("sustainTime"),
        "decayTime": _core("decayTime"),
        "vibratoDepth": _core("vibratoDepth"),
        "vibratoSpeed": _core("vibratoSpeed"),
        "punch": NativeParameter(0.0, 1.0, 0.0),
        "squareDuty": NativeParameter(0.0, 1.0, 0.0),
        "dutySweep": NativeParameter(-1.0, 1.0, 0.0),
        "lpFilterCutoff": NativeParameter(0.0, 1.0, 1.0),
        "hpFilterCutoff": NativeParameter(0.0, 1.0, 0.0),
        "repeatSpeed": NativeParameter(0.0, 1.0, 0.0),
        "changeAmount": NativeParameter(-1.0, 1.0, 0.0),
        "changeSpeed": NativeParameter(0.0, 1.0, 0.0),
        "bitCrush": NativeParameter(0.0, 1.0, 0.0),
        "masterVolume": NativeParameter(0.0, 1.0, 0.5),
    }
)


def native_defaults() -> dict[str, float]:
    return {name: spec.default for name, spec in NATIVE_PARAMETERS.items()}


# =============================================================================
# PART 1: PRESET ROUTINES
# =============================================================================


def _pickup_coin(p: dict[str, float]) -> None:
    p.update(
        waveType=0,
        frequency_start=0.62,
        sustainTime=0.05,
        decayTime=0.32,
        punch=0.45,
        changeSpeed=0.6,
        changeAmount=0.35,
    )


def _laser_shoot(p: dict[str, float]) -> None:
    p.update(
        waveType=1,
        frequency_start=0.75,
        frequency_slide=-0.35,
        squareDuty=0.3,
        sustainTime=0.12,
        decayTime=0.18,
        punch=0.2,
        hpFilterCutoff=0.05,
    )


def _explosion(p: dict[str, float]) -> None:
    p.update(
        waveType=3,
        frequency_start=0.25,
        frequency_slide=-0.1,
        sustainTime=0.35,
        decayTime=0.45,
        punch=0.5,
        vibratoDepth=0.2,
        vibratoSpeed=0.35,
    )


def _powerup(p: dict[str, float]) -> None:
    p.update(
        waveType=0,
        squareDuty=0.4,
        frequency_start=0.35,
        frequency_slide=0.15,
        sustainTime=0.3,
        decayTime=0.35,
        repeatSpeed=0.5,
    )


def _hit_hurt(p: dict[str, float]) -> None:
    p.update(
        waveType=3,
        frequency_start=0.45,
        frequency_slide=-0.35,
        sustainTime=0.05,
        decayTime=0.2,
        hpFilterCutoff=0.1,
    )


def _jump(p: dict[str, float]) -> None:
    p.update(
        waveType=0,
        squareDuty=0.5,
        frequency_start=0.4,
        frequency_slide=0.25,
        sustainTime=0.2,
        decayTime=0.25,
        hpFilterCutoff=0.05,
        lpFilterCutoff=0.9,
    )


def _blip_select(p: dict[str, float]) -> None:
    p.update(
        waveType=0,
        squareDuty=0.5,
        frequency_start=0.45,
        sustainTime=0.08,
        decayTime=0.12,
        hpFilterCutoff=0.1,
    )


PRESET_ROUTINES: Mapping[str, PresetRoutine] = MappingProxyType(
    {
        "pickup_coin": _pickup_coin,
        "laser_shoot": _laser_shoot,
        "explosion": _explosion,
        "powerup": _powerup,
        "hit_hurt": _hit_hurt,
        "jump": _jump,
        "blip_select": _blip_select,
    }
)


# =============================================================================
# PART 2: RANDOMIZATION
# =============================================================================


def _randomized(source: RandomSource) -> dict[str, float]:
    """Draw a full native parameter set; always consumes the same number of draws."""
    r = source.random
    wave_count = len(WAVE_NAMES)
    params = native_defaults()
    params["waveType"] = min(int(r() * wave_count), wave_count - 1)
    params["frequency_start"] = (r() * 2.0 - 1.0) ** 2
    params["frequency_slide"] = ((r() * 2.0 - 1.0) ** 5) * 0.5
    params["attackTime"] = r() ** 3
    params["sustainTime"] = r() ** 2
    params["decayTime"] = _DECAY_FLOOR + (1.0 - _DECAY_FLOOR) * r()
    depth, vibrato_gate = r(), r()
    params["vibratoDepth"] = depth**3 if vibrato_gate < 0.5 else 0.0
    params["vibratoSpeed"] = r()
    params["punch"] = (r() ** 2) * 0.8
    params["squareDuty"] = r()
    params["dutySweep"] = (r() * 2.0 - 1.0) ** 3
    params["lpFilterCutoff"] = 1.0 - r() ** 3
    params["hpFilterCutoff"] = r() ** 5
    repeat, repeat_gate = r(), r()
    params["repeatSpeed"] = repeat if repeat_gate < 0.3 else 0.0
    params["changeAmount"] = r() * 2.0 - 1.0
    params["changeSpeed"] = r()
    return params


# =============================================================================
# PART 3: RENDERING
# =============================================================================


class RenderedSound(BaseModel):
    """Opaque sound handle: mono float samples plus the parameters that made them."""

    samples: NDArray[np.float32]
    sample_rate: int = SAMPLE_RATE
    parameters: Mapping[str, float]

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        arbitrary_types_allowed=True,
    )

    @property
    def num_samples(self) -> int:
        return int(self.samples.size)

    @property
    def duration(self) -> float:
        return self.num_samples / self.sample_rate


def _envelope(p: Mapping[str, float], sr: int) -> FloatArray:
    scale = sr / _REFERENCE_RATE
    attack_n = int(p["attackTime"] ** 2 * _ENVELOPE_SAMPLES * scale)
    sustain_n = int(p["sustainTime"] ** 2 * _ENVELOPE_SAMPLES * scale)
    decay_n = max(1, int(p["decayTime"] ** 2 * _ENVELOPE_SAMPLES * scale))
    attack = np.arange(attack_n, dtype=np.float64) / max(attack_n, 1)
    sustain_t = np.arange(sustain_n, dtype=np.float64) / max(sustain_n, 1)
    sustain = 1.0 + (1.0 - sustain_t) * 2.0 * p["punch"]
    decay = 1.0 - np.arange(decay_n, dtype=np.float64) / decay_n
    return np.concatenate((attack, sustain, decay))


def _cycle_length(speed: float, scale: float) -> int:
    return max(1, int(((1.0 - speed) ** 2 * 20_000 + 32) * scale))


def _frequency_curve(p: Mapping[str, float], total: int, sr: int) -> FloatArray:
    scale = sr / _REFERENCE_RATE
    n = np.arange(total, dtype=np.float64)
    local = n
    if p["repeatSpeed"] > 0.0:
        local = n % _cycle_length(p["repeatSpeed"], scale)

    base_hz = (p["frequency_start"] ** 2 + 0.001) * _PERIOD_HZ
    slide = p["frequency_slide"]
    log_step = -math.log1p(-(slide**3) * 0.01) / scale
    freq = base_hz * np.exp(np.clip(log_step * local, -50.0, 50.0))

    change = p["changeAmount"]
    if change != 0.0 and p["changeSpeed"] < 1.0:
        arp_at = _cycle_length(p["changeSpeed"], scale)
        mod = 1.0 - change**2 * 0.9 if change >= 0.0 else 1.0 + change**2 * 10.0
        freq = np.where(local >= arp_at, freq / mod, freq)

    depth = p["vibratoDepth"]
    if depth > 0.0:
        vib_speed = p["vibratoSpeed"] ** 2 * 0.01 / scale
        freq = freq / (1.0 + np.sin(n * vib_speed) * depth * 0.5)

    return np.clip(freq, _MIN_FREQ_HZ, sr * 0.49)


def _noise_table(cycles: int) -> FloatArray:
    rng = np.random.default_rng(_NOISE_SEED)
    return rng.uniform(-1.0, 1.0, size=(cycles + 1, _NOISE_STEPS))


def _oscillate(p: Mapping[str, float], freq: FloatArray, sr: int) -> FloatArray:
    scale = sr / _REFERENCE_RATE
    phase_total = np.cumsum(freq / sr)
    phase = phase_total % 1.0
    wave = WAVE_NAMES[int(p["waveType"])]

    match wave:
        case "square":
            n = np.arange(freq.size, dtype=np.float64)
            duty = 0.5 - p["squareDuty"] * 0.5 - p["dutySweep"] * 0.00005 * n / scale
            duty = np.clip(duty, 0.0, 0.5)
            return np.where(phase < duty, 0.5, -0.5)
        case "sawtooth":
            return 1.0 - 2.0 * phase
        case "sine":
            return np.sin(2.0 * np.pi * phase)
        case "triangle":
            return 1.0 - 4.0 * np.abs(phase - 0.5)
        case "tan":
            return np.clip(np.tan(np.pi * phase), -4.0, 4.0) / 4.0
        case "whistle":
            return 0.75 * np.sin(2.0 * np.pi * phase) + 0.25 * np.sin(40.0 * np.pi * phase)
        case "breaker":
            shifted = (phase + math.sqrt(0.75)) % 1.0
            return -1.0 + 2.0 * np.abs(1.0 - shifted * shifted * 2.0)
        case "buzz":
            sine = np.sin(2.0 * np.pi * phase)
            return np.sign(sine) * np.abs(sine) ** 0.25 * 0.6
        case "organ":
            return (
                np.sin(2.0 * np.pi * phase)
                + 0.5 * np.sin(4.0 * np.pi * phase)
                + 0.25 * np.sin(8.0 * np.pi * phase)
            ) / 1.75
        case _:
            pass

    cycles = phase_total.astype(np.int64)
    table = _noise_table(int(cycles[-1]) if cycles.size else 0)
    steps = np.minimum((phase * _NOISE_STEPS).astype(np.int64), _NOISE_STEPS - 1)
    white = table[cycles, steps]
    match wave:
        case "pink_noise":
            pink = lfilter(_PINK_B, _PINK_A, white)
            peak = float(np.max(np.abs(pink))) or 1.0
            return pink / peak
        case "bitnoise":
            return np.where(white >= 0.0, 0.5, -0.5)
        case _:
            return white


def _filter(p: Mapping[str, float], signal: FloatArray) -> FloatArray:
    cutoff = p["lpFilterCutoff"]
    if cutoff < 1.0:
        alpha = max(cutoff**3, 1e-4)
        signal = lfilter([alpha], [1.0, alpha - 1.0], signal)
    highpass = p["hpFilterCutoff"]
    if highpass > 0.0:
        beta = min(highpass**2 * 0.1, 0.99)
        signal = signal - lfilter([beta], [1.0, beta - 1.0], signal)
    return signal


def _bit_crush(amount: float, signal: FloatArray) -> FloatArray:
    if amount <= 0.0:
        return signal
    levels = max(2.0, 2.0 ** (15.0 - amount * 13.0))
    return np.round(signal * levels) / levels


def synthesize(p: Mapping[str, float], *, sample_rate: int = SAMPLE_RATE) -> NDArray[np.float32]:
    """Render a consistent native parameter set to mono float32 samples."""
    envelope = _envelope(p, sample_rate)
    freq = _frequency_curve(p, envelope.size, sample_rate)
    signal = _oscillate(p, freq, sample_rate)
    signal = _filter(p, signal)
    signal = signal * envelope * p["masterVolume"] * 2.0
    signal = _bit_crush(p["bitCrush"], signal)
    return np.clip(signal, -1.0, 1.0).astype(np.float32)


def expected_length(p: Mapping[str, float], *, sample_rate: int = SAMPLE_RATE) -> int:
    scale = sample_rate / _REFERENCE_RATE
    return (
        int(p["attackTime"] ** 2 * _ENVELOPE_SAMPLES * scale)
        + int(p["sustainTime"] ** 2 * _ENVELOPE_SAMPLES * scale)
        + max(1, int(p["decayTime"] ** 2 * _ENVELOPE_SAMPLES * scale))
    )


# =============================================================================
# PART 4: ENGINE
# =============================================================================


class ChipSynth:
    """sfxr-style 8-bit synthesizer implementing the ``SynthEngine`` protocol."""

    def __init__(self, *, sample_rate: int = SAMPLE_RATE, max_seconds: float = 10.0) -> None:
        self.sample_rate = sample_rate
        self.max_seconds = max_seconds
        self._params = native_defaults()

    def reset_to_defaults(self) -> None:
        self._params = native_defaults()

    def apply_preset(self, tag: str) -> None:
        routine = PRESET_ROUTINES.get(tag)
        if routine is None:
            raise UnknownPresetError(f"Unknown preset: {tag!r}")
        routine(self._params)

    def supports(self, name: str) -> bool:
        return name in NATIVE_PARAMETERS

    def set_parameter(self, name: str, value: Any) -> None:
        spec = NATIVE_PARAMETERS.get(name)
        if spec is None:
            raise UnsupportedParameterError(f"Unsupported parameter: {name!r}")
        if isinstance(value, bool) or not isinstance(value, numbers.Real):
            raise ParameterValidationError(
                name, value, (spec.low, spec.high), reason="expected a number"
            )
        self._params[name] = float(value)

    def randomize_all(self, source: RandomSource) -> None:
        self._params = _randomized(source)

    def parameters(self) -> dict[str, float]:
        return {
            name: (int(value) if NATIVE_PARAMETERS[name].integral else value)
            for name, value in self._params.items()
        }

    def _check_consistency(self) -> None:
        for name, value in self._params.items():
            spec = NATIVE_PARAMETERS[name]
            if not math.isfinite(value):
                raise RenderError(f"{name} is not finite: {value!r}")
            if spec.integral and not float(value).is_integer():
                raise RenderError(f"{name} must be integral, got {value!r}")
            if not spec.low <= value <= spec.high:
                raise RenderError(
                    f"{name}={value!r} outside the engine range [{spec.low}, {spec.high}]"
                )
        if self._params["decayTime"] < _DECAY_FLOOR:
            raise RenderError(f"decayTime below the {_DECAY_FLOOR} floor")
        length = expected_length(self._params, sample_rate=self.sample_rate)
        if length > self.max_seconds * self.sample_rate:
            raise RenderError(
                f"Sound would last {length / self.sample_rate:.2f}s, "
                f"longer than the {self.max_seconds}s limit"
            )

    def render(self) -> RenderedSound:
        self._check_consistency()
        snapshot = MappingProxyType(dict(self._params))
        try:
            samples = synthesize(snapshot, sample_rate=self.sample_rate)
        except (ValueError, FloatingPointError, MemoryError) as exc:
            raise RenderError(f"Synthesis failed: {exc}") from exc
        _LOGGER.debug(
            "Rendered %d samples of %s", samples.size, WAVE_NAMES[int(snapshot["waveType"])]
        )
        return RenderedSound(samples=samples, sample_rate=self.sample_rate, parameters=snapshot)

    def encode(self, sound: RenderedSound) -> EncodedSound:
        buffer = io.BytesIO()
        sf.write(buffer, sound.samples, sound.sample_rate, format="WAV", subtype="PCM_16")
        payload = base64.b64encode(buffer.getvalue()).decode("ascii")
        return EncodedSound(mime_type="audio/wav", base64_payload=payload)

