"""Synthesis parameter schema: names, ranges, defaults and validation."""

from __future__ import annotations

import math
import numbers
from collections.abc import Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

from .errors import ParameterValidationError

ParameterKind = Literal["int", "float"]

WAVE_NAMES: tuple[str, ...] = (
    "square",
    "sawtooth",
    "sine",
    "noise",
    "triangle",
    "pink_noise",
    "tan",
    "whistle",
    "breaker",
    "bitnoise",
    "buzz",
    "organ",
)


@dataclass(frozen=True, slots=True)
class ParameterSpec:
    """Declared range and default of one synthesis parameter."""

    name: str
    kind: ParameterKind
    low: float
    high: float
    default: float
    description: str

    @property
    def expected_range(self) -> tuple[float, float]:
        return (self.low, self.high)

    def validate(self, value: Any) -> int | float:
        """Return ``value`` coerced to the parameter's kind, or raise.

        Values are never clamped: anything outside ``[low, high]`` is an error.
        """
        if isinstance(value, bool) or not isinstance(value, numbers.Real):
            raise ParameterValidationError(
                self.name, value, self.expected_range, reason="expected a number"
            )
        number = float(value)
        if not math.isfinite(number):
            raise ParameterValidationError(
                self.name, value, self.expected_range, reason="expected a finite number"
            )
        coerced: int | float
        if self.kind == "int":
            if not number.is_integer():
                raise ParameterValidationError(
                    self.name, value, self.expected_range, reason="expected an integer"
                )
            coerced = int(number)
        else:
            coerced = number
        if not self.low <= coerced <= self.high:
            raise ParameterValidationError(self.name, value, self.expected_range)
        return coerced


PARAMETER_SPECS: Mapping[str, ParameterSpec] = MappingProxyType(
    {
        spec.name: spec
        for spec in (
            ParameterSpec("waveType", "int", 0, len(WAVE_NAMES) - 1, 0, "Oscillator shape"),
            ParameterSpec("frequency_start", "float", 0.0, 1.0, 0.3, "Normalized base frequency"),
            ParameterSpec("frequency_slide", "float", -0.5, 0.5, 0.0, "Frequency sweep rate"),
            ParameterSpec("attackTime", "float", 0.0, 1.0, 0.0, "Envelope attack duration"),
            ParameterSpec("sustainTime", "float", 0.0, 1.0, 0.3, "Envelope sustain duration"),
            ParameterSpec("decayTime", "float", 0.03, 1.0, 0.4, "Envelope decay duration"),
            ParameterSpec("vibratoDepth", "float", 0.0, 1.0, 0.0, "Vibrato amplitude"),
            ParameterSpec("vibratoSpeed", "float", 0.0, 1.0, 0.0, "Vibrato rate"),
        )
    }
)

PARAMETER_NAMES: tuple[str, ...] = tuple(PARAMETER_SPECS)

DEFAULT_PARAMETERS: Mapping[str, int | float] = MappingProxyType(
    {
        name: (int(spec.default) if spec.kind == "int" else spec.default)
        for name, spec in PARAMETER_SPECS.items()
    }
)


class SoundParameters(BaseModel):
    """A complete ParameterSet as reported for the current sound."""

    waveType: int = Field(default=0, ge=0, le=len(WAVE_NAMES) - 1)
    frequency_start: float = Field(default=0.3, ge=0.0, le=1.0)
    frequency_slide: float = Field(default=0.0, ge=-0.5, le=0.5)
    attackTime: float = Field(default=0.0, ge=0.0, le=1.0)
    sustainTime: float = Field(default=0.3, ge=0.0, le=1.0)
    decayTime: float = Field(default=0.4, ge=0.03, le=1.0)
    vibratoDepth: float = Field(default=0.0, ge=0.0, le=1.0)
    vibratoSpeed: float = Field(default=0.0, ge=0.0, le=1.0)

    model_config = ConfigDict(frozen=True, extra="ignore")

    @classmethod
    def from_native(cls, native: Mapping[str, Any]) -> "SoundParameters":
        """Project an engine's native parameter snapshot onto the ParameterSet."""
        return cls.model_validate(validate_parameters(select_known(native)))

    @property
    def wave_name(self) -> str:
        return WAVE_NAMES[self.waveType]


def select_known(parameters: Mapping[str, Any]) -> dict[str, Any]:
    return {name: parameters[name] for name in PARAMETER_NAMES if name in parameters}


def validate_parameters(parameters: Mapping[str, Any]) -> dict[str, Any]:
    """Validate a partial ParameterSet.

    Known keys are range-checked and coerced; unknown keys are passed through
    untouched for the engine to accept or reject. The first violation raises
    ``ParameterValidationError``.
    """
    validated: dict[str, Any] = {}
    for name, value in parameters.items():
        spec = PARAMETER_SPECS.get(name)
        validated[name] = value if spec is None else spec.validate(value)
    return validated


def parameter_json_schema() -> dict[str, Any]:
    """JSON schema of a partial ParameterSet, as advertised to tool clients."""
    properties: dict[str, Any] = {}
    for name, spec in PARAMETER_SPECS.items():
        properties[name] = {
            "type": "integer" if spec.kind == "int" else "number",
            "minimum": spec.low,
            "maximum": spec.high,
            "description": spec.description,
        }
    return {"type": "object", "properties": properties}
