"""The sound-generation session: one engine, at most one current sound.

Every generation starts from the engine baseline and only replaces the
current sound after a successful render, so a failed call never leaves a
half-applied parameter set behind.
"""

from __future__ import annotations

import logging
import math
import numbers
import threading
from collections.abc import Mapping
from typing import Any, ContextManager, Literal

from pydantic import BaseModel, ConfigDict

from .engine import SoundHandle, SynthEngine
from .errors import NoSoundGeneratedError, ParameterValidationError, UnsupportedParameterError
from .export import to_file_bytes
from .params import SoundParameters, validate_parameters
from .presets import Preset, get_preset, list_presets
from .rng import RandomController, Seed

_LOGGER = logging.getLogger("retrosfx.session")

SessionState = Literal["empty", "ready"]


class CurrentSound(BaseModel):
    parameters: SoundParameters
    sound: Any
    label: str
    seed: Seed | None = None

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)


def format_seed(seed: Seed) -> str:
    if isinstance(seed, float) and seed.is_integer():
        return str(int(seed))
    return str(seed)


def _check_seed(seed: object) -> Seed | None:
    if seed is None:
        return None
    if isinstance(seed, bool) or not isinstance(seed, numbers.Real):
        raise ParameterValidationError("seed", seed, reason="expected a number")
    if not isinstance(seed, int) and not math.isfinite(float(seed)):
        raise ParameterValidationError("seed", seed, reason="expected a finite number")
    return seed if isinstance(seed, int) else float(seed)


class SoundSession:
    def __init__(
        self,
        engine: SynthEngine,
        *,
        random_controller: RandomController | None = None,
    ) -> None:
        self._engine = engine
        self._random = random_controller or RandomController()
        self._current: CurrentSound | None = None
        self._lock = threading.RLock()

    @property
    def engine(self) -> SynthEngine:
        return self._engine

    @property
    def state(self) -> SessionState:
        return "empty" if self._current is None else "ready"

    @property
    def current(self) -> CurrentSound | None:
        return self._current

    def generate_preset(
        self, sound_type: str, overrides: Mapping[str, Any] | None = None
    ) -> CurrentSound:
        """Render a preset, optionally overriding some of its parameters.

        Overrides are validated and checked against the engine as a whole set
        before any of them is applied.
        """
        preset = get_preset(sound_type)
        validated = validate_parameters(overrides or {})
        self._require_supported(validated)
        with self._lock:
            self._engine.reset_to_defaults()
            self._engine.apply_preset(preset.generator)
            self._apply(validated)
            return self._commit(preset.name)

    def create_custom(self, parameters: Mapping[str, Any]) -> CurrentSound:
        """Render a sound from the engine baseline plus ``parameters``."""
        validated = validate_parameters(parameters)
        self._require_supported(validated)
        with self._lock:
            self._engine.reset_to_defaults()
            self._apply(validated)
            return self._commit("custom")

    def randomize(self, seed: Seed | None = None) -> CurrentSound:
        """Randomize every engine parameter; the same seed gives the same sound."""
        checked = _check_seed(seed)
        with self._lock:
            self._random.with_seed(checked, self._engine.randomize_all)
            label = "random" if checked is None else f"random (seed: {format_seed(checked)})"
            return self._commit(label, seed=checked)

    def exclusive(self) -> ContextManager[bool]:
        """Hold the session lock across several calls, e.g. generate then export."""
        return self._lock

    def export(self) -> bytes:
        with self._lock:
            current = self._require_current()
            return to_file_bytes(self._engine, current.sound)

    def get_parameters(self) -> SoundParameters:
        with self._lock:
            return self._require_current().parameters

    def list_presets(self) -> list[Preset]:
        return list_presets()

    def _require_current(self) -> CurrentSound:
        current = self._current
        if current is None:
            raise NoSoundGeneratedError()
        return current

    def _require_supported(self, parameters: Mapping[str, Any]) -> None:
        for name in parameters:
            if not self._engine.supports(name):
                raise UnsupportedParameterError(f"Unsupported parameter: {name!r}")

    def _apply(self, parameters: Mapping[str, Any]) -> None:
        for name, value in parameters.items():
            self._engine.set_parameter(name, value)

    def _commit(self, label: str, *, seed: Seed | None = None) -> CurrentSound:
        sound: SoundHandle = self._engine.render()
        parameters = SoundParameters.from_native(self._engine.parameters())
        current = CurrentSound(parameters=parameters, sound=sound, label=label, seed=seed)
        self._current = current
        _LOGGER.info("Generated %s sound (%d samples)", label, sound.num_samples)
        return current
