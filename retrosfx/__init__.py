from __future__ import annotations

from .dispatcher import OPERATIONS, Dispatcher, ToolDefinition, ToolResult, describe_parameters
from .engine import EncodedSound, SoundHandle, SynthEngine
from .errors import (
    EncodingError,
    EngineInitError,
    ExportError,
    NoSoundGeneratedError,
    ParameterValidationError,
    RenderError,
    RetroSfxError,
    UnknownPresetError,
    UnknownSoundTypeError,
    UnsupportedParameterError,
)
from .export import parse_data_uri, to_file_bytes, write_sound_file
from .logging_utils import configure_logging as _configure_logging
from .params import (
    DEFAULT_PARAMETERS,
    PARAMETER_NAMES,
    PARAMETER_SPECS,
    WAVE_NAMES,
    ParameterSpec,
    SoundParameters,
    validate_parameters,
)
from .presets import PRESETS, SOUND_TYPES, Preset, SoundType, get_preset, list_presets
from .rng import LcgRandom, RandomController, RandomSource
from .session import CurrentSound, SoundSession
from .settings import Settings
from .synth import SAMPLE_RATE, ChipSynth, RenderedSound

__all__ = [
    "DEFAULT_PARAMETERS",
    "OPERATIONS",
    "PARAMETER_NAMES",
    "PARAMETER_SPECS",
    "PRESETS",
    "SAMPLE_RATE",
    "SOUND_TYPES",
    "WAVE_NAMES",
    "ChipSynth",
    "CurrentSound",
    "Dispatcher",
    "EncodedSound",
    "EncodingError",
    "EngineInitError",
    "ExportError",
    "LcgRandom",
    "NoSoundGeneratedError",
    "ParameterSpec",
    "ParameterValidationError",
    "Preset",
    "RandomController",
    "RandomSource",
    "RenderError",
    "RenderedSound",
    "RetroSfxError",
    "Settings",
    "SoundHandle",
    "SoundParameters",
    "SoundSession",
    "SoundType",
    "SynthEngine",
    "ToolDefinition",
    "ToolResult",
    "UnknownPresetError",
    "UnknownSoundTypeError",
    "UnsupportedParameterError",
    "describe_parameters",
    "get_preset",
    "list_presets",
    "parse_data_uri",
    "to_file_bytes",
    "validate_parameters",
    "write_sound_file",
]

__version__ = "0.1.0"

_configure_logging()
del _configure_logging
