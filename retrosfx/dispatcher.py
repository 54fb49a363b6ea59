from __future__ import annotations

import logging
import traceback
from collections.abc import Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import Annotated, Any, Callable, TypeVar

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    StrictFloat,
    StrictInt,
    ValidationError,
    WithJsonSchema,
)

from .errors import ParameterValidationError, RetroSfxError
from .export import write_sound_file
from .logging_utils import debug_enabled, log_exception
from .params import SoundParameters, parameter_json_schema
from .presets import SOUND_TYPES
from .session import SoundSession

_LOGGER = logging.getLogger("retrosfx.dispatcher")

FILEPATH_DESCRIPTION = "Full path where to save the WAV file (including .wav extension)"

SoundTypeArg = Annotated[
    str,
    WithJsonSchema(
        {
            "type": "string",
            "enum": list(SOUND_TYPES),
            "description": "Type of sound effect to generate",
        }
    ),
]
ParameterBag = Annotated[dict[str, Any], WithJsonSchema(parameter_json_schema())]
FilePathArg = Annotated[str, Field(description=FILEPATH_DESCRIPTION)]
OverridesArg = Annotated[
    ParameterBag | None, Field(description="Optional custom parameters to override")
]
ParametersArg = Annotated[ParameterBag, Field(description="Sound generation parameters")]
SeedArg = Annotated[
    StrictInt | StrictFloat | None, Field(description="Optional seed for reproducible results")
]


class ToolResult(BaseModel):
    """Response of one operation: a short human-readable text, possibly an error."""

    text: str
    is_error: bool = False

    model_config = ConfigDict(frozen=True, extra="forbid")


class _Args(BaseModel):
    model_config = ConfigDict(extra="ignore")


class GenerateSoundEffectArgs(_Args):
    type: SoundTypeArg
    customParams: OverridesArg = None
    filepath: FilePathArg


class CreateCustomSoundArgs(_Args):
    parameters: ParametersArg
    filepath: FilePathArg


class RandomizeSoundArgs(_Args):
    seed: SeedArg = None
    filepath: FilePathArg


class ExportWavArgs(_Args):
    filepath: FilePathArg


class NoArgs(_Args):
    pass


ArgsT = TypeVar("ArgsT", bound=_Args)
Handler = Callable[[SoundSession, Any], str]


@dataclass(frozen=True, slots=True)
class Operation:
    name: str
    description: str
    args_model: type[_Args]
    handler: Handler

    def input_schema(self) -> dict[str, Any]:
        schema = self.args_model.model_json_schema()
        schema.pop("title", None)
        for prop in schema.get("properties", {}).values():
            prop.pop("title", None)
        return schema


class ToolDefinition(BaseModel):
    name: str
    description: str
    input_schema: dict[str, Any]

    model_config = ConfigDict(frozen=True)


# -----------------------------------------------------------------------------
# Handlers
# -----------------------------------------------------------------------------


def _save(session: SoundSession, filepath: str, label: str) -> str:
    data = session.export()
    target = write_sound_file(filepath, data)
    return f"Generated {label} sound!\nSaved to: {target}\nFile size: {len(data)} bytes"


def _generate_sound_effect(session: SoundSession, args: GenerateSoundEffectArgs) -> str:
    current = session.generate_preset(args.type, args.customParams or {})
    return _save(session, args.filepath, current.label)


def _create_custom_sound(session: SoundSession, args: CreateCustomSoundArgs) -> str:
    current = session.create_custom(args.parameters)
    return _save(session, args.filepath, current.label)


def _randomize_sound(session: SoundSession, args: RandomizeSoundArgs) -> str:
    current = session.randomize(args.seed)
    return _save(session, args.filepath, current.label)


def _export_wav(session: SoundSession, args: ExportWavArgs) -> str:
    return _save(session, args.filepath, "exported")


def describe_parameters(params: SoundParameters) -> str:
    vibrato = "none"
    if params.vibratoDepth > 0:
        vibrato = f"{params.vibratoDepth!r} @ {params.vibratoSpeed!r}"
    slide = repr(params.frequency_slide) if params.frequency_slide != 0 else "none"
    return (
        "Current sound parameters:\n"
        f"Wave: {params.waveType} ({params.wave_name}) | Freq: {params.frequency_start:.2f}\n"
        f"Envelope: A{params.attackTime:.2f} S{params.sustainTime:.2f} D{params.decayTime:.2f}\n"
        f"Vibrato: {vibrato} | Slide: {slide}"
    )


def _get_parameters(session: SoundSession, args: NoArgs) -> str:
    return describe_parameters(session.get_parameters())


def _list_presets(session: SoundSession, args: NoArgs) -> str:
    lines = [f"- {preset.name}: {preset.description}" for preset in session.list_presets()]
    return "Available presets:\n" + "\n".join(lines)


OPERATIONS: Mapping[str, Operation] = MappingProxyType(
    {
        op.name: op
        for op in (
            Operation(
                "generate_sound_effect",
                "Generate retro-style game sound effects using built-in presets. Choose from "
                "classic 8-bit sounds like coin pickups, laser shots, explosions, powerups, hit "
                "sounds, jump effects, and UI blips. Optionally override specific parameters to "
                "customize the sound while maintaining the preset's character.",
                GenerateSoundEffectArgs,
                _generate_sound_effect,
            ),
            Operation(
                "create_custom_sound",
                "Create completely custom retro sound effects with full control over the "
                "synthesis parameters: waveform type, frequency and slide, envelope "
                "(attack/sustain/decay) and vibrato.",
                CreateCustomSoundArgs,
                _create_custom_sound,
            ),
            Operation(
                "randomize_sound",
                "Generate surprising sound effects by randomizing all synthesis parameters. "
                "Pass a seed to make the result reproducible.",
                RandomizeSoundArgs,
                _randomize_sound,
            ),
            Operation(
                "export_wav",
                "Export the most recently generated sound effect to a new WAV file without "
                "regenerating the audio.",
                ExportWavArgs,
                _export_wav,
            ),
            Operation(
                "get_parameters",
                "Inspect the synthesis parameters of the last generated sound: waveform, "
                "frequency, envelope and effects.",
                NoArgs,
                _get_parameters,
            ),
            Operation(
                "list_presets",
                "List the built-in sound effect presets with descriptions.",
                NoArgs,
                _list_presets,
            ),
        )
    }
)


def _parse_args(model: type[ArgsT], arguments: Mapping[str, Any]) -> ArgsT:
    try:
        return model.model_validate(dict(arguments))
    except ValidationError as exc:
        first = exc.errors()[0]
        field = ".".join(str(part) for part in first.get("loc", ())) or "arguments"
        raise ParameterValidationError(
            field, first.get("input"), reason=str(first.get("msg", "invalid value"))
        ) from exc


class Dispatcher:
    """Maps operation names and argument bags onto one ``SoundSession``."""

    def __init__(self, session: SoundSession, *, debug: bool | None = None) -> None:
        self._session = session
        self._debug = debug_enabled() if debug is None else debug

    @property
    def session(self) -> SoundSession:
        return self._session

    def tool_definitions(self) -> list[ToolDefinition]:
        return [
            ToolDefinition(
                name=op.name,
                description=op.description,
                input_schema=op.input_schema(),
            )
            for op in OPERATIONS.values()
        ]

    def dispatch(self, name: str, arguments: Mapping[str, Any] | None = None) -> ToolResult:
        """Run one operation; failures come back as error results, never as exceptions."""
        try:
            operation = OPERATIONS.get(name)
            if operation is None:
                raise RetroSfxError(f"Unknown tool: {name}")
            args = _parse_args(operation.args_model, arguments or {})
            with self._session.exclusive():
                text = operation.handler(self._session, args)
        except Exception as exc:
            return self._failure(name, exc)
        _LOGGER.debug("%s succeeded", name)
        return ToolResult(text=text)

    def _failure(self, name: str, exc: Exception) -> ToolResult:
        expected = isinstance(exc, RetroSfxError)
        _LOGGER.warning("%s failed: %s", name, exc, exc_info=self._debug or not expected)
        message = str(exc) if expected else f"{type(exc).__name__}: {exc}"
        if not expected:
            log_exception(name, exc)
        text = f"Error: {message}"
        if self._debug:
            trace = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
            text = f"{text}\n\nDiagnostics:\n{trace}"
        return ToolResult(text=text, is_error=True)
