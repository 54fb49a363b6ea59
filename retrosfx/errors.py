from __future__ import annotations

from typing import Any


class RetroSfxError(Exception):
    """Base error for the retrosfx library."""


class ParameterValidationError(RetroSfxError):
    """Raised when an argument or synthesis parameter falls outside its declared range."""

    def __init__(
        self,
        field: str,
        value: Any,
        expected_range: tuple[float, float] | None = None,
        *,
        reason: str | None = None,
    ) -> None:
        self.field = field
        self.value = value
        self.expected_range = expected_range
        if reason is None:
            match expected_range:
                case (low, high):
                    reason = f"expected a value in [{low}, {high}]"
                case _:
                    reason = "invalid value"
        super().__init__(f"Invalid {field}={value!r}: {reason}")


class UnknownSoundTypeError(RetroSfxError):
    """Raised when a requested sound type is not in the preset library."""


class UnknownPresetError(RetroSfxError):
    """Raised when the engine has no preset routine for a generator tag."""


class UnsupportedParameterError(RetroSfxError):
    """Raised when the engine does not recognize a parameter name."""


class RenderError(RetroSfxError):
    """Raised when the engine cannot render its current parameter state."""


class NoSoundGeneratedError(RetroSfxError):
    """Raised when export or introspection is requested before any generation."""

    def __init__(self, message: str = "No sound generated yet. Please generate a sound first.") -> None:
        super().__init__(message)


class EncodingError(RetroSfxError):
    """Raised when an encoded audio payload is empty or malformed."""


class ExportError(RetroSfxError):
    """Raised when a WAV file cannot be written."""


class EngineInitError(RetroSfxError):
    """Raised when the synthesis engine cannot be constructed."""
