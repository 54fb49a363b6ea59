from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Protocol

from pydantic import BaseModel, ConfigDict, Field

from .rng import RandomSource


class EncodedSound(BaseModel):
    """Self-contained audio payload produced by an engine."""

    mime_type: str = "audio/wav"
    base64_payload: str = Field(repr=False)

    model_config = ConfigDict(frozen=True, extra="forbid")

    @property
    def data_uri(self) -> str:
        return f"data:{self.mime_type};base64,{self.base64_payload}"


class SoundHandle(Protocol):
    @property
    def sample_rate(self) -> int: ...

    @property
    def num_samples(self) -> int: ...


class SynthEngine(Protocol):
    """Capabilities the session needs from a synthesis engine."""

    def reset_to_defaults(self) -> None: ...

    def apply_preset(self, tag: str) -> None: ...

    def supports(self, name: str) -> bool: ...

    def set_parameter(self, name: str, value: Any) -> None: ...

    def randomize_all(self, source: RandomSource) -> None: ...

    def parameters(self) -> Mapping[str, Any]: ...

    def render(self) -> SoundHandle: ...

    def encode(self, sound: SoundHandle) -> EncodedSound: ...
