from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .errors import RetroSfxError

_LOGGER = logging.getLogger("retrosfx.settings")

SampleRate = Literal[22050, 44100]

_ENV_PREFIX = "RETROSFX_"
TRUTHY = frozenset({"1", "true", "yes", "on"})


def parse_flag(raw: str | None) -> bool:
    """Interpret an on/off environment value; unset and unrecognized values are off."""
    return raw is not None and raw.strip().lower() in TRUTHY


class Settings(BaseModel):
    """Runtime configuration, read from ``RETROSFX_*`` environment variables."""

    sample_rate: SampleRate = 44100
    max_seconds: float = Field(default=10.0, gt=0.0, le=60.0)
    debug: bool = False
    server_name: str = "retrosfx"

    model_config = ConfigDict(frozen=True, extra="forbid")

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "Settings":
        env = os.environ if environ is None else environ
        data: dict[str, object] = {}
        if (raw := env.get(f"{_ENV_PREFIX}SAMPLE_RATE")) is not None:
            data["sample_rate"] = _parse_int(raw, "RETROSFX_SAMPLE_RATE")
        if (raw := env.get(f"{_ENV_PREFIX}MAX_SECONDS")) is not None:
            data["max_seconds"] = raw
        if (raw := env.get(f"{_ENV_PREFIX}DEBUG")) is not None:
            data["debug"] = parse_flag(raw)
        if (raw := env.get(f"{_ENV_PREFIX}SERVER_NAME")) is not None and raw.strip():
            data["server_name"] = raw.strip()
        try:
            settings = cls.model_validate(data)
        except ValidationError as exc:
            raise RetroSfxError(f"Invalid retrosfx environment configuration: {exc}") from exc
        _LOGGER.debug("Loaded settings: %s", settings)
        return settings


def _parse_int(raw: str, name: str) -> int:
    try:
        return int(raw.strip())
    except ValueError as exc:
        raise RetroSfxError(f"{name} must be an integer, got {raw!r}") from exc
