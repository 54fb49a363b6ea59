from __future__ import annotations

from typing import Literal, get_args

from pydantic import BaseModel, ConfigDict

from .errors import UnknownSoundTypeError

SoundType = Literal["pickup", "laser", "explosion", "powerup", "hit", "jump", "blip"]
SOUND_TYPES: tuple[SoundType, ...] = get_args(SoundType)


class Preset(BaseModel):
    """A named preset and the engine routine that seeds its parameters."""

    name: SoundType
    description: str
    generator: str

    model_config = ConfigDict(frozen=True, extra="forbid")


PRESETS: tuple[Preset, ...] = (
    Preset(name="pickup", description="Pickup/Coin sounds", generator="pickup_coin"),
    Preset(name="laser", description="Laser/Shoot sounds", generator="laser_shoot"),
    Preset(name="explosion", description="Explosion sounds", generator="explosion"),
    Preset(name="powerup", description="Powerup sounds", generator="powerup"),
    Preset(name="hit", description="Hit/Hurt sounds", generator="hit_hurt"),
    Preset(name="jump", description="Jump sounds", generator="jump"),
    Preset(name="blip", description="UI/Select sounds", generator="blip_select"),
)

_BY_NAME: dict[str, Preset] = {preset.name: preset for preset in PRESETS}


def get_preset(sound_type: str) -> Preset:
    try:
        return _BY_NAME[sound_type]
    except KeyError as exc:
        raise UnknownSoundTypeError(
            f"Unknown sound type: {sound_type!r} (expected one of {', '.join(SOUND_TYPES)})"
        ) from exc


def preset_tag_for(sound_type: str) -> str:
    return get_preset(sound_type).generator


def list_presets() -> list[Preset]:
    return list(PRESETS)
