from __future__ import annotations

import pytest

from retrosfx.errors import UnknownSoundTypeError
from retrosfx.presets import PRESETS, SOUND_TYPES, get_preset, list_presets, preset_tag_for
from retrosfx.synth import PRESET_ROUTINES


def test_library_lists_seven_presets_in_order() -> None:
    presets = list_presets()
    assert [preset.name for preset in presets] == [
        "pickup",
        "laser",
        "explosion",
        "powerup",
        "hit",
        "jump",
        "blip",
    ]
    assert tuple(preset.name for preset in presets) == SOUND_TYPES


def test_laser_description() -> None:
    assert get_preset("laser").description == "Laser/Shoot sounds"


def test_every_generator_tag_exists_in_engine() -> None:
    for preset in PRESETS:
        assert preset.generator in PRESET_ROUTINES
    assert preset_tag_for("hit") == "hit_hurt"


def test_unknown_sound_type() -> None:
    with pytest.raises(UnknownSoundTypeError, match="Unknown sound type"):
        get_preset("laser_beam")


def test_list_presets_returns_a_copy() -> None:
    presets = list_presets()
    presets.clear()
    assert len(list_presets()) == 7
