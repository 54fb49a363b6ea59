from __future__ import annotations

from pathlib import Path

import pytest

from retrosfx.engine import EncodedSound
from retrosfx.errors import EncodingError, ExportError
from retrosfx.export import decode_payload, parse_data_uri, to_file_bytes, write_sound_file
from retrosfx.synth import ChipSynth


class _BrokenEngine:
    def __init__(self, payload: str) -> None:
        self.payload = payload

    def encode(self, sound: object) -> EncodedSound:
        return EncodedSound(mime_type="audio/wav", base64_payload=self.payload)


def test_parse_data_uri() -> None:
    encoded = parse_data_uri("data:audio/wav;base64,UklGRg==")
    assert encoded.mime_type == "audio/wav"
    assert encoded.base64_payload == "UklGRg=="


def test_parse_data_uri_rejects_other_shapes() -> None:
    with pytest.raises(EncodingError):
        parse_data_uri("UklGRg==")
    with pytest.raises(EncodingError):
        parse_data_uri("data:audio/wav,UklGRg==")


def test_decode_payload_rejects_empty_and_invalid() -> None:
    with pytest.raises(EncodingError, match="empty"):
        decode_payload(EncodedSound(base64_payload=""))
    with pytest.raises(EncodingError, match="base64"):
        decode_payload(EncodedSound(base64_payload="not base64!!"))


def test_to_file_bytes_surfaces_bad_encoder_output() -> None:
    with pytest.raises(EncodingError):
        to_file_bytes(_BrokenEngine("%%%"), object())  # type: ignore[arg-type]


def test_to_file_bytes_round_trips_engine_output() -> None:
    engine = ChipSynth()
    data = to_file_bytes(engine, engine.render())
    assert data.startswith(b"RIFF")
    assert len(data) > 44


def test_write_sound_file_creates_parents(tmp_path: Path) -> None:
    target = tmp_path / "nested" / "dir" / "blip.wav"
    written = write_sound_file(str(target), b"RIFF0000WAVE")
    assert written == target
    assert target.read_bytes() == b"RIFF0000WAVE"


def test_write_sound_file_reports_os_errors(tmp_path: Path) -> None:
    blocker = tmp_path / "file.txt"
    blocker.write_text("x")
    with pytest.raises(ExportError, match="Could not write"):
        write_sound_file(blocker / "out.wav", b"data")
