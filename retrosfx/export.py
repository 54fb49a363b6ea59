from __future__ import annotations

import base64
import binascii
import logging
import re
from pathlib import Path

from .engine import EncodedSound, SoundHandle, SynthEngine
from .errors import EncodingError, ExportError

_LOGGER = logging.getLogger("retrosfx.export")
_DATA_URI = re.compile(
    r"^data:(?P<mime>[^;,]*)(?:;[^;,]*)*;base64,(?P<data>.*)$",
    re.DOTALL,
)


def parse_data_uri(uri: str) -> EncodedSound:
    """Split a ``data:<mime>;base64,<payload>`` URI into an ``EncodedSound``."""
    match = _DATA_URI.match(uri.strip())
    if match is None:
        raise EncodingError("Audio payload is not a base64 data URI")
    return EncodedSound(
        mime_type=match.group("mime") or "application/octet-stream",
        base64_payload=match.group("data"),
    )


def decode_payload(encoded: EncodedSound) -> bytes:
    payload = encoded.base64_payload.strip()
    if not payload:
        raise EncodingError("Audio payload is empty")
    try:
        data = base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise EncodingError(f"Audio payload is not valid base64: {exc}") from exc
    if not data:
        raise EncodingError("Audio payload decoded to zero bytes")
    return data


def to_file_bytes(engine: SynthEngine, sound: SoundHandle) -> bytes:
    """Encode ``sound`` through the engine and return the raw file bytes."""
    encoded = engine.encode(sound)
    return decode_payload(parse_data_uri(encoded.data_uri))


def write_sound_file(path: str | Path, data: bytes) -> Path:
    target = Path(path).expanduser()
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(data)
    except OSError as exc:
        raise ExportError(f"Could not write {target}: {exc.strerror or exc}") from exc
    _LOGGER.info("Wrote %d bytes to %s", len(data), target)
    return target
