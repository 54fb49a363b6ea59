from __future__ import annotations

from pathlib import Path

import pytest
import soundfile as sf

from retrosfx.cli import build_parser, main


@pytest.fixture(autouse=True)
def _isolated_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("RETROSFX_LOG_DIR", str(tmp_path / "logs"))
    for name in ("RETROSFX_SAMPLE_RATE", "RETROSFX_MAX_SECONDS", "RETROSFX_DEBUG"):
        monkeypatch.delenv(name, raising=False)


def test_presets_command(capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["presets"]) == 0
    out = capsys.readouterr().out
    assert "Available presets:" in out
    assert "Laser/Shoot sounds" in out


def test_generate_with_override(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    target = tmp_path / "laser.wav"
    status = main(
        ["generate", "laser", "--output", str(target), "--param", "frequency_start=0.7"]
    )
    assert status == 0
    assert target.stat().st_size > 44
    assert "Freq: 0.70" in capsys.readouterr().out


def test_random_with_seed_is_reproducible(tmp_path: Path) -> None:
    a = tmp_path / "a.wav"
    b = tmp_path / "b.wav"
    assert main(["random", "--output", str(a), "--seed", "7"]) == 0
    assert main(["random", "--output", str(b), "--seed", "7"]) == 0
    assert a.read_bytes() == b.read_bytes()


def test_custom_rejects_out_of_range(tmp_path: Path) -> None:
    target = tmp_path / "bad.wav"
    assert main(["custom", "--output", str(target), "--param", "decayTime=0"]) == 1
    assert not target.exists()


def test_custom_requires_a_parameter(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["custom", "--output", str(tmp_path / "x.wav")]) == 1
    assert "--param" in capsys.readouterr().err


def test_sample_rate_from_environment(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("RETROSFX_SAMPLE_RATE", "22050")
    target = tmp_path / "blip.wav"
    assert main(["generate", "blip", "--output", str(target)]) == 0
    assert sf.info(str(target)).samplerate == 22050


@pytest.mark.parametrize("raw", ["frequency_start", "=0.5", "punch=loud"])
def test_parser_rejects_bad_assignments(raw: str) -> None:
    with pytest.raises(SystemExit):
        build_parser().parse_args(["custom", "--output", "x.wav", "--param", raw])


def test_parser_parses_seed() -> None:
    args = build_parser().parse_args(["random", "--output", "x.wav", "--seed", "1.5"])
    assert args.seed == 1.5
    args = build_parser().parse_args(["random", "--output", "x.wav", "--seed", "12"])
    assert args.seed == 12
