from __future__ import annotations

import struct
import zlib
from pathlib import Path

import pytest

from hexmark.cli import main


@pytest.fixture(autouse=True)
def isolated_home(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    # Keep user configuration and plugins out of the way
    monkeypatch.setenv("HOME", str(tmp_path / "home"))


def write_png(tmp_path: Path) -> Path:
    ihdr = b"IHDR" + struct.pack(">IIBBBBB", 1, 1, 8, 0, 0, 0, 0)
    iend = b"IEND"
    data = (
        b"\x89PNG\r\n\x1a\n"
        + struct.pack(">I", 13) + ihdr + struct.pack(">I", zlib.crc32(ihdr))
        + struct.pack(">I", 0) + iend + struct.pack(">I", zlib.crc32(iend))
    )
    p = tmp_path / "tiny.png"
    p.write_bytes(data)
    return p


def test_list_types(capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["-t", "list"]) == 0
    assert capsys.readouterr().out.split() == ["elf", "gzip", "png"]


def test_dump(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    p = write_png(tmp_path)
    assert main(["--dump", str(p)]) == 0
    out = capsys.readouterr().out
    assert "PNG signature" in out
    assert "00000000" in out


def test_dump_with_offset_and_size(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    p = tmp_path / "data.bin"
    p.write_bytes(bytes(64))
    assert main(["--dump", "-o", "0x10", "-s", "1w", str(p)]) == 0
    out = capsys.readouterr().out
    assert "00000010" in out


def test_forced_type_failure(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    p = tmp_path / "junk.bin"
    p.write_bytes(b"this is certainly not a png file")
    assert main(["--dump", "-t", "png", str(p)]) == 1
    captured = capsys.readouterr()
    assert "decoder 'png' failed" in captured.err
    assert captured.out == ""


def test_unknown_type(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    p = tmp_path / "data.bin"
    p.write_bytes(b"abc")
    assert main(["--dump", "-t", "bogus", str(p)]) == 2
    assert "unknown decoder type 'bogus'" in capsys.readouterr().err


def test_missing_file(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["--dump", str(tmp_path / "missing.bin")]) == 2
    assert "file not found" in capsys.readouterr().err


def test_invalid_size_is_a_usage_error(tmp_path: Path) -> None:
    with pytest.raises(SystemExit) as exc:
        main(["-s", "12Q", str(tmp_path / "x")])
    assert exc.value.code == 2


def test_invalid_config(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    cfg = tmp_path / "bad.yaml"
    cfg.write_text("bytes_per_row: -1\n", encoding="utf-8")
    assert main(["--config", str(cfg), "-t", "list"]) == 2
    assert "invalid configuration" in capsys.readouterr().err


def test_user_plugin_dir_from_config(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    plugins = tmp_path / "plugins"
    plugins.mkdir()
    (plugins / "mine.py").write_text(
        "def register(registry):\n    registry.register('mine', lambda c: c.mark('all'))\n",
        encoding="utf-8",
    )
    cfg = tmp_path / "hexmark.yaml"
    cfg.write_text(f"plugin_dirs:\n  - {plugins}\n", encoding="utf-8")
    assert main(["--config", str(cfg), "-t", "list"]) == 0
    assert capsys.readouterr().out.split() == ["elf", "gzip", "png", "mine"]


def write_gzip(tmp_path: Path, fname: bytes) -> Path:
    payload = b"hello\n"
    comp = zlib.compressobj(9, zlib.DEFLATED, -15)
    body = comp.compress(payload) + comp.flush()
    data = (
        b"\x1f\x8b\x08\x08" + struct.pack("<I", 0) + b"\x00\xff"
        + fname + b"\x00"
        + body
        + struct.pack("<II", zlib.crc32(payload), len(payload))
    )
    p = tmp_path / "member.gz"
    p.write_bytes(data)
    return p


@pytest.mark.parametrize("fname", ["a[/x]b", "[red]secret"])
def test_dump_prints_bracketed_labels_verbatim(
    tmp_path: Path, capsys: pytest.CaptureFixture[str], fname: str
) -> None:
    p = write_gzip(tmp_path, fname.encode("latin-1"))
    assert main(["--dump", str(p)]) == 0
    assert f"original file name: {fname}" in capsys.readouterr().out
