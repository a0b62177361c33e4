from __future__ import annotations

from pathlib import Path

import pytest

from hexmark.core import config as config_mod
from hexmark.core.config import Config, load_config, normalize_color, parse_config
from hexmark.core.errors import ConfigError
from hexmark.ui.palette import PALETTE, palette_roles


def test_normalize_color() -> None:
    assert normalize_color("Red") == ("red", None)
    assert normalize_color("#AbC") == ("#aabbcc", None)
    assert normalize_color("#A0B0C0") == ("#a0b0c0", None)
    assert normalize_color(None) == (None, None)
    value, err = normalize_color("#12")
    assert value is None and err
    value, err = normalize_color(7)  # type: ignore[arg-type]
    assert value is None and "string" in err


def test_parse_full_config() -> None:
    cfg = parse_config(
        """
colors:
  field_0: "#f00"
  unmapped_fg: grey
plugin_dirs:
  - ~/decoders
bytes_per_row: 8
endian: be
""",
        color_roles=palette_roles(),
    )
    assert cfg.colors == {"field_0": "#ff0000", "unmapped_fg": "grey"}
    assert cfg.plugin_dirs == [Path("~/decoders").expanduser()]
    assert cfg.bytes_per_row == 8
    assert cfg.endian == "big"
    palette = PALETTE.with_overrides(cfg.colors)
    assert palette.field_colors[0] == "#ff0000"
    assert palette.field_color(None) == "grey"


def test_empty_config_uses_defaults() -> None:
    assert parse_config("") == Config()


def test_all_problems_are_reported() -> None:
    with pytest.raises(ConfigError) as exc:
        parse_config(
            """
colors:
  field_0: notacolor
  nonsense_role: red
bytes_per_row: 0
endian: middle
extra: 1
""",
            color_roles=palette_roles(),
        )
    errors = exc.value.errors
    assert len(errors) == 5
    assert any("extra" in e for e in errors)
    assert any("nonsense_role" in e for e in errors)
    assert any("bytes_per_row" in e for e in errors)
    assert any("endian" in e for e in errors)


def test_top_level_must_be_mapping() -> None:
    with pytest.raises(ConfigError):
        parse_config("- a\n- b\n")


def test_missing_default_config_is_fine(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(config_mod, "get_config_path", lambda: tmp_path / "none.yaml")
    assert load_config() == Config()


def test_missing_explicit_config_is_an_error(tmp_path: Path) -> None:
    with pytest.raises(ConfigError):
        load_config(tmp_path / "none.yaml")


def test_load_config_file(tmp_path: Path) -> None:
    p = tmp_path / "hexmark.yaml"
    p.write_text("bytes_per_row: 32\n", encoding="utf-8")
    assert load_config(p).bytes_per_row == 32
