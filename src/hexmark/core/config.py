"""User configuration: colors, plugin directories and view settings (YAML)."""

from __future__ import annotations

import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from hexmark.core.endian import Endian, normalize_endian
from hexmark.core.errors import ConfigError

# Named colors (normalized to lowercase)
NAMED_COLORS = {
    "black", "white", "gray", "grey", "red", "green", "blue",
    "yellow", "cyan", "magenta", "purple", "orange", "pink", "brown"
}

KNOWN_KEYS = {"colors", "plugin_dirs", "bytes_per_row", "endian"}


def normalize_color(color: str | None) -> tuple[str | None, str | None]:
    """
    Normalize a color specification to a canonical form.

    Returns (normalized_color, error_message).
    - Named colors normalize to lowercase
    - #RGB expands to #RRGGBB
    - #RRGGBB stays as-is but normalized to lowercase
    """
    if color is None:
        return None, None

    if not isinstance(color, str):
        return None, f"color must be a string, got {type(color).__name__}"

    color_lower = color.lower().strip()
    if color_lower in NAMED_COLORS:
        return color_lower, None

    match_rgb = re.match(r"^#([0-9a-fA-F]{3})$", color)
    if match_rgb:
        rgb = match_rgb.group(1).lower()
        return f"#{rgb[0]}{rgb[0]}{rgb[1]}{rgb[1]}{rgb[2]}{rgb[2]}", None

    if re.match(r"^#([0-9a-fA-F]{6})$", color):
        return color_lower, None

    return None, f"Invalid color '{color}'. Use a named color or hex #RGB/#RRGGBB."


@dataclass
class Config:
    colors: dict[str, str] = field(default_factory=dict)
    plugin_dirs: list[Path] | None = None  # None means the default user directory
    bytes_per_row: int = 16
    endian: Endian = "little"


def get_config_path() -> Path:
    """Get platform-appropriate configuration file path."""
    if os.name == "nt":  # Windows
        base = os.environ.get("APPDATA", os.path.expanduser("~"))
        return Path(base) / "hexmark" / "hexmark.yaml"
    else:  # macOS, Linux
        return Path.home() / ".config" / "hexmark" / "hexmark.yaml"


def parse_config(text: str, *, color_roles: set[str] | None = None) -> Config:
    try:
        data = yaml.safe_load(text) or {}
    except yaml.YAMLError as e:
        raise ConfigError([f"YAML parse error: {e}"]) from None

    if not isinstance(data, dict):
        raise ConfigError(["Top-level YAML must be a mapping."])

    errors: list[str] = []
    cfg = Config()

    for key in data:
        if key not in KNOWN_KEYS:
            errors.append(f"unknown key '{key}'")

    colors: Any = data.get("colors") or {}
    if not isinstance(colors, dict):
        errors.append("colors must be a mapping of role to color")
    else:
        for role, value in colors.items():
            if color_roles is not None and role not in color_roles:
                errors.append(f"colors: unknown role '{role}'")
                continue
            normalized, err = normalize_color(value)
            if err:
                errors.append(f"colors.{role}: {err}")
            elif normalized is not None:
                cfg.colors[str(role)] = normalized

    dirs: Any = data.get("plugin_dirs")
    if dirs is not None:
        if not isinstance(dirs, list) or not all(isinstance(d, str) for d in dirs):
            errors.append("plugin_dirs must be a list of paths")
        else:
            cfg.plugin_dirs = [Path(d).expanduser() for d in dirs]

    bpr: Any = data.get("bytes_per_row", cfg.bytes_per_row)
    if not isinstance(bpr, int) or isinstance(bpr, bool) or bpr <= 0:
        errors.append("bytes_per_row must be a positive integer")
    else:
        cfg.bytes_per_row = bpr

    try:
        cfg.endian = normalize_endian(data.get("endian")) or cfg.endian
    except (ValueError, AttributeError) as e:
        errors.append(f"endian: {e}")

    if errors:
        raise ConfigError(errors)
    return cfg


def load_config(path: Path | None = None, *, color_roles: set[str] | None = None) -> Config:
    """Load the configuration file.

    Without an explicit `path` the default location is used, and a missing
    file simply yields the defaults.
    """
    explicit = path is not None
    path = path if path is not None else get_config_path()
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        if explicit:
            raise ConfigError([f"config file not found: {path}"]) from None
        return Config()
    return parse_config(text, color_roles=color_roles)
