"""Discovery and loading of decoder plugins.

A plugin is a Python module exposing ``register(registry)``. Built-in
plugins live in the ``hexmark.decoders`` package; user plugins are ``*.py``
files in the configured plugin directories.
"""

from __future__ import annotations

import importlib
import importlib.util
import logging
import os
import pkgutil
from pathlib import Path
from types import ModuleType

from hexmark.core.errors import PluginError
from hexmark.core.registry import DecoderRegistry

logger = logging.getLogger(__name__)

BUILTIN_PACKAGE = "hexmark.decoders"


def get_user_plugins_dir() -> Path:
    """Get platform-appropriate user plugins directory."""
    if os.name == "nt":  # Windows
        base = os.environ.get("APPDATA", os.path.expanduser("~"))
        return Path(base) / "hexmark" / "plugins"
    else:  # macOS, Linux
        return Path.home() / ".config" / "hexmark" / "plugins"


def _register_module(registry: DecoderRegistry, module: ModuleType, origin: str) -> None:
    register = getattr(module, "register", None)
    if not callable(register):
        raise PluginError(origin, TypeError("plugin has no register(registry) function"))
    try:
        register(registry)
    except PluginError:
        raise
    except Exception as e:
        raise PluginError(origin, e) from e


def load_builtin_decoders(registry: DecoderRegistry) -> list[str]:
    """Register every module of the built-in decoders package, in name order."""
    package = importlib.import_module(BUILTIN_PACKAGE)
    names = sorted(info.name for info in pkgutil.iter_modules(package.__path__))
    for name in names:
        qualified = f"{BUILTIN_PACKAGE}.{name}"
        logger.debug("loading built-in plugin %s", qualified)
        _register_module(registry, importlib.import_module(qualified), qualified)
    return names


def load_plugin_file(registry: DecoderRegistry, path: Path) -> ModuleType:
    """Import a single plugin file and let it register its decoders."""
    spec = importlib.util.spec_from_file_location(f"hexmark_plugin_{path.stem}", path)
    if spec is None or spec.loader is None:
        raise PluginError(str(path), ImportError("not an importable Python file"))
    module = importlib.util.module_from_spec(spec)
    try:
        spec.loader.exec_module(module)
    except Exception as e:
        raise PluginError(str(path), e) from e
    _register_module(registry, module, str(path))
    return module


def load_plugin_dirs(registry: DecoderRegistry, dirs: list[Path]) -> list[Path]:
    """Load ``*.py`` files from each directory in turn; missing directories are skipped."""
    loaded: list[Path] = []
    for directory in dirs:
        if not directory.is_dir():
            continue
        for path in sorted(directory.glob("*.py")):
            logger.debug("loading plugin %s", path)
            load_plugin_file(registry, path)
            loaded.append(path)
    return loaded


def load_plugins(registry: DecoderRegistry, dirs: list[Path] | None = None) -> DecoderRegistry:
    """Register built-in decoders first, then user plugins."""
    load_builtin_decoders(registry)
    load_plugin_dirs(registry, [get_user_plugins_dir()] if dirs is None else dirs)
    return registry
