"""Scan source discovery and loading."""

from __future__ import annotations

import importlib
import importlib.util
import inspect
import json
import logging
import pkgutil
from pathlib import Path
from types import ModuleType

from devsweep.models.source import DevToolSource, ScanSource
from devsweep.core.registry import SourceRegistry
from devsweep.utils import xdg_config_home, xdg_data_home

log = logging.getLogger(__name__)

# Abstract base classes that should not be instantiated
_ABSTRACT_BASES = {ScanSource, DevToolSource}


def _user_source_dir() -> Path:
    return xdg_data_home() / "devsweep" / "sources"


def _config_file() -> Path:
    return xdg_config_home() / "devsweep" / "config.json"


def _find_sources_in_module(module: ModuleType) -> list[type[ScanSource]]:
    """Find all concrete ScanSource subclasses defined in a module."""
    sources: list[type[ScanSource]] = []
    for _, obj in inspect.getmembers(module, inspect.isclass):
        if (
            issubclass(obj, ScanSource)
            and obj not in _ABSTRACT_BASES
            and not inspect.isabstract(obj)
            and obj.__module__ == module.__name__
        ):
            sources.append(obj)
    return sources


def _load_builtin_sources() -> list[type[ScanSource]]:
    """Load sources from the devsweep.sources package."""
    import devsweep.sources as sources_pkg

    found: list[type[ScanSource]] = []
    for _importer, modname, _ispkg in pkgutil.iter_modules(sources_pkg.__path__):
        try:
            module = importlib.import_module(f"devsweep.sources.{modname}")
            found.extend(_find_sources_in_module(module))
        except Exception:
            log.exception("Failed to load built-in source module: %s", modname)
    return found


def _load_sources_from_directory(directory: Path) -> list[type[ScanSource]]:
    """Load sources from an external directory of modules or packages."""
    if not directory.is_dir():
        return []

    found: list[type[ScanSource]] = []
    for path in sorted(directory.iterdir()):
        if path.is_dir() and (path / "__init__.py").exists():
            module_file = path / "source.py"
            if not module_file.exists():
                module_file = path / "__init__.py"
        elif path.suffix == ".py" and path.name != "__init__.py":
            module_file = path
        else:
            continue

        try:
            spec = importlib.util.spec_from_file_location(f"devsweep_ext_source_{path.stem}", module_file)
            if spec is None or spec.loader is None:
                continue
            module = importlib.util.module_from_spec(spec)
            spec.loader.exec_module(module)
            found.extend(_find_sources_in_module(module))
        except Exception:
            log.exception("Failed to load source from: %s", module_file)
    return found


def _get_config_source_paths() -> list[Path]:
    """Read additional source paths from user config."""
    config_file = _config_file()
    if not config_file.exists():
        return []
    try:
        with open(config_file) as f:
            config = json.load(f)
        return [Path(p).expanduser() for p in config.get("source_paths", [])]
    except Exception:
        log.exception("Failed to read config file: %s", config_file)
        return []


def load_sources(registry: SourceRegistry, *, builtin_only: bool = False) -> None:
    """Discover and register all scan sources.

    Searches in order: built-in, user-local, config-specified.
    """
    source_classes: list[type[ScanSource]] = []

    source_classes.extend(_load_builtin_sources())

    if not builtin_only:
        source_classes.extend(_load_sources_from_directory(_user_source_dir()))
        for path in _get_config_source_paths():
            source_classes.extend(_load_sources_from_directory(path))

    for cls in source_classes:
        try:
            registry.register(cls())
        except Exception:
            log.exception("Failed to instantiate source: %s", cls.__name__)

    log.info("Loaded %d sources", len(registry))
