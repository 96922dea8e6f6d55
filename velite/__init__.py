"""Velite output stage: persist built collections as data, entry and asset files."""

from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version as load_pkg_version
from pathlib import Path
import tomllib

from .config import Config, OutputConfig, load_config
from .output import (
    EmissionCache,
    EmitStatus,
    ModuleFormat,
    OutputError,
    emit,
    output_assets,
    output_build,
    output_data,
    output_entry,
)
from .schema import Collection, Schema, SourceFormat

__all__ = [
    "Collection",
    "Config",
    "EmissionCache",
    "EmitStatus",
    "ModuleFormat",
    "OutputConfig",
    "OutputError",
    "Schema",
    "SourceFormat",
    "__version__",
    "emit",
    "load_config",
    "output_assets",
    "output_build",
    "output_data",
    "output_entry",
]


def _read_local_project_version() -> str:
    """Read the project version from pyproject.toml when the package is uninstalled."""
    pyproject = Path(__file__).resolve().parent.parent / "pyproject.toml"
    try:
        data = tomllib.loads(pyproject.read_text(encoding="utf-8"))
    except FileNotFoundError:
        return "0.0.0"
    return data.get("project", {}).get("version", "0.0.0")


try:
    __version__ = load_pkg_version("velite")
except PackageNotFoundError:
    __version__ = _read_local_project_version()
