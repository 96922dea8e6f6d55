"""Output stage: idempotent emission of data, entry and asset files."""

from .assets import AssetCopyResult, output_assets
from .data import output_data, record_count, serialize
from .emission import EmissionCache, EmitStatus, OutputError, default_cache, emit
from .entry import EntryBuilder, output_entry, relative_module_path
from .stage import BuildOutputs, output_build, run_output_build
from ..config import ModuleFormat

__all__ = [
    "AssetCopyResult",
    "BuildOutputs",
    "EmissionCache",
    "EmitStatus",
    "EntryBuilder",
    "ModuleFormat",
    "OutputError",
    "default_cache",
    "emit",
    "output_assets",
    "output_build",
    "output_data",
    "output_entry",
    "record_count",
    "relative_module_path",
    "run_output_build",
    "serialize",
]
