import os
from enum import Enum
from functools import lru_cache
from pathlib import Path
from typing import Any, Callable

import yaml
from pydantic import BaseModel, Field, field_validator, model_validator

from .schema import Collection, Schema, validate_collection_key

CONFIG_FILENAME = "velite.yml"
MODE_ENV_VARS = ("VELITE_ENV", "NODE_ENV")

Parser = Callable[[Path], Any]
BuildCallback = Callable[[dict[str, Any]], Any]


class ModuleFormat(str, Enum):
    """Module system used by the generated entry file."""

    COMMONJS = "commonjs"
    ESMODULE = "esmodule"

    @classmethod
    def _missing_(cls, value: object) -> "ModuleFormat | None":
        aliases = {"cjs": cls.COMMONJS, "esm": cls.ESMODULE}
        if isinstance(value, str):
            return aliases.get(value.strip().lower())
        return None


@lru_cache(maxsize=1)
def is_production() -> bool:
    """Resolve the build mode once per process from the environment."""
    for name in MODE_ENV_VARS:
        value = os.environ.get(name)
        if value:
            return value.strip().lower() == "production"
    return False


class OutputConfig(BaseModel):
    """Destinations and formatting of generated artifacts."""

    data: Path = Field(default=Path(".velite"), description="Directory for data files and the entry module.")
    static: Path = Field(default=Path("public/static"), description="Directory receiving copied assets.")
    public: Path = Field(default=Path("public"), description="Public root the static directory is served from.")
    format: ModuleFormat = Field(default=ModuleFormat.ESMODULE, description="Entry module flavour.")
    minify: bool | None = Field(
        default=None,
        description="Write compact JSON; unset follows the VELITE_ENV/NODE_ENV build mode.",
    )

    @field_validator("data", "static", "public", mode="before")
    def _ensure_path(cls, value: Any) -> Path:
        return Path(value)

    @field_validator("format", mode="before")
    def _normalize_format(cls, value: Any) -> ModuleFormat:
        return ModuleFormat(value)

    @property
    def compact(self) -> bool:
        if self.minify is not None:
            return self.minify
        return is_production()


class Config(BaseModel):
    root: Path = Field(default=Path("content"), description="Directory holding content sources.")
    output: OutputConfig = Field(default_factory=OutputConfig)
    schemas: dict[str, Schema] = Field(default_factory=dict)
    collections: dict[str, Collection] = Field(default_factory=dict)
    callback: BuildCallback | None = Field(
        default=None,
        description="Invoked with the written results once the output stage completes.",
    )
    parsers: dict[str, Parser] = Field(
        default_factory=dict,
        description="Custom source parsers keyed by source format.",
    )

    @field_validator("root", mode="before")
    def _ensure_path(cls, value: Any) -> Path:
        return Path(value)

    @model_validator(mode="before")
    @classmethod
    def _bind_schemas(cls, data: Any) -> Any:
        """Resolve schema references by name and derive missing collections."""
        if not isinstance(data, dict):
            return data
        schemas = data.get("schemas") or {}
        collections = data.get("collections")
        if collections is None:
            data = dict(data)
            data["collections"] = {
                key: {"schema": schema} for key, schema in schemas.items()
            }
            return data

        bound: dict[str, Any] = {}
        for key, collection in collections.items():
            if isinstance(collection, dict):
                reference = collection.get("schema")
                if isinstance(reference, str):
                    if reference not in schemas:
                        raise ValueError(f"collection '{key}' references unknown schema '{reference}'")
                    collection = {**collection, "schema": schemas[reference]}
            bound[key] = collection
        data = dict(data)
        data["collections"] = bound
        return data

    @field_validator("collections")
    def _check_keys(cls, value: dict[str, Collection]) -> dict[str, Collection]:
        for key in value:
            validate_collection_key(key)
        return value

    def collection_types(self) -> dict[str, str]:
        return {key: collection.type_name(key) for key, collection in self.collections.items()}


def load_config(path: str | Path) -> Config:
    """Load configuration and resolve relative paths based on the config location.

    The ``path`` argument may point to a file (e.g., ``/site/velite.yml``) or a
    directory containing that file. ``root`` and the output directories are
    interpreted relative to the directory holding the config file.
    """
    candidate = Path(path)
    data: dict[str, Any] = {}
    base_dir: Path
    if candidate.is_dir():
        config_file = candidate / CONFIG_FILENAME
        if config_file.exists():
            with config_file.open("r", encoding="utf-8") as handle:
                data = yaml.safe_load(handle) or {}
        base_dir = candidate.resolve()
    else:
        if not candidate.exists():
            raise FileNotFoundError(candidate)
        with candidate.open("r", encoding="utf-8") as handle:
            data = yaml.safe_load(handle) or {}
        base_dir = candidate.parent.resolve()

    if not isinstance(data, dict):
        raise ValueError(f"Config file {candidate} should define a mapping.")

    cfg = Config(**data)

    def _abs(value: Path) -> Path:
        return value if value.is_absolute() else (base_dir / value).resolve()

    cfg.root = _abs(cfg.root)
    out = cfg.output
    out.data = _abs(out.data)
    out.static = _abs(out.static)
    out.public = _abs(out.public)
    return cfg
