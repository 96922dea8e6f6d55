"""Generate the entry module and type declarations for built collections."""

from __future__ import annotations

import logging
import os
import time
from pathlib import Path
from typing import Any, Mapping

from ..config import ModuleFormat
from ..schema import Collection, interface_members, validate_collection_key
from .emission import EmissionCache, emit

logger = logging.getLogger(__name__)

BANNER = "// This file is generated by Velite"
ENTRY_FILENAME = "index.js"
DECLARATION_FILENAME = "index.d.ts"
INDENT = "  "


class EntryBuilder:
    """Accumulate entry and declaration statements for a set of collections.

    Statements are grouped into blocks; rendering joins blocks with a blank line
    and places the generated-file banner on top.
    """

    def __init__(self, module_format: ModuleFormat | str, config_module: str | None = None) -> None:
        self.module_format = ModuleFormat(module_format)
        self.config_module = config_module
        self.exports: list[str] = []
        self.declarations: list[list[str]] = []
        if config_module is not None:
            self.declarations.append([f"import type __vc from '{config_module}'"])
            self.declarations.append(["type Collections = typeof __vc.collections"])

    def add(self, key: str, collection: Collection) -> None:
        validate_collection_key(key)
        self.exports.append(self._export_statement(key))
        self.declarations.append(self._declaration_block(key, collection))

    def render_entry(self) -> str:
        return _render([self.exports])

    def render_declaration(self) -> str:
        return _render(self.declarations) + "\n"

    def _export_statement(self, key: str) -> str:
        if self.module_format is ModuleFormat.COMMONJS:
            return f"exports.{key} = require('./{key}.json')"
        return f"export {{ default as {key} }} from './{key}.json'"

    def _declaration_block(self, key: str, collection: Collection) -> list[str]:
        type_name = collection.type_name(key)
        suffix = "" if collection.single else "[]"
        constant = f"export declare const {key}: {type_name}{suffix}"
        if self.config_module is not None:
            return [
                f"export type {type_name} = Collections['{key}']['schema']['_output']",
                constant,
            ]

        schema = collection.schema_
        if schema is None:
            return [f"export type {type_name} = Record<string, unknown>", constant]
        members = interface_members(schema.fields, schema.computeds)
        block = [f"export interface {type_name} {{"]
        block.extend(f"{INDENT}{line}" for line in members)
        block.append("}")
        block.append(constant)
        return block


def relative_module_path(dest: str | Path, config_path: str | Path) -> str:
    """Path of the config module as seen from ``dest``, always with forward slashes."""
    return os.path.relpath(Path(config_path), Path(dest)).replace("\\", "/")


async def output_entry(
    dest: str | Path,
    module_format: ModuleFormat | str,
    config_module: str | Path | None,
    collections: Mapping[str, Collection | Mapping[str, Any]],
    *,
    cache: EmissionCache | None = None,
) -> list[Path]:
    """Write ``index.js`` and ``index.d.ts`` for ``collections`` into ``dest``.

    When ``config_module`` is omitted, declarations are rendered from each
    collection's schema fields instead of referencing the config module type.
    """
    begin = time.perf_counter()
    destination = Path(dest)

    module_path = None
    if config_module is not None:
        module_path = relative_module_path(destination, config_module)

    builder = EntryBuilder(module_format, module_path)
    for key, collection in collections.items():
        builder.add(key, _coerce_collection(collection))

    entry_file = destination / ENTRY_FILENAME
    await emit(entry_file, builder.render_entry(), f"created entry file in '{entry_file}'", cache=cache)

    dts_file = destination / DECLARATION_FILENAME
    await emit(dts_file, builder.render_declaration(), f"created entry dts file in '{dts_file}'", cache=cache)

    logger.info("output entry file in '%s' (%.2f ms)", destination, (time.perf_counter() - begin) * 1000)
    return [entry_file, dts_file]


def _coerce_collection(value: Collection | Mapping[str, Any]) -> Collection:
    if isinstance(value, Collection):
        return value
    return Collection.model_validate(value)


def _render(blocks: list[list[str]]) -> str:
    body = "\n\n".join("\n".join(block) for block in blocks if block)
    return f"{BANNER}\n\n{body}"
