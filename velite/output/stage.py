"""Run every output step for a finished build."""

from __future__ import annotations

import asyncio
import inspect
import logging
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping

from ..config import Config
from .assets import AssetCopyResult, output_assets
from .data import output_data
from .emission import EmissionCache
from .entry import output_entry

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class BuildOutputs:
    """Aggregate results from the output stage."""

    entry_paths: list[Path]
    counts: dict[str, int]
    assets: AssetCopyResult
    elapsed_seconds: float = 0.0
    collections: list[str] = field(default_factory=list)


async def output_build(
    config: Config,
    result: Mapping[str, Any],
    assets: Mapping[str, str | Path] | None = None,
    *,
    config_module: str | Path | None = None,
    cache: EmissionCache | None = None,
    minify: bool | None = None,
) -> BuildOutputs:
    """Write entry, data and asset outputs concurrently, then notify ``config.callback``."""
    begin = time.perf_counter()
    output = config.output
    output.data.mkdir(parents=True, exist_ok=True)
    output.static.mkdir(parents=True, exist_ok=True)

    compact = output.compact if minify is None else minify
    entry_paths, counts, copied = await asyncio.gather(
        output_entry(output.data, output.format, config_module, config.collections, cache=cache),
        output_data(output.data, result, cache=cache, minify=compact),
        output_assets(output.static, assets or {}, cache=cache),
    )

    if config.callback is not None:
        built = {key: data for key, data in result.items() if data is not None}
        outcome = config.callback(built)
        if inspect.isawaitable(outcome):
            await outcome

    elapsed = time.perf_counter() - begin
    logger.info("build output finished in %.2f ms", elapsed * 1000)
    return BuildOutputs(
        entry_paths=entry_paths,
        counts=counts,
        assets=copied,
        elapsed_seconds=elapsed,
        collections=list(config.collections),
    )


def run_output_build(
    config: Config,
    result: Mapping[str, Any],
    assets: Mapping[str, str | Path] | None = None,
    **options: Any,
) -> BuildOutputs:
    """Synchronous wrapper around :func:`output_build`."""
    return asyncio.run(output_build(config, result, assets, **options))
