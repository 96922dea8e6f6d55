"""Copy referenced asset files into the static output directory."""

from __future__ import annotations

import asyncio
import logging
import shutil
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping

from .emission import EmissionCache, OutputError, resolve_cache

logger = logging.getLogger(__name__)


@dataclass
class AssetCopyResult:
    """Summary of copied and skipped assets."""

    copied: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)

    @property
    def count(self) -> int:
        return len(self.copied)


async def output_assets(
    dest: str | Path,
    assets: Mapping[str, str | Path],
    *,
    cache: EmissionCache | None = None,
) -> AssetCopyResult:
    """Copy each ``target name -> source path`` pair into ``dest``.

    A pair already copied by this process is skipped. Copies run concurrently
    and the first failure is raised once all have been dispatched.
    """
    begin = time.perf_counter()
    destination = Path(dest)
    emitted = resolve_cache(cache)
    result = AssetCopyResult()

    async def _copy(name: str, source: str) -> None:
        async with emitted.lock_for(name):
            if emitted.matches(name, source):
                logger.debug("skipped copy '%s' with same content", name)
                result.skipped.append(name)
                return
            await asyncio.to_thread(_copy_file, Path(source), destination / name)
            emitted.record(name, source)
        result.copied.append(name)

    await asyncio.gather(*(_copy(name, str(source)) for name, source in assets.items()))

    logger.info("output %d assets (%.2f ms)", result.count, (time.perf_counter() - begin) * 1000)
    return result


def _copy_file(source: Path, target: Path) -> None:
    try:
        shutil.copy2(source, target)
    except OSError as exc:
        raise OutputError.from_os_error(exc, target) from exc
