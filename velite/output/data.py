"""Persist built collection records as JSON data files."""

from __future__ import annotations

import asyncio
import json
import logging
import time
from pathlib import Path
from typing import Any, Mapping

from pydantic import TypeAdapter

from ..config import is_production
from .emission import EmissionCache, emit

logger = logging.getLogger(__name__)

_JSON_VALUES: TypeAdapter[Any] = TypeAdapter(Any)


def serialize(data: Any, *, compact: bool) -> str:
    """Render records as JSON: minified when ``compact``, otherwise 2-space indented."""
    if compact:
        return json.dumps(data, ensure_ascii=False, separators=(",", ":"), default=_json_default)
    return json.dumps(data, ensure_ascii=False, indent=2, default=_json_default)


def record_count(data: Any) -> int:
    """Number of records in a result entry; a single record counts as one."""
    if isinstance(data, (list, tuple)):
        return len(data)
    return 1


async def output_data(
    dest: str | Path,
    result: Mapping[str, Any],
    *,
    cache: EmissionCache | None = None,
    minify: bool | None = None,
) -> dict[str, int]:
    """Write one ``<key>.json`` per present result entry and return record counts.

    ``None`` entries are skipped entirely. Writes run concurrently; the first
    failure is raised once dispatched, without rolling back other writes.
    """
    begin = time.perf_counter()
    destination = Path(dest)
    compact = is_production() if minify is None else minify
    present = {key: data for key, data in result.items() if data is not None}

    async def _write(key: str, data: Any) -> None:
        target = destination / f"{key}.json"
        content = serialize(data, compact=compact)
        await emit(target, content, f"wrote '{target}' with {record_count(data)} {key}", cache=cache)

    await asyncio.gather(*(_write(key, data) for key, data in present.items()))

    counts = {key: record_count(data) for key, data in present.items()}
    summary = ", ".join(f"{count} {key}" for key, count in counts.items())
    logger.info("output %s (%.2f ms)", summary, (time.perf_counter() - begin) * 1000)
    return counts


def _json_default(value: Any) -> Any:
    # Same JSON rendering as pydantic models, so datetimes read alike everywhere.
    return _JSON_VALUES.dump_python(value, mode="json")
