from __future__ import annotations

import asyncio
import os
from pathlib import Path

import pytest

from velite.output import EmissionCache, OutputError, output_assets


def _source(root: Path, name: str, payload: bytes) -> Path:
    root.mkdir(parents=True, exist_ok=True)
    path = root / name
    path.write_bytes(payload)
    return path


def test_repeated_copy_is_skipped(tmp_path: Path) -> None:
    source = _source(tmp_path / "src", "a.png", b"\x89PNG\r\n\x1a\nfake")
    dest = tmp_path / "static"
    dest.mkdir()
    cache = EmissionCache()

    first = asyncio.run(output_assets(dest, {"a.png": str(source)}, cache=cache))
    copied = dest / "a.png"
    stat_before = copied.stat()
    second = asyncio.run(output_assets(dest, {"a.png": str(source)}, cache=cache))

    assert first.count == 1
    assert second.count == 0
    assert second.skipped == ["a.png"]
    assert copied.read_bytes() == source.read_bytes()
    assert copied.stat().st_mtime_ns == stat_before.st_mtime_ns


def test_new_source_for_same_target_is_copied(tmp_path: Path) -> None:
    first_source = _source(tmp_path / "v1", "logo.svg", b"<svg>1</svg>")
    second_source = _source(tmp_path / "v2", "logo.svg", b"<svg>2</svg>")
    dest = tmp_path / "static"
    dest.mkdir()
    cache = EmissionCache()

    asyncio.run(output_assets(dest, {"logo.svg": first_source}, cache=cache))
    result = asyncio.run(output_assets(dest, {"logo.svg": second_source}, cache=cache))

    assert result.copied == ["logo.svg"]
    assert (dest / "logo.svg").read_bytes() == b"<svg>2</svg>"
    assert cache.get("logo.svg") == str(second_source)


def test_copies_many_assets(tmp_path: Path) -> None:
    assets = {
        f"image-{index}.jpg": str(_source(tmp_path / "src", f"{index}.jpg", os.urandom(64)))
        for index in range(6)
    }
    dest = tmp_path / "static"
    dest.mkdir()

    result = asyncio.run(output_assets(dest, assets, cache=EmissionCache()))

    assert result.count == 6
    assert sorted(result.copied) == sorted(assets)
    for name, source in assets.items():
        assert (dest / name).read_bytes() == Path(source).read_bytes()


def test_missing_source_fails_the_batch(tmp_path: Path) -> None:
    present = _source(tmp_path / "src", "ok.txt", b"ok")
    dest = tmp_path / "static"
    dest.mkdir()
    cache = EmissionCache()

    with pytest.raises(OutputError) as excinfo:
        asyncio.run(
            output_assets(
                dest,
                {"ok.txt": present, "gone.txt": tmp_path / "src" / "gone.txt"},
                cache=cache,
            )
        )

    assert excinfo.value.path == str(tmp_path / "src" / "gone.txt")
    assert "gone.txt" not in cache


def test_empty_asset_map_copies_nothing(tmp_path: Path) -> None:
    result = asyncio.run(output_assets(tmp_path, {}, cache=EmissionCache()))

    assert result.count == 0
    assert result.skipped == []
