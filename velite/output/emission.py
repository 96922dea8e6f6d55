"""Change-gated writes shared by every output step."""

from __future__ import annotations

import asyncio
import logging
import threading
import weakref
from enum import Enum
from pathlib import Path

logger = logging.getLogger(__name__)


class OutputError(OSError):
    """Filesystem failure while writing or copying an output artifact."""

    def __init__(self, errno: int | None, strerror: str | None, path: str) -> None:
        super().__init__(errno, strerror, path)
        self.path = path

    @classmethod
    def from_os_error(cls, exc: OSError, path: str | Path) -> "OutputError":
        offending = exc.filename if exc.filename is not None else path
        return cls(exc.errno, exc.strerror or str(exc), str(offending))


class EmitStatus(str, Enum):
    """Outcome of a single emission."""

    WROTE = "wrote"
    SKIPPED = "skipped"


class EmissionCache:
    """Remember the last content emitted per key for the lifetime of a build process.

    Keys are output file paths, or logical asset names for copied files. Nothing
    reads artifacts back through the cache; it only gates redundant writes.
    """

    def __init__(self) -> None:
        self._entries: dict[str, str] = {}
        # asyncio locks bind to the loop they are first awaited on
        self._locks: weakref.WeakKeyDictionary[asyncio.AbstractEventLoop, dict[str, asyncio.Lock]] = (
            weakref.WeakKeyDictionary()
        )
        self._mutex = threading.Lock()

    def __len__(self) -> int:
        with self._mutex:
            return len(self._entries)

    def __contains__(self, key: object) -> bool:
        with self._mutex:
            return key in self._entries

    def get(self, key: str) -> str | None:
        with self._mutex:
            return self._entries.get(key)

    def matches(self, key: str, value: str) -> bool:
        with self._mutex:
            return self._entries.get(key) == value

    def record(self, key: str, value: str) -> None:
        with self._mutex:
            self._entries[key] = value

    def snapshot(self) -> dict[str, str]:
        with self._mutex:
            return dict(self._entries)

    def clear(self) -> None:
        with self._mutex:
            self._entries.clear()
            self._locks.clear()

    def lock_for(self, key: str) -> asyncio.Lock:
        """Per-key lock held across check and write so no other emit interleaves.

        Locks are scoped to the running event loop, so one cache can serve
        several ``asyncio.run`` calls in the same process.
        """
        loop = asyncio.get_running_loop()
        with self._mutex:
            locks = self._locks.get(loop)
            if locks is None:
                locks = self._locks[loop] = {}
            lock = locks.get(key)
            if lock is None:
                lock = locks[key] = asyncio.Lock()
            return lock

    async def emit(self, path: str | Path, content: str, log: str | None = None) -> EmitStatus:
        key = str(path)
        async with self.lock_for(key):
            if self.matches(key, content):
                logger.debug("skipped write '%s' with same content", key)
                return EmitStatus.SKIPPED
            await asyncio.to_thread(_write_file, Path(path), content)
            self.record(key, content)
        if log:
            logger.info(log)
        else:
            logger.info("wrote '%s' with %d bytes", key, len(content.encode("utf-8")))
        return EmitStatus.WROTE


default_cache = EmissionCache()


async def emit(
    path: str | Path,
    content: str,
    log: str | None = None,
    *,
    cache: EmissionCache | None = None,
) -> EmitStatus:
    """Write ``content`` to ``path`` unless it is exactly what was last written there."""
    return await resolve_cache(cache).emit(path, content, log)


def resolve_cache(cache: EmissionCache | None) -> EmissionCache:
    return cache if cache is not None else default_cache


def _write_file(path: Path, content: str) -> None:
    try:
        path.write_text(content, encoding="utf-8", newline="")
    except OSError as exc:
        raise OutputError.from_os_error(exc, path) from exc
