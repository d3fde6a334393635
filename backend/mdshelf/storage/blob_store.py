"""Blob store — raw markdown content kept as files in one directory."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

logger = logging.getLogger(__name__)


def blob_key(file_id: str) -> str:
    return f"{file_id}.md"


class BlobStore:
    """Overwrite-or-create storage keyed by plain file names.

    Blocking file I/O runs in the default thread pool.
    """

    def __init__(self, root: str | Path):
        self._root = Path(root)
        self._root.mkdir(parents=True, exist_ok=True)

    @property
    def root(self) -> Path:
        return self._root

    @staticmethod
    def _valid(key: str) -> bool:
        return bool(key) and Path(key).name == key and not key.startswith(".")

    def _path(self, key: str) -> Path:
        if not self._valid(key):
            raise ValueError(f"Invalid blob key: {key!r}")
        return self._root / key

    async def get(self, key: str) -> str | None:
        """Blob content, or None if absent. Keys outside the store read as absent."""
        if not self._valid(key):
            return None
        path = self._path(key)

        def _read() -> str | None:
            try:
                return path.read_text(encoding="utf-8")
            except FileNotFoundError:
                return None

        return await asyncio.to_thread(_read)

    async def put(self, key: str, content: str) -> None:
        path = self._path(key)

        def _write() -> None:
            tmp = path.with_name(f".{path.name}.tmp")
            tmp.write_text(content, encoding="utf-8")
            tmp.replace(path)

        await asyncio.to_thread(_write)

    async def delete(self, key: str) -> None:
        """Delete a blob. A missing or unmappable key is not an error."""
        if not self._valid(key):
            logger.warning("Ignoring delete of invalid blob key %r", key)
            return
        path = self._path(key)
        await asyncio.to_thread(path.unlink, True)

    async def exists(self, key: str) -> bool:
        if not self._valid(key):
            return False
        return await asyncio.to_thread(self._path(key).is_file)
