"""Access helpers for ``meta:{id}`` records shared by all managers."""

from __future__ import annotations

import logging
from typing import AsyncIterator

from mdshelf.schemas.records import META_PREFIX, FileMeta, meta_key
from mdshelf.storage import KvStore

logger = logging.getLogger(__name__)


async def load_meta(store: KvStore, file_id: str) -> FileMeta | None:
    """Load file metadata; absent and corrupt records both yield None."""
    meta = await store.get_model(meta_key(file_id), FileMeta)
    if meta is not None and not meta.id:
        # Records from older deployments carry the id only in the key.
        meta.id = file_id
    return meta


async def save_meta(store: KvStore, meta: FileMeta) -> None:
    await store.put_model(meta_key(meta.id), meta)


async def delete_meta(store: KvStore, file_id: str) -> None:
    await store.delete(meta_key(file_id))


async def iter_meta(store: KvStore) -> AsyncIterator[tuple[str, FileMeta | None]]:
    """Yield ``(file_id, meta)`` for every metadata key; corrupt records yield None."""
    async for key in store.iter_keys(META_PREFIX):
        file_id = key[len(META_PREFIX):]
        yield file_id, await load_meta(store, file_id)
