"""Key/value metadata store on top of a single SQLite table.

Every call opens its own short session and commits immediately, so the store
only guarantees per-key consistency. Callers that touch several keys (folder
membership, history cleanup) must tolerate a crash between writes.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Any, AsyncIterator, TypeVar

from pydantic import BaseModel, ValidationError
from sqlalchemy import delete, func, select
from sqlalchemy.dialects.sqlite import insert
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from mdshelf.models.kv_entry import KvEntry

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)


@dataclass
class KvListResult:
    """One page of a prefix listing."""

    keys: list[str] = field(default_factory=list)
    cursor: str | None = None
    list_complete: bool = True


class KvStore:
    """get / put / delete / list(prefix) over the ``kv_entries`` table."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession], page_size: int = 1000):
        self._session_factory = session_factory
        self._page_size = page_size

    async def get(self, key: str) -> str | None:
        async with self._session_factory() as db:
            result = await db.execute(select(KvEntry.value).where(KvEntry.key == key))
            return result.scalar_one_or_none()

    async def put(self, key: str, value: str) -> None:
        stmt = insert(KvEntry).values(key=key, value=value)
        stmt = stmt.on_conflict_do_update(
            index_elements=[KvEntry.key],
            set_={"value": stmt.excluded.value, "updated_at": func.now()},
        )
        async with self._session_factory() as db:
            await db.execute(stmt)
            await db.commit()

    async def delete(self, key: str) -> None:
        """Delete a key. Deleting a missing key is not an error."""
        async with self._session_factory() as db:
            await db.execute(delete(KvEntry).where(KvEntry.key == key))
            await db.commit()

    async def list(
        self,
        prefix: str = "",
        cursor: str | None = None,
        limit: int | None = None,
    ) -> KvListResult:
        """List keys starting with ``prefix`` in key order.

        The cursor is the last key of the previous page; keys deleted between
        pages do not shift the next page.
        """
        limit = limit or self._page_size
        stmt = select(KvEntry.key).order_by(KvEntry.key).limit(limit + 1)
        if prefix:
            stmt = stmt.where(KvEntry.key.startswith(prefix, autoescape=True))
        if cursor is not None:
            stmt = stmt.where(KvEntry.key > cursor)

        async with self._session_factory() as db:
            result = await db.execute(stmt)
            keys = list(result.scalars().all())

        if len(keys) > limit:
            keys = keys[:limit]
            return KvListResult(keys=keys, cursor=keys[-1], list_complete=False)
        return KvListResult(keys=keys, cursor=None, list_complete=True)

    async def iter_keys(self, prefix: str = "") -> AsyncIterator[str]:
        """Walk every key under ``prefix`` page by page."""
        cursor = None
        while True:
            page = await self.list(prefix, cursor=cursor)
            for key in page.keys:
                yield key
            if page.list_complete:
                break
            cursor = page.cursor

    # -- JSON helpers ------------------------------------------------------

    async def get_model(self, key: str, model: type[M]) -> M | None:
        """Load a record; corrupt or invalid JSON is treated as absent."""
        raw = await self.get(key)
        if raw is None:
            return None
        try:
            return model.model_validate_json(raw)
        except ValidationError as e:
            logger.warning("Ignoring corrupt record %s: %s", key, e.errors()[0]["msg"])
            return None

    async def put_model(self, key: str, record: BaseModel) -> None:
        await self.put(key, record.model_dump_json(by_alias=True, exclude_none=True))

    async def get_list(self, key: str, model: type[M]) -> list[M]:
        """Load a JSON array of records.

        A corrupt document yields an empty list; individual invalid items are
        dropped so one bad entry does not hide the rest.
        """
        raw = await self.get(key)
        if not raw:
            return []
        try:
            items: Any = json.loads(raw)
        except json.JSONDecodeError:
            logger.warning("Ignoring corrupt list %s", key)
            return []
        if not isinstance(items, list):
            logger.warning("Ignoring non-list value for %s", key)
            return []

        records: list[M] = []
        for item in items:
            try:
                records.append(model.model_validate(item))
            except ValidationError:
                logger.warning("Dropping invalid item in %s: %r", key, item)
        return records

    async def put_list(self, key: str, records: list[BaseModel]) -> None:
        payload = [r.model_dump(mode="json", by_alias=True, exclude_none=True) for r in records]
        await self.put(key, json.dumps(payload))
