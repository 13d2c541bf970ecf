"""
Thin data-access layer around the `records` table.
Every public method is a coroutine that opens its own short-lived session.
"""

from __future__ import annotations

import uuid
from typing import Any, List, Optional, Union

import structlog
from sqlalchemy import delete, func, insert, or_, select
from sqlalchemy import update as sql_update
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from ..core.record import Record
from ..errors import MissingRangeKey, RecordExists
from .models import RecordRow

logger = structlog.get_logger(__name__)

# dialects with a native single-statement upsert
_DIALECT_INSERTS = {"postgresql": pg_insert, "sqlite": sqlite_insert}


def _as_uuid(rec_id: Union[uuid.UUID, str]) -> Optional[uuid.UUID]:
    if isinstance(rec_id, uuid.UUID):
        return rec_id
    try:
        return uuid.UUID(str(rec_id))
    except ValueError:
        return None


class RecordStore:
    """Thin data‑access layer around the `records` table."""

    def __init__(self, engine: AsyncEngine):
        self.engine = engine
        self._sessions = async_sessionmaker(engine, expire_on_commit=False)

    def _new_session(self) -> AsyncSession:
        return self._sessions()

    # ---- identity -------------------------------------------------------
    def record(
        self,
        type: str | None = None,
        sid: str | None = None,
        oid: str | None = None,
        ts: int | None = None,
        data: Any | None = None,
    ) -> Record:
        """Build the record for the given fields without touching storage."""
        return Record.build(type=type, sid=sid, oid=oid, ts=ts, data=data)

    # ---- reads ----------------------------------------------------------
    async def get(self, rec_id: Union[uuid.UUID, str]) -> Optional[Record]:
        """Point lookup by identifier; ``None`` when absent."""
        key = _as_uuid(rec_id)
        if key is None:
            return None
        async with self._new_session() as s:
            row = await s.get(RecordRow, key)
            return Record.from_row(row) if row is not None else None

    async def get_record(
        self, type: str | None = None, sid: str | None = None, oid: str | None = None
    ) -> Optional[Record]:
        """Look a record up by its logical ``(type, sid, oid)`` key."""
        record = self.record(type=type, sid=sid, oid=oid)
        return await self.get(record.id)

    async def get_all(
        self,
        type: str | None = None,
        sid: str | None = None,
        oid: str | None = None,
        limit: int | None = None,
    ) -> List[Record]:
        """Records of one subject, *newest→oldest*."""
        if not type or not sid:
            raise MissingRangeKey("Range query needs both type and subject id")

        q = (
            select(RecordRow)
            .where(RecordRow.type == type, RecordRow.sid == sid)
            .order_by(RecordRow.ts.desc())
        )
        if oid:
            q = q.where(RecordRow.oid == oid)
        if limit:
            q = q.limit(limit)

        async with self._new_session() as s:
            return [Record.from_row(row) for row in await s.scalars(q)]

    async def has(
        self, type: str | None = None, sid: str | None = None, oid: str | None = None
    ) -> bool:
        record = self.record(type=type, sid=sid, oid=oid)
        async with self._new_session() as s:
            q = select(RecordRow.id).where(RecordRow.id == record.id)
            return (await s.scalar(q)) is not None

    async def search(
        self,
        type: str | None = None,
        sid: str | None = None,
        oid: str | None = None,
        sample: int | None = None,
        limit: int | None = None,
        count: bool = False,
    ) -> Union[List[Record], int]:
        """
        Filter by `type`, then narrow by `sid` / `oid`.

        At most one modifier applies, checked in the order `sample`, `limit`,
        `count`; `count` returns an int instead of a list.
        """
        q = select(RecordRow)
        if type is not None:
            q = q.where(RecordRow.type == type)
        if sid:
            q = q.where(RecordRow.sid == sid)
        if oid:
            q = q.where(RecordRow.oid == oid)

        async with self._new_session() as s:
            if sample:
                q = q.order_by(func.random()).limit(sample)
            elif limit:
                q = q.limit(limit)
            elif count:
                total = await s.scalar(select(func.count()).select_from(q.subquery()))
                return int(total or 0)
            return [Record.from_row(row) for row in await s.scalars(q)]

    # ---- writes ---------------------------------------------------------
    def _upsert(self, record: Record):
        """``INSERT … ON CONFLICT (id) DO UPDATE SET ts``, or None if unsupported."""
        dialect_insert = _DIALECT_INSERTS.get(self.engine.dialect.name)
        if dialect_insert is None:
            return None
        stmt = dialect_insert(RecordRow).values(**record.columns())
        return stmt.on_conflict_do_update(
            index_elements=[RecordRow.id], set_={"ts": stmt.excluded.ts}
        )

    async def _touch(self, record: Record) -> None:
        """Overwrite only the stored ``ts`` of an existing row."""
        async with self._new_session() as s, s.begin():
            await s.execute(
                sql_update(RecordRow)
                .where(RecordRow.id == record.id)
                .values(ts=record.ts)
            )

    async def _store_or_touch(self, record: Record) -> None:
        upsert = self._upsert(record)
        if upsert is not None:
            async with self._new_session() as s, s.begin():
                await s.execute(upsert)
            return

        try:
            async with self._new_session() as s, s.begin():
                row = await s.get(RecordRow, record.id, with_for_update=True)
                if row is not None:
                    row.ts = record.ts
                else:
                    s.add(RecordRow(**record.columns()))
        except IntegrityError:
            # a concurrent caller inserted first; last writer still wins on ts
            await self._touch(record)

    async def add(
        self,
        type: str | None = None,
        sid: str | None = None,
        oid: str | None = None,
        ts: int | None = None,
        data: Any | None = None,
        update: bool = False,
    ) -> uuid.UUID:
        """
        Store a record and return its id.

        • ``update=False`` → plain insert, :class:`RecordExists` if the id is taken
        • ``update=True``  → atomic upsert, last writer wins; an existing row
          only gets the new ``ts``, its ``data`` (and everything else) is left
          as stored
        """
        record = self.record(type=type, sid=sid, oid=oid, ts=ts, data=data)

        if update:
            await self._store_or_touch(record)
        else:
            try:
                async with self._new_session() as s, s.begin():
                    await s.execute(insert(RecordRow).values(**record.columns()))
            except IntegrityError as exc:
                logger.warning("record already exists", id=str(record.id), type=record.type)
                raise RecordExists(record.id) from exc

        logger.debug("record stored", id=str(record.id), type=record.type, update=update)
        return record.id

    async def delete(
        self, type: str | None = None, sid: str | None = None, oid: str | None = None
    ) -> uuid.UUID:
        """Delete the single record addressed by ``(type, sid, oid)``."""
        record = self.record(type=type, sid=sid, oid=oid)
        async with self._new_session() as s, s.begin():
            await s.execute(delete(RecordRow).where(RecordRow.id == record.id))

        logger.debug("record deleted", id=str(record.id), type=record.type)
        return record.id

    async def delete_all(self, ref: str) -> int:
        """Delete every record whose `sid` or `oid` equals `ref`; return the count."""
        async with self._new_session() as s, s.begin():
            result = await s.execute(
                delete(RecordRow).where(or_(RecordRow.sid == ref, RecordRow.oid == ref))
            )
            deleted = result.rowcount

        logger.debug("records deleted by reference", ref=ref, deleted=deleted)
        return deleted
