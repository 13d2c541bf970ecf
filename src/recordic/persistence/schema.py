"""
Idempotent setup / teardown of the `records` table and its two indexes.

Each object is created in its own transaction. A create that fails because a
concurrent caller got there first is detected by re-inspecting the catalog,
never by reading the driver's error message.
"""

from __future__ import annotations

from typing import Callable, List, TypedDict

import structlog
from sqlalchemy import Connection, Index, inspect
from sqlalchemy.exc import DBAPIError
from sqlalchemy.ext.asyncio import AsyncEngine

from .models import TABLE_NAME, Base, RecordRow

logger = structlog.get_logger(__name__)

# index name in the database ➜ label reported to callers
INDEX_LABELS = {
    "ix_records_type": f"{TABLE_NAME}.type",
    "ix_records_index": f"{TABLE_NAME}.index",
}


class AppliedSchema(TypedDict):
    tables: List[str]
    indexes: List[str]


def _has_table(conn: Connection) -> bool:
    return inspect(conn).has_table(TABLE_NAME)


def _has_index(name: str) -> Callable[[Connection], bool]:
    def check(conn: Connection) -> bool:
        insp = inspect(conn)
        return insp.has_table(TABLE_NAME) and insp.has_index(TABLE_NAME, name)

    return check


async def _create(
    engine: AsyncEngine,
    create: Callable[[Connection], None],
    exists: Callable[[Connection], bool],
    label: str,
) -> bool:
    """Run `create` unless `exists`; return True only if this call created it."""
    try:
        async with engine.begin() as conn:
            if await conn.run_sync(exists):
                return False
            await conn.run_sync(create)
    except DBAPIError:
        async with engine.connect() as conn:
            created_elsewhere = await conn.run_sync(exists)
        if not created_elsewhere:
            raise
        logger.info("schema object already exists", name=label)
        return False

    logger.info("schema object created", name=label)
    return True


async def apply_schema(engine: AsyncEngine) -> AppliedSchema:
    """Create whatever part of the schema is missing and report what was created."""
    table = RecordRow.__table__
    applied: AppliedSchema = {"tables": [], "indexes": []}

    # Table.create also emits the table's indexes
    if await _create(engine, lambda conn: table.create(conn), _has_table, TABLE_NAME):
        applied["tables"].append(TABLE_NAME)
        applied["indexes"].extend(sorted(INDEX_LABELS[ix.name] for ix in table.indexes))
        return applied

    for index in sorted(table.indexes, key=lambda ix: ix.name):
        label = INDEX_LABELS[index.name]
        if await _create(engine, _index_creator(index), _has_index(index.name), label):
            applied["indexes"].append(label)

    return applied


def _index_creator(index: Index) -> Callable[[Connection], None]:
    return lambda conn: index.create(conn)


async def drop_schema(engine: AsyncEngine) -> None:
    """Drop the `records` table (and its indexes) if present."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    logger.info("schema dropped", table=TABLE_NAME)
