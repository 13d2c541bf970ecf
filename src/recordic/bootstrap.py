"""
Single entry-point that wires the async engine into Recordic.
Call once, e.g. in a FastAPI lifespan handler.
"""

import structlog
from sqlalchemy.ext.asyncio import AsyncEngine

from .persistence.schema import apply_schema
from .persistence.store import RecordStore

logger = structlog.get_logger(__name__)


async def init_recordic(engine: AsyncEngine) -> RecordStore:
    """
    Make sure the `records` table and its indexes exist, then hand back a
    store bound to `engine`.
    """
    applied = await apply_schema(engine)
    logger.info("recordic ready", tables=applied["tables"], indexes=applied["indexes"])
    return RecordStore(engine)
