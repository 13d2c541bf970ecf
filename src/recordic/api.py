"""
HTTP surface over a :class:`RecordStore`.

`build_router` takes a zero-argument callable returning the store so the
router can be mounted before the store exists (FastAPI lifespan startup).
"""

from __future__ import annotations

import uuid
from typing import Any, Callable, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from .core.record import Record
from .errors import InvalidInput, RecordExists
from .persistence.store import RecordStore


class RecordIn(BaseModel):
    # optional so that a missing type/sid surfaces as InvalidInput (400)
    type: Optional[str] = None
    sid: Optional[str] = None
    oid: Optional[str] = None
    ts: Optional[int] = None
    data: Any = None
    update: bool = False


def build_router(get_store: Callable[[], RecordStore]) -> APIRouter:
    router = APIRouter(prefix="/records", tags=["records"])

    @router.post("", status_code=201)
    async def add_record(body: RecordIn, store: RecordStore = Depends(get_store)):
        try:
            rec_id = await store.add(**body.model_dump())
        except InvalidInput as exc:
            raise HTTPException(status_code=400, detail=str(exc))
        except RecordExists as exc:
            raise HTTPException(status_code=409, detail=str(exc))
        return {"id": str(rec_id)}

    @router.get("/search")
    async def search_records(
        type: Optional[str] = None,
        sid: Optional[str] = None,
        oid: Optional[str] = None,
        sample: Optional[int] = None,
        limit: Optional[int] = None,
        count: bool = False,
        store: RecordStore = Depends(get_store),
    ):
        result = await store.search(
            type=type, sid=sid, oid=oid, sample=sample, limit=limit, count=count
        )
        if isinstance(result, int):
            return {"count": result}
        return [r.model_dump(mode="json") for r in result]

    @router.get("/exists")
    async def record_exists(
        type: Optional[str] = None,
        sid: Optional[str] = None,
        oid: Optional[str] = None,
        store: RecordStore = Depends(get_store),
    ):
        try:
            return {"exists": await store.has(type=type, sid=sid, oid=oid)}
        except InvalidInput as exc:
            raise HTTPException(status_code=400, detail=str(exc))

    @router.get("")
    async def record_history(
        type: Optional[str] = None,
        sid: Optional[str] = None,
        oid: Optional[str] = None,
        limit: Optional[int] = None,
        store: RecordStore = Depends(get_store),
    ):
        try:
            records = await store.get_all(type=type, sid=sid, oid=oid, limit=limit)
        except InvalidInput as exc:
            raise HTTPException(status_code=400, detail=str(exc))
        return [r.model_dump(mode="json") for r in records]

    @router.get("/{rec_id}", response_model=Record)
    async def get_record(rec_id: uuid.UUID, store: RecordStore = Depends(get_store)):
        record = await store.get(rec_id)
        if record is None:
            raise HTTPException(status_code=404, detail=f"Record {rec_id} not found")
        return record

    @router.delete("")
    async def delete_record(
        type: Optional[str] = None,
        sid: Optional[str] = None,
        oid: Optional[str] = None,
        store: RecordStore = Depends(get_store),
    ):
        try:
            rec_id = await store.delete(type=type, sid=sid, oid=oid)
        except InvalidInput as exc:
            raise HTTPException(status_code=400, detail=str(exc))
        return {"id": str(rec_id)}

    @router.delete("/by-ref/{ref}")
    async def delete_by_ref(ref: str, store: RecordStore = Depends(get_store)):
        return {"deleted": await store.delete_all(ref)}

    return router
