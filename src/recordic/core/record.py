"""
Record kernel – *pure Pydantic* (no database imports).

* Identity is a namespace-5 UUID over ``type.sid`` (or ``type.sid.oid``).
* Building a record never touches storage; only ``ts`` depends on the clock.
"""

from __future__ import annotations

import time
import uuid
from typing import Any

from pydantic import BaseModel

from ..errors import InvalidInput

# fixed namespace for every record id; changing it re-keys the whole table
RECORD_NAMESPACE = uuid.UUID("4a1f6c52-93d8-5b0e-a7c4-2e6b1d9f0c38")


def now_ms() -> int:  # milliseconds since epoch
    return int(time.time() * 1000)


def record_key(type: str, sid: str, oid: str | None = None) -> str:
    """Name hashed into the record id: ``type.sid`` or ``type.sid.oid``."""
    key = f"{type}.{sid}"
    if oid:
        key += f".{oid}"
    return key


def record_id(type: str, sid: str, oid: str | None = None) -> uuid.UUID:
    return uuid.uuid5(RECORD_NAMESPACE, record_key(type, sid, oid))


class Record(BaseModel):
    """An event or fact about a subject, optionally scoped to an object."""

    id: uuid.UUID
    type: str
    sid: str
    oid: str | None = None
    ts: int
    data: Any | None = None

    model_config = {"frozen": True, "from_attributes": True}

    @classmethod
    def build(
        cls,
        type: str | None = None,
        sid: str | None = None,
        oid: str | None = None,
        ts: int | None = None,
        data: Any | None = None,
    ) -> "Record":
        """
        Construct a fully-populated record (id included).

        Raises :class:`InvalidInput` when `type` or `sid` is missing. Pass
        `ts` explicitly for reproducible output.
        """
        if not type or not sid:
            raise InvalidInput("No type or subject id provided for a record")

        return cls(
            id=record_id(type, sid, oid),
            type=type,
            sid=sid,
            oid=oid or None,
            ts=now_ms() if ts is None else ts,
            data=data,
        )

    @classmethod
    def from_row(cls, row: Any) -> "Record":
        return cls.model_validate(row)

    def columns(self) -> dict[str, Any]:
        """Column values for an insert into the ``records`` table."""
        return self.model_dump(mode="python")
