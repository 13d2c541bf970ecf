"""
Typed failures raised by the record store.

Not-found is never an error here: lookups return ``None`` / ``False``.
"""

from __future__ import annotations

import uuid


class RecordError(Exception):
    """Base class for every record store failure."""


class InvalidInput(RecordError, ValueError):
    """`type` or `sid` missing from an identity-construction call."""


class MissingRangeKey(InvalidInput):
    """Range query issued without its full ``(type, sid)`` prefix."""


class RecordExists(RecordError):
    """Plain (non-update) insert hit an identifier that is already stored."""

    def __init__(self, rec_id: uuid.UUID):
        super().__init__(f"Record {rec_id} already exists")
        self.rec_id = rec_id
