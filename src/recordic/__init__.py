"""
Public surface for Recordic.
Importing this module does **not** touch the database; build a
`RecordStore(engine)` yourself or go through `Recordic.init(...)`.
"""

from .core.record import Record, record_id
from .errors import InvalidInput, MissingRangeKey, RecordError, RecordExists
from .persistence.schema import apply_schema, drop_schema
from .persistence.store import RecordStore
from .runtime import Recordic

__all__ = [
    "InvalidInput",
    "MissingRangeKey",
    "Record",
    "RecordError",
    "RecordExists",
    "RecordStore",
    "Recordic",
    "apply_schema",
    "drop_schema",
    "record_id",
]
