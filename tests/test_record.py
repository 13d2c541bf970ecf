import re
import uuid

import pytest
from pydantic import ValidationError

from recordic import InvalidInput, Record, record_id
from recordic.core.record import RECORD_NAMESPACE, now_ms, record_key

RX_UUID = re.compile(
    r"^[0-9a-f]{8}-[0-9a-f]{4}-[1-5][0-9a-f]{3}-[89ab][0-9a-f]{3}-[0-9a-f]{12}$", re.I
)


def test_id_is_deterministic():
    a = Record.build(type="test", sid="subject", oid="object", ts=1)
    b = Record.build(type="test", sid="subject", oid="object", ts=2)
    assert a.id == b.id
    assert RX_UUID.match(str(a.id))
    assert a.id.version == 5


def test_id_ignores_payload():
    a = Record.build(type="test", sid="subject", data={"x": 1})
    b = Record.build(type="test", sid="subject", data={"x": 2})
    assert a.id == b.id


def test_object_id_changes_identity():
    plain = record_id("test", "subject")
    scoped = record_id("test", "subject", "object")
    assert plain != scoped
    assert scoped == uuid.uuid5(RECORD_NAMESPACE, "test.subject.object")


def test_record_key():
    assert record_key("test", "subject") == "test.subject"
    assert record_key("test", "subject", "object") == "test.subject.object"
    assert record_key("test", "subject", "") == "test.subject"


def test_build_populates_fields():
    rec = Record.build(type="test", sid="subject", oid="object", ts=42, data={"a": 1})
    assert rec.type == "test"
    assert rec.sid == "subject"
    assert rec.oid == "object"
    assert rec.ts == 42
    assert rec.data == {"a": 1}


def test_build_defaults():
    before = now_ms()
    rec = Record.build(type="test", sid="subject")
    assert rec.oid is None
    assert rec.data is None
    assert before <= rec.ts <= now_ms()


@pytest.mark.parametrize(
    "fields",
    [{}, {"type": "test"}, {"sid": "subject"}, {"type": "", "sid": "subject"}],
)
def test_build_requires_type_and_sid(fields):
    with pytest.raises(InvalidInput):
        Record.build(**fields)


def test_invalid_input_is_value_error():
    with pytest.raises(ValueError):
        Record.build(type="test")


def test_record_is_frozen():
    rec = Record.build(type="test", sid="subject", ts=1)
    with pytest.raises(ValidationError):
        rec.ts = 2
