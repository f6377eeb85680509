from __future__ import annotations

import math

import pytest
from anyio import create_memory_object_stream

import coresp
from coresp import (
    Array,
    Boolean,
    BulkError,
    BulkString,
    Double,
    Integer,
    Map,
    Null,
    NullArray,
    NullBulkString,
    Set,
    SimpleError,
    SimpleString,
)

#: One or more instances of every frame variant, used by the round trip
#: and truncation tests.
SAMPLE_FRAMES = [
    SimpleString("OK"),
    SimpleString(""),
    SimpleError("ERR unknown command 'foo'"),
    Integer(0),
    Integer(123),
    Integer(-123),
    Integer(2**63 - 1),
    Integer(-(2**63)),
    BulkString(b"hello"),
    BulkString(b""),
    BulkString(b"line\r\nbreak"),
    BulkString(b"\xff\xfe\x00\x80"),
    BulkError("SYNTAX invalid syntax"),
    BulkError("multi\r\nline érror"),
    Null(),
    NullArray(),
    NullBulkString(),
    Boolean(True),
    Boolean(False),
    Double(123.0),
    Double(-1.5),
    Double(3.142),
    Double(1.23456e8),
    Double(1e-9),
    Double(0.0),
    Double(float("inf")),
    Double(float("-inf")),
    Double(float("nan")),
    Array([]),
    Array([BulkString(b"get"), BulkString(b"hello")]),
    Array([Integer(1), Array([Null(), SimpleString("nested")]), NullBulkString()]),
    Map({}),
    Map({"role": BulkString(b"master"), "port": Integer(6379)}),
    Map({"inner": Map({"list": Array([Boolean(False)])}), "set": Set([Integer(1)])}),
    Set([]),
    Set([Integer(3), BulkString(b"x"), Double(2.5)]),
    Set([Array([Integer(1)]), Map({"k": Null()})]),
]


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture(autouse=True)
def reset_config():
    yield
    coresp.Config.max_depth = None
    coresp.Config.max_bulk_length = None
    coresp.Config.max_aggregate_length = None
    coresp.Config.max_line_length = None


@pytest.fixture
def object_stream():
    return create_memory_object_stream(math.inf)
