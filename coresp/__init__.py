"""
coresp
------

coresp is a codec for the REdis Serialization Protocol (RESP2 & RESP3):
typed frames, their canonical byte encoding and an incremental decoder.
"""

from __future__ import annotations

import logging

from coresp._packer import Packer, encode
from coresp._unpacker import (
    INCOMPLETE,
    Complete,
    DecodeResult,
    Incomplete,
    Malformed,
    Unpacker,
    decode,
)
from coresp.config import Config
from coresp.exceptions import InvalidFrameError, ProtocolError, ReplyError, RESPError
from coresp.frames import (
    Array,
    Boolean,
    BulkError,
    BulkString,
    Double,
    Frame,
    Integer,
    Map,
    Null,
    NullArray,
    NullBulkString,
    Set,
    SimpleError,
    SimpleString,
    to_frame,
    to_python,
)
from coresp.stream import FrameStream

logger = logging.getLogger(__name__)
logger.addHandler(logging.NullHandler())

__all__ = [
    "Array",
    "Boolean",
    "BulkError",
    "BulkString",
    "Complete",
    "Config",
    "DecodeResult",
    "Double",
    "Frame",
    "FrameStream",
    "INCOMPLETE",
    "Incomplete",
    "Integer",
    "InvalidFrameError",
    "Malformed",
    "Map",
    "Null",
    "NullArray",
    "NullBulkString",
    "Packer",
    "ProtocolError",
    "ReplyError",
    "RESPError",
    "Set",
    "SimpleError",
    "SimpleString",
    "Unpacker",
    "decode",
    "encode",
    "to_frame",
    "to_python",
]

__version__ = "0.1.0"
