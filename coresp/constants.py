"""
RESP protocol constants
"""

from __future__ import annotations

import enum
from typing import Final


class DataType(enum.IntEnum):
    """
    Tag bytes that open every RESP frame on the wire.

    See:

    - `RESP protocol spec <https://redis.io/docs/develop/reference/protocol-spec>`__
    - `RESP3 specification <https://github.com/antirez/RESP3/blob/master/spec.md>`__
    """

    SIMPLE_STRING = ord(b"+")
    ERROR = ord(b"-")
    INT = ord(b":")
    BULK_STRING = ord(b"$")
    ARRAY = ord(b"*")
    NONE = ord(b"_")
    BOOLEAN = ord(b"#")
    DOUBLE = ord(b",")
    BULK_ERROR = ord(b"!")
    MAP = ord(b"%")
    SET = ord(b"~")


SYM_CRLF: Final[bytes] = b"\r\n"
SYM_CR: Final[bytes] = b"\r"
SYM_LF: Final[bytes] = b"\n"
SYM_EMPTY: Final[bytes] = b""
SYM_TRUE: Final[bytes] = b"t"
SYM_FALSE: Final[bytes] = b"f"

#: Fixed encodings of the payload-less frames
SYM_NULL: Final[bytes] = b"_\r\n"
SYM_NULL_ARRAY: Final[bytes] = b"*-1\r\n"
SYM_NULL_BULK_STRING: Final[bytes] = b"$-1\r\n"
SYM_BOOLEAN_TRUE: Final[bytes] = b"#t\r\n"
SYM_BOOLEAN_FALSE: Final[bytes] = b"#f\r\n"

INT64_MIN: Final[int] = -(2**63)
INT64_MAX: Final[int] = 2**63 - 1

#: Doubles with a magnitude inside ``[DOUBLE_DECIMAL_MIN, DOUBLE_DECIMAL_MAX)``
#: are written in plain decimal notation, everything else in exponent notation.
DOUBLE_DECIMAL_MIN: Final[float] = 1e-8
DOUBLE_DECIMAL_MAX: Final[float] = 1e8

#: Payloads larger than this are handed to the transport as separate
#: chunks instead of being copied into the surrounding buffer.
CHUNK_THRESHOLD: Final[int] = 6000

DEFAULT_MAX_DEPTH: Final[int] = 128
DEFAULT_MAX_BULK_LENGTH: Final[int] = 512 * 1024 * 1024
DEFAULT_MAX_AGGREGATE_LENGTH: Final[int] = 2**32 - 1
DEFAULT_MAX_LINE_LENGTH: Final[int] = 64 * 1024
