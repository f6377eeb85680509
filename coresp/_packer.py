from __future__ import annotations

import decimal
import math

from coresp.constants import (
    CHUNK_THRESHOLD,
    DOUBLE_DECIMAL_MAX,
    DOUBLE_DECIMAL_MIN,
    SYM_BOOLEAN_FALSE,
    SYM_BOOLEAN_TRUE,
    SYM_CRLF,
    SYM_EMPTY,
    SYM_NULL,
    SYM_NULL_ARRAY,
    SYM_NULL_BULK_STRING,
)
from coresp.exceptions import InvalidFrameError
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
)
from coresp.typing import Iterable, Iterator, Union, add_runtime_checks


def format_double(value: float) -> bytes:
    """
    Canonical textual form of a double: plain decimal for magnitudes in
    ``[1e-8, 1e8)`` (and zero), exponent notation (``1.23456e8``) otherwise.
    Integral values carry no fractional part.
    """
    if math.isnan(value):
        return b"nan"
    if math.isinf(value):
        return b"inf" if value > 0 else b"-inf"
    sign = "-" if math.copysign(1.0, value) < 0 else ""
    magnitude = abs(value)
    if magnitude == 0:
        return f"{sign}0".encode("ascii")
    # repr() gives the shortest digit string that round trips
    digits = decimal.Decimal(repr(magnitude)).normalize()
    if DOUBLE_DECIMAL_MIN <= magnitude < DOUBLE_DECIMAL_MAX:
        text = format(digits, "f")
    else:
        coefficient = "".join(str(d) for d in digits.as_tuple().digits)
        if len(coefficient) > 1:
            coefficient = f"{coefficient[0]}.{coefficient[1:]}"
        text = f"{coefficient}e{digits.adjusted()}"
    return f"{sign}{text}".encode("ascii")


class Packer:
    """
    Serializes frames into the RESP wire format
    """

    def __init__(self, encoding: str = "utf-8"):
        #: Encoding used for ``str`` arguments of :meth:`pack_command`
        self.encoding = encoding

    def encode(self, frame: Frame) -> bytes:
        """Returns the canonical bytestring representation of the frame"""
        return SYM_EMPTY.join(self._pieces(frame))

    def pack(self, frame: Frame) -> list[bytes]:
        """
        Encode a frame as a list of chunks whose concatenation is
        :meth:`encode`. Large bulk payloads are emitted as their own chunk
        rather than being copied into a larger buffer.
        """
        return self._chunk(self._pieces(frame))

    def pack_frames(self, frames: Iterable[Frame]) -> list[bytes]:
        """Encode a batch of frames (for example a pipeline) into chunks"""
        return self._chunk(piece for frame in frames for piece in self._pieces(frame))

    def encode_value(self, value: Union[str, bytes, int, float]) -> bytes:
        """Returns a bytestring representation of a command argument"""
        if isinstance(value, bytes):
            return value
        elif isinstance(value, str):
            return value.encode(self.encoding)
        elif isinstance(value, bool):
            raise InvalidFrameError("bool is not a valid command argument")
        elif isinstance(value, int):
            return b"%d" % value
        elif isinstance(value, float):
            return repr(value).encode("ascii")
        raise InvalidFrameError(f"{type(value).__name__} is not a valid command argument")

    def pack_command(
        self, command: Union[str, bytes], *args: Union[str, bytes, int, float]
    ) -> list[bytes]:
        """
        Pack a command and its arguments as an array of bulk strings

        The command name may include literal sub command tokens, e.g.
        ``CONFIG GET``; those are sent as separate arguments.
        """
        name = self.encode_value(command)
        parts = tuple(name.split()) if b" " in name else (name,)
        arguments = parts + tuple(self.encode_value(arg) for arg in args)
        return self.pack(Array(BulkString(argument) for argument in arguments))

    def _chunk(self, pieces: Iterable[bytes]) -> list[bytes]:
        output: list[bytes] = []
        buff: list[bytes] = []
        buff_length = 0
        for piece in pieces:
            # to avoid large string mallocs, hand large payloads over
            # as they are
            if len(piece) > CHUNK_THRESHOLD:
                if buff:
                    output.append(SYM_EMPTY.join(buff))
                    buff, buff_length = [], 0
                output.append(piece)
                continue
            buff.append(piece)
            buff_length += len(piece)
            if buff_length > CHUNK_THRESHOLD:
                output.append(SYM_EMPTY.join(buff))
                buff, buff_length = [], 0
        if buff:
            output.append(SYM_EMPTY.join(buff))
        return output

    def _pieces(self, frame: Frame) -> Iterator[bytes]:
        # explicit stack so arbitrarily nested frames don't hit the recursion limit
        pending: list[Frame] = [frame]
        while pending:
            current = pending.pop()
            if isinstance(current, SimpleString):
                yield b"+%s\r\n" % current.value.encode("utf-8")
            elif isinstance(current, SimpleError):
                yield b"-%s\r\n" % current.value.encode("utf-8")
            elif isinstance(current, Integer):
                if current.value < 0:
                    yield b":%d\r\n" % current.value
                else:
                    yield b":+%d\r\n" % current.value
            elif isinstance(current, BulkString):
                yield b"$%d\r\n" % len(current.value)
                yield current.value
                yield SYM_CRLF
            elif isinstance(current, BulkError):
                payload = current.value.encode("utf-8")
                yield b"!%d\r\n" % len(payload)
                yield payload
                yield SYM_CRLF
            elif isinstance(current, Array):
                yield b"*%d\r\n" % len(current.items)
                pending.extend(reversed(current.items))
            elif isinstance(current, Map):
                yield b"%%%d\r\n" % len(current.entries)
                for key, value in reversed(current.entries):
                    pending.append(value)
                    pending.append(SimpleString(key))
            elif isinstance(current, Set):
                yield b"~%d\r\n" % len(current.elements)
                pending.extend(reversed(current.elements))
            elif isinstance(current, Null):
                yield SYM_NULL
            elif isinstance(current, NullArray):
                yield SYM_NULL_ARRAY
            elif isinstance(current, NullBulkString):
                yield SYM_NULL_BULK_STRING
            elif isinstance(current, Boolean):
                yield SYM_BOOLEAN_TRUE if current.value else SYM_BOOLEAN_FALSE
            elif isinstance(current, Double):
                yield b",%s\r\n" % format_double(current.value)
            else:
                raise InvalidFrameError(f"Cannot encode {type(current).__name__}")


_PACKER = Packer()


@add_runtime_checks
def encode(frame: Frame) -> bytes:
    """
    Encode a single frame

    >>> encode(Array([BulkString(b"get"), BulkString(b"hello")]))
    b'*2\\r\\n$3\\r\\nget\\r\\n$5\\r\\nhello\\r\\n'
    """
    return _PACKER.encode(frame)
