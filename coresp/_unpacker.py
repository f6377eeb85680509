from __future__ import annotations

import logging
import re

from coresp.config import Config
from coresp.constants import (
    INT64_MAX,
    INT64_MIN,
    SYM_CR,
    SYM_CRLF,
    SYM_FALSE,
    SYM_LF,
    SYM_TRUE,
    DataType,
)
from coresp.exceptions import ProtocolError
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
from coresp.typing import (
    Buffer,
    Final,
    Iterator,
    NamedTuple,
    Optional,
    Union,
    add_runtime_checks,
)

logger = logging.getLogger(__name__)

_TAGS: Final[frozenset[int]] = frozenset(DataType)
_AGGREGATES: Final[frozenset[int]] = frozenset(
    {DataType.ARRAY, DataType.MAP, DataType.SET}
)
_INTEGER = re.compile(rb"[+-]?[0-9]+")
_LENGTH = re.compile(rb"0|-?[1-9][0-9]*")
_DOUBLE = re.compile(
    rb"[+-]?(?:[0-9]+(?:\.[0-9]*)?|\.[0-9]+)(?:[eE][+-]?[0-9]+)?|[+-]?inf|nan"
)
#: no signed 64-bit value needs more characters than this
_MAX_INTEGER_WIDTH: Final[int] = 20


class Complete(NamedTuple):
    #: The decoded frame
    frame: Frame
    #: Number of bytes the frame occupied at the front of the buffer
    consumed: int


class Incomplete:
    """
    The buffer holds the start of a valid frame but not all of it yet
    """

    def __repr__(self) -> str:
        return "INCOMPLETE"


INCOMPLETE: Final[Incomplete] = Incomplete()


class Malformed(NamedTuple):
    #: Human readable description of what was wrong with the input
    reason: str


DecodeResult = Union[Complete, Incomplete, Malformed]


class _MalformedInput(Exception):
    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(reason)


class _Node:
    __slots__ = ("children", "data_type", "key", "remaining")

    def __init__(self, data_type: int, count: int) -> None:
        self.data_type = data_type
        self.remaining = count * 2 if data_type == DataType.MAP else count
        self.children: list[Frame] = []
        self.key: Optional[str] = None

    def expects_key(self) -> bool:
        return self.data_type == DataType.MAP and self.key is None

    def append(self, frame: Frame) -> None:
        self.remaining -= 1
        if self.data_type == DataType.MAP:
            if self.key is None:
                assert isinstance(frame, SimpleString)
                self.key = frame.value
            else:
                self.children.append((self.key, frame))  # type: ignore[arg-type]
                self.key = None
        else:
            self.children.append(frame)

    def build(self) -> Frame:
        if self.data_type == DataType.MAP:
            return Map(self.children)  # type: ignore[arg-type]
        elif self.data_type == DataType.SET:
            return Set(self.children)
        return Array(self.children)


class _Progress:
    """
    Partially decoded frame: the open aggregates and the offset of the
    next unread element
    """

    __slots__ = ("nodes", "offset")

    def __init__(self, offset: int) -> None:
        self.nodes: list[_Node] = []
        self.offset = offset


def _read_line(
    data: Union[bytes, bytearray], start: int, max_line_length: int
) -> Optional[tuple[Union[bytes, bytearray], int]]:
    end = data.find(SYM_CRLF, start)
    if end == -1:
        # a lone LF, or a CR that isn't the last byte, can never become a CRLF
        if data.find(SYM_LF, start) != -1 or data.find(SYM_CR, start, len(data) - 1) != -1:
            raise _MalformedInput(f"Expected CRLF terminated line at offset {start - 1}")
        if len(data) - start > max_line_length:
            raise _MalformedInput(f"Line at offset {start - 1} exceeds {max_line_length} bytes")
        return None
    if end - start > max_line_length:
        raise _MalformedInput(f"Line at offset {start - 1} exceeds {max_line_length} bytes")
    if data.find(SYM_CR, start, end) != -1 or data.find(SYM_LF, start, end) != -1:
        raise _MalformedInput(f"Stray CR or LF in line at offset {start - 1}")
    return data[start:end], end + 2


def _text(chunk: Union[bytes, bytearray], kind: str) -> str:
    try:
        return chunk.decode("utf-8")
    except UnicodeDecodeError:
        raise _MalformedInput(f"{kind} is not valid UTF-8: {bytes(chunk)!r}") from None


def _integer(chunk: Union[bytes, bytearray]) -> int:
    if len(chunk) > _MAX_INTEGER_WIDTH or not _INTEGER.fullmatch(chunk):
        raise _MalformedInput(f"Invalid integer {bytes(chunk)!r}")
    value = int(chunk)
    if not INT64_MIN <= value <= INT64_MAX:
        raise _MalformedInput(f"Integer {value} is outside the 64-bit range")
    return value


def _length(chunk: Union[bytes, bytearray], tag: int) -> int:
    if len(chunk) > _MAX_INTEGER_WIDTH or not _LENGTH.fullmatch(chunk):
        raise _MalformedInput(f"Invalid length {bytes(chunk)!r} for {chr(tag)!r}")
    return int(chunk)


def _double(chunk: Union[bytes, bytearray]) -> float:
    if not _DOUBLE.fullmatch(chunk):
        raise _MalformedInput(f"Invalid double {bytes(chunk)!r}")
    return float(chunk)


def _decode(
    data: Union[bytes, bytearray],
    start: int,
    progress: _Progress,
    max_depth: int,
    max_bulk_length: int,
    max_aggregate_length: int,
    max_line_length: int,
) -> DecodeResult:
    size = len(data)
    offset = progress.offset
    nodes = progress.nodes
    try:
        while True:
            progress.offset = offset
            if offset >= size:
                return INCOMPLETE
            marker = data[offset]
            if marker not in _TAGS:
                return Malformed(
                    f"Unknown tag byte {bytes([marker])!r} at offset {offset - start}"
                )
            if nodes and nodes[-1].expects_key() and marker != DataType.SIMPLE_STRING:
                return Malformed(
                    f"Map key at offset {offset - start} must be a simple string, got {chr(marker)!r}"
                )
            line = _read_line(data, offset + 1, max_line_length)
            if line is None:
                return INCOMPLETE
            chunk, offset = line

            frame: Frame
            if marker == DataType.SIMPLE_STRING:
                frame = SimpleString(_text(chunk, "Simple string"))
            elif marker == DataType.ERROR:
                frame = SimpleError(_text(chunk, "Simple error"))
            elif marker == DataType.INT:
                frame = Integer(_integer(chunk))
            elif marker == DataType.NONE:
                if chunk:
                    raise _MalformedInput(f"Unexpected payload for null: {bytes(chunk)!r}")
                frame = Null()
            elif marker == DataType.BOOLEAN:
                if chunk == SYM_TRUE:
                    frame = Boolean(True)
                elif chunk == SYM_FALSE:
                    frame = Boolean(False)
                else:
                    raise _MalformedInput(f"Invalid boolean {bytes(chunk)!r}")
            elif marker == DataType.DOUBLE:
                frame = Double(_double(chunk))
            elif marker in _AGGREGATES:
                count = _length(chunk, marker)
                if count == -1 and marker == DataType.ARRAY:
                    frame = NullArray()
                else:
                    if count < 0:
                        raise _MalformedInput(f"Negative length {count} for {chr(marker)!r}")
                    if count > max_aggregate_length:
                        raise _MalformedInput(
                            f"Aggregate length {count} exceeds {max_aggregate_length}"
                        )
                    if len(nodes) >= max_depth:
                        raise _MalformedInput(f"Nesting depth exceeds {max_depth}")
                    node = _Node(marker, count)
                    if count > 0:
                        nodes.append(node)
                        continue
                    frame = node.build()
            else:
                length = _length(chunk, marker)
                if length == -1 and marker == DataType.BULK_STRING:
                    frame = NullBulkString()
                else:
                    if length < 0:
                        raise _MalformedInput(f"Negative length {length} for {chr(marker)!r}")
                    if length > max_bulk_length:
                        raise _MalformedInput(f"Bulk length {length} exceeds {max_bulk_length}")
                    end = offset + length
                    if size < end + 2:
                        return INCOMPLETE
                    if data[end : end + 2] != SYM_CRLF:
                        raise _MalformedInput(f"Missing CRLF after bulk payload at offset {end - start}")
                    payload = data[offset:end]
                    offset = end + 2
                    if marker == DataType.BULK_STRING:
                        frame = BulkString(bytes(payload))
                    else:
                        frame = BulkError(_text(payload, "Bulk error"))

            while nodes:
                parent = nodes[-1]
                parent.append(frame)
                if parent.remaining:
                    break
                nodes.pop()
                frame = parent.build()
            else:
                return Complete(frame, offset - start)
    except _MalformedInput as e:
        return Malformed(e.reason)


@add_runtime_checks
def decode(
    data: Buffer,
    max_depth: Optional[int] = None,
    max_bulk_length: Optional[int] = None,
    max_aggregate_length: Optional[int] = None,
    max_line_length: Optional[int] = None,
) -> DecodeResult:
    """
    Decode the frame at the start of :paramref:`data`

    :param data: buffer holding zero, one or more (possibly partial) frames
    :param max_depth: deepest aggregate nesting accepted.
     Defaults to :attr:`coresp.Config.max_depth`
    :param max_bulk_length: largest declared bulk payload accepted.
     Defaults to :attr:`coresp.Config.max_bulk_length`
    :param max_aggregate_length: largest declared aggregate size accepted.
     Defaults to :attr:`coresp.Config.max_aggregate_length`
    :param max_line_length: longest line accepted.
     Defaults to :attr:`coresp.Config.max_line_length`
    :return: :class:`Complete` with the frame and the number of bytes it used,
     :data:`INCOMPLETE` if more bytes are required, or :class:`Malformed` if
     no continuation of the buffer can be a valid frame.
    """
    if isinstance(data, memoryview):
        data = data.tobytes()
    return _decode(
        data,
        0,
        _Progress(0),
        Config.max_depth if max_depth is None else max_depth,
        Config.max_bulk_length if max_bulk_length is None else max_bulk_length,
        Config.max_aggregate_length if max_aggregate_length is None else max_aggregate_length,
        Config.max_line_length if max_line_length is None else max_line_length,
    )


class Unpacker:
    """
    Incremental decoder for a stream of frames

    Bytes are accumulated with :meth:`feed` and frames pulled out
    with :meth:`get_frame` (or by iterating over the unpacker). Once
    malformed input is seen the unpacker refuses to continue until
    :meth:`reset` is called.
    """

    def __init__(
        self,
        max_depth: Optional[int] = None,
        max_bulk_length: Optional[int] = None,
        max_aggregate_length: Optional[int] = None,
        max_line_length: Optional[int] = None,
    ) -> None:
        self.max_depth = max_depth
        self.max_bulk_length = max_bulk_length
        self.max_aggregate_length = max_aggregate_length
        self.max_line_length = max_line_length
        self.localbuffer = bytearray()
        self.bytes_read = 0
        self.error: Optional[str] = None
        self._progress: Optional[_Progress] = None

    @property
    def pending(self) -> int:
        """Number of buffered bytes not yet consumed by a frame"""
        return len(self.localbuffer) - self.bytes_read

    def feed(self, data: Buffer) -> None:
        if self.bytes_read:
            del self.localbuffer[: self.bytes_read]
            if self._progress is not None:
                self._progress.offset -= self.bytes_read
            self.bytes_read = 0
        self.localbuffer += data

    def get_frame(self) -> Union[Frame, Incomplete]:
        """
        :return: The next complete frame, or :data:`INCOMPLETE` if
         more data needs to be fed first.
        :raises ProtocolError: if the buffered data is not valid RESP
        """
        if self.error is not None:
            raise ProtocolError(self.error)
        # a frame left incomplete by an earlier call resumes where it stopped
        if self._progress is None:
            self._progress = _Progress(self.bytes_read)
        result = _decode(
            self.localbuffer,
            self.bytes_read,
            self._progress,
            Config.max_depth if self.max_depth is None else self.max_depth,
            Config.max_bulk_length if self.max_bulk_length is None else self.max_bulk_length,
            Config.max_aggregate_length
            if self.max_aggregate_length is None
            else self.max_aggregate_length,
            Config.max_line_length if self.max_line_length is None else self.max_line_length,
        )
        if isinstance(result, Complete):
            self._progress = None
            self.bytes_read += result.consumed
            if self.bytes_read == len(self.localbuffer):
                self.localbuffer.clear()
                self.bytes_read = 0
            return result.frame
        if isinstance(result, Malformed):
            logger.debug(f"Malformed RESP input after {self.bytes_read} bytes: {result.reason}")
            self.error = result.reason
            self._progress = None
            raise ProtocolError(result.reason)
        return result

    def __iter__(self) -> Iterator[Frame]:
        while True:
            frame = self.get_frame()
            if isinstance(frame, Incomplete):
                return
            yield frame

    def reset(self) -> None:
        self.localbuffer.clear()
        self.bytes_read = 0
        self.error = None
        self._progress = None
