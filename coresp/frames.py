"""
Frame value model

Every RESP message is exactly one of the frame classes defined here.
Frames are immutable, compare structurally and are totally ordered:
first by variant (in the order the variants are declared below) and then
by payload. :class:`Map` and :class:`Set` keep their contents sorted so that
two logically equal containers always encode to the same bytes.
"""

from __future__ import annotations

import dataclasses
import math

from coresp.constants import INT64_MAX, INT64_MIN, DataType
from coresp.exceptions import InvalidFrameError, ReplyError
from coresp.typing import (
    Any,
    ClassVar,
    Hashable,
    Iterable,
    Iterator,
    Mapping,
    NativeValue,
)


class Frame:
    """
    Base class of all RESP frames
    """

    __slots__ = ()

    #: The tag byte identifying the frame on the wire
    data_type: ClassVar[DataType]
    #: Position of the variant in the total order across variants
    rank: ClassVar[int]

    def _payload_key(self) -> Any:
        return ()

    def _compare_key(self) -> tuple[int, Any]:
        return (self.rank, self._payload_key())

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, Frame):
            return NotImplemented
        return self._compare_key() < other._compare_key()

    def __le__(self, other: object) -> bool:
        if not isinstance(other, Frame):
            return NotImplemented
        return self._compare_key() <= other._compare_key()

    def __gt__(self, other: object) -> bool:
        if not isinstance(other, Frame):
            return NotImplemented
        return self._compare_key() > other._compare_key()

    def __ge__(self, other: object) -> bool:
        if not isinstance(other, Frame):
            return NotImplemented
        return self._compare_key() >= other._compare_key()


def _check_line(value: object, kind: str) -> str:
    if not isinstance(value, str):
        raise InvalidFrameError(f"{kind} payload must be str, not {type(value).__name__}")
    if "\r" in value or "\n" in value:
        raise InvalidFrameError(f"{kind} payload cannot contain CR or LF: {value!r}")
    return value


def _check_frame(value: object, container: str) -> Frame:
    if not isinstance(value, Frame):
        raise InvalidFrameError(
            f"{container} members must be frames, not {type(value).__name__}"
        )
    return value


@dataclasses.dataclass(frozen=True, slots=True)
class SimpleString(Frame):
    """
    Single line status reply, e.g. ``+OK``
    """

    data_type: ClassVar[DataType] = DataType.SIMPLE_STRING
    rank: ClassVar[int] = 0

    value: str

    def __post_init__(self) -> None:
        _check_line(self.value, "SimpleString")

    def _payload_key(self) -> str:
        return self.value


@dataclasses.dataclass(frozen=True, slots=True)
class SimpleError(Frame):
    """
    Single line error reply, e.g. ``-ERR unknown command``
    """

    data_type: ClassVar[DataType] = DataType.ERROR
    rank: ClassVar[int] = 1

    value: str

    def __post_init__(self) -> None:
        _check_line(self.value, "SimpleError")

    def _payload_key(self) -> str:
        return self.value


@dataclasses.dataclass(frozen=True, slots=True)
class Integer(Frame):
    """
    Signed 64-bit integer
    """

    data_type: ClassVar[DataType] = DataType.INT
    rank: ClassVar[int] = 2

    value: int

    def __post_init__(self) -> None:
        if isinstance(self.value, bool) or not isinstance(self.value, int):
            raise InvalidFrameError(
                f"Integer payload must be int, not {type(self.value).__name__}"
            )
        if not INT64_MIN <= self.value <= INT64_MAX:
            raise InvalidFrameError(f"Integer payload {self.value} is outside the 64-bit range")

    def _payload_key(self) -> int:
        return self.value


@dataclasses.dataclass(frozen=True, slots=True)
class BulkString(Frame):
    """
    Length prefixed binary safe string. The payload is kept as raw
    bytes; ``str`` values are encoded as UTF-8 on construction.
    """

    data_type: ClassVar[DataType] = DataType.BULK_STRING
    rank: ClassVar[int] = 3

    value: bytes

    def __post_init__(self) -> None:
        if isinstance(self.value, str):
            object.__setattr__(self, "value", self.value.encode("utf-8"))
        elif isinstance(self.value, (bytearray, memoryview)):
            object.__setattr__(self, "value", bytes(self.value))
        elif not isinstance(self.value, bytes):
            raise InvalidFrameError(
                f"BulkString payload must be bytes or str, not {type(self.value).__name__}"
            )

    def __len__(self) -> int:
        return len(self.value)

    def _payload_key(self) -> bytes:
        return self.value


@dataclasses.dataclass(frozen=True, slots=True)
class Array(Frame):
    """
    Ordered sequence of frames
    """

    data_type: ClassVar[DataType] = DataType.ARRAY
    rank: ClassVar[int] = 4

    items: tuple[Frame, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(
            self, "items", tuple(_check_frame(item, "Array") for item in self.items)
        )

    def __len__(self) -> int:
        return len(self.items)

    def __iter__(self) -> Iterator[Frame]:
        return iter(self.items)

    def __getitem__(self, index: int) -> Frame:
        return self.items[index]

    def _payload_key(self) -> tuple[Frame, ...]:
        return self.items


@dataclasses.dataclass(frozen=True, slots=True)
class Null(Frame):
    """
    RESP3 null: ``_``
    """

    data_type: ClassVar[DataType] = DataType.NONE
    rank: ClassVar[int] = 5


@dataclasses.dataclass(frozen=True, slots=True)
class NullArray(Frame):
    """
    RESP2 null array: ``*-1``
    """

    data_type: ClassVar[DataType] = DataType.ARRAY
    rank: ClassVar[int] = 6


@dataclasses.dataclass(frozen=True, slots=True)
class NullBulkString(Frame):
    """
    RESP2 null bulk string: ``$-1``
    """

    data_type: ClassVar[DataType] = DataType.BULK_STRING
    rank: ClassVar[int] = 7


@dataclasses.dataclass(frozen=True, slots=True)
class Boolean(Frame):
    data_type: ClassVar[DataType] = DataType.BOOLEAN
    rank: ClassVar[int] = 8

    value: bool

    def __post_init__(self) -> None:
        if not isinstance(self.value, bool):
            raise InvalidFrameError(
                f"Boolean payload must be bool, not {type(self.value).__name__}"
            )

    def _payload_key(self) -> bool:
        return self.value


@dataclasses.dataclass(frozen=True, slots=True, eq=False)
class Double(Frame):
    """
    64-bit floating point number. ``nan`` compares equal to itself
    and sorts after every other double. ``-0.0`` and ``0.0`` are distinct
    frames (they encode differently) with ``-0.0`` sorting first.
    """

    data_type: ClassVar[DataType] = DataType.DOUBLE
    rank: ClassVar[int] = 9

    value: float

    def __post_init__(self) -> None:
        if isinstance(self.value, bool) or not isinstance(self.value, (int, float)):
            raise InvalidFrameError(
                f"Double payload must be float, not {type(self.value).__name__}"
            )
        object.__setattr__(self, "value", float(self.value))

    def __eq__(self, other: object) -> bool:
        if other.__class__ is not self.__class__:
            return NotImplemented
        assert isinstance(other, Double)
        if math.isnan(self.value):
            return math.isnan(other.value)
        return self.value == other.value and math.copysign(
            1.0, self.value
        ) == math.copysign(1.0, other.value)

    def __hash__(self) -> int:
        if math.isnan(self.value):
            return hash((Double, "nan"))
        return hash((Double, self.value, math.copysign(1.0, self.value)))

    def _payload_key(self) -> tuple[bool, float, float]:
        if math.isnan(self.value):
            return (True, 0.0, 0.0)
        return (False, self.value, math.copysign(1.0, self.value))


@dataclasses.dataclass(frozen=True, slots=True)
class BulkError(Frame):
    """
    Length prefixed error, the only error form that may span lines
    """

    data_type: ClassVar[DataType] = DataType.BULK_ERROR
    rank: ClassVar[int] = 10

    value: str

    def __post_init__(self) -> None:
        if isinstance(self.value, (bytes, bytearray, memoryview)):
            try:
                object.__setattr__(self, "value", bytes(self.value).decode("utf-8"))
            except UnicodeDecodeError as e:
                raise InvalidFrameError(f"BulkError payload is not valid UTF-8: {e}") from e
        elif not isinstance(self.value, str):
            raise InvalidFrameError(
                f"BulkError payload must be str, not {type(self.value).__name__}"
            )

    def _payload_key(self) -> str:
        return self.value


@dataclasses.dataclass(frozen=True, slots=True)
class Map(Frame):
    """
    Mapping of text keys to frames. Entries are kept sorted by key;
    when a key is repeated the last value wins.

    Accepts either a mapping or an iterable of ``(key, value)`` pairs::

        Map({"role": BulkString(b"master"), "port": Integer(6379)})
    """

    data_type: ClassVar[DataType] = DataType.MAP
    rank: ClassVar[int] = 11

    entries: tuple[tuple[str, Frame], ...] = ()

    def __post_init__(self) -> None:
        source: Iterable[tuple[str, Frame]]
        if isinstance(self.entries, Mapping):
            source = self.entries.items()
        else:
            source = self.entries
        merged: dict[str, Frame] = {}
        for key, value in source:
            merged[_check_line(key, "Map key")] = _check_frame(value, "Map")
        object.__setattr__(self, "entries", tuple(sorted(merged.items())))

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self) -> Iterator[str]:
        return (key for key, _ in self.entries)

    def __getitem__(self, key: str) -> Frame:
        for candidate, value in self.entries:
            if candidate == key:
                return value
        raise KeyError(key)

    def get(self, key: str, default: Frame | None = None) -> Frame | None:
        try:
            return self[key]
        except KeyError:
            return default

    def keys(self) -> list[str]:
        return [key for key, _ in self.entries]

    def items(self) -> tuple[tuple[str, Frame], ...]:
        return self.entries

    def _payload_key(self) -> tuple[tuple[str, Frame], ...]:
        return self.entries


@dataclasses.dataclass(frozen=True, slots=True)
class Set(Frame):
    """
    Collection of distinct frames, kept in the frame total order
    """

    data_type: ClassVar[DataType] = DataType.SET
    rank: ClassVar[int] = 12

    elements: tuple[Frame, ...] = ()

    def __post_init__(self) -> None:
        distinct: list[Frame] = []
        for element in sorted(_check_frame(element, "Set") for element in self.elements):
            if not distinct or distinct[-1] != element:
                distinct.append(element)
        object.__setattr__(self, "elements", tuple(distinct))

    def __len__(self) -> int:
        return len(self.elements)

    def __iter__(self) -> Iterator[Frame]:
        return iter(self.elements)

    def __contains__(self, element: object) -> bool:
        return element in self.elements

    def _payload_key(self) -> tuple[Frame, ...]:
        return self.elements



def to_frame(value: NativeValue | Frame) -> Frame:
    """
    Build a frame from a python value

    - ``None`` becomes :class:`Null`
    - ``bool``, ``int`` & ``float`` become :class:`Boolean`, :class:`Integer` & :class:`Double`
    - ``bytes`` & ``str`` become :class:`BulkString`
    - ``list`` & ``tuple`` become :class:`Array`
    - ``dict`` (with ``str`` keys) becomes :class:`Map`
    - ``set`` & ``frozenset`` become :class:`Set`
    - :class:`~coresp.exceptions.ReplyError` becomes :class:`SimpleError`
      (or :class:`BulkError` if the message spans lines)

    :raises InvalidFrameError: if the value (or any nested value) has no
     frame representation
    """
    if isinstance(value, Frame):
        return value
    if value is None:
        return Null()
    if isinstance(value, bool):
        return Boolean(value)
    if isinstance(value, int):
        return Integer(value)
    if isinstance(value, float):
        return Double(value)
    if isinstance(value, (bytes, bytearray, memoryview, str)):
        return BulkString(value)
    if isinstance(value, ReplyError):
        if "\r" in value.message or "\n" in value.message:
            return BulkError(value.message)
        return SimpleError(value.message)
    if isinstance(value, Mapping):
        return Map({key: to_frame(item) for key, item in value.items()})
    if isinstance(value, (set, frozenset)):
        return Set(to_frame(item) for item in value)
    if isinstance(value, (list, tuple)):
        return Array(to_frame(item) for item in value)
    raise InvalidFrameError(f"Cannot represent {type(value).__name__} as a RESP frame")


def _ensure_hashable(item: Any) -> Hashable:
    if isinstance(item, list):
        return tuple(_ensure_hashable(i) for i in item)
    elif isinstance(item, set):
        return frozenset(_ensure_hashable(i) for i in item)
    elif isinstance(item, dict):
        return tuple((k, _ensure_hashable(v)) for k, v in item.items())
    return item


def to_python(frame: Frame, decode: bool = False, encoding: str = "utf-8") -> Any:
    """
    Convert a frame into plain python values

    :param decode: Whether to decode bulk string payloads using :paramref:`encoding`.
     Payloads that can't be decoded are returned as ``bytes``.
    :param encoding: The encoding to use when :paramref:`decode` is ``True``
    :return: ``None`` for all three null frames, :class:`~coresp.exceptions.ReplyError`
     instances for error frames, and ``list``/``dict``/``set`` for containers. Members
     of sets that are not hashable are converted to tuples or frozensets.
    """
    if isinstance(frame, (Null, NullArray, NullBulkString)):
        return None
    if isinstance(frame, (SimpleString, Integer, Boolean, Double)):
        return frame.value
    if isinstance(frame, BulkString):
        if decode:
            try:
                return frame.value.decode(encoding)
            except ValueError:
                return frame.value
        return frame.value
    if isinstance(frame, (SimpleError, BulkError)):
        return ReplyError(frame.value)
    if isinstance(frame, Array):
        return [to_python(item, decode, encoding) for item in frame.items]
    if isinstance(frame, Map):
        return {key: to_python(value, decode, encoding) for key, value in frame.entries}
    if isinstance(frame, Set):
        return {_ensure_hashable(to_python(item, decode, encoding)) for item in frame.elements}
    raise InvalidFrameError(f"Unknown frame type {type(frame).__name__}")
