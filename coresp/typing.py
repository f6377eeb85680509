from __future__ import annotations

import warnings
from collections.abc import (
    AsyncIterator,
    Callable,
    Hashable,
    Iterable,
    Iterator,
    Mapping,
    Sequence,
    Set,
)
from typing import (
    TYPE_CHECKING,
    Any,
    ClassVar,
    Final,
    Literal,
    NamedTuple,
    Optional,
    ParamSpec,
    TypeVar,
    Union,
)

from typing_extensions import Self

from coresp.config import Config

_runtime_checks = False
_beartype_found = False

try:
    import beartype

    _beartype_found = True
except ImportError:  # pragma: no cover
    pass

if Config.runtime_checks and not TYPE_CHECKING:  # pragma: no cover
    if _beartype_found:
        _runtime_checks = True
    else:
        warnings.warn(
            "Runtime checks were enabled via environment variable CORESP_RUNTIME_CHECKS"
            " but could not import beartype"
        )

RUNTIME_TYPECHECKS = _runtime_checks

P = ParamSpec("P")
R = TypeVar("R")


def safe_beartype(func: Callable[P, R]) -> Callable[P, R]:
    if TYPE_CHECKING:
        return func

    return beartype.beartype(func) if _beartype_found else func


def add_runtime_checks(func: Callable[P, R]) -> Callable[P, R]:
    if RUNTIME_TYPECHECKS and not TYPE_CHECKING:
        return safe_beartype(func)

    return func


#: Anything the decoder accepts as input
Buffer = Union[bytes, bytearray, memoryview]

#: The canonical type used for "strings" that may be text or raw bytes
StringT = Union[str, bytes]

#: Python primitives that frames are built from or converted into
NativePrimitive = Union[StringT, int, float, bool, None]

#: Represents any python value :func:`coresp.frames.to_frame` understands.
#:
#: This should preferably be a recursive definition, however runtime type
#: checkers (beartype) require loosening it with :class:`typing.Any`.
NativeValue = Union[
    NativePrimitive,
    Sequence[Any],
    Mapping[str, Any],
    Set[Any],
]

__all__ = [
    "Any",
    "AsyncIterator",
    "Buffer",
    "Callable",
    "ClassVar",
    "Final",
    "Hashable",
    "Iterable",
    "Iterator",
    "Literal",
    "Mapping",
    "NamedTuple",
    "NativePrimitive",
    "NativeValue",
    "Optional",
    "ParamSpec",
    "Self",
    "Sequence",
    "Set",
    "StringT",
    "TypeVar",
    "Union",
    "TYPE_CHECKING",
    "RUNTIME_TYPECHECKS",
]
