from __future__ import annotations

import os

from coresp.constants import (
    DEFAULT_MAX_AGGREGATE_LENGTH,
    DEFAULT_MAX_BULK_LENGTH,
    DEFAULT_MAX_DEPTH,
    DEFAULT_MAX_LINE_LENGTH,
)


def _env_limit(name: str, default: int) -> int:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    value = int(raw)
    if value <= 0:
        raise ValueError(f"{name} must be a positive integer, got {raw!r}")
    return value


class __Config:
    def __init__(self) -> None:
        self.__max_depth: int | None = None
        self.__max_bulk_length: int | None = None
        self.__max_aggregate_length: int | None = None
        self.__max_line_length: int | None = None

    @property
    def runtime_checks(self) -> bool:
        """
        Whether runtime type checks are to be enabled.
        Can be enabled by setting the environment variable ``CORESP_RUNTIME_CHECKS`` to ``true``
        """
        return os.environ.get("CORESP_RUNTIME_CHECKS", "").lower() in [
            "1",
            "true",
            "t",
        ]

    @property
    def max_depth(self) -> int:
        """
        Deepest aggregate nesting (arrays, maps & sets) the decoder accepts
        before declaring the input malformed. Can be set with the environment
        variable ``CORESP_MAX_DEPTH`` or by assigning to ``coresp.Config.max_depth``
        """
        if self.__max_depth is not None:
            return self.__max_depth
        return _env_limit("CORESP_MAX_DEPTH", DEFAULT_MAX_DEPTH)

    @max_depth.setter
    def max_depth(self, value: int | None) -> None:
        self.__max_depth = value

    @property
    def max_bulk_length(self) -> int:
        """
        Largest declared length of a bulk string or bulk error payload.
        Can be set with the environment variable ``CORESP_MAX_BULK_LENGTH``
        """
        if self.__max_bulk_length is not None:
            return self.__max_bulk_length
        return _env_limit("CORESP_MAX_BULK_LENGTH", DEFAULT_MAX_BULK_LENGTH)

    @max_bulk_length.setter
    def max_bulk_length(self, value: int | None) -> None:
        self.__max_bulk_length = value

    @property
    def max_aggregate_length(self) -> int:
        """
        Largest declared element count of an array or set, or entry count of a map.
        Can be set with the environment variable ``CORESP_MAX_AGGREGATE_LENGTH``
        """
        if self.__max_aggregate_length is not None:
            return self.__max_aggregate_length
        return _env_limit("CORESP_MAX_AGGREGATE_LENGTH", DEFAULT_MAX_AGGREGATE_LENGTH)

    @max_aggregate_length.setter
    def max_aggregate_length(self, value: int | None) -> None:
        self.__max_aggregate_length = value

    @property
    def max_line_length(self) -> int:
        """
        Longest CRLF terminated line (tag byte excluded) the decoder will
        wait for. Can be set with the environment variable ``CORESP_MAX_LINE_LENGTH``
        """
        if self.__max_line_length is not None:
            return self.__max_line_length
        return _env_limit("CORESP_MAX_LINE_LENGTH", DEFAULT_MAX_LINE_LENGTH)

    @max_line_length.setter
    def max_line_length(self, value: int | None) -> None:
        self.__max_line_length = value


#: Used to configure global behaviors of the coresp library
Config = __Config()
