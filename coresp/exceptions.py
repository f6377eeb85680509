from __future__ import annotations


class RESPError(Exception):
    """
    Base exception from which all other exceptions in coresp
    derive from.
    """


class InvalidFrameError(RESPError, ValueError):
    """
    Raised when a frame is constructed with a payload the wire
    format cannot express (for example a simple string containing CR or LF)
    """


class ProtocolError(RESPError):
    """
    Raised by the incremental decoders when the byte stream can no longer
    be a valid sequence of RESP frames. The stream is desynchronized and
    should be discarded.
    """

    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(f"Protocol Error: {reason}")


class ReplyError(RESPError):
    """
    Python representation of an error frame (simple or bulk)
    """

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)

    @property
    def code(self) -> str:
        """
        The error prefix sent by the server, e.g. ``ERR`` or ``WRONGTYPE``
        """
        return self.message.split(" ", 1)[0]

    def __eq__(self, other: object) -> bool:
        if isinstance(other, ReplyError):
            return type(self) is type(other) and self.message == other.message
        return NotImplemented

    def __hash__(self) -> int:
        return hash((type(self), self.message))
