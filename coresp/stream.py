from __future__ import annotations

import logging
from types import TracebackType

import anyio
from anyio.abc import AnyByteReceiveStream, AnyByteSendStream

from coresp._packer import Packer
from coresp._unpacker import Incomplete, Unpacker
from coresp.frames import Frame
from coresp.typing import Iterable, Optional, Self

logger = logging.getLogger(__name__)


class FrameStream:
    """
    Sends and receives frames over a pair of anyio byte streams

    The receive side may be any :class:`anyio.abc.ByteReceiveStream` or an
    object stream carrying ``bytes`` (e.g. one half of
    :func:`anyio.create_memory_object_stream`). The stream does not know
    or care what transport is behind it.
    """

    def __init__(
        self,
        receive_stream: AnyByteReceiveStream,
        send_stream: Optional[AnyByteSendStream] = None,
        unpacker: Optional[Unpacker] = None,
        packer: Optional[Packer] = None,
    ) -> None:
        self.receive_stream = receive_stream
        self.send_stream = send_stream
        self.unpacker = unpacker or Unpacker()
        self.packer = packer or Packer()

    async def send(self, frame: Frame) -> None:
        await self.send_many([frame])

    async def send_many(self, frames: Iterable[Frame]) -> None:
        """Write several frames, e.g. a pipeline of requests"""
        if self.send_stream is None:
            raise anyio.ClosedResourceError
        for chunk in self.packer.pack_frames(frames):
            await self.send_stream.send(chunk)

    async def receive(self) -> Frame:
        """
        Wait for the next complete frame

        :raises anyio.EndOfStream: if the peer closed between frames
        :raises anyio.IncompleteRead: if the peer closed in the middle of a frame
        :raises ~coresp.exceptions.ProtocolError: if the peer sent malformed data
        """
        while True:
            frame = self.unpacker.get_frame()
            if not isinstance(frame, Incomplete):
                return frame
            try:
                data = await self.receive_stream.receive()
            except anyio.EndOfStream:
                if self.unpacker.pending:
                    logger.info(
                        f"Stream closed with {self.unpacker.pending} bytes of an incomplete frame"
                    )
                    raise anyio.IncompleteRead from None
                raise
            self.unpacker.feed(data)

    def __aiter__(self) -> Self:
        return self

    async def __anext__(self) -> Frame:
        try:
            return await self.receive()
        except anyio.EndOfStream:
            raise StopAsyncIteration from None

    async def aclose(self) -> None:
        if self.send_stream is not None:
            await self.send_stream.aclose()
        await self.receive_stream.aclose()

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(
        self,
        exc_type: Optional[type[BaseException]],
        exc_value: Optional[BaseException],
        traceback: Optional[TracebackType],
    ) -> None:
        await self.aclose()
