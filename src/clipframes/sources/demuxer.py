"""Reassembly of a raw decoder byte stream into fixed-size frames.

The decoder writes frames back to back with no headers, so framing is
purely by byte count.  Chunks arrive at arbitrary sizes and alignments;
:class:`FrameAssembler` turns them into whole frames and
:class:`FrameDemuxer` drives it from an async stream, one frame per call.
"""

import asyncio
import logging
from typing import Optional, Protocol

from clipframes.core import (
    ConcurrentReadError,
    DemuxState,
    EndReason,
    FrameOverflowError,
)

logger = logging.getLogger(__name__)

DEFAULT_STALL_TIMEOUT = 60.0


class ByteStream(Protocol):
    """Anything with an ``asyncio.StreamReader``-style ``read``."""

    async def read(self, n: int = -1) -> bytes:
        ...


class FrameAssembler:
    """Accumulates byte chunks into a fixed-capacity frame buffer.

    The buffer is reused for every frame and never handed out; completed
    frames are returned as independent ``bytes`` copies.

    Args:
        frame_byte_size: Exact length of one frame in bytes.
    """

    def __init__(self, frame_byte_size: int):
        if frame_byte_size <= 0:
            raise ValueError(f"frame_byte_size must be positive, got {frame_byte_size}")
        self._size = frame_byte_size
        self._buffer = bytearray(frame_byte_size)
        self._length = 0

    @property
    def frame_byte_size(self) -> int:
        return self._size

    @property
    def length(self) -> int:
        """Bytes accumulated towards the next frame."""
        return self._length

    @property
    def is_complete(self) -> bool:
        return self._length == self._size

    def push(self, chunk: bytes) -> Optional[bytes]:
        """Append a chunk; return the finished frame if it completed one.

        Bytes past the frame boundary are carried over to the start of the
        buffer for the next frame.

        Raises:
            FrameOverflowError: the carry-over does not fit in the buffer.
        """
        n_copied = min(len(chunk), self._size - self._length)
        self._buffer[self._length:self._length + n_copied] = chunk[:n_copied]
        self._length += n_copied

        if self._length < self._size:
            return None

        frame = bytes(self._buffer)

        rest = len(chunk) - n_copied
        if rest > self._size:
            self._length = 0
            raise FrameOverflowError(
                f"Video data overflow: {rest} bytes left over after a frame, "
                f"buffer holds {self._size}"
            )
        self._buffer[:rest] = chunk[n_copied:]
        self._length = rest
        return frame

    def take_complete(self) -> Optional[bytes]:
        """Return a frame made up entirely of carried-over bytes, if any."""
        if not self.is_complete:
            return None
        self._length = 0
        return bytes(self._buffer)

    def reset(self) -> None:
        self._length = 0


class FrameDemuxer:
    """Pull-based frame reader over a raw decoder stream.

    State machine::

        OPEN --EOF/stall--> ENDED
        OPEN --close()----> CLOSED
        OPEN --error------> FAILED

    Only one :meth:`read_next_frame` may be outstanding at a time.  A
    stream that makes no progress for ``stall_timeout`` seconds is treated
    as ended rather than failed.

    Args:
        stream: Source of raw bytes; ``read`` returns ``b""`` at EOF.
        frame_byte_size: Exact length of one frame in bytes.
        stall_timeout: Seconds without any bytes before giving up.
        chunk_size: Maximum bytes requested per read.  Defaults to one
            frame, which keeps any carry-over smaller than the buffer.
        name: Label used in log messages.
    """

    def __init__(
        self,
        stream: ByteStream,
        frame_byte_size: int,
        stall_timeout: float = DEFAULT_STALL_TIMEOUT,
        chunk_size: Optional[int] = None,
        name: str = "",
    ):
        self._stream = stream
        self._assembler = FrameAssembler(frame_byte_size)
        self._stall_timeout = stall_timeout
        self._chunk_size = chunk_size or frame_byte_size
        self._name = name or "stream"

        self._state = DemuxState.OPEN
        self._end_reason: Optional[EndReason] = None
        self._error: Optional[BaseException] = None
        self._reading = False
        self._closed = asyncio.Event()
        self._frames_read = 0

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def state(self) -> DemuxState:
        return self._state

    @property
    def end_reason(self) -> Optional[EndReason]:
        return self._end_reason

    @property
    def error(self) -> Optional[BaseException]:
        return self._error

    @property
    def frame_byte_size(self) -> int:
        return self._assembler.frame_byte_size

    @property
    def buffered_bytes(self) -> int:
        """Bytes already accumulated towards the next frame."""
        return self._assembler.length

    @property
    def frames_read(self) -> int:
        return self._frames_read

    @property
    def is_reading(self) -> bool:
        return self._reading

    # ------------------------------------------------------------------
    # Reading
    # ------------------------------------------------------------------

    async def read_next_frame(self) -> Optional[bytes]:
        """Read the next complete frame.

        Returns:
            Exactly ``frame_byte_size`` bytes, or ``None`` once the stream
            has ended, stalled or been closed.

        Raises:
            ConcurrentReadError: another read is still in flight.
            FrameOverflowError: the stream delivered more than fits.
            Exception: whatever the stream raised, on this and every later call.
        """
        if self._state is DemuxState.FAILED:
            raise self._error
        if self._state is not DemuxState.OPEN:
            logger.info("%s: tried to read next video frame after stream ended", self._name)
            return None
        if self._reading:
            raise ConcurrentReadError(f"{self._name}: a frame read is already in progress")

        self._reading = True
        try:
            frame = await self._accumulate()
        except Exception as e:
            self._fail(e)
            raise
        finally:
            self._reading = False

        if frame is not None:
            self._frames_read += 1
        return frame

    async def _accumulate(self) -> Optional[bytes]:
        frame = self._assembler.take_complete()
        while frame is None:
            chunk = await self._next_chunk()
            if chunk is None:
                return None
            frame = self._assembler.push(chunk)
        return frame

    async def _next_chunk(self) -> Optional[bytes]:
        """Wait for the next chunk, racing the stall timeout and close()."""
        read_task = asyncio.ensure_future(self._stream.read(self._chunk_size))
        close_task = asyncio.ensure_future(self._closed.wait())
        try:
            done, _ = await asyncio.wait(
                {read_task, close_task},
                timeout=self._stall_timeout,
                return_when=asyncio.FIRST_COMPLETED,
            )
        finally:
            close_task.cancel()
            if not read_task.done():
                read_task.cancel()

        # close() wins over data that raced in with it
        if self._state is DemuxState.CLOSED:
            if read_task.done() and not read_task.cancelled():
                read_task.exception()
            return None

        if read_task not in done:
            logger.warning(
                "%s: timeout on read video frame, no data for %.1fs",
                self._name, self._stall_timeout,
            )
            self._end(EndReason.STALL)
            return None

        chunk = read_task.result()
        if not chunk:
            logger.debug("%s: video stream ended", self._name)
            self._end(EndReason.EOF)
            return None
        return chunk

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def _end(self, reason: EndReason) -> None:
        self._state = DemuxState.ENDED
        self._end_reason = reason
        self._assembler.reset()

    def _fail(self, error: BaseException) -> None:
        logger.error("%s: frame read failed: %s", self._name, error)
        self._state = DemuxState.FAILED
        self._error = error
        self._assembler.reset()

    def close(self) -> None:
        """Stop reading; an in-flight read resolves with ``None``.

        A failed demuxer stays failed and keeps raising its error.
        """
        if self._state in (DemuxState.CLOSED, DemuxState.FAILED):
            self._closed.set()
            return
        if self._state is DemuxState.OPEN:
            self._end_reason = EndReason.CLOSED
        self._state = DemuxState.CLOSED
        self._assembler.reset()
        self._closed.set()
