"""Abstract base class for all clipframes frame sources."""

from abc import ABC, abstractmethod
from typing import AsyncIterator, Optional

from clipframes.sources.frame import Frame


class FrameSource(ABC):
    """Uniform async interface for pulling decoded frames.

    All sources produce :class:`Frame` objects with RGBA uint8 images.

    Usage::

        async with VideoFrameSource(config) as src:
            async for frame in src:
                canvas_frames.append(frame.image)
    """

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    @abstractmethod
    async def open(self) -> None:
        """Open the underlying decoder / file."""

    @abstractmethod
    def close(self) -> None:
        """Release the underlying decoder.  Safe to call more than once."""

    @abstractmethod
    async def read(self) -> Optional[Frame]:
        """Read the next frame.

        Returns:
            A :class:`Frame`, or ``None`` when the source is exhausted.
        """

    async def wait_closed(self) -> None:
        """Wait until resources released by :meth:`close` are gone."""

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    @abstractmethod
    def fps(self) -> float:
        """Output frames per second."""

    @property
    @abstractmethod
    def resolution(self) -> tuple[int, int]:
        """``(width, height)`` of the frames produced by this source."""

    @property
    @abstractmethod
    def is_open(self) -> bool:
        """``True`` when the source has been opened and not yet closed."""

    # ------------------------------------------------------------------
    # Context manager
    # ------------------------------------------------------------------

    async def __aenter__(self) -> "FrameSource":
        await self.open()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
        await self.wait_closed()

    # ------------------------------------------------------------------
    # Iterator protocol
    # ------------------------------------------------------------------

    def __aiter__(self) -> AsyncIterator[Frame]:
        return self

    async def __anext__(self) -> Frame:
        frame = await self.read()
        if frame is None:
            raise StopAsyncIteration
        return frame
