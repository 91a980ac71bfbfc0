"""Core enumerations for clipframes."""

from enum import Enum, auto


class ResizeMode(str, Enum):
    """How a clip is fitted into its requested box on the canvas."""
    STRETCH = "stretch"
    CONTAIN = "contain"
    CONTAIN_BLUR = "contain-blur"
    COVER = "cover"

    @property
    def is_contain(self) -> bool:
        """``True`` for the letterboxing modes."""
        return self in (ResizeMode.CONTAIN, ResizeMode.CONTAIN_BLUR)


class OriginX(str, Enum):
    """Horizontal anchor corner for placement."""
    LEFT = "left"
    RIGHT = "right"


class OriginY(str, Enum):
    """Vertical anchor corner for placement."""
    TOP = "top"
    BOTTOM = "bottom"


class DemuxState(Enum):
    """Lifecycle state of a frame demuxer."""
    OPEN = auto()
    ENDED = auto()
    CLOSED = auto()
    FAILED = auto()


class EndReason(Enum):
    """Why a demuxer stopped producing frames."""
    EOF = auto()
    STALL = auto()
    CLOSED = auto()
