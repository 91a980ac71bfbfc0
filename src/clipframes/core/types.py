"""Core data types for clipframes."""

from dataclasses import dataclass
from typing import Optional

from .enums import ResizeMode, OriginX, OriginY


# ============================================================================
# Geometry Types
# ============================================================================

@dataclass(frozen=True)
class ResolvedGeometry:
    """Pixel geometry of one frame source, derived once at open.

    Attributes:
        target_width: Width of the scaled frame the decoder emits.
        target_height: Height of the scaled frame the decoder emits.
        channels: Bytes per pixel.
        requested_width: Width of the box the clip is placed in.
        requested_height: Height of the box the clip is placed in.
        left: Canvas x coordinate of the box anchor.
        top: Canvas y coordinate of the box anchor.
        center_offset_x: Letterbox centering delta along x.
        center_offset_y: Letterbox centering delta along y.
    """
    target_width: int
    target_height: int
    channels: int
    requested_width: int
    requested_height: int
    left: float = 0.0
    top: float = 0.0
    center_offset_x: float = 0.0
    center_offset_y: float = 0.0
    resize_mode: ResizeMode = ResizeMode.CONTAIN_BLUR
    origin_x: OriginX = OriginX.LEFT
    origin_y: OriginY = OriginY.TOP

    @property
    def frame_byte_size(self) -> int:
        """Number of bytes in one raw frame."""
        return self.target_width * self.target_height * self.channels

    @property
    def frame_shape(self) -> tuple[int, int, int]:
        """``(height, width, channels)`` of a decoded frame array."""
        return (self.target_height, self.target_width, self.channels)

    @property
    def image_position(self) -> tuple[float, float]:
        """Placement of the sharp frame, letterbox offset included."""
        return (self.left + self.center_offset_x, self.top + self.center_offset_y)


# ============================================================================
# Media Types
# ============================================================================

@dataclass
class MediaStream:
    """One stream reported by the media probe."""
    index: int
    codec_type: str
    codec_name: Optional[str] = None
    width: Optional[int] = None
    height: Optional[int] = None

    @property
    def is_video(self) -> bool:
        return self.codec_type == "video"
