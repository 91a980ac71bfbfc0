"""Frame dataclass for the clipframes FrameSource abstraction."""

from dataclasses import dataclass

import numpy as np


@dataclass
class Frame:
    """A single decoded video frame with metadata.

    Attributes:
        image: RGBA uint8 numpy array of shape (H, W, 4).  Arrays built
            straight from decoder output are read-only.
        timestamp: Seconds into the output timeline (frame number divided
            by the output framerate).
        frame_number: Sequential counter starting from 0.
        source_name: Human-readable identifier, e.g. ``"ffmpeg:clip.mp4"``.
        width: Frame width in pixels.
        height: Frame height in pixels.
    """

    image: np.ndarray
    timestamp: float
    frame_number: int
    source_name: str
    width: int
    height: int
