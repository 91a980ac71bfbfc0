"""Places decoded frames on a canvas."""

from typing import Union

import numpy as np

from clipframes.compositor.canvas import Canvas
from clipframes.core import ResizeMode, ResolvedGeometry


class FrameCompositor:
    """Draws each decoded frame of one source onto a canvas.

    Under ``contain-blur`` a blurred copy stretched over the whole
    requested box is added first, so the letterbox gap is filled by the
    frame itself.

    Args:
        geometry: Resolved geometry of the source.
    """

    def __init__(self, geometry: ResolvedGeometry):
        self.geometry = geometry

    def _pixels(self, frame: Union[bytes, bytearray, memoryview, np.ndarray]) -> np.ndarray:
        if isinstance(frame, np.ndarray):
            return frame.reshape(self.geometry.frame_shape)
        return np.frombuffer(frame, dtype=np.uint8).reshape(self.geometry.frame_shape)

    def draw(self, canvas: Canvas, frame: Union[bytes, bytearray, memoryview, np.ndarray]) -> None:
        """Add the frame (and its blurred backdrop, if any) to ``canvas``."""
        g = self.geometry
        img = canvas.create_image(
            width=g.target_width,
            height=g.target_height,
            pixels=self._pixels(frame),
        )
        left, top = g.image_position
        img.set_placement(left=left, top=top, origin_x=g.origin_x, origin_y=g.origin_y)

        if g.resize_mode == ResizeMode.CONTAIN_BLUR:
            blurred = img.clone()
            canvas.apply_blur(blurred, width=g.requested_width, height=g.requested_height)
            blurred.set_placement(left=g.left, top=g.top, origin_x=g.origin_x, origin_y=g.origin_y)
            canvas.add(blurred)

        canvas.add(img)
