"""Canvas boundary and frame compositing."""

from clipframes.compositor.canvas import Canvas, ImageHandle, RasterCanvas, RasterImage
from clipframes.compositor.frame_compositor import FrameCompositor

__all__ = [
    "Canvas",
    "ImageHandle",
    "RasterCanvas",
    "RasterImage",
    "FrameCompositor",
]
