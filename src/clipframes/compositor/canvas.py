"""Canvas boundary and a numpy/OpenCV raster implementation of it."""

from typing import Optional, Protocol

import cv2
import numpy as np

from clipframes.core import OriginX, OriginY

# Gaussian sigma of the backdrop blur, as a fraction of its longest side
BLUR_SIGMA_RATIO = 0.03


class ImageHandle(Protocol):
    """A positioned image owned by a canvas."""

    def set_placement(
        self,
        left: float,
        top: float,
        origin_x: OriginX = OriginX.LEFT,
        origin_y: OriginY = OriginY.TOP,
    ) -> None:
        ...

    def clone(self) -> "ImageHandle":
        ...


class Canvas(Protocol):
    """What the frame compositor needs from a drawing surface."""

    def create_image(self, width: int, height: int, pixels: np.ndarray) -> ImageHandle:
        ...

    def apply_blur(self, image: ImageHandle, width: int, height: int) -> None:
        ...

    def add(self, image: ImageHandle) -> None:
        ...


class RasterImage:
    """RGBA pixel array with a placement on a :class:`RasterCanvas`.

    ``left``/``top`` locate the corner named by ``origin_x``/``origin_y``,
    so a right-anchored image extends leftwards from ``left``.
    """

    def __init__(self, pixels: np.ndarray):
        self.pixels = pixels
        self.left = 0.0
        self.top = 0.0
        self.origin_x = OriginX.LEFT
        self.origin_y = OriginY.TOP

    @property
    def width(self) -> int:
        return self.pixels.shape[1]

    @property
    def height(self) -> int:
        return self.pixels.shape[0]

    def set_placement(
        self,
        left: float,
        top: float,
        origin_x: OriginX = OriginX.LEFT,
        origin_y: OriginY = OriginY.TOP,
    ) -> None:
        self.left = left
        self.top = top
        self.origin_x = OriginX(origin_x)
        self.origin_y = OriginY(origin_y)

    def clone(self) -> "RasterImage":
        copy = RasterImage(self.pixels.copy())
        copy.set_placement(self.left, self.top, self.origin_x, self.origin_y)
        return copy

    def bounds(self) -> tuple[int, int]:
        """Canvas ``(x, y)`` of the image's top-left pixel."""
        x = self.left if self.origin_x == OriginX.LEFT else self.left - self.width
        y = self.top if self.origin_y == OriginY.TOP else self.top - self.height
        return int(round(x)), int(round(y))


class RasterCanvas:
    """In-memory RGBA canvas with an ordered draw list.

    Images are drawn in insertion order by :meth:`render`, later ones on
    top, with straight alpha blending.

    Args:
        width: Canvas width in pixels.
        height: Canvas height in pixels.
        background: RGBA fill colour.
    """

    def __init__(self, width: int, height: int, background: tuple[int, int, int, int] = (0, 0, 0, 255)):
        self.width = width
        self.height = height
        self.background = background
        self._objects: list[RasterImage] = []

    @property
    def objects(self) -> list[RasterImage]:
        """Draw list, bottom first."""
        return list(self._objects)

    def create_image(self, width: int, height: int, pixels: np.ndarray) -> RasterImage:
        pixels = np.asarray(pixels, dtype=np.uint8)
        if pixels.size != width * height * 4:
            raise ValueError(
                f"Pixel buffer of {pixels.size} bytes does not match {width}x{height} RGBA"
            )
        return RasterImage(pixels.reshape(height, width, 4))

    def apply_blur(
        self,
        image: RasterImage,
        width: int,
        height: int,
        sigma: Optional[float] = None,
    ) -> None:
        """Stretch ``image`` to ``width`` x ``height`` and blur it in place."""
        resized = cv2.resize(image.pixels, (width, height), interpolation=cv2.INTER_LINEAR)
        sigma = sigma or max(1.0, max(width, height) * BLUR_SIGMA_RATIO)
        image.pixels = cv2.GaussianBlur(resized, (0, 0), sigma)

    def add(self, image: RasterImage) -> None:
        self._objects.append(image)

    def clear(self) -> None:
        self._objects.clear()

    def render(self) -> np.ndarray:
        """Flatten the draw list into an ``(H, W, 4)`` uint8 array."""
        out = np.empty((self.height, self.width, 4), dtype=np.uint8)
        out[:] = self.background
        for image in self._objects:
            self._blend(out, image)
        return out

    def _blend(self, out: np.ndarray, image: RasterImage) -> None:
        x, y = image.bounds()
        x0, y0 = max(x, 0), max(y, 0)
        x1, y1 = min(x + image.width, self.width), min(y + image.height, self.height)
        if x0 >= x1 or y0 >= y1:
            return

        src = image.pixels[y0 - y:y1 - y, x0 - x:x1 - x].astype(np.float32)
        dst = out[y0:y1, x0:x1].astype(np.float32)
        alpha = src[..., 3:4] / 255.0

        blended = np.empty_like(dst)
        blended[..., :3] = src[..., :3] * alpha + dst[..., :3] * (1.0 - alpha)
        blended[..., 3:4] = src[..., 3:4] + dst[..., 3:4] * (1.0 - alpha)
        out[y0:y1, x0:x1] = np.clip(np.rint(blended), 0, 255).astype(np.uint8)
