"""Tests for placing decoded frames on a canvas."""

import numpy as np
import pytest

from clipframes.compositor import FrameCompositor, RasterCanvas
from clipframes.core import OriginX, OriginY, ResizeMode, ResolvedGeometry
from clipframes.pipeline import resolve_geometry
from clipframes.utils.config import FrameSourceConfig


class RecordingImage:
    def __init__(self, canvas, width, height, pixels):
        self.canvas = canvas
        self.width = width
        self.height = height
        self.pixels = pixels
        self.placement = None
        self.blurred_to = None

    def set_placement(self, left, top, origin_x=OriginX.LEFT, origin_y=OriginY.TOP):
        self.placement = (left, top, origin_x, origin_y)

    def clone(self):
        copy = RecordingImage(self.canvas, self.width, self.height, self.pixels.copy())
        copy.placement = self.placement
        return copy


class RecordingCanvas:
    """Implements only the canvas boundary and records every call."""

    def __init__(self):
        self.added = []

    def create_image(self, width, height, pixels):
        return RecordingImage(self, width, height, pixels)

    def apply_blur(self, image, width, height):
        image.blurred_to = (width, height)

    def add(self, image):
        self.added.append(image)


def scenario_geometry(mode="contain-blur", **params):
    config = FrameSourceConfig(
        path="clip.mp4", canvas_width=1920, canvas_height=1080,
        input_width=1000, input_height=500, width=0.5, resize_mode=mode, **params,
    )
    return resolve_geometry(config)


class TestFrameCompositor:
    def test_contain_blur_adds_backdrop_then_frame(self):
        geometry = scenario_geometry()
        canvas = RecordingCanvas()
        frame = bytes(geometry.frame_byte_size)

        FrameCompositor(geometry).draw(canvas, frame)

        assert len(canvas.added) == 2
        backdrop, sharp = canvas.added
        assert backdrop.blurred_to == (960, 1080)
        assert backdrop.placement == (0, 0, OriginX.LEFT, OriginY.TOP)
        assert (sharp.width, sharp.height) == (960, 480)
        assert sharp.blurred_to is None
        assert sharp.placement == (0, 300, OriginX.LEFT, OriginY.TOP)
        assert sharp.pixels.shape == (480, 960, 4)

    @pytest.mark.parametrize("mode", ["contain", "stretch", "cover"])
    def test_single_image_without_blur(self, mode):
        geometry = scenario_geometry(mode)
        canvas = RecordingCanvas()

        FrameCompositor(geometry).draw(canvas, bytes(geometry.frame_byte_size))

        assert len(canvas.added) == 1
        assert canvas.added[0].blurred_to is None

    def test_anchor_corners_are_passed_through(self):
        geometry = scenario_geometry(left=1.0, top=1.0, origin_x="right", origin_y="bottom")
        canvas = RecordingCanvas()

        FrameCompositor(geometry).draw(canvas, bytes(geometry.frame_byte_size))

        backdrop, sharp = canvas.added
        assert backdrop.placement == (1920, 1080, OriginX.RIGHT, OriginY.BOTTOM)
        assert sharp.placement == (1920, 780, OriginX.RIGHT, OriginY.BOTTOM)

    def test_accepts_ndarray(self):
        geometry = ResolvedGeometry(
            target_width=2, target_height=2, channels=4,
            requested_width=2, requested_height=2, resize_mode=ResizeMode.STRETCH,
        )
        canvas = RecordingCanvas()
        FrameCompositor(geometry).draw(canvas, np.zeros(16, dtype=np.uint8))
        assert canvas.added[0].pixels.shape == (2, 2, 4)


class TestRasterCanvas:
    def test_letterboxed_frame_renders_over_blur(self):
        geometry = scenario_geometry()
        canvas = RasterCanvas(1920, 1080)
        frame = np.full(geometry.frame_shape, 200, dtype=np.uint8)
        frame[..., 3] = 255

        FrameCompositor(geometry).draw(canvas, frame.tobytes())
        out = canvas.render()

        assert out.shape == (1080, 1920, 4)
        assert [img.pixels.shape for img in canvas.objects] == [(1080, 960, 4), (480, 960, 4)]
        # Letterbox gap is filled by the blurred backdrop, right half untouched
        assert out[100, 480, 0] > 0
        assert tuple(out[540, 480]) == (200, 200, 200, 255)
        assert tuple(out[540, 1500]) == (0, 0, 0, 255)

    def test_right_bottom_origin_and_clipping(self):
        canvas = RasterCanvas(4, 4)
        image = canvas.create_image(2, 2, np.full((2, 2, 4), 255, dtype=np.uint8))
        image.set_placement(left=5, top=4, origin_x=OriginX.RIGHT, origin_y=OriginY.BOTTOM)
        canvas.add(image)

        out = canvas.render()

        assert image.bounds() == (3, 2)
        assert out[2:4, 3:4].min() == 255
        assert out[:2].max(axis=(0, 1)).tolist() == [0, 0, 0, 255]

    def test_alpha_blending(self):
        canvas = RasterCanvas(1, 1, background=(0, 0, 0, 255))
        pixel = np.array([[[255, 255, 255, 128]]], dtype=np.uint8)
        canvas.add(canvas.create_image(1, 1, pixel))

        assert tuple(canvas.render()[0, 0]) == (128, 128, 128, 255)

    def test_create_image_checks_size(self):
        canvas = RasterCanvas(4, 4)
        with pytest.raises(ValueError):
            canvas.create_image(2, 2, np.zeros(15, dtype=np.uint8))

    def test_clone_is_independent(self):
        canvas = RasterCanvas(4, 4)
        image = canvas.create_image(1, 1, np.zeros(4, dtype=np.uint8))
        image.set_placement(1, 2)
        copy = image.clone()
        copy.pixels[0, 0, 0] = 9

        assert image.pixels[0, 0, 0] == 0
        assert (copy.left, copy.top) == (1, 2)

    def test_clear(self):
        canvas = RasterCanvas(2, 2)
        canvas.add(canvas.create_image(1, 1, np.zeros(4, dtype=np.uint8)))
        canvas.clear()
        assert canvas.objects == []
