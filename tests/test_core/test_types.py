"""Tests for core types."""

import pytest

from clipframes.core import (
    FrameSourceError, ConfigurationError, DecoderProcessError,
    MediaStream, ResizeMode, ResolvedGeometry,
)


class TestResizeMode:
    def test_contain_modes(self):
        assert ResizeMode.CONTAIN.is_contain
        assert ResizeMode.CONTAIN_BLUR.is_contain
        assert not ResizeMode.COVER.is_contain
        assert not ResizeMode.STRETCH.is_contain

    def test_from_value(self):
        assert ResizeMode("contain-blur") is ResizeMode.CONTAIN_BLUR


class TestResolvedGeometry:
    def test_frame_byte_size(self):
        geometry = ResolvedGeometry(
            target_width=960, target_height=480, channels=4,
            requested_width=960, requested_height=1080,
        )
        assert geometry.frame_byte_size == 1843200

    def test_image_position(self):
        geometry = ResolvedGeometry(
            target_width=10, target_height=10, channels=4,
            requested_width=20, requested_height=10,
            left=5, top=1, center_offset_x=5,
        )
        assert geometry.image_position == (10, 1)

    def test_immutable(self):
        geometry = ResolvedGeometry(
            target_width=1, target_height=1, channels=4,
            requested_width=1, requested_height=1,
        )
        with pytest.raises(AttributeError):
            geometry.target_width = 2


class TestMediaStream:
    def test_is_video(self):
        assert MediaStream(index=0, codec_type="video").is_video
        assert not MediaStream(index=1, codec_type="audio").is_video


class TestExceptions:
    def test_hierarchy(self):
        assert issubclass(ConfigurationError, FrameSourceError)
        error = DecoderProcessError("boom", returncode=2, stderr_tail="tail")
        assert isinstance(error, FrameSourceError)
        assert error.returncode == 2
        assert error.stderr_tail == "tail"
