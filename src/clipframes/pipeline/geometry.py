"""Target frame geometry for a clip placed in a box on the canvas."""

from __future__ import annotations

import math
from typing import TYPE_CHECKING

from clipframes.core import ConfigurationError, OriginX, OriginY, ResolvedGeometry

if TYPE_CHECKING:
    from clipframes.utils.config import FrameSourceConfig


def round_half_away_from_zero(value: float) -> int:
    """Round to the nearest integer, ties away from zero (``2.5 -> 3``)."""
    return int(math.copysign(math.floor(abs(value) + 0.5), value))


def fit_inside(
    requested_width: int,
    requested_height: int,
    input_width: int,
    input_height: int,
) -> tuple[int, int]:
    """Largest ``(width, height)`` with the input aspect ratio that fits the box.

    The axis with the larger scale ratio is the one with spare room, so the
    frame is fitted to the other axis and a letterbox gap is left on it.
    """
    if input_width <= 0 or input_height <= 0:
        raise ConfigurationError(
            f"Input dimensions must be positive, got {input_width}x{input_height}"
        )

    ratio_w = requested_width / input_width
    ratio_h = requested_height / input_height
    input_aspect_ratio = input_width / input_height

    if ratio_w > ratio_h:
        return round_half_away_from_zero(requested_height * input_aspect_ratio), requested_height
    return requested_width, round_half_away_from_zero(requested_width / input_aspect_ratio)


def resolve_geometry(config: FrameSourceConfig) -> ResolvedGeometry:
    """Compute the decoded frame size and its placement offsets.

    ``stretch`` and ``cover`` decode straight to the requested box; the
    scaling filter handles distortion or cropping.  ``contain`` and
    ``contain-blur`` letterbox the frame and center it inside the box.

    Raises:
        ConfigurationError: the geometry cannot produce a non-empty frame.
    """
    requested_width = config.requested_width
    requested_height = config.requested_height
    target_width, target_height = requested_width, requested_height
    center_offset_x = 0.0
    center_offset_y = 0.0

    if config.resize_mode.is_contain:
        target_width, target_height = fit_inside(
            requested_width,
            requested_height,
            config.input_width or 0,
            config.input_height or 0,
        )
        # Anchoring from the right/bottom edge measures the other way
        dir_x = 1 if config.origin_x == OriginX.LEFT else -1
        dir_y = 1 if config.origin_y == OriginY.TOP else -1
        center_offset_x = dir_x * (requested_width - target_width) / 2
        center_offset_y = dir_y * (requested_height - target_height) / 2

    if target_width <= 0 or target_height <= 0:
        raise ConfigurationError(
            f"Resolved frame size {target_width}x{target_height} is empty "
            f"(requested {requested_width}x{requested_height}, "
            f"input {config.input_width}x{config.input_height})"
        )

    return ResolvedGeometry(
        target_width=target_width,
        target_height=target_height,
        channels=config.channels,
        requested_width=requested_width,
        requested_height=requested_height,
        left=config.left_px,
        top=config.top_px,
        center_offset_x=center_offset_x,
        center_offset_y=center_offset_y,
        resize_mode=config.resize_mode,
        origin_x=config.origin_x,
        origin_y=config.origin_y,
    )
