"""Geometry resolution and decoder filter graph construction."""

from clipframes.pipeline.geometry import (
    resolve_geometry,
    fit_inside,
    round_half_away_from_zero,
)
from clipframes.pipeline.filter_graph import (
    build_decoder_args,
    build_video_filter,
    build_scale_filter,
    build_trim_args,
    input_codec_args,
    common_args,
)

__all__ = [
    "resolve_geometry",
    "fit_inside",
    "round_half_away_from_zero",
    "build_decoder_args",
    "build_video_filter",
    "build_scale_filter",
    "build_trim_args",
    "input_codec_args",
    "common_args",
]
