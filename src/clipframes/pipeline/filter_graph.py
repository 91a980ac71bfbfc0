"""ffmpeg argument construction for raw RGBA frame decoding."""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

from clipframes.core import ResizeMode, ResolvedGeometry

if TYPE_CHECKING:
    from clipframes.utils.config import FrameSourceConfig


PIXEL_FORMAT = "rgba"

# Alpha-capable codecs whose native ffmpeg decoders drop the alpha plane
ALPHA_CODEC_DECODERS = {
    "vp8": "libvpx",
    "vp9": "libvpx-vp9",
}


def format_number(value: float) -> str:
    """Render a number for an ffmpeg argument without a trailing ``.0``."""
    value = float(value)
    if value.is_integer():
        return str(int(value))
    return repr(value)


def common_args(enable_ffmpeg_log: bool = False) -> list[str]:
    return ["-hide_banner", *([] if enable_ffmpeg_log else ["-loglevel", "error"])]


def input_codec_args(codec_name: Optional[str]) -> list[str]:
    decoder = ALPHA_CODEC_DECODERS.get(codec_name or "")
    if decoder is None:
        return []
    return ["-vcodec", decoder]


def build_scale_filter(geometry: ResolvedGeometry) -> str:
    w, h = geometry.target_width, geometry.target_height
    if geometry.resize_mode != ResizeMode.COVER:
        return f"scale={w}:{h}"
    # Scale up until both sides cover the box, honouring the sample aspect
    # ratio, then crop the overflow around the center.
    factor = f"max({w}/(iw*sar)\\,{h}/ih)"
    return f"scale=(iw*sar)*{factor}:ih*{factor},crop={w}:{h}"


def build_video_filter(config: FrameSourceConfig, geometry: ResolvedGeometry) -> str:
    """Build the ``-vf`` filter chain: optional setpts, fps, then scale."""
    stages = []
    if config.frame_pts_factor != 1:
        stages.append(f"setpts={format_number(config.frame_pts_factor)}*PTS")
    stages.append(f"fps={config.framerate}")
    stages.append(build_scale_filter(geometry))
    return ",".join(stages)


def build_trim_args(config: FrameSourceConfig) -> tuple[list[str], list[str]]:
    """Return ``(input_args, output_args)`` for the cut window.

    ``cut_to`` becomes a duration relative to ``cut_from``, stretched by the
    pts factor so the trimmed span matches the retimed output.
    """
    input_args: list[str] = []
    output_args: list[str] = []
    if config.cut_from:
        input_args = ["-ss", format_number(config.cut_from)]
    if config.cut_to is not None:
        duration = (config.cut_to - (config.cut_from or 0)) * config.frame_pts_factor
        output_args = ["-t", format_number(duration)]
    return input_args, output_args


def build_decoder_args(
    config: FrameSourceConfig,
    geometry: ResolvedGeometry,
    codec_name: Optional[str] = None,
) -> list[str]:
    """Full ffmpeg argument list (without the binary) writing raw frames to stdout."""
    seek_args, duration_args = build_trim_args(config)
    return [
        *common_args(config.enable_ffmpeg_log),
        *input_codec_args(codec_name),
        *seek_args,
        "-i", config.path,
        *duration_args,
        "-vf", build_video_filter(config, geometry),
        "-map", "v:0",
        "-vcodec", "rawvideo",
        "-pix_fmt", PIXEL_FORMAT,
        "-f", "image2pipe",
        "-",
    ]
