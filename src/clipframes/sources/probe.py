"""Media stream probing with ffprobe."""

import asyncio
import json
import logging
from typing import Any, Optional

from clipframes.core import ConfigurationError, MediaStream, ProbeError

logger = logging.getLogger(__name__)


def _optional_int(value: Any) -> Optional[int]:
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def parse_streams(payload: str) -> list[MediaStream]:
    """Parse ``ffprobe -of json -show_entries stream=...`` output."""
    try:
        data = json.loads(payload)
    except json.JSONDecodeError as e:
        raise ProbeError(f"Unparsable ffprobe output: {e}") from e

    streams = []
    for position, stream in enumerate(data.get("streams", [])):
        index = _optional_int(stream.get("index"))
        streams.append(
            MediaStream(
                index=position if index is None else index,
                codec_type=stream.get("codec_type") or "unknown",
                codec_name=stream.get("codec_name"),
                width=_optional_int(stream.get("width")),
                height=_optional_int(stream.get("height")),
            )
        )
    return streams


async def read_file_streams(ffprobe_path: str, path: str) -> list[MediaStream]:
    """Return the streams of a media file in container order.

    Raises:
        ProbeError: ffprobe is missing, failed, or printed garbage.
    """
    cmd = [
        ffprobe_path,
        "-v", "error",
        "-show_entries", "stream=index,codec_type,codec_name,width,height",
        "-of", "json",
        path,
    ]
    try:
        proc = await asyncio.create_subprocess_exec(
            *cmd,
            stdin=asyncio.subprocess.DEVNULL,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
    except OSError as e:
        raise ProbeError(f"Failed to run ffprobe ({ffprobe_path}): {e}") from e

    stdout, stderr = await proc.communicate()
    if proc.returncode != 0:
        stderr_text = stderr.decode("utf-8", errors="replace").strip()
        raise ProbeError(f"ffprobe failed on {path} (code {proc.returncode}): {stderr_text}")

    streams = parse_streams(stdout.decode("utf-8", errors="replace"))
    logger.debug("Probed %s: %s", path, [(s.codec_type, s.codec_name) for s in streams])
    return streams


def first_video_stream(streams: list[MediaStream]) -> MediaStream:
    """Pick the stream the decoder maps with ``v:0``.

    Raises:
        ConfigurationError: the input has no video stream.
    """
    for stream in streams:
        if stream.is_video:
            return stream
    raise ConfigurationError("Input has no video stream")
