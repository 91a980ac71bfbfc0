"""Frame sources for clipframes.

Decodes a clip with ffmpeg and reassembles its raw output into frames.

Quick start::

    from clipframes.sources import open_video_frame_source

    source = await open_video_frame_source(config)
    while await source.read_next_frame(canvas):
        ...
    source.close()
"""

from clipframes.sources.frame import Frame
from clipframes.sources.base import FrameSource
from clipframes.sources.demuxer import FrameAssembler, FrameDemuxer
from clipframes.sources.decoder import DecoderProcess
from clipframes.sources.probe import read_file_streams, first_video_stream, parse_streams
from clipframes.sources.video_frame_source import VideoFrameSource, open_video_frame_source

__all__ = [
    "Frame",
    "FrameSource",
    "FrameAssembler",
    "FrameDemuxer",
    "DecoderProcess",
    "read_file_streams",
    "first_video_stream",
    "parse_streams",
    "VideoFrameSource",
    "open_video_frame_source",
]
