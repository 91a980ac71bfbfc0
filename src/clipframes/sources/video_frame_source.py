"""Video clip frame source backed by an ffmpeg decoder process."""

import logging
from pathlib import Path
from typing import Optional

import numpy as np

from clipframes.compositor import Canvas, FrameCompositor
from clipframes.core import (
    ConcurrentReadError,
    DecoderProcessError,
    EndReason,
    FrameSizeError,
    FrameSourceError,
    ResolvedGeometry,
)
from clipframes.pipeline import build_decoder_args, resolve_geometry
from clipframes.sources.base import FrameSource
from clipframes.sources.decoder import DecoderProcess
from clipframes.sources.demuxer import FrameDemuxer
from clipframes.sources.frame import Frame
from clipframes.sources.probe import first_video_stream, read_file_streams
from clipframes.utils.config import FrameSourceConfig

logger = logging.getLogger(__name__)

# Grace period for the decoder to exit once its stdout hit EOF
EXIT_WAIT_SECONDS = 5.0


class VideoFrameSource(FrameSource):
    """Frames of one clip, decoded to raw RGBA and scaled for the canvas.

    :meth:`open` probes the clip, resolves its geometry and starts ffmpeg.
    Geometry problems surface as :class:`ConfigurationError` before any
    process is spawned.  A decoder failure is sticky: the read that
    notices it and every later read raise :class:`DecoderProcessError`.

    Args:
        config: Per-clip configuration.
    """

    def __init__(self, config: FrameSourceConfig):
        self._config = config
        self._name = Path(config.path).name

        self._geometry: Optional[ResolvedGeometry] = None
        self._decoder: Optional[DecoderProcess] = None
        self._demuxer: Optional[FrameDemuxer] = None
        self._compositor: Optional[FrameCompositor] = None
        self._error: Optional[FrameSourceError] = None
        self._closed = False

        self._delivered: int = 0

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def open(self) -> None:
        if self._decoder is not None:
            return
        if self._closed:
            raise RuntimeError(f"Source is closed: {self._config.path}")

        config = self._config
        streams = await read_file_streams(config.ffprobe_path, config.path)
        video = first_video_stream(streams)

        # Probe only fills what the caller left unset
        updates = {}
        if config.input_width is None:
            updates["input_width"] = video.width
        if config.input_height is None:
            updates["input_height"] = video.height
        if updates:
            config = config.model_copy(update=updates)
            self._config = config

        geometry = resolve_geometry(config)
        args = build_decoder_args(config, geometry, video.codec_name)

        decoder = DecoderProcess(
            config.ffmpeg_path,
            args,
            name=self._name,
            log_output=config.enable_ffmpeg_log,
        )
        await decoder.start()

        self._geometry = geometry
        self._decoder = decoder
        self._demuxer = FrameDemuxer(
            decoder.stdout,
            geometry.frame_byte_size,
            stall_timeout=config.stall_timeout_seconds,
            name=self._name,
        )
        self._compositor = FrameCompositor(geometry)
        self._delivered = 0

        logger.info(
            "VideoFrameSource opened: %s  codec=%s  input %sx%s -> %dx%d "
            "(%s, box %dx%d) @ %s fps",
            config.path, video.codec_name, config.input_width, config.input_height,
            geometry.target_width, geometry.target_height, config.resize_mode.value,
            geometry.requested_width, geometry.requested_height, config.framerate,
        )

    def close(self) -> None:
        """Stop the decoder.  Idempotent, and quiet after a natural end."""
        if self._closed:
            return
        self._closed = True
        if self._demuxer is not None:
            self._demuxer.close()
        if self._decoder is not None:
            self._decoder.terminate()
        logger.info("VideoFrameSource closed: %s", self._config.path)

    async def wait_closed(self) -> None:
        if self._decoder is not None:
            await self._decoder.aclose()

    # ------------------------------------------------------------------
    # Reading
    # ------------------------------------------------------------------

    async def read_raw(self) -> Optional[bytes]:
        """Read the next frame as raw RGBA bytes, ``None`` when exhausted."""
        if self._error is not None:
            raise self._error
        if self._demuxer is None or self._closed:
            return None

        try:
            rgba = await self._demuxer.read_next_frame()
        except ConcurrentReadError:
            raise
        except FrameSourceError as e:
            self._error = e
            raise
        except Exception as e:
            self._error = DecoderProcessError(f"Video stream error on {self._name}: {e}")
            raise self._error from e

        if rgba is None:
            await self._check_decoder_exit()
            return None

        if len(rgba) != self._geometry.frame_byte_size:
            self._error = FrameSizeError(
                f"Frame of {len(rgba)} bytes, expected {self._geometry.frame_byte_size}"
            )
            raise self._error
        return rgba

    async def read(self) -> Optional[Frame]:
        rgba = await self.read_raw()
        if rgba is None:
            return None

        frame = Frame(
            image=np.frombuffer(rgba, dtype=np.uint8).reshape(self._geometry.frame_shape),
            timestamp=self._delivered / self._config.fps,
            frame_number=self._delivered,
            source_name=f"ffmpeg:{self._name}",
            width=self._geometry.target_width,
            height=self._geometry.target_height,
        )
        self._delivered += 1
        return frame

    async def read_next_frame(self, canvas: Canvas) -> bool:
        """Composite the next frame onto ``canvas``.

        Returns:
            ``True`` when a frame was drawn, ``False`` once the clip is
            exhausted (nothing is added to the canvas then).
        """
        frame = await self.read()
        if frame is None:
            return False
        self._compositor.draw(canvas, frame.image)
        return True

    async def _check_decoder_exit(self) -> None:
        """Turn a failed decoder exit after EOF into a sticky error.

        A stalled decoder is stopped, since nothing will read its output.
        """
        if self._closed:
            return
        if self._demuxer.end_reason is EndReason.STALL:
            self._decoder.terminate()
            return
        if self._demuxer.end_reason is not EndReason.EOF:
            return
        returncode = await self._decoder.wait_exit(timeout=EXIT_WAIT_SECONDS)
        if returncode is None:
            logger.warning("%s: ffmpeg still running after its output ended", self._name)
            return
        if returncode != 0:
            self._error = self._decoder.exit_error(returncode)
            logger.error("%s: %s", self._name, self._error)
            raise self._error
        logger.debug("%s: ffmpeg exited cleanly after %d frames", self._name, self._delivered)

    # ------------------------------------------------------------------
    # Extra properties
    # ------------------------------------------------------------------

    @property
    def config(self) -> FrameSourceConfig:
        """Configuration, with probed input dimensions once opened."""
        return self._config

    @property
    def geometry(self) -> Optional[ResolvedGeometry]:
        return self._geometry

    @property
    def frames_delivered(self) -> int:
        return self._delivered

    # ------------------------------------------------------------------
    # FrameSource properties
    # ------------------------------------------------------------------

    @property
    def fps(self) -> float:
        return self._config.fps

    @property
    def resolution(self) -> tuple[int, int]:
        if self._geometry is None:
            return (0, 0)
        return (self._geometry.target_width, self._geometry.target_height)

    @property
    def is_open(self) -> bool:
        return self._demuxer is not None and not self._closed


async def open_video_frame_source(config: FrameSourceConfig) -> VideoFrameSource:
    """Open a clip and return a ready :class:`VideoFrameSource`."""
    source = VideoFrameSource(config)
    await source.open()
    return source
