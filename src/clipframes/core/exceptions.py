"""Exception taxonomy for clipframes."""


class FrameSourceError(Exception):
    """Base class for all frame source failures."""


class ConfigurationError(FrameSourceError):
    """Geometry or media metadata cannot be resolved; raised before decoding starts."""


class ProbeError(FrameSourceError):
    """ffprobe failed or produced output that could not be parsed."""


class DecoderProcessError(FrameSourceError):
    """The decoder process could not start, failed, or its stream errored."""

    def __init__(self, message: str, returncode: int | None = None, stderr_tail: str = ""):
        super().__init__(message)
        self.returncode = returncode
        self.stderr_tail = stderr_tail


class FrameOverflowError(FrameSourceError):
    """More bytes arrived than the frame buffer can hold."""


class FrameSizeError(FrameSourceError):
    """A completed frame does not have the expected byte length."""


class ConcurrentReadError(FrameSourceError):
    """A frame read was requested while another one is still outstanding."""
