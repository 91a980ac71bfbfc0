"""Core types, enums and exceptions for clipframes."""

from .enums import (
    ResizeMode,
    OriginX,
    OriginY,
    DemuxState,
    EndReason,
)

from .types import (
    ResolvedGeometry,
    MediaStream,
)

from .exceptions import (
    FrameSourceError,
    ConfigurationError,
    ProbeError,
    DecoderProcessError,
    FrameOverflowError,
    FrameSizeError,
    ConcurrentReadError,
)

__all__ = [
    # Enums
    "ResizeMode",
    "OriginX",
    "OriginY",
    "DemuxState",
    "EndReason",
    # Types
    "ResolvedGeometry",
    "MediaStream",
    # Exceptions
    "FrameSourceError",
    "ConfigurationError",
    "ProbeError",
    "DecoderProcessError",
    "FrameOverflowError",
    "FrameSizeError",
    "ConcurrentReadError",
]
