"""Configuration management for clipframes."""

import logging
from pathlib import Path
from typing import Optional, Dict, Any, Literal

import yaml
from pydantic import BaseModel, Field, field_validator, model_validator

from clipframes.core import ResizeMode, OriginX, OriginY
from clipframes.pipeline.geometry import round_half_away_from_zero


logger = logging.getLogger(__name__)

DEFAULT_STALL_TIMEOUT_SECONDS = 60.0


class CanvasConfig(BaseModel):
    """Target canvas every clip is composited onto."""
    width: int = Field(default=1920, gt=0)
    height: int = Field(default=1080, gt=0)
    framerate: str = "25"  # ffmpeg rate string, e.g. "30000/1001"


class DecoderConfig(BaseModel):
    """Configuration for the external ffmpeg decoder."""
    ffmpeg_path: str = "ffmpeg"
    ffprobe_path: str = "ffprobe"
    enable_ffmpeg_log: bool = False
    stall_timeout_seconds: float = Field(default=DEFAULT_STALL_TIMEOUT_SECONDS, gt=0)


class LoggingConfig(BaseModel):
    """Configuration for logging."""
    level: str = "INFO"
    log_to_file: bool = False
    log_directory: str = "logs"
    max_log_size_mb: int = 100
    backup_count: int = 5


class FrameSourceConfig(BaseModel):
    """Immutable per-clip configuration of one video frame source.

    ``width``, ``height``, ``left`` and ``top`` are fractions of the canvas
    size; ``width``/``height`` of ``None`` cover the whole canvas.
    ``input_width``/``input_height`` are filled in from the media probe
    when left unset.
    """

    model_config = {"frozen": True}

    path: str
    canvas_width: int = Field(gt=0)
    canvas_height: int = Field(gt=0)
    channels: Literal[4] = 4  # RGBA, one byte per channel
    framerate: str = "25"
    frame_pts_factor: float = Field(default=1.0, gt=0)
    resize_mode: ResizeMode = ResizeMode.CONTAIN_BLUR
    input_width: Optional[int] = None
    input_height: Optional[int] = None
    width: Optional[float] = Field(default=None, gt=0)
    height: Optional[float] = Field(default=None, gt=0)
    left: float = 0.0
    top: float = 0.0
    origin_x: OriginX = OriginX.LEFT
    origin_y: OriginY = OriginY.TOP
    cut_from: Optional[float] = Field(default=None, ge=0)
    cut_to: Optional[float] = Field(default=None, ge=0)

    # Decoder process
    ffmpeg_path: str = "ffmpeg"
    ffprobe_path: str = "ffprobe"
    enable_ffmpeg_log: bool = False
    stall_timeout_seconds: float = Field(default=DEFAULT_STALL_TIMEOUT_SECONDS, gt=0)

    @field_validator("framerate", mode="before")
    @classmethod
    def validate_framerate(cls, v: Any) -> str:
        """Accept numbers or ``num/den`` strings for the output rate."""
        text = str(v).strip()
        num, _, den = text.partition("/")
        try:
            rate = float(num) / float(den) if den else float(num)
        except (ValueError, ZeroDivisionError):
            raise ValueError(f"Invalid framerate: {v!r}")
        if rate <= 0:
            raise ValueError(f"Framerate must be positive: {v!r}")
        return text

    @model_validator(mode="after")
    def validate_cut_window(self) -> "FrameSourceConfig":
        if self.cut_to is not None and self.cut_to <= (self.cut_from or 0):
            raise ValueError(
                f"cut_to ({self.cut_to}) must be after cut_from ({self.cut_from or 0})"
            )
        return self

    @property
    def requested_width(self) -> int:
        """Requested box width in canvas pixels."""
        if not self.width:
            return self.canvas_width
        return round_half_away_from_zero(self.width * self.canvas_width)

    @property
    def requested_height(self) -> int:
        """Requested box height in canvas pixels."""
        if not self.height:
            return self.canvas_height
        return round_half_away_from_zero(self.height * self.canvas_height)

    @property
    def left_px(self) -> float:
        return self.left * self.canvas_width

    @property
    def top_px(self) -> float:
        return self.top * self.canvas_height

    @property
    def fps(self) -> float:
        """Output framerate as a number."""
        num, _, den = self.framerate.partition("/")
        return float(num) / float(den) if den else float(num)


class ClipFramesConfig(BaseModel):
    """Root configuration for clipframes."""

    # System settings
    project_name: str = "clipframes"
    version: str = "0.1.0"
    debug_mode: bool = False

    # Sub-configurations
    canvas: CanvasConfig = Field(default_factory=CanvasConfig)
    decoder: DecoderConfig = Field(default_factory=DecoderConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    def source_config(self, path: str | Path, **params: Any) -> FrameSourceConfig:
        """Build a :class:`FrameSourceConfig` for one clip.

        Canvas and decoder settings come from this config unless
        ``params`` overrides them.

        Example:
            >>> cfg = ClipFramesConfig().source_config(
            ...     "clip.mp4", width=0.5, resize_mode="contain")
        """
        values: Dict[str, Any] = {
            "path": str(path),
            "canvas_width": self.canvas.width,
            "canvas_height": self.canvas.height,
            "framerate": self.canvas.framerate,
            **self.decoder.model_dump(),
        }
        values.update(params)
        return FrameSourceConfig(**values)

    def setup_logging(self) -> None:
        """Configure logging based on config."""
        level_name = "DEBUG" if self.debug_mode else self.logging.level.upper()
        log_level = getattr(logging, level_name)

        handlers = []

        # Console handler
        console_handler = logging.StreamHandler()
        console_handler.setLevel(log_level)
        formatter = logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        )
        console_handler.setFormatter(formatter)
        handlers.append(console_handler)

        # File handler
        if self.logging.log_to_file:
            log_dir = Path(self.logging.log_directory)
            log_dir.mkdir(exist_ok=True, parents=True)

            from logging.handlers import RotatingFileHandler
            file_handler = RotatingFileHandler(
                log_dir / "clipframes.log",
                maxBytes=self.logging.max_log_size_mb * 1024 * 1024,
                backupCount=self.logging.backup_count
            )
            file_handler.setLevel(log_level)
            file_handler.setFormatter(formatter)
            handlers.append(file_handler)

        logging.basicConfig(
            level=log_level,
            handlers=handlers,
            force=True
        )

        logger.info("Logging configured: level=%s", level_name)


def load_config(
    config_path: Optional[str] = None,
    overrides: Optional[Dict[str, Any]] = None
) -> ClipFramesConfig:
    """Load configuration from YAML file with optional overrides.

    Args:
        config_path: Path to YAML config file. If None, uses default.yaml
        overrides: Dictionary of config overrides (nested keys with dots)

    Returns:
        Validated ClipFramesConfig instance

    Example:
        >>> config = load_config("config/default.yaml")
        >>> config = load_config(overrides={"decoder.enable_ffmpeg_log": True})
    """
    if config_path is None:
        repo_root = Path(__file__).parent.parent.parent.parent
        config_path = repo_root / "config" / "default.yaml"
    else:
        config_path = Path(config_path)

    config_dict = {}
    if config_path.exists():
        logger.info("Loading config from %s", config_path)
        with open(config_path) as f:
            config_dict = yaml.safe_load(f) or {}
    else:
        logger.warning("Config file not found: %s, using defaults", config_path)

    if overrides:
        config_dict = _apply_overrides(config_dict, overrides)

    config = ClipFramesConfig(**config_dict)
    config.setup_logging()

    return config


def _apply_overrides(
    config_dict: Dict[str, Any],
    overrides: Dict[str, Any]
) -> Dict[str, Any]:
    """Apply nested overrides to config dictionary.

    Example:
        overrides = {"canvas.width": 1280}
        -> config_dict["canvas"]["width"] = 1280
    """
    for key, value in overrides.items():
        keys = key.split(".")
        d = config_dict
        for k in keys[:-1]:
            d = d.setdefault(k, {})
        d[keys[-1]] = value
    return config_dict
