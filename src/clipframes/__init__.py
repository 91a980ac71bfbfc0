"""clipframes - raw video frame sources for canvas compositing.

Decodes clips with an external ffmpeg process, reassembles the raw RGBA
byte stream into frames and places each frame on a target canvas.
"""

__version__ = "0.1.0"


def main() -> None:
    """Entry point for the clipframes command."""
    print(f"clipframes v{__version__}")
    print("Raw video frame sources for canvas compositing")
    print()
    print("Available commands:")
    print("  python scripts/extract_frames.py <clip> <output_dir>  - Dump composited frames")
    print()
    print("Configuration defaults live in config/default.yaml.")
