#!/usr/bin/env python
"""Composite every frame of a clip onto a canvas and write PNGs.

Usage:
    python scripts/extract_frames.py clip.mp4 out_frames --width 0.5 --resize-mode contain-blur
"""
from __future__ import annotations

import argparse
import asyncio
import logging
from pathlib import Path

import cv2

from clipframes.compositor import RasterCanvas
from clipframes.sources import open_video_frame_source
from clipframes.utils.config import load_config

logger = logging.getLogger(__name__)


async def extract(args: argparse.Namespace) -> int:
    config = load_config(args.config, overrides={"debug_mode": True} if args.verbose else None)
    params = {
        "resize_mode": args.resize_mode,
        "left": args.left,
        "top": args.top,
        "origin_x": args.origin_x,
        "origin_y": args.origin_y,
    }
    if args.width:
        params["width"] = args.width
    if args.height:
        params["height"] = args.height
    if args.cut_from is not None:
        params["cut_from"] = args.cut_from
    if args.cut_to is not None:
        params["cut_to"] = args.cut_to
    source_config = config.source_config(args.clip, **params)

    output_dir = Path(args.output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    canvas = RasterCanvas(config.canvas.width, config.canvas.height)
    source = await open_video_frame_source(source_config)
    count = 0
    try:
        while args.max_frames is None or count < args.max_frames:
            canvas.clear()
            if not await source.read_next_frame(canvas):
                break
            rgba = canvas.render()
            cv2.imwrite(str(output_dir / f"frame_{count:06d}.png"), cv2.cvtColor(rgba, cv2.COLOR_RGBA2BGRA))
            count += 1
    finally:
        source.close()
        await source.wait_closed()

    logger.info("Wrote %d frames to %s", count, output_dir)
    return count


def main():
    parser = argparse.ArgumentParser(description="Dump composited clip frames as PNG")
    parser.add_argument("clip", help="Input video file")
    parser.add_argument("output_dir", help="Directory for PNG frames")
    parser.add_argument("--config", default=None, help="YAML config (default: config/default.yaml)")
    parser.add_argument("--resize-mode", default="contain-blur",
                        choices=["stretch", "contain", "contain-blur", "cover"])
    parser.add_argument("--width", type=float, default=None, help="Box width as a fraction of the canvas")
    parser.add_argument("--height", type=float, default=None, help="Box height as a fraction of the canvas")
    parser.add_argument("--left", type=float, default=0.0)
    parser.add_argument("--top", type=float, default=0.0)
    parser.add_argument("--origin-x", default="left", choices=["left", "right"])
    parser.add_argument("--origin-y", default="top", choices=["top", "bottom"])
    parser.add_argument("--cut-from", type=float, default=None)
    parser.add_argument("--cut-to", type=float, default=None)
    parser.add_argument("--max-frames", type=int, default=None)
    parser.add_argument("-v", "--verbose", action="store_true")
    args = parser.parse_args()

    asyncio.run(extract(args))


if __name__ == "__main__":
    main()
