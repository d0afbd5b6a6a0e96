#!/usr/bin/env python3
"""Render the reference room scene.

This script renders the reference scene (a red/green room with a mirrored
pyramid, a diffuse sphere and a glass hourglass) with the Whitted ray
tracer and saves the result as a PNG.

Usage:
    python -m examples.render_cornell_box [options]

Options:
    --width WIDTH       Image width in pixels (default: 250)
    --height HEIGHT     Image height in pixels (default: 250)
    --samples SAMPLES   Primary rays per pixel, a perfect square (default: 4)
    --depth DEPTH       Recursion depth (default: 3)
    --output OUTPUT     Output file path (default: cornell_box.png)
    --empty-room        Render only the walls
    --linear-blend      Mix refracted color linearly instead of additively
    --quiet             Suppress progress output
    --verbose           Enable debug logging

Example:
    python -m examples.render_cornell_box --width 500 --height 500 --samples 16
"""

from __future__ import annotations

import argparse
import logging
import sys
import time
from pathlib import Path

import taichi as ti


def parse_args() -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Render the reference room scene.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--width",
        type=int,
        default=250,
        help="Image width in pixels (default: 250)",
    )
    parser.add_argument(
        "--height",
        type=int,
        default=250,
        help="Image height in pixels (default: 250)",
    )
    parser.add_argument(
        "--samples",
        type=int,
        default=4,
        help="Primary rays per pixel, must be a perfect square (default: 4)",
    )
    parser.add_argument(
        "--depth",
        type=int,
        default=3,
        help="Recursion depth (default: 3)",
    )
    parser.add_argument(
        "--output",
        type=str,
        default="cornell_box.png",
        help="Output file path (default: cornell_box.png)",
    )
    parser.add_argument(
        "--empty-room",
        action="store_true",
        help="Render only the walls of the room",
    )
    parser.add_argument(
        "--linear-blend",
        action="store_true",
        help="Mix refracted color linearly instead of additively",
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Suppress progress output",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable debug logging",
    )
    return parser.parse_args()


def render_cornell_box(
    width: int = 250,
    height: int = 250,
    samples: int = 4,
    depth: int = 3,
    output_path: str = "cornell_box.png",
    empty_room: bool = False,
    linear_blend: bool = False,
    quiet: bool = False,
) -> Path:
    """Render the reference scene and save to file.

    Args:
        width: Image width in pixels.
        height: Image height in pixels.
        samples: Primary rays per pixel.
        depth: Recursion depth.
        output_path: Output file path (PNG).
        empty_room: If True, render only the walls.
        linear_blend: If True, use the linear refraction blend.
        quiet: If True, suppress progress output.

    Returns:
        Path to the saved image file.
    """
    # Lazy imports to allow Taichi initialization first
    from whitted.core.config import RefractionBlend, RenderConfig
    from whitted.core.sampler import ImageSampler
    from whitted.preview.export import save_png
    from whitted.scene.cornell_box import create_reference_scene

    config = RenderConfig(
        width=width,
        height=height,
        samples_per_pixel=samples,
        max_depth=depth,
        refraction_blend=RefractionBlend.LINEAR if linear_blend else RefractionBlend.ADDITIVE,
    )

    if not quiet:
        print(f"Creating scene ({width}x{height})...")

    scene = create_reference_scene(include_objects=not empty_room)
    sampler = ImageSampler(scene, config)

    if not quiet:
        print(f"Rendering {samples} samples per pixel at depth {depth}...")

    start_time = time.time()

    def progress_callback(rows_done: int, total_rows: int) -> None:
        if not quiet:
            progress_pct = (rows_done / total_rows) * 100 if total_rows > 0 else 0
            print(
                f"\r  Progress: {rows_done}/{total_rows} rows ({progress_pct:.1f}%)",
                end="",
                flush=True,
            )

    sampler.render(callback=progress_callback)

    if not quiet:
        print()  # Newline after progress

    output_file = Path(output_path)
    save_png(sampler.get_image_rgba8(), output_file)

    total_time = time.time() - start_time
    if not quiet:
        print(f"Saved to: {output_file.absolute()}")
        print(f"Total time: {total_time:.2f}s")

    return output_file


def main() -> int:
    """Main entry point."""
    args = parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else (logging.WARNING if args.quiet else logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    # Initialize Taichi
    # Use GPU if available, fall back to CPU
    try:
        ti.init(arch=ti.gpu)
        if not args.quiet:
            print("Using GPU backend")
    except Exception:
        ti.init(arch=ti.cpu)
        if not args.quiet:
            print("Using CPU backend")

    try:
        render_cornell_box(
            width=args.width,
            height=args.height,
            samples=args.samples,
            depth=args.depth,
            output_path=args.output,
            empty_room=args.empty_room,
            linear_blend=args.linear_blend,
            quiet=args.quiet,
        )
        return 0
    except (ValueError, RuntimeError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
