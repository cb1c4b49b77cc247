#!/usr/bin/env python3
"""Render the demo scene.

This script builds the demo scene (a white sphere resting on a blue cube, lit
by two point lights), renders one frame and saves it as a PNG.

Usage:
    python -m examples.render_demo_scene [options]

Options:
    --width WIDTH       Image width in pixels (default: 400)
    --height HEIGHT     Image height in pixels (default: 400)
    --pattern NAME      Sampling pattern: square, circle or hexagon (default: circle)
    --samples SAMPLES   Samples per pixel, at most the pattern size (default: 5)
    --ambient VALUE     Scene ambient intensity (default: 0.0)
    --reflection VALUE  Mirror reflectivity of the sphere (default: 0.0)
    --move DX DY DZ     Translate the eye before rendering
    --zoom DFOV         Change the vertical field of view, in degrees
    --tone-map METHOD   none, reinhard or exposure (default: none)
    --output OUTPUT     Output file path (default: demo_scene.png)
    --arch ARCH         Taichi backend (default: cpu)
    --verbose           Log renderer details
    --quiet             Suppress progress output

Example:
    python -m examples.render_demo_scene --width 200 --height 200 --pattern hexagon --samples 6
"""

from __future__ import annotations

import argparse
import logging
import sys
import time
from pathlib import Path


def parse_args() -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Render the demo scene.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--width", type=int, default=400, help="Image width (default: 400)")
    parser.add_argument("--height", type=int, default=400, help="Image height (default: 400)")
    parser.add_argument(
        "--pattern",
        choices=("square", "circle", "hexagon"),
        default="circle",
        help="Sub-pixel sampling pattern (default: circle)",
    )
    parser.add_argument("--samples", type=int, default=5, help="Samples per pixel (default: 5)")
    parser.add_argument(
        "--ambient", type=float, default=0.0, help="Scene ambient intensity (default: 0.0)"
    )
    parser.add_argument(
        "--reflection",
        type=float,
        default=0.0,
        help="Mirror reflectivity of the sphere (default: 0.0)",
    )
    parser.add_argument(
        "--move",
        type=float,
        nargs=3,
        metavar=("DX", "DY", "DZ"),
        default=None,
        help="Translate the eye before rendering",
    )
    parser.add_argument(
        "--zoom", type=float, default=0.0, help="Field of view change in degrees (default: 0)"
    )
    parser.add_argument(
        "--tone-map",
        choices=("none", "reinhard", "exposure"),
        default="none",
        help="Tone mapping method (default: none)",
    )
    parser.add_argument(
        "--output", type=str, default="demo_scene.png", help="Output file path"
    )
    parser.add_argument("--arch", type=str, default="cpu", help="Taichi backend (default: cpu)")
    parser.add_argument("--verbose", action="store_true", help="Log renderer details")
    parser.add_argument("--quiet", action="store_true", help="Suppress progress output")
    return parser.parse_args()


def render_demo_scene(args: argparse.Namespace) -> Path:
    """Render the demo scene and save it to file.

    Returns:
        Path to the saved image file.
    """
    # Lazy imports: the library declares Taichi fields at import time
    from mirrortrace.core.frame import FrameRenderer
    from mirrortrace.preview.export import save_png
    from mirrortrace.scene.demo import DemoSceneParams, create_demo_scene

    if not args.quiet:
        print(f"Creating demo scene ({args.width}x{args.height})...")

    params = DemoSceneParams(ambient_intensity=args.ambient, sphere_reflection=args.reflection)
    scene, camera = create_demo_scene(params)

    if args.move is not None:
        camera = camera.moved(*args.move)
    if args.zoom:
        camera = camera.zoomed(args.zoom)

    renderer = FrameRenderer(
        scene,
        args.width,
        args.height,
        camera=camera,
        pattern=args.pattern,
        samples=args.samples,
    )

    if not args.quiet:
        print(f"Rendering with {args.samples} {args.pattern} samples per pixel...")

    start_time = time.time()
    frame = renderer.render_frame()
    render_time = time.time() - start_time

    output_file = Path(args.output)
    save_png(renderer, str(output_file), tone_map=args.tone_map, gamma=2.2)

    if not args.quiet:
        print(f"  Peak channel value: {frame.max():.4f}")
        print(f"Saved to: {output_file.absolute()}")
        print(f"Render time: {render_time:.2f}s")

    return output_file


def main() -> int:
    """Main entry point."""
    args = parse_args()

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(name)s: %(message)s")

    from mirrortrace.config import init_taichi

    try:
        init_taichi(args.arch)
        if not args.quiet:
            print(f"Using {args.arch} backend")
        render_demo_scene(args)
        return 0
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
