#!/usr/bin/env python3
"""Render a sphere scene to a PPM or PNG image.

This script renders one of the built-in scenes, or a scene described in a
JSON file, scanline by scanline and writes the result to disk.

Usage:
    python -m examples.render_spheres [options]

Options:
    --width WIDTH           Image width in pixels (default: scene's, 400)
    --aspect-ratio RATIO    Width / height (default: scene's, 16/9)
    --samples SAMPLES       Samples per pixel (default: scene's, 100)
    --max-depth DEPTH       Maximum bounces per sample (default: scene's, 50)
    --vfov DEGREES          Vertical field of view
    --defocus-angle DEGREES Lens defocus angle, 0 for a pinhole camera
    --focus-dist DIST       Distance to the plane of perfect focus
    --seed SEED             Render seed (default: 0)
    --scene SCENE           "default", "glass", or a path to a JSON scene
    --output OUTPUT         Output file, .ppm or .png (default: image.ppm)
    --cpu                   Force the CPU backend
    --quiet                 Suppress progress output
    --verbose               Enable debug logging

A JSON scene holds "materials" and "spheres" lists as produced by
SceneManager.to_dict(), plus an optional "camera" object whose keys are
ThinLensCamera fields.

Example:
    python -m examples.render_spheres --width 200 --samples 20 --output spheres.png
"""

from __future__ import annotations

import argparse
import dataclasses
import json
import logging
import sys
import time
from pathlib import Path

import taichi as ti


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Render a sphere scene.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--width", type=int, default=None, help="Image width in pixels")
    parser.add_argument("--aspect-ratio", type=float, default=None, help="Width / height")
    parser.add_argument("--samples", type=int, default=None, help="Samples per pixel")
    parser.add_argument("--max-depth", type=int, default=None, help="Maximum bounces")
    parser.add_argument("--vfov", type=float, default=None, help="Vertical field of view")
    parser.add_argument(
        "--defocus-angle", type=float, default=None, help="Lens defocus angle in degrees"
    )
    parser.add_argument(
        "--focus-dist", type=float, default=None, help="Distance to the focus plane"
    )
    parser.add_argument("--seed", type=int, default=0, help="Render seed (default: 0)")
    parser.add_argument(
        "--scene",
        type=str,
        default="default",
        help='"default", "glass", or a JSON scene file (default: default)',
    )
    parser.add_argument(
        "--output",
        type=str,
        default="image.ppm",
        help="Output file path, .ppm or .png (default: image.ppm)",
    )
    parser.add_argument("--cpu", action="store_true", help="Force the CPU backend")
    parser.add_argument("--quiet", action="store_true", help="Suppress progress output")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    return parser.parse_args(argv)


def load_scene(scene_arg: str):
    """Build the requested scene.

    Returns:
        A tuple of (scene, camera).
    """
    # Lazy imports to allow Taichi initialization first
    from mcray.camera.thin_lens import ThinLensCamera
    from mcray.scene.manager import SceneManager
    from mcray.scene.presets import create_default_scene, create_glass_scene

    if scene_arg == "default":
        return create_default_scene()
    if scene_arg == "glass":
        return create_glass_scene()

    with open(scene_arg, encoding="utf-8") as f:
        data = json.load(f)

    scene = SceneManager()
    scene.from_dict(data)

    camera_args = dict(data.get("camera", {}))
    for key in ("lookfrom", "lookat", "vup"):
        if key in camera_args:
            camera_args[key] = tuple(camera_args[key])
    return scene, ThinLensCamera(**camera_args)


def apply_overrides(camera, args: argparse.Namespace):
    """Return a copy of the camera with command-line overrides applied."""
    overrides = {
        "image_width": args.width,
        "aspect_ratio": args.aspect_ratio,
        "samples_per_pixel": args.samples,
        "max_depth": args.max_depth,
        "vfov": args.vfov,
        "defocus_angle": args.defocus_angle,
        "focus_dist": args.focus_dist,
    }
    overrides = {key: value for key, value in overrides.items() if value is not None}
    return dataclasses.replace(camera, **overrides)


def render_spheres(args: argparse.Namespace) -> Path:
    """Render the scene selected by ``args`` and save it.

    Returns:
        Path to the saved image file.
    """
    from mcray.core.renderer import Renderer
    from mcray.output.export import save_image

    quiet = args.quiet

    _, camera = load_scene(args.scene)
    camera = apply_overrides(camera, args)

    if not quiet:
        print(
            f"Rendering {camera.image_width}x{camera.image_height}, "
            f"{camera.samples_per_pixel} samples per pixel..."
        )

    start_time = time.time()

    def progress_callback(rows_done: int, height: int) -> None:
        if not quiet:
            print(f"\rScanlines remaining: {height - rows_done} ", end="", flush=True)

    renderer = Renderer(camera)
    pixels = renderer.render(seed=args.seed, callback=progress_callback)

    if not quiet:
        print("\nDone.")

    output_file = Path(args.output)
    save_image(pixels, output_file)

    if not quiet:
        print(f"Saved to: {output_file.absolute()}")
        print(f"Total time: {time.time() - start_time:.2f}s")

    return output_file


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    # ti.gpu falls back to CPU when no GPU backend is available
    arch = ti.cpu if args.cpu else ti.gpu
    ti.init(arch=arch)
    if not args.quiet:
        print(f"Requested {'CPU' if args.cpu else 'GPU'} backend")

    try:
        render_spheres(args)
        return 0
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
