#!/usr/bin/env python3
"""Render a sphere scene to a PNG file.

This script builds one of the preset sphere scenes, path traces it with
the requested settings and saves the 8-bit result.

Usage:
    python -m examples.render_spheres [options]

Options:
    --preset NAME       Resolution preset: uhd, fhd, hd, thumbnail (default: hd)
    --width WIDTH       Image width in pixels (overrides the preset)
    --height HEIGHT     Image height in pixels (overrides the preset)
    --samples SAMPLES   Number of samples per pixel (default: 50)
    --bounces BOUNCES   Maximum path length (default: 20)
    --seed SEED         Random seed (default: 0)
    --shading MODE      path, albedo or normals (default: path)
    --scene NAME        lit or two_spheres (default: lit)
    --output OUTPUT     Output file path (default: spheres.png)
    --batch-size SIZE   Samples per progress update (default: 10)
    --quiet             Suppress progress output

Example:
    python -m examples.render_spheres --preset thumbnail --samples 100
"""

from __future__ import annotations

import argparse
import sys
import time
from pathlib import Path

import taichi as ti

SHADING_CHOICES = ("path", "albedo", "normals")


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Render a sphere scene.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--preset",
        type=str,
        default="hd",
        choices=("uhd", "fhd", "hd", "thumbnail"),
        help="Resolution preset (default: hd)",
    )
    parser.add_argument(
        "--width",
        type=int,
        default=None,
        help="Image width in pixels (overrides the preset)",
    )
    parser.add_argument(
        "--height",
        type=int,
        default=None,
        help="Image height in pixels (overrides the preset)",
    )
    parser.add_argument(
        "--samples",
        type=int,
        default=50,
        help="Number of samples per pixel (default: 50)",
    )
    parser.add_argument(
        "--bounces",
        type=int,
        default=20,
        help="Maximum path length (default: 20)",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=0,
        help="Random seed (default: 0)",
    )
    parser.add_argument(
        "--shading",
        type=str,
        default="path",
        choices=SHADING_CHOICES,
        help="What each sample measures (default: path)",
    )
    parser.add_argument(
        "--scene",
        type=str,
        default="lit",
        choices=("lit", "two_spheres"),
        help="Scene to render (default: lit)",
    )
    parser.add_argument(
        "--output",
        type=str,
        default="spheres.png",
        help="Output file path (default: spheres.png)",
    )
    parser.add_argument(
        "--batch-size",
        type=int,
        default=10,
        help="Samples per progress update (default: 10)",
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Suppress progress output",
    )
    return parser.parse_args(argv)


def render_spheres(
    preset: str = "hd",
    width: int | None = None,
    height: int | None = None,
    num_samples: int = 50,
    max_bounces: int = 20,
    seed: int = 0,
    shading: str = "path",
    scene_name: str = "lit",
    output_path: str = "spheres.png",
    batch_size: int = 10,
    quiet: bool = False,
) -> Path:
    """Render a preset sphere scene and save to file.

    Args:
        preset: Resolution preset name.
        width: Image width in pixels, or None to use the preset's.
        height: Image height in pixels, or None to use the preset's.
        num_samples: Number of samples per pixel.
        max_bounces: Maximum path length.
        seed: Seed for the per-sample random states.
        shading: "path", "albedo" or "normals".
        scene_name: Name of a scene in SCENE_PRESETS.
        output_path: Output file path (PNG).
        batch_size: Number of samples to render between progress updates.
        quiet: If True, suppress progress output.

    Returns:
        Path to the saved image file.
    """
    # Lazy imports to allow Taichi initialization first
    from src.pathtracer.core.integrator import ShadingMode
    from src.pathtracer.core.renderer import RESOLUTION_PRESETS, RenderSettings, render_frame
    from src.pathtracer.preview.export import save_png_from_array
    from src.pathtracer.scene.presets import SCENE_PRESETS

    preset_width, preset_height = RESOLUTION_PRESETS[preset]
    mode = {
        "path": ShadingMode.PATH_TRACE,
        "albedo": ShadingMode.ALBEDO,
        "normals": ShadingMode.NORMALS,
    }[shading]

    settings = RenderSettings(
        width=width if width is not None else preset_width,
        height=height if height is not None else preset_height,
        samples_per_pixel=num_samples,
        max_bounces=max_bounces,
        seed=seed,
        shading=mode,
    )

    if not quiet:
        print(f"Creating {scene_name} scene ({settings.width}x{settings.height})...")

    scene, camera = SCENE_PRESETS[scene_name]()

    if not quiet:
        print(f"Rendering {num_samples} samples per pixel, up to {max_bounces} bounces...")

    start_time = time.time()

    def progress_callback(current: int, target: int) -> None:
        if not quiet:
            elapsed = time.time() - start_time
            progress_pct = (current / target) * 100 if target > 0 else 0
            samples_per_sec = current / elapsed if elapsed > 0 else 0
            print(
                f"\r  Progress: {current}/{target} samples "
                f"({progress_pct:.1f}%) - {samples_per_sec:.1f} spp/s",
                end="",
                flush=True,
            )

    pixels = render_frame(
        scene,
        camera,
        settings,
        callback=progress_callback,
        batch_size=batch_size,
    )

    if not quiet:
        print()  # Newline after progress

    output_file = Path(output_path)
    save_png_from_array(pixels, str(output_file))

    total_time = time.time() - start_time
    if not quiet:
        print(f"Saved to: {output_file.absolute()}")
        print(f"Total time: {total_time:.2f}s")

    return output_file


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = parse_args(argv)

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
        render_spheres(
            preset=args.preset,
            width=args.width,
            height=args.height,
            num_samples=args.samples,
            max_bounces=args.bounces,
            seed=args.seed,
            shading=args.shading,
            scene_name=args.scene,
            output_path=args.output,
            batch_size=args.batch_size,
            quiet=args.quiet,
        )
        return 0
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
