#!/usr/bin/env python3
"""Print scattering statistics for a set of materials.

This script builds a material library, either the built-in showcase or one
loaded from a JSON configuration, and samples every material with the
host-side probes. For each material it reports how often rays scatter, how
many samples are specular, the mean cosine to the normal and, for sampled
materials, a Monte Carlo estimate of the integral of scattering_pdf over the
sphere (which should be close to 1).

Usage:
    python -m examples.material_report [options]

Options:
    --config CONFIG     JSON file with 'textures' and 'materials' lists
    --samples SAMPLES   Number of scatter samples per material (default: 20000)
    --seed SEED         Random stream seed (default: 42)
    --save-config PATH  Write the library configuration as JSON
    --verbose           Enable debug logging

Example:
    python -m examples.material_report --samples 50000 --save-config showcase.json
"""

import argparse
import json
import logging
import math
import sys
from pathlib import Path

import numpy as np
import taichi as ti

logger = logging.getLogger(__name__)

NORMAL = (0.0, 1.0, 0.0)
INCIDENT = (1.0, -1.0, 0.0)


def parse_args() -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Print scattering statistics for a set of materials.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="JSON library configuration (default: built-in showcase)",
    )
    parser.add_argument(
        "--samples",
        type=int,
        default=20000,
        help="Number of scatter samples per material (default: 20000)",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=42,
        help="Random stream seed (default: 42)",
    )
    parser.add_argument(
        "--save-config",
        type=str,
        default=None,
        help="Write the library configuration to this JSON file",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable debug logging",
    )
    return parser.parse_args()


def build_showcase(library) -> None:
    """Add one material of every kind to the library."""
    checker = library.add_checker_texture(0.32, (0.2, 0.3, 0.1), (0.9, 0.9, 0.9))
    library.add_lambertian_material(texture_id=checker)
    library.add_metal_material(albedo=(0.8, 0.6, 0.2), fuzz=0.3)
    library.add_metal_material(albedo=(0.7, 0.7, 0.7), fuzz=0.0)
    library.add_dielectric_material(ir=1.5)
    library.add_diffuse_light_material(emit=(4.0, 4.0, 4.0))
    library.add_isotropic_material(albedo=(0.9, 0.9, 0.9))


def report(library, num_samples: int) -> list[dict]:
    """Sample every material in the library and collect statistics."""
    from src.scattering.materials.probe import (
        evaluate_emitted,
        evaluate_scattering_pdf,
        sample_scatter,
    )

    rng = np.random.default_rng(0)
    sphere_dirs = rng.normal(size=(num_samples, 3))
    sphere_dirs /= np.linalg.norm(sphere_dirs, axis=1, keepdims=True)

    rows = []
    for info in library.materials:
        samples = sample_scatter(
            info.material_id, num_samples, normal=NORMAL, ray_direction=INCIDENT
        )
        scattered = samples.direction[samples.did_scatter]
        mean_cos = float("nan")
        if len(scattered) > 0:
            unit = scattered / np.linalg.norm(scattered, axis=1, keepdims=True)
            mean_cos = float(unit[:, 1].mean())

        pdf_integral = float("nan")
        if samples.did_scatter.any() and not samples.is_specular.any():
            pdf = evaluate_scattering_pdf(info.material_id, sphere_dirs, normal=NORMAL)
            pdf_integral = float(pdf.mean() * 4.0 * math.pi)

        rows.append(
            {
                "id": info.material_id,
                "type": info.material_type.name.lower(),
                "scatter": float(samples.did_scatter.mean()),
                "specular": float(samples.is_specular.mean()),
                "mean_cos": mean_cos,
                "pdf_integral": pdf_integral,
                "emitted": evaluate_emitted(info.material_id, normal=NORMAL).tolist(),
            }
        )
    return rows


def main() -> int:
    """Main entry point."""
    args = parse_args()
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(name)s %(levelname)s: %(message)s",
    )

    ti.init(arch=ti.cpu)

    from src.scattering.core.sampling import seed_random_streams
    from src.scattering.materials.library import MaterialLibrary

    try:
        library = MaterialLibrary()
        if args.config is None:
            build_showcase(library)
        else:
            library.from_dict(json.loads(Path(args.config).read_text()))
        seed_random_streams(args.seed)

        rows = report(library, args.samples)
    except (OSError, ValueError, RuntimeError) as e:
        logger.error("Failed to evaluate materials: %s", e)
        return 1

    print(f"{'id':>3} {'type':<14} {'scatter':>8} {'specular':>9} {'mean cos':>9} {'pdf int':>8}  emitted")
    for row in rows:
        print(
            f"{row['id']:>3} {row['type']:<14} {row['scatter']:>8.3f} {row['specular']:>9.3f} "
            f"{row['mean_cos']:>9.3f} {row['pdf_integral']:>8.3f}  {row['emitted']}"
        )

    if args.save_config is not None:
        Path(args.save_config).write_text(json.dumps(library.to_dict(), indent=2))
        logger.info("Saved configuration to %s", args.save_config)

    return 0


if __name__ == "__main__":
    sys.exit(main())
