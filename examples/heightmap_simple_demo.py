#!/usr/bin/env python3
"""
Simple demo script showing plate-seeded heightmap generation.
"""

import numpy as np
from py_platemap import MapConfig, generate_heightmap, summarize_heights
from py_platemap.logging_config import configure_logging


def main():
    """Demonstrate heightmap generation."""
    configure_logging(level="WARNING")

    print("Py-Platemap Heightmap Generation Demo")
    print("=" * 40)

    for flavor in ("centroid", "voronoi"):
        print(f"\n{flavor.upper()} diagram:")
        print("-" * 30)

        config = MapConfig(width=400, height=300, radius=12, flavor=flavor)
        heightmap = generate_heightmap(config, seed=f"{flavor}_demo")
        summary = summarize_heights(heightmap)

        print(f"  Total cells: {summary['cells']}")
        print(f"  Cells reached by a plate: {summary['assigned']}")
        print(f"  Height range: {summary['min']:.2f}-{summary['max']:.2f}")
        print(f"  Average height: {summary['mean']:.3f}")

        print("  Plates:")
        for point, vector in zip(heightmap.seed_points, heightmap.plate_vectors):
            print(f"    ({point.x:7.1f}, {point.y:7.1f})  drift {np.round(vector, 2)}")

        bins = [0.0, 0.1, 0.3, 0.5, 0.7, 0.9001]
        hist, _ = np.histogram(heightmap.heights, bins=bins)
        print("  Height distribution:")
        for i in range(len(bins) - 1):
            bar = '#' * int(hist[i] / max(hist.max(), 1) * 20)
            print(f"    {bins[i]:.1f}-{min(bins[i + 1], 0.9):.1f}: {bar} ({hist[i]})")


if __name__ == "__main__":
    main()
