#!/usr/bin/env python3
"""
Simple demo script showing the three map types.
"""

from py_polymap import MapOptions, try_generate
from py_polymap.config import settings
from py_polymap.utils.logging import configure_logging


def main():
    """Generate one map of each type and print its statistics."""
    configure_logging("WARNING", settings.log_format)

    print("Py-Polymap Generation Demo")
    print("=" * 40)

    demos = [
        MapOptions(map_type="standard", seed="demo"),
        MapOptions(map_type="expanded-hex", seed="demo", expanded_map_size=30),
        MapOptions(map_type="expanded-delaunay", seed="demo", target_tile_count=30),
        MapOptions(map_type="expanded-delaunay", seed="demo", target_tile_count=45,
                   irregularity=0.6, erosion_rounds=3),
    ]

    for options in demos:
        print(f"\n{options.map_type.upper()} (seed={options.seed})")
        print("-" * 30)

        result = try_generate(options)
        if not result.ok:
            print(f"  Failed after {result.attempts}:")
            for error in result.errors():
                print(f"    {error}")
            continue

        stats = result.map_data.statistics()
        print(f"  Generator: {result.generator} (attempts: {', '.join(result.attempts)})")
        print(f"  Tiles: {stats['tiles']} ({stats['boundary_tiles']} on the coast)")
        print(f"  Nodes: {stats['nodes']} ({stats['interior_nodes']} interior)")
        print(f"  Edges: {stats['edges']}")
        print(f"  Shapes: {stats['shapes']}")
        print(f"  Resources: {stats['resources']}")

    print("\nDemo complete!")


if __name__ == "__main__":
    main()
