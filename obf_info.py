#!/usr/bin/env python3
"""
OBF Info - Command Line Inspector
Loads an OBF model and prints its node/group/primitive tree.

Usage:
    python obf_info.py model.obf [--flip-yz]
"""

import sys
from pathlib import Path

from obf_errors import ObfError
from obf_loader import ObfDocument, is_obf_file


def print_tree(document):
    """Print the node tree with per-group texture offsets and mesh stats."""
    print(f"OBF version {document.version}, {len(document.nodes)} nodes, "
          f"{document.mesh_count} meshes")
    for node in document.nodes:
        print(f"Node {node.index} '{node.name}': {len(node.groups)} groups")
        for group in node.groups:
            u, v = group.texture_offset
            print(f"  Group {group.index}: offset ({u:.3f}, {v:.3f}), "
                  f"{len(group.primitives)} primitives")
            for primitive in group.primitives:
                mesh = primitive.mesh
                print(f"    Primitive {primitive.index}: {primitive.topology_name}, "
                      f"{mesh.vertex_count} vertices, {mesh.index_count} indices, "
                      f"{primitive.layout!r}, material {primitive.material}")

    box = document.bounds()
    if box is not None:
        low, high = box
        size = high - low
        print(f"Bounding box: {size[0]:.2f} x {size[1]:.2f} x {size[2]:.2f}")
        print(f"Scale factor: {document.scale_factor:.4f}")


def main(argv=None):
    """Main entry point."""
    argv = sys.argv[1:] if argv is None else argv

    print("\n" + "="*60)
    print("OBF INFO")
    print("="*60)

    paths = [a for a in argv if not a.startswith('--')]
    if not paths:
        print("\nUsage: python obf_info.py [model_file] [--flip-yz]")
        return 0

    if Path(paths[0]).exists() and not is_obf_file(paths[0]):
        print(f"✗ Not an OBF file: {paths[0]}")
        return 1

    try:
        document = ObfDocument.from_file(paths[0], flip_yz='--flip-yz' in argv)
    except (ObfError, OSError) as e:
        print(f"✗ Error loading model: {e}")
        return 1

    print_tree(document)
    return 0


if __name__ == "__main__":
    sys.exit(main())
