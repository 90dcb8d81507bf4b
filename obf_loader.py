"""
OBF Model Loader Module
Decodes an OBF binary model into an immutable document of meshes.

The document owns the decoded Node -> Group -> Primitive tree and a flat
table mapping each (node, group, primitive) key to its Mesh. Loading either
returns a complete document or raises; nothing partial is ever kept.
"""

from pathlib import Path
from types import MappingProxyType

import numpy as np

from byte_cursor import ByteCursor
from obf_decoder import NodeDecoder
from obf_errors import ObfError, InvalidFormat
from obf_mesh import MeshKey
from obf_types import MAGIC, SUPPORTED_VERSIONS


def is_obf_file(filename):
    """Check whether a file starts with the OBF magic."""
    try:
        with open(filename, 'rb') as f:
            return f.read(len(MAGIC)) == MAGIC
    except OSError:
        return False


class ObfDocument:
    """Decoded OBF model: node tree plus the keyed mesh table."""

    def __init__(self, nodes, meshes, version=2, flags=0):
        self._nodes = tuple(nodes)
        self._version = version
        self._flags = flags
        self._meshes = MappingProxyType(dict(meshes))
        self._groups = {
            (node.index, group.index): group
            for node in self._nodes for group in node.groups
        }
        self._center = (0.0, 0.0, 0.0)
        self._scale_factor = 1.0
        self._analyze_model()

    @property
    def nodes(self):
        return self._nodes

    @property
    def version(self):
        return self._version

    @property
    def flags(self):
        return self._flags

    @property
    def center(self):
        """Bounding-box center as an (x, y, z) tuple."""
        return self._center

    @property
    def scale_factor(self):
        return self._scale_factor

    @classmethod
    def load(cls, stream, flip_yz=False):
        """Decode a document from a binary stream owned by the caller."""
        cursor = ByteCursor.from_stream(stream)
        return cls._decode(cursor, flip_yz)

    @classmethod
    def from_bytes(cls, data, flip_yz=False):
        return cls._decode(ByteCursor(data), flip_yz)

    @classmethod
    def from_file(cls, filename, flip_yz=False):
        """Open, decode fully and close an OBF file."""
        filepath = Path(filename)
        if not filepath.exists():
            raise FileNotFoundError(f"OBF file not found: {filename}")

        print(f"\nLoading OBF: {filepath.name}")
        with open(filepath, 'rb') as f:
            document = cls.load(f, flip_yz=flip_yz)

        print(f"✓ OBF loaded: {len(document.nodes)} nodes, {document.mesh_count} meshes, "
              f"{document.vertex_count} vertices")
        if document.mesh_count == 0:
            print("⚠️  WARNING: No meshes found!")
        return document

    @classmethod
    def _decode(cls, cursor, flip_yz):
        version, flags = cls._read_header(cursor)

        node_count = cursor.read_u32()
        node_decoder = NodeDecoder(cursor, version, flags, flip_yz)

        nodes = []
        meshes = {}
        for n in range(node_count):
            try:
                node = node_decoder.decode(n)
            except ObfError as e:
                e.locate(node=n)
                raise
            for group in node.groups:
                for primitive in group.primitives:
                    meshes[MeshKey(n, group.index, primitive.index)] = primitive.mesh
            nodes.append(node)

        if cursor.remaining():
            raise InvalidFormat(f"{cursor.remaining()} bytes of trailing data after last node",
                                offset=cursor.tell())

        return cls(nodes, meshes, version, flags)

    @staticmethod
    def _read_header(cursor):
        magic = cursor.read_bytes(len(MAGIC))
        if magic != MAGIC:
            raise InvalidFormat(f"Not an OBF file (magic {magic!r})", offset=0)

        version = cursor.read_u16()
        if version not in SUPPORTED_VERSIONS:
            raise InvalidFormat(f"Unsupported OBF version {version}", offset=len(MAGIC))

        flags = cursor.read_u16()
        return version, flags

    def get_meshes(self):
        """Read-only mapping of MeshKey -> Mesh, in file order."""
        return self._meshes

    def group(self, key: MeshKey):
        return self._groups[(key.node, key.group)]

    def texture_offset(self, key: MeshKey):
        """Texture-animation (U, V) offset of the group owning key."""
        return self.group(key).texture_offset

    def draw_items(self):
        """Yield (texture_offset, mesh) pairs in draw order."""
        for key, mesh in self._meshes.items():
            yield self.texture_offset(key), mesh

    @property
    def mesh_count(self):
        return len(self._meshes)

    @property
    def vertex_count(self):
        return sum(mesh.vertex_count for mesh in self._meshes.values())

    def bounds(self):
        """Return (min_xyz, max_xyz) over all meshes, or None if empty."""
        boxes = [b for b in (mesh.bounds() for mesh in self._meshes.values()) if b is not None]
        if not boxes:
            return None
        lows, highs = zip(*boxes)
        return np.min(lows, axis=0), np.max(highs, axis=0)

    def _analyze_model(self):
        """Compute center and scale factor for framing the model."""
        box = self.bounds()
        if box is None:
            return

        low, high = box
        self._center = tuple(float(v) for v in (low + high) / 2)

        max_size = float(np.max(high - low))
        if max_size > 0:
            self._scale_factor = 5.0 / max_size

    def __repr__(self):
        return f"ObfDocument(version={self.version}, nodes={len(self.nodes)}, meshes={self.mesh_count})"
