"""
OBF Types Module
Format constants and the decoded Node/Group/Primitive tree.
"""

from dataclasses import dataclass, field
from typing import Optional, Tuple

MAGIC = b'OBF\x00'
SUPPORTED_VERSIONS = (1, 2)

# Header flags
FLAG_NODE_TRANSFORM = 0x1

TOPOLOGY_TRIANGLES = 0
TOPOLOGY_LINES = 1
TOPOLOGY_POINTS = 2

# Topology code -> (name, indices per element)
TOPOLOGIES = {
    TOPOLOGY_TRIANGLES: ('triangles', 3),
    TOPOLOGY_LINES: ('lines', 2),
    TOPOLOGY_POINTS: ('points', 1),
}

# Attribute bit -> (name, float components), in interleaving order
ATTRIBUTES = (
    (0x1, 'position', 3),
    (0x2, 'normal', 3),
    (0x4, 'texcoord', 2),
    (0x8, 'color', 4),
)
ATTRIBUTE_MASK = 0xF

INDEX_WIDTHS = {1: '<u1', 2: '<u2', 4: '<u4'}
V1_INDEX_WIDTH = 2

MATERIAL_NONE = 0
MATERIAL_SLOT = 1
MATERIAL_PATH = 2

IDENTITY_TRANSFORM = (
    1.0, 0.0, 0.0, 0.0,
    0.0, 1.0, 0.0, 0.0,
    0.0, 0.0, 1.0, 0.0,
    0.0, 0.0, 0.0, 1.0,
)


class VertexLayout:
    """Interleaved vertex attribute layout described by a bitmask."""

    def __init__(self, mask: int):
        self._mask = mask

    @property
    def mask(self) -> int:
        return self._mask

    @property
    def attributes(self):
        return [name for bit, name, _ in ATTRIBUTES if self.mask & bit]

    @property
    def stride(self) -> int:
        """Floats per vertex."""
        return sum(width for bit, _, width in ATTRIBUTES if self.mask & bit)

    def has(self, name: str) -> bool:
        return name in self.attributes

    def offset_of(self, name: str) -> int:
        """Float offset of an attribute within a vertex, -1 if absent."""
        offset = 0
        for bit, attr, width in ATTRIBUTES:
            if not self.mask & bit:
                continue
            if attr == name:
                return offset
            offset += width
        return -1

    def width_of(self, name: str) -> int:
        for _, attr, width in ATTRIBUTES:
            if attr == name:
                return width
        raise KeyError(name)

    def __eq__(self, other):
        return isinstance(other, VertexLayout) and self.mask == other.mask

    def __hash__(self):
        return hash(self.mask)

    def __repr__(self):
        return f"VertexLayout({'+'.join(self.attributes) or 'empty'})"


@dataclass(frozen=True)
class MaterialRef:
    """Material reference: a slot index, a texture path, or nothing."""
    slot: Optional[int] = None
    path: Optional[str] = None

    @property
    def is_empty(self) -> bool:
        return self.slot is None and self.path is None

    def __str__(self):
        if self.path is not None:
            return self.path
        if self.slot is not None:
            return f"slot {self.slot}"
        return "none"


@dataclass(frozen=True)
class Primitive:
    index: int
    topology: int
    layout: VertexLayout
    material: MaterialRef
    mesh: object = None  # obf_mesh.Mesh

    @property
    def topology_name(self) -> str:
        return TOPOLOGIES[self.topology][0]


@dataclass(frozen=True)
class Group:
    index: int
    texture_offset: Tuple[float, float] = (0.0, 0.0)
    primitives: Tuple[Primitive, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class Node:
    index: int
    name: str = ""
    transform: Tuple[float, ...] = IDENTITY_TRANSFORM
    groups: Tuple[Group, ...] = field(default_factory=tuple)

    @property
    def primitive_count(self) -> int:
        return sum(len(group.primitives) for group in self.groups)
