"""
OBF Decoder Module
Record decoders for the Node -> Group -> Primitive tree.

Each decoder reads one record from a ByteCursor positioned at its start and
leaves the cursor just past it. Errors propagate unchanged except that each
level records its own index on the exception before re-raising.
"""

import numpy as np

from byte_cursor import ByteCursor
from obf_errors import ObfError, MalformedPrimitive
from obf_mesh import Mesh
from obf_types import (
    ATTRIBUTE_MASK, FLAG_NODE_TRANSFORM, IDENTITY_TRANSFORM, INDEX_WIDTHS,
    MATERIAL_NONE, MATERIAL_PATH, MATERIAL_SLOT, TOPOLOGIES, V1_INDEX_WIDTH,
    Group, MaterialRef, Node, Primitive, VertexLayout,
)


class PrimitiveDecoder:
    """Decodes one Primitive record into a Primitive with its Mesh."""

    def __init__(self, cursor: ByteCursor, version=2, flip_yz=False):
        self.cursor = cursor
        self.version = version
        self.flip_yz = flip_yz

    def decode(self, index=0) -> Primitive:
        start = self.cursor.tell()

        topology = self.cursor.read_u8()
        if topology not in TOPOLOGIES:
            raise MalformedPrimitive(f"Unknown topology {topology}", offset=start)

        layout = self._read_layout()
        vertex_count = self.cursor.read_u32()
        vertices = self._read_vertices(layout, vertex_count)
        indices = self._read_indices()
        self._validate_indices(indices, topology, vertex_count, start)
        material = self._read_material()

        if self.flip_yz:
            vertices = self._swap_yz(vertices, layout)

        mesh = Mesh(vertices, indices, layout, topology, material)
        return Primitive(index=index, topology=topology, layout=layout,
                         material=material, mesh=mesh)

    def _read_layout(self):
        offset = self.cursor.tell()
        mask = self.cursor.read_u8()
        if mask & ~ATTRIBUTE_MASK:
            raise MalformedPrimitive(f"Unknown vertex attribute bits 0x{mask:02x}", offset=offset)
        layout = VertexLayout(mask)
        if not layout.has('position'):
            raise MalformedPrimitive("Vertex layout has no position attribute", offset=offset)
        return layout

    def _read_vertices(self, layout, vertex_count):
        offset = self.cursor.tell()
        data = self.cursor.read_length_prefixed_blob()
        expected = vertex_count * layout.stride * 4
        if len(data) != expected:
            raise MalformedPrimitive(
                f"Vertex buffer is {len(data)} bytes, expected {expected} "
                f"for {vertex_count} x {layout!r}", offset=offset)
        return np.frombuffer(data, dtype='<f4').reshape(vertex_count, layout.stride)

    def _read_indices(self):
        if self.version >= 2:
            offset = self.cursor.tell()
            width = self.cursor.read_u8()
            if width not in INDEX_WIDTHS:
                raise MalformedPrimitive(f"Unsupported index width {width}", offset=offset)
        else:
            width = V1_INDEX_WIDTH

        index_count = self.cursor.read_u32()
        offset = self.cursor.tell()
        data = self.cursor.read_length_prefixed_blob()
        if len(data) != index_count * width:
            raise MalformedPrimitive(
                f"Index buffer is {len(data)} bytes, expected {index_count * width} "
                f"for {index_count} indices of width {width}", offset=offset)
        return np.frombuffer(data, dtype=INDEX_WIDTHS[width]).astype(np.uint32)

    def _validate_indices(self, indices, topology, vertex_count, offset):
        name, stride = TOPOLOGIES[topology]
        if len(indices) % stride:
            raise MalformedPrimitive(
                f"{len(indices)} indices is not a multiple of {stride} for {name}", offset=offset)
        if len(indices) and int(indices.max()) >= vertex_count:
            raise MalformedPrimitive(
                f"Index {int(indices.max())} out of range for {vertex_count} vertices", offset=offset)

    def _read_material(self):
        offset = self.cursor.tell()
        kind = self.cursor.read_u8()
        if kind == MATERIAL_NONE:
            return MaterialRef()
        if kind == MATERIAL_SLOT:
            return MaterialRef(slot=self.cursor.read_u32())
        if kind == MATERIAL_PATH:
            return MaterialRef(path=self.cursor.read_string(error=MalformedPrimitive))
        raise MalformedPrimitive(f"Unknown material kind {kind}", offset=offset)

    @staticmethod
    def _swap_yz(vertices, layout):
        vertices = vertices.copy()
        for name in ('position', 'normal'):
            offset = layout.offset_of(name)
            if offset >= 0:
                vertices[:, [offset + 1, offset + 2]] = vertices[:, [offset + 2, offset + 1]]
        return vertices


class GroupDecoder:
    """Decodes one Group record and the Primitives it owns."""

    def __init__(self, cursor: ByteCursor, version=2, flip_yz=False):
        self.cursor = cursor
        self.primitive_decoder = PrimitiveDecoder(cursor, version, flip_yz)

    def decode(self, index=0) -> Group:
        offset_u = self.cursor.read_f32()
        offset_v = self.cursor.read_f32()
        primitive_count = self.cursor.read_u32()

        primitives = []
        for i in range(primitive_count):
            try:
                primitives.append(self.primitive_decoder.decode(i))
            except ObfError as e:
                e.locate(primitive=i)
                raise

        return Group(index=index, texture_offset=(offset_u, offset_v),
                     primitives=tuple(primitives))


class NodeDecoder:
    """Decodes one Node record and the Groups it owns."""

    def __init__(self, cursor: ByteCursor, version=2, flags=0, flip_yz=False):
        self.cursor = cursor
        self.flags = flags
        self.group_decoder = GroupDecoder(cursor, version, flip_yz)

    def decode(self, index=0) -> Node:
        name = self.cursor.read_string()

        if self.flags & FLAG_NODE_TRANSFORM:
            transform = tuple(float(v) for v in self.cursor.read_f32_array(16))
        else:
            transform = IDENTITY_TRANSFORM

        group_count = self.cursor.read_u32()
        groups = []
        for i in range(group_count):
            try:
                groups.append(self.group_decoder.decode(i))
            except ObfError as e:
                e.locate(group=i)
                raise

        return Node(index=index, name=name, transform=transform, groups=tuple(groups))
