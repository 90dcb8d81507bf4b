"""
OBF Mesh Module
Render-ready geometry resolved from a decoded primitive.

A Mesh owns its vertex and index buffers as read-only numpy arrays, so it
stays valid after the source stream is closed and can be shared between
renderers. Drawing is left to a backend object supplied by the caller:
anything with a ``draw(mesh)`` method. Each renderer binds its own backend
through ``Mesh.bind``, which returns a BoundMesh and leaves the Mesh unchanged.
"""

from dataclasses import dataclass

import numpy as np

from obf_types import VertexLayout, MaterialRef, TOPOLOGIES, TOPOLOGY_TRIANGLES


@dataclass(frozen=True)
class MeshKey:
    """Identity of a primitive within a document: (node, group, primitive)."""
    node: int
    group: int
    primitive: int

    def __str__(self):
        return f"{self.node}/{self.group}/{self.primitive}"


class Mesh:
    """Interleaved float32 vertices plus uint32 indices."""

    def __init__(self, vertices, indices, layout: VertexLayout, topology=TOPOLOGY_TRIANGLES,
                 material: MaterialRef = MaterialRef()):
        self._vertices = np.array(vertices, dtype=np.float32).reshape(-1, layout.stride)
        self._indices = np.array(indices, dtype=np.uint32).reshape(-1)
        self._vertices.flags.writeable = False
        self._indices.flags.writeable = False
        self._layout = layout
        self._topology = topology
        self._material = material

    @property
    def vertices(self):
        return self._vertices

    @property
    def indices(self):
        return self._indices

    @property
    def layout(self):
        return self._layout

    @property
    def topology(self):
        return self._topology

    @property
    def material(self):
        return self._material

    @property
    def vertex_count(self):
        return len(self._vertices)

    @property
    def index_count(self):
        return len(self._indices)

    @property
    def primitive_count(self):
        """Triangles, lines or points drawn by this mesh."""
        return self.index_count // TOPOLOGIES[self._topology][1]

    @property
    def triangle_count(self):
        if self._topology != TOPOLOGY_TRIANGLES:
            return 0
        return self.primitive_count

    def _attribute(self, name):
        offset = self._layout.offset_of(name)
        if offset < 0:
            return None
        return self._vertices[:, offset:offset + self._layout.width_of(name)]

    @property
    def positions(self):
        return self._attribute('position')

    @property
    def normals(self):
        return self._attribute('normal')

    @property
    def texcoords(self):
        return self._attribute('texcoord')

    @property
    def colors(self):
        return self._attribute('color')

    def bounds(self):
        """Return (min_xyz, max_xyz) of the positions, or None if empty."""
        if self.vertex_count == 0:
            return None
        positions = self.positions
        return positions.min(axis=0), positions.max(axis=0)

    def bind(self, backend):
        """Pair this mesh with a graphics backend for one renderer."""
        return BoundMesh(self, backend)

    def render(self, backend):
        """Issue this mesh's draw request to backend."""
        backend.draw(self)

    def __eq__(self, other):
        if not isinstance(other, Mesh):
            return NotImplemented
        return (self._layout == other._layout
                and self._topology == other._topology
                and self._material == other._material
                and np.array_equal(self._vertices, other._vertices)
                and np.array_equal(self._indices, other._indices))

    __hash__ = None

    def __repr__(self):
        return (f"Mesh({TOPOLOGIES[self._topology][0]}, {self.vertex_count} vertices, "
                f"{self.index_count} indices, {self._layout!r})")


class BoundMesh:
    """A mesh together with the backend one renderer draws it with."""

    def __init__(self, mesh, backend):
        self.mesh = mesh
        self.backend = backend

    def render(self):
        self.mesh.render(self.backend)
