"""Builds OBF byte strings for tests."""

import struct

QUAD_VERTICES = [
    (0.0, 0.0, 0.0),
    (1.0, 0.0, 0.0),
    (1.0, 1.0, 0.0),
    (0.0, 1.0, 0.0),
]
QUAD_INDICES = [0, 1, 2, 0, 2, 3]


def blob(data):
    return struct.pack('<I', len(data)) + data


def string(text):
    if isinstance(text, bytes):
        return blob(text)
    return blob(text.encode('utf-8'))


def primitive(vertices=QUAD_VERTICES, indices=QUAD_INDICES, mask=0x1, topology=0,
              index_width=2, material=None, version=2):
    floats = [c for vertex in vertices for c in vertex]
    out = struct.pack('<BBI', topology, mask, len(vertices))
    out += blob(struct.pack(f'<{len(floats)}f', *floats))

    fmt = {1: 'B', 2: 'H', 4: 'I'}[index_width]
    if version >= 2:
        out += struct.pack('<B', index_width)
    out += struct.pack('<I', len(indices))
    out += blob(struct.pack(f'<{len(indices)}{fmt}', *indices))

    if material is None:
        out += struct.pack('<B', 0)
    elif isinstance(material, int):
        out += struct.pack('<BI', 1, material)
    else:
        out += struct.pack('<B', 2) + string(material)
    return out


def group(primitives, offset=(0.0, 0.0)):
    return struct.pack('<ffI', offset[0], offset[1], len(primitives)) + b''.join(primitives)


def node(groups, name='node', transform=None):
    out = string(name)
    if transform is not None:
        out += struct.pack('<16f', *transform)
    return out + struct.pack('<I', len(groups)) + b''.join(groups)


def document(nodes, version=2, flags=0, magic=b'OBF\x00'):
    return magic + struct.pack('<HHI', version, flags, len(nodes)) + b''.join(nodes)


def single_quad(offset=(0.25, 0.0), indices=QUAD_INDICES):
    """1 node, 1 group, 1 primitive: two triangles over four vertices."""
    return document([node([group([primitive(indices=indices)], offset=offset)])])
