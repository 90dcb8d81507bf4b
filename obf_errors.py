"""
OBF Error Module
Exception types raised while decoding OBF model files.
"""


class ObfError(Exception):
    """Base class for all OBF decode failures."""

    def __init__(self, message, offset=None):
        super().__init__(message)
        self.message = message
        self.offset = offset
        self.node = None
        self.group = None
        self.primitive = None

    def locate(self, node=None, group=None, primitive=None):
        """Record where in the tree the error happened (innermost call wins)."""
        if node is not None and self.node is None:
            self.node = node
        if group is not None and self.group is None:
            self.group = group
        if primitive is not None and self.primitive is None:
            self.primitive = primitive
        return self

    @property
    def path(self):
        parts = []
        for label, value in (('node', self.node), ('group', self.group), ('primitive', self.primitive)):
            if value is not None:
                parts.append(f"{label} {value}")
        return ' / '.join(parts)

    def __str__(self):
        text = self.message
        if self.offset is not None:
            text = f"{text} (at byte {self.offset})"
        if self.path:
            text = f"{self.path}: {text}"
        return text


class TruncatedData(ObfError):
    """Fewer bytes remain than a field requires."""


class OutOfRange(ObfError):
    """A seek target lies outside the buffer."""


class InvalidFormat(ObfError):
    """Header magic or version mismatch, or trailing data."""


class MalformedPrimitive(ObfError):
    """Primitive buffers are inconsistent with their declared counts."""
