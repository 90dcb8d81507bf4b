"""
Byte Cursor Module
Position-tracked little-endian reader over an in-memory buffer.
"""

import struct

import numpy as np

from obf_errors import TruncatedData, OutOfRange, InvalidFormat


class ByteCursor:
    """Reads typed little-endian values from a buffer, tracking the position."""

    def __init__(self, data):
        self.data = memoryview(bytes(data))
        self.pos = 0

    @classmethod
    def from_stream(cls, stream):
        """Read a binary stream to the end and wrap the bytes."""
        return cls(stream.read())

    def __len__(self):
        return len(self.data)

    def tell(self):
        return self.pos

    def remaining(self):
        return len(self.data) - self.pos

    def seek(self, offset):
        if offset < 0 or offset > len(self.data):
            raise OutOfRange(f"Seek target {offset} outside buffer of {len(self.data)} bytes",
                             offset=self.pos)
        self.pos = offset

    def read_bytes(self, n):
        """Read n raw bytes."""
        if n < 0:
            raise OutOfRange(f"Negative read length {n}", offset=self.pos)
        if n > self.remaining():
            raise TruncatedData(f"Need {n} bytes, only {self.remaining()} left", offset=self.pos)
        chunk = self.data[self.pos:self.pos + n].tobytes()
        self.pos += n
        return chunk

    def _unpack(self, fmt):
        size = struct.calcsize(fmt)
        return struct.unpack(fmt, self.read_bytes(size))[0]

    def read_u8(self):
        return self._unpack('<B')

    def read_u16(self):
        return self._unpack('<H')

    def read_u32(self):
        return self._unpack('<I')

    def read_f32(self):
        return self._unpack('<f')

    def read_f32_array(self, count):
        """Read count floats as a float32 array (owned copy)."""
        return np.frombuffer(self.read_bytes(count * 4), dtype='<f4').astype(np.float32)

    def read_fixed_string(self, n, encoding='ascii', error=InvalidFormat):
        """Read an n-byte string field, dropping NUL padding."""
        start = self.pos
        return self._decode_text(self.read_bytes(n).rstrip(b'\x00'), encoding, error, start)

    def read_length_prefixed_blob(self):
        """Read a u32 byte count followed by that many bytes."""
        start = self.pos
        length = self.read_u32()
        if length > self.remaining():
            raise TruncatedData(f"Blob declares {length} bytes, only {self.remaining()} left",
                                offset=start)
        return self.read_bytes(length)

    def read_string(self, error=InvalidFormat):
        """Read a length-prefixed UTF-8 string.

        Undecodable bytes raise ``error`` (an ObfError subclass) instead of
        being replaced.
        """
        start = self.pos
        return self._decode_text(self.read_length_prefixed_blob(), 'utf-8', error, start)

    @staticmethod
    def _decode_text(data, encoding, error, offset):
        try:
            return data.decode(encoding)
        except UnicodeDecodeError as e:
            raise error(f"Invalid {encoding} text: {e.reason} at position {e.start}",
                        offset=offset) from e
