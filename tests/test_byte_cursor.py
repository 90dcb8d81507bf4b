import io
import struct

import numpy as np
import pytest

from byte_cursor import ByteCursor
from obf_errors import TruncatedData, OutOfRange, InvalidFormat, MalformedPrimitive


def test_typed_reads_advance_position():
    data = struct.pack('<BHIf', 7, 513, 70000, 1.5)
    cursor = ByteCursor(data)

    assert cursor.read_u8() == 7
    assert cursor.read_u16() == 513
    assert cursor.read_u32() == 70000
    assert cursor.read_f32() == 1.5
    assert cursor.tell() == len(data)
    assert cursor.remaining() == 0


def test_fixed_string_strips_padding():
    cursor = ByteCursor(b'OBF\x00rest')
    assert cursor.read_fixed_string(4) == 'OBF'
    assert cursor.remaining() == 4


def test_length_prefixed_blob():
    cursor = ByteCursor(struct.pack('<I', 3) + b'abcd')
    assert cursor.read_length_prefixed_blob() == b'abc'
    assert cursor.remaining() == 1


def test_blob_longer_than_buffer_is_truncated():
    cursor = ByteCursor(struct.pack('<I', 100) + b'abc')
    with pytest.raises(TruncatedData) as info:
        cursor.read_length_prefixed_blob()
    assert info.value.offset == 0


def test_read_past_end_is_truncated():
    cursor = ByteCursor(b'\x01\x02')
    with pytest.raises(TruncatedData):
        cursor.read_u32()
    assert cursor.tell() == 0


def test_seek_bounds():
    cursor = ByteCursor(b'\x00' * 8)
    cursor.seek(8)
    assert cursor.remaining() == 0
    cursor.seek(2)
    assert cursor.tell() == 2
    with pytest.raises(OutOfRange):
        cursor.seek(9)
    with pytest.raises(OutOfRange):
        cursor.seek(-1)


def test_f32_array_is_owned_copy():
    source = bytearray(struct.pack('<3f', 1.0, 2.0, 3.0))
    cursor = ByteCursor(source)
    values = cursor.read_f32_array(3)
    source[:] = b'\x00' * len(source)

    assert values.dtype == np.float32
    assert values.tolist() == [1.0, 2.0, 3.0]


def test_from_stream():
    cursor = ByteCursor.from_stream(io.BytesIO(b'\x2a'))
    assert len(cursor) == 1
    assert cursor.read_u8() == 42


def test_string_with_invalid_utf8_is_rejected():
    cursor = ByteCursor(struct.pack('<I', 2) + b'\xff\xfe')
    with pytest.raises(InvalidFormat, match='utf-8') as info:
        cursor.read_string()
    assert info.value.offset == 0


def test_string_error_type_is_selectable():
    cursor = ByteCursor(struct.pack('<I', 1) + b'\xff')
    with pytest.raises(MalformedPrimitive):
        cursor.read_string(error=MalformedPrimitive)


def test_fixed_string_with_non_ascii_is_rejected():
    cursor = ByteCursor(b'OB\xe9\x00')
    with pytest.raises(InvalidFormat, match='ascii'):
        cursor.read_fixed_string(4)
