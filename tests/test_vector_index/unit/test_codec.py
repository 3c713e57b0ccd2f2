"""Unit tests for the float32 vector codec."""

import struct

import numpy as np
import pytest

from vector_index.codec import decode_vector, encode_vector
from vector_index.errors import EncodingError, IndexInternalError


class TestEncode:
    """Tests for encode_vector."""

    def test_little_endian_float32_layout(self):
        """Each value should occupy 4 little-endian bytes, no prefix."""
        blob = encode_vector([1.0, -2.5, 0.0])

        assert blob == struct.pack("<3f", 1.0, -2.5, 0.0)
        assert blob[:4] == b"\x00\x00\x80\x3f"

    def test_empty_vector(self):
        """Empty vector encodes to empty bytes."""
        assert encode_vector([]) == b""

    def test_length_is_four_bytes_per_value(self):
        assert len(encode_vector([0.1] * 1536)) == 1536 * 4


class TestDecode:
    """Tests for decode_vector."""

    def test_round_trip_float32_representable(self):
        """Values representable in float32 should survive exactly."""
        values = [0.5, -1.25, 3.0, 1024.0, 2.0**-10, 0.0]

        assert decode_vector(encode_vector(values)) == values

    def test_round_trip_is_lossy_within_float32_rounding(self):
        """Arbitrary doubles differ by at most float32 rounding error."""
        values = [0.1, 1 / 3, -2.718281828459045, 123456.789]

        decoded = decode_vector(encode_vector(values))

        assert decoded != values
        for original, restored in zip(values, decoded, strict=True):
            assert restored == float(np.float32(original))
            assert abs(restored - original) <= abs(original) * 2.0**-24

    def test_returns_python_floats(self):
        decoded = decode_vector(struct.pack("<2f", 1.5, 2.5))

        assert decoded == [1.5, 2.5]
        assert all(type(v) is float for v in decoded)

    def test_malformed_length_raises(self):
        """Blob length must be a multiple of 4."""
        with pytest.raises(EncodingError, match="not a multiple of 4"):
            decode_vector(b"\x00\x00\x80")

    def test_encoding_error_is_internal(self):
        """Decode failures come from stored data, so they are backend errors."""
        assert issubclass(EncodingError, IndexInternalError)
