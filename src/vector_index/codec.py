"""Vector codec for backends that store vectors as packed float32 blobs.

Vectors are narrowed to single precision and written as little-endian IEEE-754
values with no padding or length prefix. Decoding widens back to float64, so a
round trip is exact only for values already representable as float32.
"""

from collections.abc import Sequence

import numpy as np

from vector_index.errors import EncodingError

FLOAT32_LE = np.dtype("<f4")


def encode_vector(values: Sequence[float]) -> bytes:
    """Pack ``values`` as little-endian float32 bytes.

    Args:
        values: Vector of float64 values

    Returns:
        ``4 * len(values)`` bytes
    """
    return np.asarray(values, dtype=np.float64).astype(FLOAT32_LE).tobytes()


def decode_vector(blob: bytes) -> list[float]:
    """Unpack little-endian float32 bytes into a list of floats.

    Raises:
        EncodingError: If the blob length is not a multiple of 4
    """
    if len(blob) % FLOAT32_LE.itemsize:
        raise EncodingError(
            f"Vector blob length {len(blob)} is not a multiple of {FLOAT32_LE.itemsize}"
        )
    return np.frombuffer(blob, dtype=FLOAT32_LE).astype(np.float64).tolist()
