# SPDX-License-Identifier: MIT
"""Msgpack decoder with support for typed array extensions."""

from __future__ import annotations

from typing import Any

import msgpack
import numpy as np

# Extension type codes used for typed arrays
EXT_UINT8_ARRAY = 0x12  # 18
EXT_INT32_ARRAY = 0x15  # 21
EXT_UINT32_ARRAY = 0x16  # 22
EXT_FLOAT32_ARRAY = 0x17  # 23

# (dtype kind, item size) -> extension code
_DTYPE_CODES = {
    ("u", 1): EXT_UINT8_ARRAY,
    ("i", 4): EXT_INT32_ARRAY,
    ("u", 4): EXT_UINT32_ARRAY,
    ("f", 4): EXT_FLOAT32_ARRAY,
}


def decode_typed_array(code: int, data: bytes) -> np.ndarray | bytes:
    """Decode a msgpack extension type to a numpy array."""
    if code == EXT_UINT8_ARRAY:
        return np.frombuffer(data, dtype=np.uint8)
    elif code == EXT_INT32_ARRAY:
        return np.frombuffer(data, dtype="<i4")
    elif code == EXT_UINT32_ARRAY:
        return np.frombuffer(data, dtype="<u4")
    elif code == EXT_FLOAT32_ARRAY:
        return np.frombuffer(data, dtype="<f4")
    else:
        # Return raw data for unknown extension types
        return data


def ext_hook(code: int, data: bytes) -> Any:
    """Hook for handling msgpack extension types."""
    return decode_typed_array(code, data)


def encode_typed_array(array: np.ndarray) -> msgpack.ExtType:
    """Encode a numpy array as a little-endian typed array extension."""
    code = _DTYPE_CODES.get((array.dtype.kind, array.dtype.itemsize))
    if code is None:
        raise TypeError(f"No typed array extension for dtype {array.dtype}")
    little = array.astype(array.dtype.newbyteorder("<"), copy=False)
    return msgpack.ExtType(code, np.ascontiguousarray(little).tobytes())


def default(obj: Any) -> Any:
    """Hook for packing numpy arrays and scalars."""
    if isinstance(obj, np.ndarray):
        return encode_typed_array(obj.reshape(-1))
    if isinstance(obj, np.generic):
        return obj.item()
    raise TypeError(f"Cannot serialize {type(obj).__name__}")


def decode_msgpack(data: bytes) -> Any:
    """Decode msgpack data with support for typed arrays.

    Args:
        data: Raw msgpack bytes

    Returns:
        Decoded Python object (dict, list, etc.)
    """
    return msgpack.unpackb(data, ext_hook=ext_hook, raw=False, strict_map_key=False)


def encode_msgpack(obj: Any) -> bytes:
    """Encode an object, packing numpy arrays as typed arrays."""
    return msgpack.packb(obj, default=default, use_bin_type=True)
