# SPDX-License-Identifier: MIT
"""Decoding of container object-set dumps."""

from .msgpack_decoder import decode_msgpack, encode_msgpack
from .object_set import (
    DecodedAnimation,
    DecodedBinding,
    DecodedSkeleton,
    Decoder,
    MsgpackObjectDecoder,
    UnknownObject,
    encode_object_set,
    first_of_type,
    load_skeleton,
)

__all__ = [
    "decode_msgpack",
    "encode_msgpack",
    "DecodedAnimation",
    "DecodedBinding",
    "DecodedSkeleton",
    "Decoder",
    "MsgpackObjectDecoder",
    "UnknownObject",
    "encode_object_set",
    "first_of_type",
    "load_skeleton",
]
