# SPDX-License-Identifier: MIT
"""Decoded container objects and the msgpack object-set decoder.

An object-set dump is a msgpack array (or a map with an ``objects`` key)
of maps, each tagged with a ``type``:

``skeleton``
    ``bones`` (names), ``parent_indices`` and ``reference_pose`` (n * 10 or
    n * 12 floats per bone).
``animation``
    ``num_tracks``, optional ``transform_size`` (10 or 12, default 10) and
    either ``frames`` (frame-major floats) or ``tracks`` (one float array
    per track).
``binding``
    ``transform_track_to_bone_indices``.

Numeric arrays may be plain lists or typed array extensions.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Protocol, Sequence

import msgpack
import numpy as np

from anim_converter.animation.animation_data import AnimationBinding
from anim_converter.errors import DecodeFailure, IndexOutOfRange
from anim_converter.parser.msgpack_decoder import decode_msgpack, encode_msgpack
from anim_converter.scene.skeleton import Skeleton
from anim_converter.scene.transforms import FrameTransform

SKELETON_TYPE = "skeleton"
ANIMATION_TYPE = "animation"
BINDING_TYPE = "binding"


def _transform_rows(values: Any, width: int) -> list[FrameTransform]:
    data = np.asarray(values, dtype=np.float32).reshape(-1)
    if width not in (10, 12):
        raise ValueError(f"Unsupported transform size {width}")
    if len(data) % width:
        raise ValueError(f"Cannot split {len(data)} floats into transforms of {width}")

    return [FrameTransform.from_array(row) for row in data.reshape(-1, width)]


@dataclass
class DecodedSkeleton:
    """Skeleton arrays as found in the container."""

    bones: list[str]
    parent_indices: list[int]
    reference_pose: list[FrameTransform]

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> DecodedSkeleton:
        bones = [str(name) for name in d.get("bones", [])]
        pose = np.asarray(d.get("reference_pose", []), dtype=np.float32).reshape(-1)
        width = len(pose) // len(bones) if bones else 10
        return cls(
            bones=bones,
            parent_indices=[int(p) for p in d.get("parent_indices", [])],
            reference_pose=_transform_rows(pose, width),
        )

    def to_dict(self) -> dict[str, Any]:
        pose = (
            np.stack([t.to_array() for t in self.reference_pose])
            if self.reference_pose
            else np.zeros(0, dtype=np.float32)
        )
        return {
            "type": SKELETON_TYPE,
            "bones": list(self.bones),
            "parent_indices": np.asarray(self.parent_indices, dtype=np.int32),
            "reference_pose": pose,
        }

    def to_skeleton(self) -> Skeleton:
        return Skeleton.build(self.bones, self.reference_pose, self.parent_indices)


@dataclass
class DecodedAnimation:
    """Per-track samples of one animation."""

    num_tracks: int
    frames: list[list[FrameTransform]] = field(default_factory=list)
    tracks: list[list[FrameTransform]] | None = None
    skeleton: Skeleton | None = field(default=None, repr=False)

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> DecodedAnimation:
        num_tracks = int(d.get("num_tracks", 0))
        width = int(d.get("transform_size", 10))

        if "tracks" in d:
            tracks = [_transform_rows(values, width) for values in d["tracks"]]
            return cls(num_tracks=num_tracks or len(tracks), tracks=tracks)

        rows = _transform_rows(d.get("frames", []), width)
        if num_tracks <= 0:
            if rows:
                raise ValueError("Frame-major animation without num_tracks")
            return cls(num_tracks=0)
        if len(rows) % num_tracks:
            raise ValueError(
                f"{len(rows)} transforms do not divide into {num_tracks} tracks"
            )

        frames = [rows[i : i + num_tracks] for i in range(0, len(rows), num_tracks)]
        return cls(num_tracks=num_tracks, frames=frames)

    def to_dict(self) -> dict[str, Any]:
        if self.tracks is not None:
            return {
                "type": ANIMATION_TYPE,
                "num_tracks": self.num_tracks,
                "tracks": [
                    np.stack([t.to_array() for t in track]).reshape(-1)
                    if track
                    else np.zeros(0, dtype=np.float32)
                    for track in self.tracks
                ],
            }
        rows = [t.to_array() for snapshot in self.frames for t in snapshot]
        return {
            "type": ANIMATION_TYPE,
            "num_tracks": self.num_tracks,
            "frames": np.stack(rows).reshape(-1)
            if rows
            else np.zeros(0, dtype=np.float32),
        }

    def bind(self, skeleton: Skeleton) -> None:
        """Associate the animation with the skeleton it animates."""
        if self.num_tracks > len(skeleton):
            raise IndexOutOfRange(
                f"Animation has {self.num_tracks} tracks but the skeleton has "
                f"only {len(skeleton)} bones"
            )
        self.skeleton = skeleton

    @property
    def is_frame_major(self) -> bool:
        return self.tracks is None

    def fetch_all_tracks(self) -> list[list[FrameTransform]]:
        """Return the samples in their stored layout.

        Frame-major (``[frame][track]``) unless the dump stored tracks.
        """
        if self.tracks is not None:
            return self.tracks
        return self.frames


@dataclass
class DecodedBinding:
    """Track to bone index list as found in the container."""

    transform_track_to_bone_indices: list[int]

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> DecodedBinding:
        indices = d.get("transform_track_to_bone_indices", [])
        return cls(transform_track_to_bone_indices=[int(i) for i in indices])

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": BINDING_TYPE,
            "transform_track_to_bone_indices": np.asarray(
                self.transform_track_to_bone_indices, dtype=np.int32
            ),
        }

    def to_binding(self) -> AnimationBinding:
        return AnimationBinding.from_indices(self.transform_track_to_bone_indices)


@dataclass
class UnknownObject:
    """Any object type the converter does not use."""

    type: str
    data: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {**self.data, "type": self.type}


DecodedObject = DecodedSkeleton | DecodedAnimation | DecodedBinding | UnknownObject

_OBJECT_TYPES = {
    SKELETON_TYPE: DecodedSkeleton,
    ANIMATION_TYPE: DecodedAnimation,
    BINDING_TYPE: DecodedBinding,
}


class Decoder(Protocol):
    """Reads every object stored in a container file."""

    def read_objects(self, path: Path) -> list[DecodedObject]: ...


def parse_object(d: dict[str, Any]) -> DecodedObject:
    """Create a decoded object from a msgpack map."""
    type_name = str(d.get("type", ""))
    object_type = _OBJECT_TYPES.get(type_name)
    if object_type is None:
        return UnknownObject(type=type_name, data=d)
    return object_type.from_dict(d)


class MsgpackObjectDecoder:
    """Decoder for msgpack object-set dumps."""

    def read_objects(self, path: Path) -> list[DecodedObject]:
        """Decode every object in a dump file.

        Raises:
            DecodeFailure: if the file cannot be read or parsed
        """
        try:
            payload = decode_msgpack(Path(path).read_bytes())
            if isinstance(payload, dict):
                payload = payload.get("objects", [])
            if not isinstance(payload, list):
                raise ValueError(f"Expected a list of objects, got {type(payload).__name__}")
            return [parse_object(item) for item in payload if isinstance(item, dict)]
        except (OSError, ValueError, TypeError, msgpack.exceptions.UnpackException) as e:
            raise DecodeFailure(f"Failed to decode {path}: {e}") from e


def encode_object_set(objects: Sequence[DecodedObject]) -> bytes:
    """Encode objects into the msgpack object-set format."""
    return encode_msgpack([obj.to_dict() for obj in objects])


def first_of_type(objects: Sequence[DecodedObject], object_type: type) -> Any:
    """Return the first object of a type, or None."""
    for obj in objects:
        if isinstance(obj, object_type):
            return obj
    return None


def load_skeleton(path: Path, decoder: Decoder) -> Skeleton:
    """Decode a container and build the first skeleton it holds.

    Raises:
        DecodeFailure: if the container cannot be decoded or holds no skeleton
    """
    objects = decoder.read_objects(path)
    decoded = first_of_type(objects, DecodedSkeleton)
    if decoded is None:
        raise DecodeFailure(f"No skeleton found in {path}")
    return decoded.to_skeleton()
