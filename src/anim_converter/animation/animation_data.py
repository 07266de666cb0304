# SPDX-License-Identifier: MIT
"""Animation data structures."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from anim_converter.errors import MalformedBinding


class TrackType(Enum):
    """Types of animation tracks."""

    POSITION_X = "position_x"
    POSITION_Y = "position_y"
    POSITION_Z = "position_z"
    SCALE_X = "scale_x"
    SCALE_Y = "scale_y"
    SCALE_Z = "scale_z"
    ROTATION_EULER_X = "rotation_euler_x"
    ROTATION_EULER_Y = "rotation_euler_y"
    ROTATION_EULER_Z = "rotation_euler_z"
    QUAT_X = "quat_x"
    QUAT_Y = "quat_y"
    QUAT_Z = "quat_z"
    QUAT_W = "quat_w"


POSITION_TRACKS = (TrackType.POSITION_X, TrackType.POSITION_Y, TrackType.POSITION_Z)
SCALE_TRACKS = (TrackType.SCALE_X, TrackType.SCALE_Y, TrackType.SCALE_Z)
EULER_TRACKS = (
    TrackType.ROTATION_EULER_X,
    TrackType.ROTATION_EULER_Y,
    TrackType.ROTATION_EULER_Z,
)
QUATERNION_TRACKS = (
    TrackType.QUAT_X,
    TrackType.QUAT_Y,
    TrackType.QUAT_Z,
    TrackType.QUAT_W,
)


@dataclass
class AnimationTrack:
    """A single keyed scalar channel."""

    track_type: TrackType
    keys: list[tuple[int, float]] = field(default_factory=list)  # (frame, value)

    def insert_keyframe(self, frame: int, value: float) -> None:
        self.keys.append((frame, float(value)))

    @property
    def frames(self) -> list[int]:
        return [frame for frame, _ in self.keys]

    @property
    def values(self) -> list[float]:
        return [value for _, value in self.keys]

    def __len__(self) -> int:
        """Return number of keyframes."""
        return len(self.keys)


@dataclass
class AnimationGroup:
    """The keyed channels of one animated bone."""

    name: str
    tracks: list[AnimationTrack] = field(default_factory=list)

    def get_track(self, track_type: TrackType) -> AnimationTrack | None:
        """Get track by type."""
        for track in self.tracks:
            if track.track_type == track_type:
                return track
        return None

    def add_track(self, track: AnimationTrack) -> None:
        """Add a track to the group."""
        self.tracks.append(track)

    @property
    def has_euler_rotation(self) -> bool:
        return any(t.track_type in EULER_TRACKS for t in self.tracks)

    @property
    def has_quaternion_rotation(self) -> bool:
        return any(t.track_type in QUATERNION_TRACKS for t in self.tracks)


@dataclass
class AnimationClip:
    """A named animation holding one group per animated bone."""

    name: str
    start_frame: int = 0
    end_frame: int = 0
    groups: list[AnimationGroup] = field(default_factory=list)

    @property
    def frame_count(self) -> int:
        """Get total frame count."""
        return self.end_frame - self.start_frame + 1

    def get_group(self, name: str) -> AnimationGroup | None:
        """Get group by bone name."""
        for group in self.groups:
            if group.name == name:
                return group
        return None


@dataclass(frozen=True)
class AnimationBinding:
    """Maps each animation track index to the skeleton bone it animates."""

    track_to_bone: tuple[int, ...]

    @classmethod
    def from_indices(cls, indices) -> AnimationBinding:
        """Build a binding, rejecting bones bound to more than one track."""
        track_to_bone = tuple(int(i) for i in indices)
        seen: dict[int, int] = {}
        for track_index, bone_index in enumerate(track_to_bone):
            if bone_index in seen:
                raise MalformedBinding(
                    f"Tracks {seen[bone_index]} and {track_index} both "
                    f"animate bone {bone_index}"
                )
            seen[bone_index] = track_index

        return cls(track_to_bone=track_to_bone)

    def __len__(self) -> int:
        return len(self.track_to_bone)
