# SPDX-License-Identifier: MIT
"""Normalize decoded per-frame transform data into per-track sequences."""

from __future__ import annotations

from typing import Sequence

from anim_converter.errors import DecodeFailure
from anim_converter.scene.transforms import FrameTransform


class TransformSampler:
    """Track-major view over decoded animation samples.

    Decoders expose samples either as a list of per-frame snapshots (one
    transform per track in each snapshot) or as a list of per-track frame
    sequences. Both are served through ``frames_for``.
    """

    def __init__(
        self,
        *,
        frame_major: Sequence[Sequence[FrameTransform]] | None = None,
        track_major: Sequence[Sequence[FrameTransform]] | None = None,
    ):
        if (frame_major is None) == (track_major is None):
            raise ValueError("Provide exactly one of frame_major or track_major")

        self._frame_major = frame_major
        self._tracks: list[tuple[FrameTransform, ...]] | None = None
        if track_major is not None:
            self._tracks = [tuple(frames) for frames in track_major]

    @classmethod
    def from_frame_major(
        cls, frames: Sequence[Sequence[FrameTransform]]
    ) -> TransformSampler:
        """Create a sampler from ``frames[frame][track]`` data."""
        return cls(frame_major=frames)

    @classmethod
    def from_track_major(
        cls, tracks: Sequence[Sequence[FrameTransform]]
    ) -> TransformSampler:
        """Create a sampler from ``tracks[track][frame]`` data."""
        return cls(track_major=tracks)

    def _ensure_tracks(self) -> list[tuple[FrameTransform, ...]]:
        if self._tracks is None:
            self._tracks = _transpose(self._frame_major)
            self._frame_major = None
        return self._tracks

    @property
    def track_count(self) -> int:
        return len(self._ensure_tracks())

    def frames_for(self, track_index: int) -> tuple[FrameTransform, ...]:
        """Return the ordered frames of a track, empty if it has no data."""
        tracks = self._ensure_tracks()
        if track_index < 0 or track_index >= len(tracks):
            return ()
        return tracks[track_index]


def _transpose(
    frames: Sequence[Sequence[FrameTransform]],
) -> list[tuple[FrameTransform, ...]]:
    """Transpose frame-major snapshots into per-track sequences.

    Snapshots may be ragged at the end: a track stops at the first
    snapshot that lacks it.

    Raises:
        DecodeFailure: a track reappears after a snapshot that lacked it
    """
    track_count = max((len(snapshot) for snapshot in frames), default=0)
    tracks: list[list[FrameTransform]] = [[] for _ in range(track_count)]

    for frame_index, snapshot in enumerate(frames):
        for track_index, transform in enumerate(snapshot):
            if len(tracks[track_index]) != frame_index:
                raise DecodeFailure(
                    f"Track {track_index} resumes at frame {frame_index} after a gap"
                )
            tracks[track_index].append(transform)

    return [tuple(track) for track in tracks]
