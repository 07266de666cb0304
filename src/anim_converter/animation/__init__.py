# SPDX-License-Identifier: MIT
"""Animation track assembly and rotation conversion."""

from .animation_data import (
    AnimationBinding,
    AnimationClip,
    AnimationGroup,
    AnimationTrack,
    TrackType,
)
from .assembler import RotationMode, assemble_scene
from .rotation import euler_channels, quat_to_euler_xyz
from .sampler import TransformSampler

__all__ = [
    "AnimationBinding",
    "AnimationClip",
    "AnimationGroup",
    "AnimationTrack",
    "TrackType",
    "RotationMode",
    "assemble_scene",
    "euler_channels",
    "quat_to_euler_xyz",
    "TransformSampler",
]
