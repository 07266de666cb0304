# SPDX-License-Identifier: MIT
"""Skeleton model and output scene representation."""

from .scene_graph import OutputBone, OutputModel, OutputScene, OutputSkeleton
from .skeleton import Bone, Skeleton
from .transforms import FrameTransform, normalize_quaternion

__all__ = [
    "Bone",
    "Skeleton",
    "OutputBone",
    "OutputModel",
    "OutputScene",
    "OutputSkeleton",
    "FrameTransform",
    "normalize_quaternion",
]
