# SPDX-License-Identifier: MIT
"""Anim Converter - Convert skeletal animation samples into glTF and Collada scenes."""

from anim_converter.animation import RotationMode, TransformSampler, assemble_scene
from anim_converter.scene import Skeleton

__version__ = "0.1.0"
__all__ = ["RotationMode", "Skeleton", "TransformSampler", "assemble_scene"]
