# SPDX-License-Identifier: MIT
"""Export formats and settings."""

from __future__ import annotations

import dataclasses as dc
from enum import Enum

from anim_converter.animation.assembler import RotationMode


class ExportFormat(Enum):
    """Interchange formats the converter can write."""

    GLTF = "gltf"
    DAE = "dae"

    @property
    def extension(self) -> str:
        return f".{self.value}"

    @property
    def rotation_mode(self) -> RotationMode:
        """glTF animates quaternions, Collada animates Euler angles."""
        if self == ExportFormat.DAE:
            return RotationMode.EULER
        return RotationMode.QUATERNION


@dc.dataclass(frozen=True)
class ExportSettings:
    """Options handed to the exporters along with the scene."""

    export_animations: bool = True
    """Write the animation clips. When False only the hierarchy is written."""

    frame_rate: float = 30.0
    """Frames per second used to convert frame indices to seconds."""

    compatibility_mode: bool = True
    """Sanitize node ids so Blender's Collada importer can resolve them."""

    def __post_init__(self):
        if not self.frame_rate > 0:
            raise ValueError(f"frame_rate must be positive, got {self.frame_rate}")

    def frame_to_seconds(self, frame: int) -> float:
        return frame / self.frame_rate
