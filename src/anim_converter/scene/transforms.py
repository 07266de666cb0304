# SPDX-License-Identifier: MIT
"""Transform utilities for decoded animation samples."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Sequence

import numpy as np

from anim_converter.errors import DegenerateRotation

Vector3 = tuple[float, float, float]
Quaternion = tuple[float, float, float, float]  # (x, y, z, w)


@dataclass(frozen=True)
class FrameTransform:
    """Decomposed transform with translation, rotation, and scale."""

    translation: Vector3
    rotation: Quaternion  # Quaternion (x, y, z, w)
    scale: Vector3

    @classmethod
    def identity(cls) -> FrameTransform:
        """Create an identity transform."""
        return cls(
            translation=(0.0, 0.0, 0.0),
            rotation=(0.0, 0.0, 0.0, 1.0),
            scale=(1.0, 1.0, 1.0),
        )

    @classmethod
    def from_array(cls, row: Sequence[float] | np.ndarray) -> FrameTransform:
        """Build a transform from a packed float row.

        Accepts the 12-float qs-transform layout (translation xyzw, rotation
        xyzw, scale xyzw, with the w padding of translation and scale
        ignored) or a tightly packed 10-float row (txyz, rxyzw, sxyz).

        Args:
            row: 10 or 12 floats

        Returns:
            FrameTransform with float32 precision values
        """
        data = np.asarray(row, dtype=np.float32).reshape(-1)

        if len(data) == 12:
            t, r, s = data[0:3], data[4:8], data[8:11]
        elif len(data) == 10:
            t, r, s = data[0:3], data[3:7], data[7:10]
        else:
            raise ValueError(f"Expected 10 or 12 transform elements, got {len(data)}")

        return cls(
            translation=tuple(float(v) for v in t),
            rotation=tuple(float(v) for v in r),
            scale=tuple(float(v) for v in s),
        )

    def to_array(self) -> np.ndarray:
        """Pack into a 10-float row (txyz, rxyzw, sxyz)."""
        return np.array(
            [*self.translation, *self.rotation, *self.scale], dtype=np.float32
        )


def normalize_quaternion(q: Sequence[float]) -> Quaternion:
    """Scale a quaternion to unit length.

    Args:
        q: Quaternion as (x, y, z, w)

    Returns:
        Unit quaternion as (x, y, z, w)

    Raises:
        DegenerateRotation: if the norm is zero or not finite
    """
    x, y, z, w = (float(c) for c in q)
    norm = math.sqrt(x * x + y * y + z * z + w * w)
    if norm == 0.0 or not math.isfinite(norm):
        raise DegenerateRotation(f"Cannot normalize quaternion {tuple(q)}")

    return (x / norm, y / norm, z / norm, w / norm)


def quaternion_multiply(q1: Quaternion, q2: Quaternion) -> Quaternion:
    """Multiply two quaternions (x, y, z, w format).

    Args:
        q1: First quaternion
        q2: Second quaternion

    Returns:
        Product quaternion
    """
    x1, y1, z1, w1 = q1
    x2, y2, z2, w2 = q2

    return (
        w1 * x2 + x1 * w2 + y1 * z2 - z1 * y2,
        w1 * y2 - x1 * z2 + y1 * w2 + z1 * x2,
        w1 * z2 + x1 * y2 - y1 * x2 + z1 * w2,
        w1 * w2 - x1 * x2 - y1 * y2 - z1 * z2,
    )
