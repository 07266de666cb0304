# SPDX-License-Identifier: MIT
"""Quaternion to Euler angle conversion."""

from __future__ import annotations

import math
from typing import Sequence

from anim_converter.animation.animation_data import TrackType


def quat_to_euler_xyz(q: Sequence[float]) -> tuple[float, float, float]:
    """Convert a quaternion to XYZ Euler angles.

    Uses the atan2/asin decomposition. The pitch is clamped to +-pi/2 when
    rounding pushes its sine outside [-1, 1] (gimbal lock).

    Args:
        q: Quaternion as (x, y, z, w)

    Returns:
        (x, y, z) angles in radians
    """
    qx, qy, qz, w = (float(c) for c in q)

    sinr_cosp = 2.0 * (w * qx + qy * qz)
    cosr_cosp = 1.0 - 2.0 * (qx * qx + qy * qy)
    angle_x = math.atan2(sinr_cosp, cosr_cosp)

    sinp = 2.0 * (w * qy - qz * qx)
    if abs(sinp) >= 1.0:
        angle_y = math.copysign(math.pi / 2.0, sinp)
    else:
        angle_y = math.asin(sinp)

    siny_cosp = 2.0 * (w * qz + qx * qy)
    cosy_cosp = 1.0 - 2.0 * (qy * qy + qz * qz)
    angle_z = math.atan2(siny_cosp, cosy_cosp)

    return (angle_x, angle_y, angle_z)


def euler_channels(q: Sequence[float]) -> dict[TrackType, float]:
    """Map a quaternion to the values keyed on the Euler rotation tracks.

    The X and Z angles are swapped: the Euler X track carries the Z angle
    and the Euler Z track carries the X angle. Collada consumers of the
    exported files expect this layout.
    """
    angle_x, angle_y, angle_z = quat_to_euler_xyz(q)
    return {
        TrackType.ROTATION_EULER_X: angle_z,
        TrackType.ROTATION_EULER_Y: angle_y,
        TrackType.ROTATION_EULER_Z: angle_x,
    }
