# SPDX-License-Identifier: MIT
"""Assemble a skeleton and decoded samples into an exportable scene."""

from __future__ import annotations

from enum import Enum

from anim_converter.animation.animation_data import (
    POSITION_TRACKS,
    QUATERNION_TRACKS,
    SCALE_TRACKS,
    AnimationBinding,
    AnimationClip,
    AnimationGroup,
    AnimationTrack,
    TrackType,
)
from anim_converter.animation.rotation import euler_channels
from anim_converter.animation.sampler import TransformSampler
from anim_converter.errors import EmptyBinding, IndexOutOfRange, NoRootBone
from anim_converter.scene.scene_graph import (
    OutputBone,
    OutputModel,
    OutputScene,
    OutputSkeleton,
)
from anim_converter.scene.skeleton import Skeleton
from anim_converter.scene.transforms import FrameTransform


class RotationMode(Enum):
    """How rotations are keyed in the assembled animation."""

    EULER = "euler"
    QUATERNION = "quaternion"


# Order in which Euler tracks are added to a group
EULER_TRACK_ORDER = (
    TrackType.ROTATION_EULER_Z,
    TrackType.ROTATION_EULER_Y,
    TrackType.ROTATION_EULER_X,
)


def build_bone_hierarchy(skeleton: Skeleton) -> OutputSkeleton:
    """Create output bones and link them to their parents.

    The first bone with parent index -1 becomes the root. Later roots stay
    unattached and are not reachable from the returned skeleton.

    Args:
        skeleton: Validated skeleton

    Returns:
        OutputSkeleton holding the root bone

    Raises:
        NoRootBone: if no bone has parent index -1
    """
    bones = [
        OutputBone(
            name=bone.name,
            translation=bone.reference_translation,
            rotation=bone.reference_rotation,
            scale=(1.0, 1.0, 1.0),
        )
        for bone in skeleton.bones
    ]

    root = None
    for i, bone in enumerate(skeleton.bones):
        if bone.parent_index < 0:
            if root is None:
                root = bones[i]
        else:
            bones[i].set_parent(bones[bone.parent_index])

    if root is None:
        raise NoRootBone("Skeleton has no bone with parent index -1")

    return OutputSkeleton(root_bones=[root])


def build_channel_group(
    name: str,
    frames: tuple[FrameTransform, ...],
    rotation_mode: RotationMode,
) -> AnimationGroup:
    """Key position, scale, and rotation tracks for one bone.

    Args:
        name: Bone name used as the group name
        frames: Frame transforms, keyed at frames 0..len(frames)-1
        rotation_mode: Euler or quaternion rotation tracks

    Returns:
        AnimationGroup with 6 + 3 (Euler) or 6 + 4 (quaternion) tracks
    """
    position = [AnimationTrack(t) for t in POSITION_TRACKS]
    scale = [AnimationTrack(t) for t in SCALE_TRACKS]

    for f, transform in enumerate(frames):
        for axis in range(3):
            position[axis].insert_keyframe(f, transform.translation[axis])
            scale[axis].insert_keyframe(f, transform.scale[axis])

    group = AnimationGroup(name=name, tracks=position + scale)

    if rotation_mode == RotationMode.EULER:
        euler = {t: AnimationTrack(t) for t in EULER_TRACK_ORDER}
        for f, transform in enumerate(frames):
            for track_type, angle in euler_channels(transform.rotation).items():
                euler[track_type].insert_keyframe(f, angle)
        group.tracks.extend(euler[t] for t in EULER_TRACK_ORDER)
    else:
        # Animated rotations are passed through without renormalizing
        quat = [AnimationTrack(t) for t in QUATERNION_TRACKS]
        for f, transform in enumerate(frames):
            for component in range(4):
                quat[component].insert_keyframe(f, transform.rotation[component])
        group.tracks.extend(quat)

    return group


def assemble_scene(
    skeleton: Skeleton,
    binding: AnimationBinding,
    sampler: TransformSampler,
    rotation_mode: RotationMode,
    animation_name: str,
) -> OutputScene:
    """Build a scene with the bone hierarchy and one keyed animation.

    The animation length is the frame count of the first bound track.
    Tracks with more frames are truncated to that length. Tracks without
    frames, and tracks bound to bones under an additional root, produce no
    channel group.

    Args:
        skeleton: Skeleton shared by the whole batch
        binding: Track to bone mapping of the animation
        sampler: Decoded frames per track
        rotation_mode: Euler or quaternion rotation tracks
        animation_name: Name of the animation clip

    Returns:
        OutputScene with one skeleton-only model and one animation

    Raises:
        NoRootBone: skeleton has no root
        EmptyBinding: binding has no tracks
        IndexOutOfRange: binding names a missing bone, or the first track
            has no frames
    """
    output_skeleton = build_bone_hierarchy(skeleton)
    model = OutputModel(name="Model", skeleton=output_skeleton)

    if len(binding) == 0:
        raise EmptyBinding(f"Animation {animation_name} binds no tracks")

    for track_index, bone_index in enumerate(binding.track_to_bone):
        if bone_index < 0 or bone_index >= len(skeleton):
            raise IndexOutOfRange(
                f"Track {track_index} targets bone {bone_index}, skeleton has "
                f"{len(skeleton)} bones"
            )

    frame_count = len(sampler.frames_for(0))
    if frame_count == 0:
        raise IndexOutOfRange(
            f"No frame data for track 0 (bone {binding.track_to_bone[0]})"
        )

    clip = AnimationClip(name=animation_name, start_frame=0, end_frame=frame_count - 1)
    exported = skeleton.hierarchy_indices

    for track_index, bone_index in enumerate(binding.track_to_bone):
        frames = sampler.frames_for(track_index)
        if not frames or bone_index not in exported:
            continue

        bone_name = skeleton[bone_index].name
        clip.groups.append(
            build_channel_group(bone_name, frames[:frame_count], rotation_mode)
        )

    return OutputScene(name="Scene", models=[model], animations=[clip])
