# SPDX-License-Identifier: MIT
"""glTF 2.0 export via pygltflib."""

from __future__ import annotations

from pathlib import Path

import numpy as np
import pygltflib

from anim_converter.animation.animation_data import (
    POSITION_TRACKS,
    QUATERNION_TRACKS,
    SCALE_TRACKS,
    AnimationGroup,
    TrackType,
)
from anim_converter.errors import ExportError
from anim_converter.export.settings import ExportSettings
from anim_converter.scene.scene_graph import OutputScene


def _append_accessor(
    gltf: pygltflib.GLTF2,
    blob: bytearray,
    data: np.ndarray,
    accessor_type: str,
    *,
    with_bounds: bool = False,
) -> int:
    """Append float data to the blob and create a bufferView + accessor.

    Returns:
        Index of the new accessor
    """
    data = np.ascontiguousarray(data, dtype="<f4")
    offset = len(blob)
    blob.extend(data.tobytes())

    gltf.bufferViews.append(
        pygltflib.BufferView(buffer=0, byteOffset=offset, byteLength=data.nbytes)
    )
    accessor = pygltflib.Accessor(
        bufferView=len(gltf.bufferViews) - 1,
        componentType=pygltflib.FLOAT,
        count=len(data),
        type=accessor_type,
    )
    # Animation inputs must declare min/max
    if with_bounds:
        accessor.min = np.atleast_1d(data.min(axis=0)).astype(float).tolist()
        accessor.max = np.atleast_1d(data.max(axis=0)).astype(float).tolist()

    gltf.accessors.append(accessor)
    return len(gltf.accessors) - 1


def _stack_tracks(group: AnimationGroup, track_types: tuple[TrackType, ...]) -> np.ndarray:
    columns = []
    for track_type in track_types:
        track = group.get_track(track_type)
        if track is None:
            raise ExportError(f"Group {group.name} has no {track_type.value} track")
        columns.append(track.values)
    return np.array(columns, dtype=np.float32).T


def build_gltf(scene: OutputScene, settings: ExportSettings) -> pygltflib.GLTF2:
    """Convert a scene into a glTF document with an unattached binary blob.

    Each bone becomes a node with its reference TRS. Each animation group
    becomes translation, rotation and scale channels on the node with the
    same name.

    Args:
        scene: Assembled scene with quaternion rotation tracks
        settings: Export settings

    Returns:
        GLTF2 document; buffers are set when animations were written

    Raises:
        ExportError: if a group carries Euler rotations or targets an
            unknown bone
    """
    gltf = pygltflib.GLTF2(
        asset=pygltflib.Asset(version="2.0", generator="anim-converter"),
        scenes=[pygltflib.Scene(name=scene.name, nodes=[])],
        scene=0,
    )

    bones = list(scene.iter_bones())
    node_index = {bone: i for i, bone in enumerate(bones)}
    for bone in bones:
        gltf.nodes.append(
            pygltflib.Node(
                name=bone.name,
                translation=[float(v) for v in bone.translation],
                rotation=[float(v) for v in bone.rotation],
                scale=[float(v) for v in bone.scale],
                children=[node_index[child] for child in bone.children],
            )
        )
    for model in scene.models:
        gltf.scenes[0].nodes.extend(node_index[root] for root in model.skeleton.root_bones)

    if not settings.export_animations:
        return gltf

    nodes_by_name: dict[str, int] = {}
    for i, bone in enumerate(bones):
        nodes_by_name.setdefault(bone.name, i)

    blob = bytearray()
    for clip in scene.animations:
        animation = pygltflib.Animation(name=clip.name, samplers=[], channels=[])

        for group in clip.groups:
            if group.has_euler_rotation:
                raise ExportError(
                    f"glTF requires quaternion rotations, group {group.name} "
                    "has Euler tracks"
                )
            node = nodes_by_name.get(group.name)
            if node is None:
                raise ExportError(f"Animation group {group.name} targets no bone")

            first = group.get_track(TrackType.POSITION_X)
            if first is None or len(first) == 0:
                continue

            times = np.array(
                [settings.frame_to_seconds(f) for f in first.frames], dtype=np.float32
            )
            time_accessor = _append_accessor(
                gltf, blob, times, pygltflib.SCALAR, with_bounds=True
            )

            outputs = [
                ("translation", POSITION_TRACKS, pygltflib.VEC3),
                ("rotation", QUATERNION_TRACKS, pygltflib.VEC4),
                ("scale", SCALE_TRACKS, pygltflib.VEC3),
            ]
            for path, track_types, accessor_type in outputs:
                values = _stack_tracks(group, track_types)
                value_accessor = _append_accessor(gltf, blob, values, accessor_type)

                animation.samplers.append(
                    pygltflib.AnimationSampler(
                        input=time_accessor,
                        output=value_accessor,
                        interpolation="LINEAR",
                    )
                )
                animation.channels.append(
                    pygltflib.AnimationChannel(
                        sampler=len(animation.samplers) - 1,
                        target=pygltflib.AnimationChannelTarget(node=node, path=path),
                    )
                )

        if animation.channels:
            gltf.animations.append(animation)

    if blob:
        gltf.buffers = [pygltflib.Buffer(byteLength=len(blob))]
        gltf.set_binary_blob(bytes(blob))

    return gltf


def write_gltf(scene: OutputScene, path: Path, settings: ExportSettings) -> None:
    """Write a scene as .gltf (embedded data URI buffer) or .glb."""
    gltf = build_gltf(scene, settings)
    path = Path(path)

    if path.suffix.lower() == ".gltf" and gltf.buffers:
        gltf.convert_buffers(pygltflib.BufferFormat.DATAURI)

    gltf.save(str(path))
