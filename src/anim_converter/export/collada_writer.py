# SPDX-License-Identifier: MIT
"""Collada 1.4.1 export of joint hierarchies and Euler animation channels."""

from __future__ import annotations

import math
import re
import xml.etree.ElementTree as ET
from pathlib import Path
from typing import Iterable

from anim_converter.animation.animation_data import (
    EULER_TRACKS,
    AnimationTrack,
    TrackType,
)
from anim_converter.animation.rotation import quat_to_euler_xyz
from anim_converter.errors import ExportError
from anim_converter.export.settings import ExportSettings
from anim_converter.scene.scene_graph import OutputBone, OutputScene

COLLADA_NAMESPACE = "http://www.collada.org/2005/11/COLLADASchema"

# Track type -> (transform sid, member, output param)
CHANNEL_TARGETS = {
    TrackType.POSITION_X: ("translate", "X", "X"),
    TrackType.POSITION_Y: ("translate", "Y", "Y"),
    TrackType.POSITION_Z: ("translate", "Z", "Z"),
    TrackType.SCALE_X: ("scale", "X", "X"),
    TrackType.SCALE_Y: ("scale", "Y", "Y"),
    TrackType.SCALE_Z: ("scale", "Z", "Z"),
    TrackType.ROTATION_EULER_X: ("rotationX", "ANGLE", "ANGLE"),
    TrackType.ROTATION_EULER_Y: ("rotationY", "ANGLE", "ANGLE"),
    TrackType.ROTATION_EULER_Z: ("rotationZ", "ANGLE", "ANGLE"),
}

_INVALID_ID_CHARS = re.compile(r"[^A-Za-z0-9_.\-]")


def _format_floats(values: Iterable[float]) -> str:
    return " ".join(format(float(v), ".9g") for v in values)


def sanitize_id(name: str) -> str:
    """Make a name usable as an XML id."""
    cleaned = _INVALID_ID_CHARS.sub("_", name) or "_"
    if not (cleaned[0].isalpha() or cleaned[0] == "_"):
        cleaned = f"_{cleaned}"
    return cleaned


def _assign_ids(bones: list[OutputBone], sanitize: bool) -> dict[OutputBone, str]:
    ids: dict[OutputBone, str] = {}
    used: set[str] = set()
    for bone in bones:
        base = sanitize_id(bone.name) if sanitize else bone.name
        candidate = base
        suffix = 1
        while candidate in used:
            candidate = f"{base}.{suffix:03d}"
            suffix += 1
        used.add(candidate)
        ids[bone] = candidate
    return ids


def _add_node(
    parent: ET.Element, bone: OutputBone, ids: dict[OutputBone, str]
) -> None:
    node = ET.SubElement(
        parent,
        "node",
        id=ids[bone],
        name=bone.name,
        sid=ids[bone],
        type="JOINT",
    )

    ET.SubElement(node, "translate", sid="translate").text = _format_floats(
        bone.translation
    )
    angle_x, angle_y, angle_z = (math.degrees(a) for a in quat_to_euler_xyz(bone.rotation))
    ET.SubElement(node, "rotate", sid="rotationZ").text = _format_floats(
        (0, 0, 1, angle_z)
    )
    ET.SubElement(node, "rotate", sid="rotationY").text = _format_floats(
        (0, 1, 0, angle_y)
    )
    ET.SubElement(node, "rotate", sid="rotationX").text = _format_floats(
        (1, 0, 0, angle_x)
    )
    ET.SubElement(node, "scale", sid="scale").text = _format_floats(bone.scale)

    for child in bone.children:
        _add_node(node, child, ids)


def _add_source(
    parent: ET.Element,
    source_id: str,
    values: list,
    param_name: str,
    param_type: str = "float",
) -> None:
    source = ET.SubElement(parent, "source", id=source_id)
    array_id = f"{source_id}-array"

    if param_type == "name":
        array = ET.SubElement(source, "Name_array", id=array_id, count=str(len(values)))
        array.text = " ".join(values)
    else:
        array = ET.SubElement(source, "float_array", id=array_id, count=str(len(values)))
        array.text = _format_floats(values)

    technique = ET.SubElement(source, "technique_common")
    accessor = ET.SubElement(
        technique, "accessor", source=f"#{array_id}", count=str(len(values)), stride="1"
    )
    ET.SubElement(accessor, "param", name=param_name, type=param_type)


def _add_channel_animation(
    library: ET.Element,
    animation_id: str,
    node_id: str,
    track: AnimationTrack,
    settings: ExportSettings,
) -> None:
    sid, member, param = CHANNEL_TARGETS[track.track_type]
    values = track.values
    if track.track_type in EULER_TRACKS:
        values = [math.degrees(v) for v in values]

    animation = ET.SubElement(library, "animation", id=animation_id)
    _add_source(
        animation,
        f"{animation_id}-input",
        [settings.frame_to_seconds(f) for f in track.frames],
        "TIME",
    )
    _add_source(animation, f"{animation_id}-output", values, param)
    _add_source(
        animation,
        f"{animation_id}-interpolation",
        ["LINEAR"] * len(track),
        "INTERPOLATION",
        param_type="name",
    )

    sampler = ET.SubElement(animation, "sampler", id=f"{animation_id}-sampler")
    for semantic, suffix in (
        ("INPUT", "input"),
        ("OUTPUT", "output"),
        ("INTERPOLATION", "interpolation"),
    ):
        ET.SubElement(
            sampler, "input", semantic=semantic, source=f"#{animation_id}-{suffix}"
        )

    ET.SubElement(
        animation,
        "channel",
        source=f"#{animation_id}-sampler",
        target=f"{node_id}/{sid}.{member}",
    )


def build_collada(scene: OutputScene, settings: ExportSettings) -> ET.ElementTree:
    """Convert a scene into a Collada document.

    Raises:
        ExportError: if a group carries quaternion rotations or targets an
            unknown bone
    """
    root = ET.Element("COLLADA", xmlns=COLLADA_NAMESPACE, version="1.4.1")

    asset = ET.SubElement(root, "asset")
    contributor = ET.SubElement(asset, "contributor")
    ET.SubElement(contributor, "authoring_tool").text = "anim-converter"
    ET.SubElement(asset, "unit", name="meter", meter="1")
    ET.SubElement(asset, "up_axis").text = "Y_UP"

    bones = list(scene.iter_bones())
    ids = _assign_ids(bones, settings.compatibility_mode)
    ids_by_name: dict[str, str] = {}
    for bone in bones:
        ids_by_name.setdefault(bone.name, ids[bone])

    if settings.export_animations and scene.animations:
        library = ET.SubElement(root, "library_animations")
        for clip in scene.animations:
            clip_id = sanitize_id(clip.name)
            for group in clip.groups:
                if group.has_quaternion_rotation:
                    raise ExportError(
                        f"Collada requires Euler rotations, group {group.name} "
                        "has quaternion tracks"
                    )
                node_id = ids_by_name.get(group.name)
                if node_id is None:
                    raise ExportError(f"Animation group {group.name} targets no bone")

                for track in group.tracks:
                    if len(track) == 0:
                        continue
                    animation_id = f"{clip_id}_{node_id}_{track.track_type.value}"
                    _add_channel_animation(library, animation_id, node_id, track, settings)

    visual_scenes = ET.SubElement(root, "library_visual_scenes")
    scene_id = sanitize_id(scene.name)
    visual_scene = ET.SubElement(visual_scenes, "visual_scene", id=scene_id, name=scene.name)
    for model in scene.models:
        for root_bone in model.skeleton.root_bones:
            _add_node(visual_scene, root_bone, ids)

    scene_element = ET.SubElement(root, "scene")
    ET.SubElement(scene_element, "instance_visual_scene", url=f"#{scene_id}")

    tree = ET.ElementTree(root)
    ET.indent(tree)
    return tree


def write_collada(scene: OutputScene, path: Path, settings: ExportSettings) -> None:
    """Write a scene as a .dae file."""
    tree = build_collada(scene, settings)
    tree.write(str(path), encoding="utf-8", xml_declaration=True)
