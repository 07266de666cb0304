# SPDX-License-Identifier: MIT
"""Scene exporters."""

from __future__ import annotations

from pathlib import Path

from anim_converter.errors import ExportError
from anim_converter.export.collada_writer import build_collada, write_collada
from anim_converter.export.gltf_writer import build_gltf, write_gltf
from anim_converter.export.settings import ExportFormat, ExportSettings
from anim_converter.scene.scene_graph import OutputScene

_WRITERS = {
    ".gltf": write_gltf,
    ".glb": write_gltf,
    ".dae": write_collada,
}


def export_scene(
    scene: OutputScene, path: Path, settings: ExportSettings | None = None
) -> None:
    """Write a scene to disk, choosing the writer from the file suffix.

    Raises:
        ExportError: if the suffix is not supported or the writer fails
    """
    path = Path(path)
    writer = _WRITERS.get(path.suffix.lower())
    if writer is None:
        raise ExportError(f"Unsupported export format: {path.suffix}")

    try:
        writer(scene, path, settings or ExportSettings())
    except ExportError:
        raise
    except Exception as e:
        raise ExportError(f"Failed to export {path}: {e}") from e


__all__ = [
    "ExportFormat",
    "ExportSettings",
    "build_collada",
    "build_gltf",
    "export_scene",
    "write_collada",
    "write_gltf",
]
