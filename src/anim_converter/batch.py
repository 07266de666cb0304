# SPDX-License-Identifier: MIT
"""Convert many animation files against one skeleton."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable

from tqdm import tqdm

from anim_converter.animation.assembler import assemble_scene
from anim_converter.animation.sampler import TransformSampler
from anim_converter.errors import (
    ConversionError,
    DecodeFailure,
    ExportError,
    MissingAnimation,
    MissingBinding,
)
from anim_converter.export import export_scene
from anim_converter.export.settings import ExportFormat, ExportSettings
from anim_converter.parser.object_set import (
    DecodedAnimation,
    DecodedBinding,
    Decoder,
    first_of_type,
)
from anim_converter.scene.scene_graph import OutputScene
from anim_converter.scene.skeleton import Skeleton

DEFAULT_PATTERN = "*.anmb"

Exporter = Callable[[OutputScene, Path, ExportSettings], None]


@dataclass
class ItemResult:
    """Outcome of converting one animation file."""

    input_path: Path
    output_path: Path | None = None
    error: ConversionError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class BatchReport:
    """Per-item results in input order."""

    results: list[ItemResult] = field(default_factory=list)

    @property
    def succeeded(self) -> list[ItemResult]:
        return [r for r in self.results if r.ok]

    @property
    def failed(self) -> list[ItemResult]:
        return [r for r in self.results if not r.ok]


def find_animation_files(path: Path, pattern: str = DEFAULT_PATTERN) -> list[Path]:
    """Return the file itself, or every file matching pattern below a directory."""
    path = Path(path)
    if path.is_dir():
        return sorted(p for p in path.rglob(pattern) if p.is_file())
    return [path]


def output_path_for(
    animation_path: Path,
    input_root: Path | None,
    output_root: Path | None,
    extension: str,
) -> Path:
    """Derive where an animation's export goes.

    Without an output root the file lands next to the animation. With one,
    the animation's directory relative to the input root is recreated below
    the output root.
    """
    animation_path = Path(animation_path)
    file_name = f"{animation_path.stem}{extension}"

    if output_root is None:
        return animation_path.parent / file_name

    output_dir = Path(output_root)
    if input_root is not None:
        relative = Path(os.path.relpath(animation_path.parent, input_root))
        if relative != Path("."):
            output_dir = output_dir / relative

    return output_dir / file_name


class BatchDriver:
    """Runs the scene assembler over a set of animation files.

    The skeleton is loaded once by the caller and shared read-only by every
    item. A failing item is reported and skipped; the batch carries on.
    """

    def __init__(
        self,
        skeleton: Skeleton,
        decoder: Decoder,
        *,
        export_format: ExportFormat = ExportFormat.GLTF,
        settings: ExportSettings | None = None,
        exporter: Exporter = export_scene,
        show_progress: bool = True,
    ):
        self._skeleton = skeleton
        self._decoder = decoder
        self._export_format = export_format
        self._settings = settings or ExportSettings()
        self._exporter = exporter
        self._show_progress = show_progress

    def build_scene(self, animation_path: Path) -> OutputScene:
        """Decode one animation file and assemble its scene.

        Raises:
            DecodeFailure: the decoder failed
            MissingAnimation: no animation object in the file
            MissingBinding: no animation binding object in the file
            ConversionError: any structural error from the assembler
        """
        try:
            objects = self._decoder.read_objects(animation_path)
        except DecodeFailure:
            raise
        except Exception as e:
            raise DecodeFailure(f"Failed to decode {animation_path}: {e}") from e

        animation = first_of_type(objects, DecodedAnimation)
        if animation is None:
            raise MissingAnimation(f"No animation found in {animation_path}")
        animation.bind(self._skeleton)

        binding = first_of_type(objects, DecodedBinding)
        if binding is None:
            raise MissingBinding(f"No animation binding found in {animation_path}")

        if animation.is_frame_major:
            sampler = TransformSampler.from_frame_major(animation.fetch_all_tracks())
        else:
            sampler = TransformSampler.from_track_major(animation.fetch_all_tracks())

        return assemble_scene(
            self._skeleton,
            binding.to_binding(),
            sampler,
            self._export_format.rotation_mode,
            Path(animation_path).stem,
        )

    def process(
        self,
        animation_path: Path,
        input_root: Path | None = None,
        output_root: Path | None = None,
    ) -> ItemResult:
        """Convert and export one file, capturing any failure in the result."""
        animation_path = Path(animation_path)
        result = ItemResult(input_path=animation_path)

        try:
            scene = self.build_scene(animation_path)

            output_path = output_path_for(
                animation_path, input_root, output_root, self._export_format.extension
            )
            output_path.parent.mkdir(parents=True, exist_ok=True)

            try:
                self._exporter(scene, output_path, self._settings)
            except ConversionError:
                raise
            except Exception as e:
                raise ExportError(f"Failed to export {output_path}: {e}") from e

            result.output_path = output_path
        except ConversionError as e:
            result.error = e
        except OSError as e:
            result.error = ExportError(f"Cannot write output for {animation_path}: {e}")

        return result

    def run(
        self,
        animation_paths: list[Path],
        input_root: Path | None = None,
        output_root: Path | None = None,
    ) -> BatchReport:
        """Convert every file in order and report per-item outcomes."""
        report = BatchReport()

        for index in self._skeleton.extra_root_indices:
            tqdm.write(
                f"Warning: Bone {self._skeleton[index].name} is an additional root "
                "and will not be exported"
            )

        progress = tqdm(
            animation_paths,
            desc="Converting",
            unit="file",
            disable=not self._show_progress or len(animation_paths) < 2,
        )
        for animation_path in progress:
            tqdm.write(f"Processing: {animation_path}")
            result = self.process(animation_path, input_root, output_root)

            if result.ok:
                tqdm.write(f"  Exported: {result.output_path}")
            elif isinstance(result.error, (MissingAnimation, MissingBinding)):
                tqdm.write(f"  Warning: {result.error}")
            else:
                tqdm.write(f"  Error processing {animation_path}: {result.error}")

            report.results.append(result)

        return report
