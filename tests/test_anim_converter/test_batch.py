# SPDX-License-Identifier: MIT
"""Tests for the batch driver and command-line interface."""

from pathlib import Path

import pytest


def _write_skeleton(path):
    from anim_converter.parser.object_set import DecodedSkeleton, encode_object_set
    from anim_converter.scene.transforms import FrameTransform

    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(
        encode_object_set(
            [
                DecodedSkeleton(
                    ["Root", "Child"],
                    [-1, 0],
                    [FrameTransform.identity(), FrameTransform.identity()],
                )
            ]
        )
    )
    return path


def _write_animation(path, *, animation=True, binding=True, frame_count=2):
    from anim_converter.parser.object_set import (
        DecodedAnimation,
        DecodedBinding,
        encode_object_set,
    )
    from anim_converter.scene.transforms import FrameTransform

    frames = [
        [FrameTransform((float(f), 0.0, 0.0), (0.0, 0.0, 0.0, 1.0), (1.0, 1.0, 1.0))]
        for f in range(frame_count)
    ]
    objects = []
    if animation:
        objects.append(DecodedAnimation(num_tracks=1, frames=frames))
    if binding:
        objects.append(DecodedBinding([1]))

    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(encode_object_set(objects))
    return path


def _load_skeleton(path):
    from anim_converter.parser.object_set import MsgpackObjectDecoder, load_skeleton

    return load_skeleton(path, MsgpackObjectDecoder())


class RecordingExporter:
    """Exporter stand-in that records every call."""

    def __init__(self):
        self.calls = []

    def __call__(self, scene, path, settings):
        self.calls.append((scene, Path(path), settings))


class TestOutputPath:
    """Tests for output path derivation."""

    def test_default_next_to_input(self):
        """Test output lands beside the animation without an output root."""
        from anim_converter.batch import output_path_for

        result = output_path_for(Path("in/sub/walk.anmb"), Path("in"), None, ".gltf")

        assert result == Path("in/sub/walk.gltf")

    def test_mirrors_relative_directories(self):
        """Test the input's relative folder is recreated under the output root."""
        from anim_converter.batch import output_path_for

        result = output_path_for(
            Path("in/a/b/walk.anmb"), Path("in"), Path("out"), ".dae"
        )

        assert result == Path("out/a/b/walk.dae")

    def test_file_at_input_root(self):
        """Test a file directly inside the input root."""
        from anim_converter.batch import output_path_for

        result = output_path_for(Path("in/walk.anmb"), Path("in"), Path("out"), ".gltf")

        assert result == Path("out/walk.gltf")


class TestFindAnimationFiles:
    """Tests for recursive animation discovery."""

    def test_recursive_search(self, tmp_path):
        """Test matching files in nested folders."""
        from anim_converter.batch import find_animation_files

        (tmp_path / "a" / "b").mkdir(parents=True)
        (tmp_path / "one.anmb").write_bytes(b"")
        (tmp_path / "a" / "b" / "two.anmb").write_bytes(b"")
        (tmp_path / "a" / "notes.txt").write_text("skip")

        found = find_animation_files(tmp_path)

        assert found == sorted([tmp_path / "a" / "b" / "two.anmb", tmp_path / "one.anmb"])

    def test_single_file(self, tmp_path):
        """Test that a file path is returned as is."""
        from anim_converter.batch import find_animation_files

        path = tmp_path / "walk.anmb"
        path.write_bytes(b"")

        assert find_animation_files(path) == [path]


class TestBatchDriver:
    """Tests for BatchDriver."""

    def test_converts_every_file(self, tmp_path):
        """Test scenes are built and exported with mirrored paths."""
        from anim_converter.batch import BatchDriver
        from anim_converter.export.settings import ExportFormat
        from anim_converter.parser.object_set import MsgpackObjectDecoder

        skeleton = _load_skeleton(_write_skeleton(tmp_path / "body.skl"))
        first = _write_animation(tmp_path / "in" / "walk.anmb")
        second = _write_animation(tmp_path / "in" / "combat" / "punch.anmb", frame_count=4)
        exporter = RecordingExporter()

        driver = BatchDriver(
            skeleton,
            MsgpackObjectDecoder(),
            export_format=ExportFormat.DAE,
            exporter=exporter,
            show_progress=False,
        )
        report = driver.run([first, second], tmp_path / "in", tmp_path / "out")

        assert len(report.succeeded) == 2
        assert [call[1] for call in exporter.calls] == [
            tmp_path / "out" / "walk.dae",
            tmp_path / "out" / "combat" / "punch.dae",
        ]
        assert (tmp_path / "out" / "combat").is_dir()

        scene = exporter.calls[1][0]
        clip = scene.animations[0]
        assert clip.name == "punch"
        assert clip.frame_count == 4
        assert clip.groups[0].name == "Child"
        assert clip.groups[0].has_euler_rotation

    def test_failures_do_not_stop_batch(self, tmp_path, capsys):
        """Test that failing items are reported and skipped."""
        from anim_converter.batch import BatchDriver
        from anim_converter.errors import DecodeFailure, MissingAnimation, MissingBinding
        from anim_converter.parser.object_set import MsgpackObjectDecoder

        skeleton = _load_skeleton(_write_skeleton(tmp_path / "body.skl"))
        no_animation = _write_animation(tmp_path / "a.anmb", animation=False)
        no_binding = _write_animation(tmp_path / "b.anmb", binding=False)
        broken = tmp_path / "c.anmb"
        broken.write_bytes(b"\xc1")
        good = _write_animation(tmp_path / "d.anmb")
        exporter = RecordingExporter()

        driver = BatchDriver(
            skeleton, MsgpackObjectDecoder(), exporter=exporter, show_progress=False
        )
        report = driver.run([no_animation, no_binding, broken, good], tmp_path)

        assert [r.input_path for r in report.results] == [
            no_animation,
            no_binding,
            broken,
            good,
        ]
        assert isinstance(report.results[0].error, MissingAnimation)
        assert isinstance(report.results[1].error, MissingBinding)
        assert isinstance(report.results[2].error, DecodeFailure)
        assert report.results[3].ok
        assert report.results[3].output_path == tmp_path / "d.gltf"
        assert len(exporter.calls) == 1

        out = capsys.readouterr().out
        assert out.index("a.anmb") < out.index("b.anmb") < out.index("d.anmb")
        assert "Exported:" in out

    def test_exporter_failure_is_captured(self, tmp_path):
        """Test that an exporter exception becomes an ExportError result."""
        from anim_converter.batch import BatchDriver
        from anim_converter.errors import ExportError
        from anim_converter.parser.object_set import MsgpackObjectDecoder

        def failing_exporter(scene, path, settings):
            raise RuntimeError("disk full")

        skeleton = _load_skeleton(_write_skeleton(tmp_path / "body.skl"))
        path = _write_animation(tmp_path / "walk.anmb")

        driver = BatchDriver(
            skeleton, MsgpackObjectDecoder(), exporter=failing_exporter, show_progress=False
        )
        result = driver.process(path)

        assert isinstance(result.error, ExportError)
        assert "disk full" in str(result.error)

    def test_structural_error_is_captured(self, tmp_path):
        """Test that assembler errors fail only the current item."""
        from anim_converter.batch import BatchDriver
        from anim_converter.errors import IndexOutOfRange
        from anim_converter.parser.object_set import (
            DecodedAnimation,
            DecodedBinding,
            MsgpackObjectDecoder,
            encode_object_set,
        )
        from anim_converter.scene.transforms import FrameTransform

        skeleton = _load_skeleton(_write_skeleton(tmp_path / "body.skl"))
        path = tmp_path / "bad.anmb"
        path.write_bytes(
            encode_object_set(
                [
                    DecodedAnimation(num_tracks=1, frames=[[FrameTransform.identity()]]),
                    DecodedBinding([7]),
                ]
            )
        )

        driver = BatchDriver(
            skeleton, MsgpackObjectDecoder(), exporter=RecordingExporter(), show_progress=False
        )
        result = driver.process(path)

        assert isinstance(result.error, IndexOutOfRange)

    def test_additional_root_warned_once(self, tmp_path, capsys):
        """Test that each extra root is reported once per batch."""
        from anim_converter.batch import BatchDriver
        from anim_converter.parser.object_set import MsgpackObjectDecoder
        from anim_converter.scene.skeleton import Skeleton
        from anim_converter.scene.transforms import FrameTransform

        skeleton = Skeleton.build(
            ["Root", "Child", "Prop"],
            [FrameTransform.identity()] * 3,
            [-1, 0, -1],
        )
        paths = [
            _write_animation(tmp_path / "walk.anmb"),
            _write_animation(tmp_path / "run.anmb"),
        ]

        driver = BatchDriver(
            skeleton, MsgpackObjectDecoder(), exporter=RecordingExporter(), show_progress=False
        )
        report = driver.run(paths, tmp_path)

        assert len(report.succeeded) == 2
        out = capsys.readouterr().out
        assert out.count("Warning: Bone Prop is an additional root") == 1


class TestCli:
    """Tests for the command-line interface."""

    def test_convert_directory_to_gltf(self, tmp_path):
        """Test a full run writing glTF files into a mirrored tree."""
        from anim_converter.cli import main

        skeleton = _write_skeleton(tmp_path / "body.skl")
        _write_animation(tmp_path / "in" / "walk.anmb")
        _write_animation(tmp_path / "in" / "sub" / "run.anmb")

        code = main(
            [str(skeleton), str(tmp_path / "in"), "-o", str(tmp_path / "out"), "--no-progress"]
        )

        assert code == 0
        assert (tmp_path / "out" / "walk.gltf").is_file()
        assert (tmp_path / "out" / "sub" / "run.gltf").is_file()

    def test_convert_single_file_to_dae(self, tmp_path):
        """Test the default output folder and the -dae flag."""
        from anim_converter.cli import main

        skeleton = _write_skeleton(tmp_path / "body.skl")
        animation = _write_animation(tmp_path / "anims" / "walk.anmb")

        code = main([str(skeleton), str(animation), "-dae"])

        assert code == 0
        assert (tmp_path / "anims" / "walk.dae").is_file()

    def test_missing_skeleton(self, tmp_path, capsys):
        """Test that a missing skeleton stops the run."""
        from anim_converter.cli import main

        code = main([str(tmp_path / "none.skl"), str(tmp_path)])

        assert code == 1
        assert "Skeleton file not found" in capsys.readouterr().err

    def test_no_animation_files(self, tmp_path, capsys):
        """Test that an empty folder stops the run."""
        from anim_converter.cli import main

        skeleton = _write_skeleton(tmp_path / "body.skl")
        (tmp_path / "empty").mkdir()

        code = main([str(skeleton), str(tmp_path / "empty")])

        assert code == 1
        assert "No animation files found" in capsys.readouterr().err

    def test_format_flags_are_exclusive(self, tmp_path):
        """Test that -gltf and -dae cannot be combined."""
        from anim_converter.cli import main

        with pytest.raises(SystemExit):
            main([str(tmp_path / "a.skl"), str(tmp_path), "-gltf", "-dae"])
