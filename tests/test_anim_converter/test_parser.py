# SPDX-License-Identifier: MIT
"""Tests for the msgpack object-set decoder."""

import struct

import numpy as np
import pytest


class TestMsgpackDecoder:
    """Tests for msgpack decoder."""

    def test_decode_float32_array(self):
        """Test decoding Float32Array extension type."""
        from anim_converter.parser.msgpack_decoder import decode_typed_array

        # Create test float32 data
        floats = [1.0, 2.0, 3.0]
        data = struct.pack("<3f", *floats)

        result = decode_typed_array(0x17, data)  # EXT_FLOAT32_ARRAY

        assert len(result) == 3
        assert abs(result[0] - 1.0) < 1e-6
        assert abs(result[1] - 2.0) < 1e-6
        assert abs(result[2] - 3.0) < 1e-6

    def test_decode_int32_array(self):
        """Test decoding Int32Array extension type."""
        from anim_converter.parser.msgpack_decoder import decode_typed_array

        data = struct.pack("<3i", -1, 0, 1)

        result = decode_typed_array(0x15, data)  # EXT_INT32_ARRAY

        assert list(result) == [-1, 0, 1]

    def test_unknown_extension_returns_bytes(self):
        """Test that unknown extension codes are left as raw bytes."""
        from anim_converter.parser.msgpack_decoder import decode_typed_array

        assert decode_typed_array(0x01, b"\x00\x01") == b"\x00\x01"

    def test_encode_numpy_arrays(self):
        """Test that numpy arrays are packed as typed arrays."""
        from anim_converter.parser.msgpack_decoder import decode_msgpack, encode_msgpack

        packed = encode_msgpack({"values": np.array([1.5, 2.5], dtype=np.float32)})
        decoded = decode_msgpack(packed)

        assert decoded["values"].dtype == np.float32
        assert list(decoded["values"]) == [1.5, 2.5]

    def test_encode_unsupported_dtype(self):
        """Test rejecting arrays without a typed array extension."""
        from anim_converter.parser.msgpack_decoder import encode_msgpack

        with pytest.raises(TypeError):
            encode_msgpack(np.array([1.0], dtype=np.float64))


class TestObjectSet:
    """Tests for decoding object-set dumps."""

    def test_decode_plain_lists(self, tmp_path):
        """Test a dump written with plain msgpack lists."""
        import msgpack

        from anim_converter.parser.object_set import (
            DecodedAnimation,
            DecodedBinding,
            DecodedSkeleton,
            MsgpackObjectDecoder,
            UnknownObject,
        )

        identity = [0, 0, 0, 0, 0, 0, 1, 1, 1, 1]
        objects = [
            {"type": "metadata", "tool": "dump"},
            {
                "type": "skeleton",
                "bones": ["Root", "Child"],
                "parent_indices": [-1, 0],
                "reference_pose": identity + [1, 0, 0, 0, 0, 0, 2, 1, 1, 1],
            },
            {"type": "animation", "num_tracks": 1, "frames": identity * 3},
            {"type": "binding", "transform_track_to_bone_indices": [1]},
        ]
        path = tmp_path / "dump.anmb"
        path.write_bytes(msgpack.packb(objects))

        decoded = MsgpackObjectDecoder().read_objects(path)

        assert isinstance(decoded[0], UnknownObject)
        assert decoded[0].type == "metadata"
        assert isinstance(decoded[1], DecodedSkeleton)
        assert isinstance(decoded[2], DecodedAnimation)
        assert isinstance(decoded[3], DecodedBinding)

        skeleton = decoded[1].to_skeleton()
        assert skeleton.bone_names == ["Root", "Child"]
        assert skeleton[1].reference_translation == (1.0, 0.0, 0.0)
        # (0, 0, 0, 2) is normalized
        assert skeleton[1].reference_rotation == (0.0, 0.0, 0.0, 1.0)

        assert decoded[2].is_frame_major
        assert len(decoded[2].fetch_all_tracks()) == 3
        assert decoded[3].to_binding().track_to_bone == (1,)

    def test_encode_decode_dump(self, tmp_path):
        """Test writing a dump with typed arrays and reading it back."""
        from anim_converter.parser.object_set import (
            DecodedAnimation,
            DecodedBinding,
            DecodedSkeleton,
            MsgpackObjectDecoder,
            encode_object_set,
            first_of_type,
        )
        from anim_converter.scene.transforms import FrameTransform

        t = FrameTransform((1.0, 2.0, 3.0), (0.0, 0.0, 0.0, 1.0), (1.0, 1.0, 1.0))
        objects = [
            DecodedSkeleton(["Root"], [-1], [FrameTransform.identity()]),
            DecodedAnimation(num_tracks=1, tracks=[[t, t]]),
            DecodedBinding([0]),
        ]
        path = tmp_path / "dump.anmb"
        path.write_bytes(encode_object_set(objects))

        decoded = MsgpackObjectDecoder().read_objects(path)
        animation = first_of_type(decoded, DecodedAnimation)

        assert not animation.is_frame_major
        assert animation.fetch_all_tracks() == [[t, t]]
        assert first_of_type(decoded, DecodedBinding).transform_track_to_bone_indices == [0]

    def test_padded_animation_rows(self, tmp_path):
        """Test frame data stored with 12 floats per transform."""
        import msgpack

        from anim_converter.parser.object_set import MsgpackObjectDecoder

        row = [1, 2, 3, 0, 0, 0, 0, 1, 1, 1, 1, 0]
        objects = {
            "objects": [
                {"type": "animation", "num_tracks": 2, "transform_size": 12, "frames": row * 4}
            ]
        }
        path = tmp_path / "dump.anmb"
        path.write_bytes(msgpack.packb(objects))

        (animation,) = MsgpackObjectDecoder().read_objects(path)

        frames = animation.fetch_all_tracks()
        assert len(frames) == 2
        assert len(frames[0]) == 2
        assert frames[1][1].translation == (1.0, 2.0, 3.0)

    def test_corrupt_file(self, tmp_path):
        """Test that unreadable data raises DecodeFailure."""
        from anim_converter.errors import DecodeFailure
        from anim_converter.parser.object_set import MsgpackObjectDecoder

        path = tmp_path / "broken.anmb"
        path.write_bytes(b"\xc1\xc1\xc1")

        with pytest.raises(DecodeFailure):
            MsgpackObjectDecoder().read_objects(path)

        with pytest.raises(DecodeFailure):
            MsgpackObjectDecoder().read_objects(tmp_path / "missing.anmb")

    def test_frames_not_divisible_by_tracks(self, tmp_path):
        """Test frame data that does not split evenly into tracks."""
        import msgpack

        from anim_converter.errors import DecodeFailure
        from anim_converter.parser.object_set import MsgpackObjectDecoder

        identity = [0, 0, 0, 0, 0, 0, 1, 1, 1, 1]
        path = tmp_path / "dump.anmb"
        path.write_bytes(
            msgpack.packb([{"type": "animation", "num_tracks": 2, "frames": identity * 3}])
        )

        with pytest.raises(DecodeFailure):
            MsgpackObjectDecoder().read_objects(path)

    def test_load_skeleton(self, tmp_path):
        """Test loading the first skeleton of a dump."""
        from anim_converter.errors import DecodeFailure
        from anim_converter.parser.object_set import (
            DecodedBinding,
            DecodedSkeleton,
            MsgpackObjectDecoder,
            encode_object_set,
            load_skeleton,
        )
        from anim_converter.scene.transforms import FrameTransform

        path = tmp_path / "body.skl"
        path.write_bytes(
            encode_object_set([DecodedSkeleton(["Hips"], [-1], [FrameTransform.identity()])])
        )
        skeleton = load_skeleton(path, MsgpackObjectDecoder())
        assert skeleton.bone_names == ["Hips"]

        empty = tmp_path / "empty.skl"
        empty.write_bytes(encode_object_set([DecodedBinding([0])]))
        with pytest.raises(DecodeFailure):
            load_skeleton(empty, MsgpackObjectDecoder())
