# SPDX-License-Identifier: MIT
"""Immutable skeleton model shared by every animation of a batch."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from anim_converter.errors import MalformedSkeleton, NoRootBone
from anim_converter.scene.transforms import Quaternion, Vector3, normalize_quaternion


@dataclass(frozen=True)
class Bone:
    """A named bone with its parent link and reference pose."""

    name: str
    parent_index: int  # -1 for a root
    reference_translation: Vector3
    reference_rotation: Quaternion  # unit quaternion (x, y, z, w)
    reference_scale: Vector3 = (1.0, 1.0, 1.0)

    @property
    def is_root(self) -> bool:
        return self.parent_index < 0


@dataclass(frozen=True)
class Skeleton:
    """Ordered bones; a bone's position is its id everywhere else."""

    bones: tuple[Bone, ...]

    @classmethod
    def build(
        cls,
        bone_names: Sequence[str],
        reference_pose: Sequence,
        parent_indices: Sequence[int],
    ) -> Skeleton:
        """Validate decoded skeleton arrays and build a Skeleton.

        Reference rotations are re-normalized since decoded quaternions are
        not guaranteed to be unit length. Reference scale is always
        (1, 1, 1).

        Args:
            bone_names: Bone names, one per bone
            reference_pose: Per-bone objects exposing ``translation`` and
                ``rotation`` (x, y, z, w)
            parent_indices: Parent bone index per bone, -1 for a root

        Returns:
            Skeleton

        Raises:
            MalformedSkeleton: misaligned arrays, parent out of range, or cycle
            NoRootBone: no bone has parent index -1
            DegenerateRotation: a reference rotation cannot be normalized
        """
        count = len(bone_names)
        if len(parent_indices) != count:
            raise MalformedSkeleton(
                f"Expected {count} parent indices, got {len(parent_indices)}"
            )
        if len(reference_pose) != count:
            raise MalformedSkeleton(
                f"Expected {count} reference transforms, got {len(reference_pose)}"
            )

        parents = [int(p) for p in parent_indices]
        for i, parent in enumerate(parents):
            if parent < -1 or parent >= count:
                raise MalformedSkeleton(
                    f"Bone {i} ({bone_names[i]}) has parent index {parent} "
                    f"outside [-1, {count})"
                )

        if -1 not in parents:
            raise NoRootBone("Skeleton has no bone with parent index -1")

        _check_acyclic(parents, bone_names)

        bones = []
        for i, name in enumerate(bone_names):
            pose = reference_pose[i]
            bones.append(
                Bone(
                    name=str(name),
                    parent_index=parents[i],
                    reference_translation=tuple(float(v) for v in pose.translation[:3]),
                    reference_rotation=normalize_quaternion(pose.rotation),
                )
            )

        return cls(bones=tuple(bones))

    def __len__(self) -> int:
        return len(self.bones)

    def __getitem__(self, index: int) -> Bone:
        return self.bones[index]

    @property
    def bone_names(self) -> list[str]:
        return [bone.name for bone in self.bones]

    @property
    def parent_indices(self) -> list[int]:
        return [bone.parent_index for bone in self.bones]

    @property
    def root_index(self) -> int:
        """Index of the first bone with parent index -1."""
        for i, bone in enumerate(self.bones):
            if bone.is_root:
                return i
        raise NoRootBone("Skeleton has no bone with parent index -1")

    @property
    def extra_root_indices(self) -> list[int]:
        """Roots after the first one; they are left out of the hierarchy."""
        roots = [i for i, bone in enumerate(self.bones) if bone.is_root]
        return roots[1:]

    @property
    def hierarchy_indices(self) -> frozenset[int]:
        """Bones below the first root, including the root itself."""
        root = self.root_index
        members = set()
        for start in range(len(self.bones)):
            node = start
            for _ in range(len(self.bones)):
                parent = self.bones[node].parent_index
                if parent < 0:
                    break
                node = parent
            if node == root:
                members.add(start)
        return frozenset(members)


def _check_acyclic(parents: list[int], names: Sequence[str]) -> None:
    # 0 = unvisited, 1 = on current chain, 2 = reaches a root
    state = [0] * len(parents)

    for start in range(len(parents)):
        chain = []
        node = start
        while node >= 0 and state[node] == 0:
            state[node] = 1
            chain.append(node)
            node = parents[node]

        if node >= 0 and state[node] == 1:
            raise MalformedSkeleton(
                f"Parent chain of bone {start} ({names[start]}) forms a cycle "
                f"through bone {node} ({names[node]})"
            )

        for visited in chain:
            state[visited] = 2
