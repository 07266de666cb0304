# SPDX-License-Identifier: MIT
"""Output scene graph handed to the exporters."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Iterator

from anim_converter.scene.transforms import Quaternion, Vector3

if TYPE_CHECKING:
    from anim_converter.animation.animation_data import AnimationClip


@dataclass(eq=False)
class OutputBone:
    """A bone node in the exported hierarchy."""

    name: str
    translation: Vector3 = (0.0, 0.0, 0.0)
    rotation: Quaternion = (0.0, 0.0, 0.0, 1.0)  # Quaternion (x,y,z,w)
    scale: Vector3 = (1.0, 1.0, 1.0)
    parent: OutputBone | None = field(default=None, repr=False)
    children: list[OutputBone] = field(default_factory=list, repr=False)

    def set_parent(self, parent: OutputBone) -> None:
        """Attach this bone to a parent's child list."""
        if self.parent is not None:
            self.parent.children.remove(self)
        self.parent = parent
        parent.children.append(self)

    def iter_subtree(self) -> Iterator[OutputBone]:
        """Yield this bone and its descendants depth-first, parents first."""
        stack = [self]
        while stack:
            bone = stack.pop()
            yield bone
            stack.extend(reversed(bone.children))


@dataclass
class OutputSkeleton:
    """Owns the root bones of the hierarchy."""

    root_bones: list[OutputBone] = field(default_factory=list)

    def iter_bones(self) -> Iterator[OutputBone]:
        for root in self.root_bones:
            yield from root.iter_subtree()


@dataclass
class OutputModel:
    """A model carrying a skeleton; meshes stay empty for animation exports."""

    name: str
    skeleton: OutputSkeleton = field(default_factory=OutputSkeleton)
    meshes: list = field(default_factory=list)


@dataclass
class OutputScene:
    """Complete scene: bone hierarchy plus animation clips."""

    name: str = "Scene"
    models: list[OutputModel] = field(default_factory=list)
    animations: list[AnimationClip] = field(default_factory=list)

    def iter_bones(self) -> Iterator[OutputBone]:
        for model in self.models:
            yield from model.skeleton.iter_bones()
