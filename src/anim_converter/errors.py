# SPDX-License-Identifier: MIT
"""Error types raised while converting animations."""

from __future__ import annotations


class ConversionError(Exception):
    """Base class for all errors raised by the converter."""


class MalformedSkeleton(ConversionError):
    """Skeleton arrays are misaligned, out of range, or cyclic."""


class DegenerateRotation(ConversionError):
    """Quaternion with a zero or non-finite norm."""


class NoRootBone(ConversionError):
    """No bone has a parent index of -1."""


class EmptyBinding(ConversionError):
    """Animation binding maps no tracks."""


class IndexOutOfRange(ConversionError):
    """Binding references a bone or track that does not exist."""


class MalformedBinding(IndexOutOfRange):
    """Binding maps more than one track to the same bone."""


class MissingAnimation(ConversionError):
    """Decoded object set holds no animation."""


class MissingBinding(ConversionError):
    """Decoded object set holds no animation binding."""


class DecodeFailure(ConversionError):
    """The decoder could not read an input file."""


class ExportError(ConversionError):
    """The scene could not be written in the requested format."""
