"""
Overlap Analysis Errors
Centralizes the exceptions raised by the analysis stages.
"""
from __future__ import annotations

from typing import Optional


class OverlapError(Exception):
    """Base exception for the overlap analysis."""
    pass


class GeometryError(OverlapError):
    """The frame geometry does not allow ordering frames into slices."""
    pass


class FramesNotParallel(GeometryError):
    """Image orientation is stored per frame, frames are probably not parallel."""
    pass


class AmbiguousAxis(GeometryError):
    """No single axis dominates the slice normal, slice ordering is undefined."""
    def __init__(self, message: str, normal: Optional[tuple[float, float, float]] = None):
        super().__init__(message)
        self.normal = normal


class MetadataError(OverlapError):
    """Required metadata is missing."""
    def __init__(self, message: str, frame_number: Optional[int] = None):
        super().__init__(message)
        self.frame_number = frame_number


class MetadataNotFound(MetadataError):
    """Orientation, position, slice thickness or segment reference not found."""
    pass


class ValidationError(OverlapError):
    """A segment number is not valid for the segmentation."""
    def __init__(
        self,
        message: str,
        segment_number: Optional[int] = None,
        frame_number: Optional[int] = None,
    ):
        super().__init__(message)
        self.segment_number = segment_number
        self.frame_number = frame_number


class InvalidReference(ValidationError):
    """A frame references segment number 0 (numbering is 1-based)."""
    pass


class SegmentNumberOutOfRange(ValidationError):
    """A segment number exceeds the number of segments."""
    pass


class CapacityError(OverlapError):
    """The number of frames exceeds the addressable range."""
    def __init__(self, message: str, frame_count: int):
        super().__init__(message)
        self.frame_count = frame_count


class ComparisonError(OverlapError):
    """Two frames could not be compared pixel by pixel."""
    def __init__(self, message: str, frames: tuple[int, int]):
        super().__init__(message)
        self.frames = frames


class LengthMismatch(ComparisonError):
    """The pixel buffers of two frames differ in length."""
    pass


class BufferUnavailable(ComparisonError):
    """The pixel buffer of a frame is missing or cannot be unpacked."""
    pass
