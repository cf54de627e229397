"""
Segmentation Source
===================
This module defines the read-only view of a multi-frame segmentation that the
overlap analysis consumes.

Why is this file needed?
------------------------
1. Decoupling: Parsing the segmentation container and decoding its functional
   groups happens elsewhere. The analysis only talks to `SegmentationSource`.
2. Testing & Embedding: `InMemorySegmentation` holds all frame metadata and
   packed pixel data in plain Python/NumPy objects, so callers (and tests) can
   feed the analysis without any file format.

Classes:
    SegmentationSource: Protocol with the accessors the analysis needs.
    FrameRecord: Per-frame metadata and packed pixel data.
    InMemorySegmentation: Protocol implementation backed by FrameRecords.
"""
from __future__ import annotations

from dataclasses import dataclass, field
import logging
from typing import Optional, Protocol, Sequence, TYPE_CHECKING

import numpy as np

if TYPE_CHECKING:
    import numpy.typing as npt

logger = logging.getLogger(__name__)

Cosines = tuple[float, float, float, float, float, float]
Coordinates = tuple[float, float, float]


class SegmentationSource(Protocol):
    """
    Accessors of a binary segmentation object. Missing metadata or pixel data
    is reported by returning None.
    """
    def segment_count(self) -> int: ...
    def frame_count(self) -> int: ...
    def orientation_of(self, frame_number: int) -> Optional[tuple[Cosines, bool]]: ...
    def position_of(self, frame_number: int) -> Optional[Coordinates]: ...
    def slice_thickness(self) -> Optional[float]: ...
    def referenced_segment_of(self, frame_number: int) -> Optional[int]: ...
    def pixel_buffer_of(self, frame_number: int) -> Optional[bytes]: ...
    def frame_dimensions(self) -> tuple[int, int]: ...


def pack_binary_frame(mask: npt.ArrayLike) -> bytes:
    """
    Pack a 2D mask into one bit per pixel, row-major, least significant bit first.

    Args:
        mask: Array of shape (rows, cols); every nonzero value is foreground.

    Returns:
        The packed frame, ceil(rows * cols / 8) bytes long.
    """
    flat = np.asarray(mask).astype(bool).ravel()
    return np.packbits(flat, bitorder="little").tobytes()


def unpack_binary_frame(data: Optional[bytes], rows: int, cols: int) -> Optional[npt.NDArray[np.uint8]]:
    """
    Unpack a binary frame into one byte (0 or 1) per pixel.

    Returns:
        Flat array of length rows * cols, or None if the buffer is missing or
        too short to hold rows * cols bits.
    """
    num_pixels = rows * cols
    if data is None or len(data) * 8 < num_pixels:
        return None
    packed = np.frombuffer(data, dtype=np.uint8)
    return np.unpackbits(packed, count=num_pixels, bitorder="little")


@dataclass
class FrameRecord:
    """Metadata and pixel data of a single physical frame."""
    position: Optional[Coordinates]
    segment_number: Optional[int]
    pixels: Optional[bytes]


@dataclass
class InMemorySegmentation:
    """
    Segmentation held completely in memory.

    Orientation and slice thickness are shared by all frames; set
    `orientation_per_frame` to emulate a per-frame Plane Orientation
    functional group.
    """
    rows: int
    cols: int
    number_of_segments: int
    orientation: Optional[Cosines] = (1.0, 0.0, 0.0, 0.0, 1.0, 0.0)
    orientation_per_frame: bool = False
    thickness: Optional[float] = 1.0
    frames: list[FrameRecord] = field(default_factory=list)

    @classmethod
    def from_masks(
        cls,
        masks: Sequence[npt.ArrayLike],
        positions: Sequence[Optional[Coordinates]],
        segment_numbers: Sequence[Optional[int]],
        number_of_segments: Optional[int] = None,
        **kwargs,
    ) -> InMemorySegmentation:
        """
        Build a segmentation from unpacked 2D masks.

        Args:
            masks: One (rows, cols) mask per frame.
            positions: Image Position (Patient) per frame.
            segment_numbers: Referenced segment number per frame.
            number_of_segments: Defaults to the largest referenced segment number.
            **kwargs: Passed on to the constructor (orientation, thickness, ...).
        """
        if not (len(masks) == len(positions) == len(segment_numbers)):
            raise ValueError(
                f"Got {len(masks)} masks, {len(positions)} positions and "
                f"{len(segment_numbers)} segment numbers, counts must match."
            )
        shapes = {np.shape(m) for m in masks}
        if len(shapes) > 1:
            raise ValueError(f"All masks must have the same shape, got {sorted(shapes)}")
        rows, cols = shapes.pop() if shapes else (0, 0)

        if number_of_segments is None:
            number_of_segments = max((s for s in segment_numbers if s is not None), default=0)

        frames = [
            FrameRecord(
                position=tuple(float(c) for c in pos) if pos is not None else None,
                segment_number=seg,
                pixels=pack_binary_frame(mask),
            )
            for mask, pos, seg in zip(masks, positions, segment_numbers)
        ]
        logger.debug(f"Created in-memory segmentation with {len(frames)} frames of {rows}x{cols} pixels")
        return cls(rows=rows, cols=cols, number_of_segments=number_of_segments, frames=frames, **kwargs)

    def segment_count(self) -> int:
        return self.number_of_segments

    def frame_count(self) -> int:
        return len(self.frames)

    def orientation_of(self, frame_number: int) -> Optional[tuple[Cosines, bool]]:
        if self.orientation is None:
            return None
        return self.orientation, self.orientation_per_frame

    def position_of(self, frame_number: int) -> Optional[Coordinates]:
        return self.frames[frame_number].position

    def slice_thickness(self) -> Optional[float]:
        return self.thickness

    def referenced_segment_of(self, frame_number: int) -> Optional[int]:
        return self.frames[frame_number].segment_number

    def pixel_buffer_of(self, frame_number: int) -> Optional[bytes]:
        return self.frames[frame_number].pixels

    def frame_dimensions(self) -> tuple[int, int]:
        return self.rows, self.cols
