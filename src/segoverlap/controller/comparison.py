from __future__ import annotations

from abc import ABC, abstractmethod
import logging
from typing import Optional, TYPE_CHECKING

import numpy as np

from segoverlap.model.errors import BufferUnavailable, LengthMismatch
from segoverlap.model.segmentation import unpack_binary_frame

if TYPE_CHECKING:
    from segoverlap.model.segmentation import SegmentationSource

logger = logging.getLogger(__name__)


def is_byte_aligned(rows: int, cols: int) -> bool:
    """True if a binary frame of rows x cols pixels fills whole bytes."""
    return (rows * cols) % 8 == 0


class FrameComparator(ABC):
    """
    Abstract base class for checking two binary frames for a shared foreground pixel.
    """

    def __init__(self, rows: int, cols: int) -> None:
        """
        Args:
            rows: Number of pixel rows of every frame.
            cols: Number of pixel columns of every frame.
        """
        self.rows = rows
        self.cols = cols

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(rows={self.rows}, cols={self.cols})"

    @abstractmethod
    def frames_overlap(
        self,
        f1: int,
        f2: int,
        f1_data: Optional[bytes],
        f2_data: Optional[bytes],
    ) -> bool:
        """Compare the packed pixel data of frames f1 and f2."""
        pass


class BinaryFrameComparator(FrameComparator):
    """
    Fast mode: compare 8 pixels at once with a bitwise AND of the packed bytes.
    Only valid if rows * cols is a multiple of 8.
    """

    def frames_overlap(self, f1, f2, f1_data, f2_data) -> bool:
        logger.debug(f"Comparing frames {f1} and {f2} for overlap (fast binary mode)")
        if f1_data is None or f2_data is None:
            msg = f"Cannot access binary frames {f1} and {f2} for comparison"
            logger.error(msg)
            raise BufferUnavailable(msg, frames=(f1, f2))
        if len(f1_data) != len(f2_data):
            msg = f"Frames {f1} and {f2} have different length, cannot compare"
            logger.error(msg)
            raise LengthMismatch(msg, frames=(f1, f2))

        a = np.frombuffer(f1_data, dtype=np.uint8)
        b = np.frombuffer(f2_data, dtype=np.uint8)
        hits = np.flatnonzero(a & b)
        if hits.size:
            logger.debug(f"Frames {f1} and {f2} do overlap, first shared byte at index {hits[0]}")
            return True
        return False


class UnpackedFrameComparator(FrameComparator):
    """
    Slow mode: unpack both frames to one byte per pixel and compare pixel by pixel.
    Used when frames do not end on a byte boundary.
    """

    def frames_overlap(self, f1, f2, f1_data, f2_data) -> bool:
        logger.debug(f"Comparing frames {f1} and {f2} for overlap (slow unpacked mode)")
        f1_unpacked = unpack_binary_frame(f1_data, self.rows, self.cols)
        f2_unpacked = unpack_binary_frame(f2_data, self.rows, self.cols)
        if f1_unpacked is None or f2_unpacked is None:
            msg = f"Cannot unpack frames {f1} and {f2} for comparison"
            logger.error(msg)
            raise BufferUnavailable(msg, frames=(f1, f2))

        hits = np.flatnonzero((f1_unpacked != 0) & (f1_unpacked == f2_unpacked))
        if hits.size:
            logger.debug(f"Frames {f1} and {f2} do overlap, first shared pixel at index {hits[0]}")
            return True
        return False


def select_comparator(rows: int, cols: int) -> FrameComparator:
    """Pick the comparison strategy for frames of the given dimensions."""
    if is_byte_aligned(rows, cols):
        return BinaryFrameComparator(rows, cols)
    return UnpackedFrameComparator(rows, cols)


def check_frames_overlap(
    source: SegmentationSource,
    f1: int,
    f2: int,
    comparator: Optional[FrameComparator] = None,
) -> bool:
    """
    Check whether two physical frames share at least one foreground pixel.

    The same frame never overlaps with itself.

    Args:
        source: The segmentation providing the pixel data.
        f1: First frame number.
        f2: Second frame number.
        comparator: Strategy to use; selected from the frame dimensions if omitted.
    """
    if f1 == f2:
        return False
    if comparator is None:
        comparator = select_comparator(*source.frame_dimensions())
    overlap = comparator.frames_overlap(f1, f2, source.pixel_buffer_of(f1), source.pixel_buffer_of(f2))
    if not overlap:
        logger.debug(f"Frames {f1} and {f2} don't overlap")
    return overlap
