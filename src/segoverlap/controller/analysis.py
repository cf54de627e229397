"""
Overlap Analysis
================
This module ties the analysis stages together for one segmentation object.

Why is this file needed?
------------------------
1. Ordering: Every stage depends on the one before it (orientation ->
   logical positions -> segments by position -> overlap matrix -> groups).
   Asking for a late artifact computes all missing earlier ones.
2. Caching: Each artifact is computed once per segmentation object and kept
   in an `AnalysisCache`. A failing stage leaves its own slot empty, so the
   next call retries it; earlier results stay cached.

Not thread-safe: callers must serialize access to one instance.

Classes:
    OverlapAnalysis: The public entry point.
"""
from __future__ import annotations

import logging
import time
from typing import Optional, TYPE_CHECKING

import numpy as np

from segoverlap.config import OVERLAP, POSITION_TOLERANCE
from segoverlap.controller.orientation import ensure_frames_are_parallel
from segoverlap.controller.overlap import build_overlap_matrix, group_non_overlapping_segments
from segoverlap.controller.positions import (
    check_frame_count,
    collect_frame_positions,
    group_frames_by_logical_position,
    read_slice_thickness,
)
from segoverlap.controller.report import (
    format_logical_positions,
    format_overlap_matrix,
    format_segment_groups,
    format_segments_by_position,
)
from segoverlap.controller.segments import collect_frames_for_segments, index_segments_by_position
from segoverlap.model.errors import SegmentNumberOutOfRange
from segoverlap.model.state import AnalysisCache

if TYPE_CHECKING:
    import numpy.typing as npt

    from segoverlap.model.geometry_primitives import ImageOrientation
    from segoverlap.model.segmentation import SegmentationSource
    from segoverlap.model.state import LogicalPositions, SegmentGroups, SegmentsByPosition

logger = logging.getLogger(__name__)


class OverlapAnalysis:
    """
    Determines which segments of a binary segmentation spatially overlap.

    All accessors return copies of the cached results.
    """

    def __init__(
        self,
        source: Optional[SegmentationSource] = None,
        *,
        tolerance: float = POSITION_TOLERANCE,
    ) -> None:
        """
        Args:
            source: The segmentation to analyse; can be set later.
            tolerance: Fraction of the slice thickness below which neighbouring
                frames are considered to be at the same position.
        """
        self.source = source
        self.tolerance = tolerance
        self._cache = AnalysisCache()

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(source={self.source!r}, tolerance={self.tolerance})"

    def set_segmentation(self, source: SegmentationSource) -> None:
        """Analyse a different segmentation object; drops all cached results."""
        self.source = source
        self.clear()

    def clear(self) -> None:
        """Drop all cached results."""
        self._cache.reset()

    def _require_source(self) -> SegmentationSource:
        if self.source is None:
            raise ValueError("No segmentation object set.")
        return self.source

    # --- Stages ---

    def image_orientation(self) -> ImageOrientation:
        """Shared image orientation; fails if frames are not parallel."""
        if self._cache.image_orientation is None:
            self._cache.image_orientation = ensure_frames_are_parallel(self._require_source())
        return self._cache.image_orientation

    def _group_frames_by_position(self) -> LogicalPositions:
        cache = self._cache
        if cache.logical_positions is not None:
            return cache.logical_positions

        source = self._require_source()
        if check_frame_count(source) == 0:
            # No frames, no positions; orientation is not needed
            cache.frame_positions = []
            cache.logical_positions = []
            return cache.logical_positions

        orientation = self.image_orientation()
        start = time.perf_counter()
        try:
            if cache.frame_positions is None:
                cache.frame_positions = collect_frame_positions(source)
            cache.logical_positions = group_frames_by_logical_position(
                cache.frame_positions,
                orientation,
                read_slice_thickness(source),
                tolerance=self.tolerance,
            )
        except Exception:
            cache.frame_positions = None
            cache.logical_positions = None
            raise

        if logger.isEnabledFor(logging.DEBUG):
            logger.debug(format_logical_positions(cache.logical_positions))
        logger.debug(f"Grouping frames by position took {time.perf_counter() - start:.6f} s")
        return cache.logical_positions

    def _segments_by_position(self) -> SegmentsByPosition:
        cache = self._cache
        if cache.segments_by_position is None:
            logical_positions = self._group_frames_by_position()
            start = time.perf_counter()
            cache.segments_by_position = index_segments_by_position(self._require_source(), logical_positions)
            if logger.isEnabledFor(logging.DEBUG):
                logger.debug(format_segments_by_position(cache.segments_by_position))
            logger.debug(f"Grouping segments by position took {time.perf_counter() - start:.6f} s")
        return cache.segments_by_position

    def _overlap_matrix(self) -> npt.NDArray[np.int8]:
        cache = self._cache
        if cache.overlap_matrix is None:
            segments_by_position = self._segments_by_position()
            start = time.perf_counter()
            cache.overlap_matrix = build_overlap_matrix(self._require_source(), segments_by_position)
            if logger.isEnabledFor(logging.DEBUG):
                logger.debug(format_overlap_matrix(cache.overlap_matrix))
            logger.debug(f"Building overlap matrix took {time.perf_counter() - start:.6f} s")
        return cache.overlap_matrix

    def _non_overlapping_segments(self) -> SegmentGroups:
        cache = self._cache
        if cache.non_overlapping_segments is None:
            matrix = self._overlap_matrix()
            start = time.perf_counter()
            cache.non_overlapping_segments = group_non_overlapping_segments(matrix)
            if logger.isEnabledFor(logging.DEBUG):
                logger.debug(format_segment_groups(cache.non_overlapping_segments))
            logger.debug(f"Grouping non-overlapping segments took {time.perf_counter() - start:.6f} s")
        return cache.non_overlapping_segments

    # --- Public accessors ---

    def logical_positions(self) -> LogicalPositions:
        """Frame numbers per distinct physical slice, ascending along the slice normal."""
        return [list(frames) for frames in self._group_frames_by_position()]

    def frames_of_segment(self, segment_number: int) -> list[int]:
        """
        Physical frame numbers referencing the given segment.

        Raises:
            SegmentNumberOutOfRange: segment_number is not within 1..N.
        """
        source = self._require_source()
        num_segments = source.segment_count()
        if segment_number < 1 or segment_number > num_segments:
            msg = f"Segment number {segment_number} is out of range (1..{num_segments})"
            logger.error(msg)
            raise SegmentNumberOutOfRange(msg, segment_number=segment_number)
        if self._cache.frames_for_segment is None:
            self._cache.frames_for_segment = collect_frames_for_segments(source)
        return list(self._cache.frames_for_segment[segment_number - 1])

    def segments_by_position(self) -> SegmentsByPosition:
        """(segment number, frame number) entries per logical position."""
        return list(self._segments_by_position())

    def overlap_matrix(self) -> npt.NDArray[np.int8]:
        """
        Symmetric (N, N) matrix; cell [a - 1, b - 1] is 1 if segments a and b overlap.
        """
        return self._overlap_matrix().copy()

    def overlaps(self, segment_a: int, segment_b: int) -> bool:
        """True if the two segments (1-based numbers) share a pixel anywhere."""
        num_segments = self._require_source().segment_count()
        for number in (segment_a, segment_b):
            if number < 1 or number > num_segments:
                msg = f"Segment number {number} is out of range (1..{num_segments})"
                logger.error(msg)
                raise SegmentNumberOutOfRange(msg, segment_number=number)
        return bool(self._overlap_matrix()[segment_a - 1, segment_b - 1] == OVERLAP)

    def non_overlapping_groups(self) -> SegmentGroups:
        """Segment numbers partitioned into groups without overlaps."""
        return [list(group) for group in self._non_overlapping_segments()]
