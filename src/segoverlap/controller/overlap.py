from __future__ import annotations

import logging
from typing import Optional, TYPE_CHECKING

import numpy as np

from segoverlap.config import NO_OVERLAP, OVERLAP, UNKNOWN
from segoverlap.controller.comparison import check_frames_overlap, select_comparator

if TYPE_CHECKING:
    import numpy.typing as npt

    from segoverlap.controller.comparison import FrameComparator
    from segoverlap.model.segmentation import SegmentationSource
    from segoverlap.model.state import SegmentGroups, SegmentsByPosition

logger = logging.getLogger(__name__)


def build_overlap_matrix(
    source: SegmentationSource,
    segments_by_position: SegmentsByPosition,
    comparator: Optional[FrameComparator] = None,
) -> npt.NDArray[np.int8]:
    """
    Build the symmetric segment overlap matrix.

    Cell [a - 1, b - 1] is 1 if segments a and b share a foreground pixel at
    any logical position, else 0. Pairs of different segments at the same
    position are compared once each; a pair already known to overlap is not
    compared again. Pairs never seen together end up as 0.

    Args:
        source: The segmentation providing the pixel data.
        segments_by_position: Entries per logical position.
        comparator: Strategy to use; selected from the frame dimensions if omitted.

    Returns:
        (N, N) int8 array, N being the number of segments.
    """
    num_segments = source.segment_count()
    if comparator is None:
        comparator = select_comparator(*source.frame_dimensions())

    matrix = np.full((num_segments, num_segments), UNKNOWN, dtype=np.int8)
    # A segment does not overlap with itself
    np.fill_diagonal(matrix, NO_OVERLAP)

    for position, entries in enumerate(segments_by_position):
        logger.debug(f"Comparing segments at logical frame position {position}")
        for i in range(len(entries)):
            seg_a, frame_a = entries[i]
            for j in range(i + 1, len(entries)):
                seg_b, frame_b = entries[j]
                if seg_a == seg_b:
                    continue
                if matrix[seg_a - 1, seg_b - 1] == OVERLAP:
                    logger.debug(
                        f"Skipping frame comparison on pos #{position} for segments {seg_a} and {seg_b} "
                        "(already marked as overlapping)"
                    )
                    continue
                overlap = check_frames_overlap(source, frame_a, frame_b, comparator)
                value = OVERLAP if overlap else NO_OVERLAP
                matrix[seg_a - 1, seg_b - 1] = value
                matrix[seg_b - 1, seg_a - 1] = value

    # Segments never found at the same position cannot overlap
    matrix[matrix == UNKNOWN] = NO_OVERLAP
    return matrix


def group_non_overlapping_segments(matrix: npt.NDArray[np.int8]) -> SegmentGroups:
    """
    Partition the segments into groups of mutually non-overlapping segments.

    Greedy first fit: segments are visited in ascending order and put into the
    first existing group none of whose members they overlap; otherwise a new
    group is opened. This does not guarantee the smallest number of groups.

    Returns:
        Groups of segment numbers, in order of creation.
    """
    groups: SegmentGroups = []
    for index in range(matrix.shape[0]):
        for group in groups:
            if all(matrix[index, member - 1] != OVERLAP for member in group):
                group.append(index + 1)
                break
        else:
            groups.append([index + 1])
    return groups
