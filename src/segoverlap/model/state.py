"""
Analysis State (Cache Record)
=============================
This module defines the container for every artifact the overlap analysis
computes for one segmentation object.

Why is this file needed?
------------------------
1. Memoization: Each stage stores its result here exactly once. A slot that
   is None has not been computed (or its computation failed); an empty list
   is a valid, computed result.
2. Invalidation: `reset()` clears all slots together whenever the source
   segmentation is replaced.

Classes:
    SegmentFrame: (segment number, frame number) entry of a logical position.
    AnalysisCache: The memoization record.
"""
from __future__ import annotations

from dataclasses import dataclass, fields
import logging
from typing import NamedTuple, Optional, TYPE_CHECKING

import numpy as np

from segoverlap.model.geometry_primitives import FramePosition, ImageOrientation

if TYPE_CHECKING:
    import numpy.typing as npt

logger = logging.getLogger(__name__)


class SegmentFrame(NamedTuple):
    """A segment present at a logical position, tagged with its frame."""
    segment_number: int
    frame_number: int


LogicalPositions = list[list[int]]
SegmentsByPosition = list[tuple[SegmentFrame, ...]]
SegmentGroups = list[list[int]]


@dataclass
class AnalysisCache:
    """
    Holds the computed artifacts for the current segmentation.
    """
    image_orientation: Optional[ImageOrientation] = None
    frame_positions: Optional[list[FramePosition]] = None
    frames_for_segment: Optional[list[list[int]]] = None
    logical_positions: Optional[LogicalPositions] = None
    segments_by_position: Optional[SegmentsByPosition] = None
    overlap_matrix: Optional[npt.NDArray[np.int8]] = None
    non_overlapping_segments: Optional[SegmentGroups] = None

    def reset(self) -> None:
        """Clear all cached artifacts."""
        for f in fields(self):
            setattr(self, f.name, None)
        logger.debug("Analysis cache has been reset.")
