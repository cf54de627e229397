"""
segoverlap: Spatial overlap analysis for binary segmentation volumes
====================================================================

Determines, for every pair of segments of a multi-frame binary segmentation,
whether their pixels ever coincide, and partitions the segments into groups
that can be stored together in a single label map.

Key features:
- Grouping of frames into logical (physical slice) positions
- Per-position segment index
- Segment overlap matrix from packed pixel comparison
- Greedy non-overlapping segment groups
"""

__version__ = "0.1.0"

from .controller.analysis import OverlapAnalysis
from .model.errors import (
    AmbiguousAxis,
    BufferUnavailable,
    CapacityError,
    ComparisonError,
    FramesNotParallel,
    GeometryError,
    InvalidReference,
    LengthMismatch,
    MetadataError,
    MetadataNotFound,
    OverlapError,
    SegmentNumberOutOfRange,
    ValidationError,
)
from .model.segmentation import (
    FrameRecord,
    InMemorySegmentation,
    SegmentationSource,
    pack_binary_frame,
    unpack_binary_frame,
)
from .model.state import SegmentFrame
from .logging_config import setup_logging
