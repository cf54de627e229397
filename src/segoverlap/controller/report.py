"""Plain text renderings of the analysis artifacts, used for debug logging."""
from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np

if TYPE_CHECKING:
    import numpy.typing as npt

    from segoverlap.model.state import LogicalPositions, SegmentGroups, SegmentsByPosition


def format_logical_positions(logical_positions: LogicalPositions) -> str:
    lines = ["Frames grouped by position:"]
    for i, frames in enumerate(logical_positions):
        lines.append(f"Logical frame #{i}: {', '.join(str(f) for f in frames)}")
    return "\n".join(lines)


def format_segments_by_position(segments_by_position: SegmentsByPosition) -> str:
    lines = ["Segments grouped by logical frame positions, (seg#,frame#):"]
    for i, entries in enumerate(segments_by_position):
        pairs = ",".join(f"({seg},{frame})" for seg, frame in entries)
        lines.append(f"Logical frame #{i}: {pairs}")
    return "\n".join(lines)


def format_overlap_matrix(matrix: npt.NDArray[np.int8]) -> str:
    lines = ["Overlap matrix:"]
    for row in matrix:
        lines.append(" ".join(str(int(value)) for value in row))
    return "\n".join(lines)


def format_segment_groups(groups: SegmentGroups) -> str:
    lines = ["Non-overlapping segments:"]
    for i, group in enumerate(groups):
        lines.append(f"Group #{i}: {', '.join(str(s) for s in group)}")
    return "\n".join(lines)
