from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from segoverlap.controller.positions import check_frame_count
from segoverlap.model.errors import InvalidReference, MetadataNotFound, SegmentNumberOutOfRange
from segoverlap.model.state import SegmentFrame

if TYPE_CHECKING:
    from segoverlap.model.segmentation import SegmentationSource
    from segoverlap.model.state import LogicalPositions, SegmentsByPosition

logger = logging.getLogger(__name__)


def referenced_segment(source: SegmentationSource, frame_number: int, num_segments: int) -> int:
    """
    Look up the segment a frame belongs to and validate it.

    Raises:
        MetadataNotFound: The frame has no Referenced Segment Number.
        InvalidReference: The frame references segment 0 or a negative number.
        SegmentNumberOutOfRange: The number exceeds the number of segments.
    """
    segment_number = source.referenced_segment_of(frame_number)
    if segment_number is None:
        msg = f"Referenced Segment Number not found for frame #{frame_number}, cannot add segment"
        logger.error(msg)
        raise MetadataNotFound(msg, frame_number=frame_number)
    if segment_number < 1:
        msg = f"Referenced Segment Number is {segment_number} (not permitted) for frame #{frame_number}"
        logger.error(msg)
        raise InvalidReference(msg, segment_number=segment_number, frame_number=frame_number)
    if segment_number > num_segments:
        msg = (
            f"Found Referenced Segment Number {segment_number} for frame #{frame_number} but only "
            f"{num_segments} segments are present, segments are not numbered consecutively"
        )
        logger.error(msg)
        raise SegmentNumberOutOfRange(msg, segment_number=segment_number, frame_number=frame_number)
    return segment_number


def index_segments_by_position(
    source: SegmentationSource,
    logical_positions: LogicalPositions,
) -> SegmentsByPosition:
    """
    Collect the segments present at every logical position.

    Returns:
        For each logical position, its (segment number, frame number) entries,
        unique and sorted by segment number, then frame number.
    """
    num_segments = source.segment_count()
    result: SegmentsByPosition = []
    for frames in logical_positions:
        entries = {
            SegmentFrame(referenced_segment(source, frame_number, num_segments), frame_number)
            for frame_number in frames
        }
        result.append(tuple(sorted(entries)))
    return result


def collect_frames_for_segments(source: SegmentationSource) -> list[list[int]]:
    """
    Assign every physical frame to the segment it references.

    Returns:
        One list of frame numbers per segment; index 0 holds segment 1.
    """
    num_frames = check_frame_count(source)
    num_segments = source.segment_count()
    frames_for_segment: list[list[int]] = [[] for _ in range(num_segments)]
    for frame_number in range(num_frames):
        segment_number = referenced_segment(source, frame_number, num_segments)
        frames_for_segment[segment_number - 1].append(frame_number)
    return frames_for_segment
