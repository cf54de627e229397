from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from segoverlap.config import MAX_FRAME_COUNT, POSITION_TOLERANCE
from segoverlap.model.errors import AmbiguousAxis, CapacityError, MetadataNotFound
from segoverlap.model.geometry_primitives import Axis, FramePosition, Vector

if TYPE_CHECKING:
    from segoverlap.model.geometry_primitives import ImageOrientation
    from segoverlap.model.segmentation import SegmentationSource
    from segoverlap.model.state import LogicalPositions

logger = logging.getLogger(__name__)


def check_frame_count(source: SegmentationSource) -> int:
    """Return the number of frames, rejecting counts beyond MAX_FRAME_COUNT."""
    num_frames = source.frame_count()
    if num_frames > MAX_FRAME_COUNT:
        msg = f"Number of frames {num_frames} exceeds maximum number of possible frames (2^32-1)"
        logger.error(msg)
        raise CapacityError(msg, frame_count=num_frames)
    return num_frames


def collect_frame_positions(source: SegmentationSource) -> list[FramePosition]:
    """
    Read Image Position (Patient) of every frame, in physical frame order.

    Raises:
        MetadataNotFound: A frame has no position.
        CapacityError: Too many frames.
    """
    positions: list[FramePosition] = []
    for frame_number in range(check_frame_count(source)):
        coords = source.position_of(frame_number)
        if coords is None:
            msg = f"Image Position (Patient) not found for frame {frame_number}, cannot sort frames by position"
            logger.error(msg)
            raise MetadataNotFound(msg, frame_number=frame_number)
        positions.append(FramePosition(frame_number=frame_number, position=Vector.from_sequence(coords)))
    return positions


def read_slice_thickness(source: SegmentationSource) -> float:
    """
    Raises:
        MetadataNotFound: Pixel Measures carry no slice thickness.
    """
    thickness = source.slice_thickness()
    if thickness is None:
        msg = "Slice Thickness not found, cannot sort frames by position"
        logger.error(msg)
        raise MetadataNotFound(msg)
    logger.debug(f"Slice Thickness is {thickness}")
    return float(thickness)


def identify_changing_coordinate(orientation: ImageOrientation) -> Axis:
    """
    Find the axis along which the slice position changes the most.

    That is the axis with the strictly largest absolute component of the slice
    normal (cross product of row and column direction).

    Raises:
        AmbiguousAxis: Two or more components share the largest magnitude.
    """
    normal = abs(orientation.normal)
    for axis in Axis:
        others = [normal[other] for other in Axis if other != axis]
        if all(normal[axis] > value for value in others):
            return axis

    msg = "Cannot identify coordinate relevant for sorting frames by position"
    logger.error(f"{msg}, |normal| = ({normal.x}, {normal.y}, {normal.z})")
    raise AmbiguousAxis(msg, normal=(normal.x, normal.y, normal.z))


def group_frames_by_logical_position(
    frame_positions: list[FramePosition],
    orientation: ImageOrientation,
    slice_thickness: float,
    tolerance: float = POSITION_TOLERANCE,
) -> LogicalPositions:
    """
    Cluster frames that lie on the same physical slice.

    Frames are stable-sorted along the changing coordinate. Walking that order,
    a frame joins the logical position of its predecessor if the two are less
    than `tolerance * slice_thickness` apart, otherwise it opens a new one.
    Only sort neighbours are compared, so there is no transitive bridging.

    Args:
        frame_positions: Positions of all frames.
        orientation: Shared image orientation.
        slice_thickness: Slice thickness in mm.
        tolerance: Fraction of the slice thickness treated as "same position".

    Returns:
        Logical positions in ascending order along the changing coordinate,
        each a list of physical frame numbers.
    """
    axis = identify_changing_coordinate(orientation)
    logger.debug(f"Using coordinate {axis.name} for sorting frames by position")
    if not frame_positions:
        return []

    sorted_positions = sorted(frame_positions, key=lambda fp: fp.coordinate(axis))
    max_distance = slice_thickness * tolerance

    logical_positions: LogicalPositions = [[sorted_positions[0].frame_number]]
    for previous, current in zip(sorted_positions, sorted_positions[1:]):
        diff = abs(current.coordinate(axis) - previous.coordinate(axis))
        logger.debug(
            f"Frame {current.frame_number} is {diff} mm away from previous frame {previous.frame_number}"
        )
        if diff < max_distance:
            logical_positions[-1].append(current.frame_number)
        else:
            logical_positions.append([current.frame_number])
    return logical_positions
