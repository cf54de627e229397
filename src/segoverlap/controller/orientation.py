from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from segoverlap.model.errors import FramesNotParallel, MetadataNotFound
from segoverlap.model.geometry_primitives import ImageOrientation

if TYPE_CHECKING:
    from segoverlap.model.segmentation import SegmentationSource

logger = logging.getLogger(__name__)


def ensure_frames_are_parallel(source: SegmentationSource) -> ImageOrientation:
    """
    Check that Image Orientation (Patient) is shared by all frames.

    Only a shared orientation guarantees parallel frames; a per-frame orientation
    is rejected even if all values happen to be equal.

    Args:
        source: The segmentation to check.

    Returns:
        The shared image orientation.

    Raises:
        MetadataNotFound: There are no frames or no orientation is available.
        FramesNotParallel: The orientation is stored per frame.
    """
    if source.frame_count() == 0:
        logger.error("Segmentation has no frames, cannot check for parallel frames")
        raise MetadataNotFound("Segmentation has no frames, cannot check for parallel frames")

    found = source.orientation_of(0)
    if found is None:
        logger.error("Plane Orientation (Patient) not found, cannot check for parallel frames")
        raise MetadataNotFound("Plane Orientation (Patient) not found, cannot check for parallel frames")

    cosines, per_frame = found
    if per_frame:
        logger.error("Image Orientation (Patient) is per-frame, frames are probably not parallel")
        raise FramesNotParallel("Image Orientation (Patient) is per-frame, frames are probably not parallel")

    orientation = ImageOrientation.from_cosines(cosines)
    logger.debug(f"Image Orientation (Patient) is shared, frames are parallel: {orientation.as_tuple()}")
    return orientation
