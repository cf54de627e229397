"""Shared fixtures for building small in-memory segmentations."""
import numpy as np
import pytest

from segoverlap import InMemorySegmentation


def mask_with(rows, cols, *pixels):
    """Return a (rows, cols) boolean mask with the given (row, col) pixels set."""
    mask = np.zeros((rows, cols), dtype=bool)
    for r, c in pixels:
        mask[r, c] = True
    return mask


def make_segmentation(frames, rows=8, cols=8, number_of_segments=None, **kwargs):
    """
    Build an axial segmentation from (z, segment number, pixels) tuples.
    """
    masks = [mask_with(rows, cols, *pixels) for _, _, pixels in frames]
    positions = [(0.0, 0.0, z) for z, _, _ in frames]
    segments = [seg for _, seg, _ in frames]
    return InMemorySegmentation.from_masks(
        masks, positions, segments, number_of_segments=number_of_segments, **kwargs
    )


@pytest.fixture
def two_overlapping_segments():
    """Two segments at one position sharing pixel (3, 4)."""
    return make_segmentation([
        (0.0, 1, [(3, 4), (0, 0)]),
        (0.0, 2, [(3, 4), (7, 7)]),
    ])


@pytest.fixture
def three_segments_two_positions():
    """
    Segments 1 and 2 never share a position, 1 and 3 share one without
    overlapping, 2 and 3 share one and overlap.
    """
    return make_segmentation([
        (0.0, 1, [(0, 0)]),
        (0.0, 3, [(1, 1)]),
        (1.0, 2, [(2, 2)]),
        (1.0, 3, [(2, 2), (5, 5)]),
    ])
