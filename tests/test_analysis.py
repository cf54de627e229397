"""End-to-end tests of OverlapAnalysis, including caching behaviour."""
import logging

import numpy as np
import pytest

import segoverlap.controller.analysis as analysis_module
from segoverlap import (
    AmbiguousAxis,
    FramesNotParallel,
    InvalidReference,
    MetadataNotFound,
    OverlapAnalysis,
    SegmentFrame,
    SegmentNumberOutOfRange,
    ValidationError,
)

from conftest import make_segmentation


@pytest.fixture
def call_counter(monkeypatch):
    """Wrap a function imported into the analysis module and count its calls."""
    counts = {}

    def install(name):
        original = getattr(analysis_module, name)
        counts[name] = 0

        def wrapper(*args, **kwargs):
            counts[name] += 1
            return original(*args, **kwargs)

        monkeypatch.setattr(analysis_module, name, wrapper)

    return counts, install


def test_two_overlapping_segments(two_overlapping_segments):
    analysis = OverlapAnalysis(two_overlapping_segments)
    assert analysis.logical_positions() == [[0, 1]]
    matrix = analysis.overlap_matrix()
    assert matrix[0, 1] == 1
    assert analysis.overlaps(1, 2)
    assert analysis.non_overlapping_groups() == [[1], [2]]


def test_three_segments_two_positions(three_segments_two_positions):
    analysis = OverlapAnalysis(three_segments_two_positions)
    assert analysis.logical_positions() == [[0, 1], [2, 3]]
    assert analysis.segments_by_position() == [
        (SegmentFrame(1, 0), SegmentFrame(3, 1)),
        (SegmentFrame(2, 2), SegmentFrame(3, 3)),
    ]
    np.testing.assert_array_equal(analysis.overlap_matrix(), [[0, 0, 0], [0, 0, 1], [0, 1, 0]])
    assert not analysis.overlaps(1, 2)
    assert analysis.non_overlapping_groups() == [[1, 2], [3]]


def test_unaligned_frames_use_unpacked_comparison():
    seg = make_segmentation([
        (0.0, 1, [(2, 2)]),
        (0.0, 2, [(2, 2)]),
        (0.0, 3, [(0, 1)]),
    ], rows=3, cols=3)
    analysis = OverlapAnalysis(seg)
    np.testing.assert_array_equal(analysis.overlap_matrix(), [[0, 1, 0], [1, 0, 0], [0, 0, 0]])
    assert analysis.non_overlapping_groups() == [[1, 3], [2]]


def test_segments_never_co_located_do_not_overlap():
    seg = make_segmentation([
        (0.0, 1, [(0, 0)]),
        (5.0, 2, [(0, 0)]),
    ])
    analysis = OverlapAnalysis(seg)
    assert analysis.overlap_matrix().tolist() == [[0, 0], [0, 0]]
    assert analysis.non_overlapping_groups() == [[1, 2]]


def test_groups_partition_all_segments():
    seg = make_segmentation([
        (0.0, 1, [(0, 0), (1, 1)]),
        (0.0, 2, [(0, 0)]),
        (0.0, 3, [(1, 1)]),
        (1.0, 4, [(3, 3)]),
        (1.0, 5, [(3, 3)]),
        (1.0, 2, [(6, 6)]),
    ], number_of_segments=6)
    groups = OverlapAnalysis(seg).non_overlapping_groups()
    flat = [s for group in groups for s in group]
    assert sorted(flat) == [1, 2, 3, 4, 5, 6]


def test_frames_of_segment(three_segments_two_positions):
    analysis = OverlapAnalysis(three_segments_two_positions)
    assert analysis.frames_of_segment(3) == [1, 3]
    assert analysis.frames_of_segment(2) == [2]


@pytest.mark.parametrize("number", [0, 4])
def test_frames_of_segment_out_of_range(three_segments_two_positions, number):
    with pytest.raises(SegmentNumberOutOfRange):
        OverlapAnalysis(three_segments_two_positions).frames_of_segment(number)


def test_repeated_calls_do_not_recompute(three_segments_two_positions, call_counter):
    counts, install = call_counter
    for name in (
        "ensure_frames_are_parallel",
        "collect_frame_positions",
        "index_segments_by_position",
        "build_overlap_matrix",
        "group_non_overlapping_segments",
    ):
        install(name)

    analysis = OverlapAnalysis(three_segments_two_positions)
    first_matrix = analysis.overlap_matrix()
    first_groups = analysis.non_overlapping_groups()
    second_matrix = analysis.overlap_matrix()
    second_groups = analysis.non_overlapping_groups()
    analysis.logical_positions()
    analysis.segments_by_position()

    np.testing.assert_array_equal(first_matrix, second_matrix)
    assert first_groups == second_groups
    assert all(count == 1 for count in counts.values()), counts


def test_results_are_copies(three_segments_two_positions):
    analysis = OverlapAnalysis(three_segments_two_positions)
    analysis.overlap_matrix()[1, 2] = 0
    analysis.logical_positions()[0].append(99)
    analysis.non_overlapping_groups()[0].append(99)
    assert analysis.overlap_matrix()[1, 2] == 1
    assert analysis.logical_positions() == [[0, 1], [2, 3]]
    assert analysis.non_overlapping_groups() == [[1, 2], [3]]


def test_set_segmentation_resets_results(two_overlapping_segments, three_segments_two_positions):
    analysis = OverlapAnalysis(two_overlapping_segments)
    assert analysis.non_overlapping_groups() == [[1], [2]]
    analysis.set_segmentation(three_segments_two_positions)
    assert analysis.non_overlapping_groups() == [[1, 2], [3]]


def test_failed_stage_is_retried(call_counter):
    counts, install = call_counter
    install("ensure_frames_are_parallel")

    seg = make_segmentation([(0.0, 1, [(0, 0)]), (0.0, 2, [(0, 0)])], thickness=None)
    analysis = OverlapAnalysis(seg)
    with pytest.raises(MetadataNotFound):
        analysis.overlap_matrix()

    seg.thickness = 1.0
    assert analysis.overlap_matrix()[0, 1] == 1
    # The orientation check succeeded the first time and stays cached
    assert counts["ensure_frames_are_parallel"] == 1


def test_segment_zero_fails_before_matrix(call_counter):
    counts, install = call_counter
    install("build_overlap_matrix")

    seg = make_segmentation([(0.0, 1, [(0, 0)]), (0.0, 0, [(0, 0)])], number_of_segments=1)
    analysis = OverlapAnalysis(seg)
    with pytest.raises(ValidationError):
        analysis.non_overlapping_groups()
    with pytest.raises(InvalidReference):
        analysis.overlap_matrix()
    assert counts["build_overlap_matrix"] == 0
    # Grouping by position does not look at segment references
    assert analysis.logical_positions() == [[0, 1]]


def test_not_parallel():
    seg = make_segmentation([(0.0, 1, [])], orientation_per_frame=True)
    with pytest.raises(FramesNotParallel):
        OverlapAnalysis(seg).non_overlapping_groups()


def test_ambiguous_axis():
    seg = make_segmentation([(0.0, 1, [])], orientation=(1.0, 0.0, 0.0, 0.0, 0.5, 0.5))
    with pytest.raises(AmbiguousAxis):
        OverlapAnalysis(seg).logical_positions()


def test_sagittal_slices_are_ordered_along_x():
    seg = make_segmentation(
        [(0.0, 1, [(0, 0)]), (0.0, 2, [(0, 0)])],
        orientation=(0.0, 1.0, 0.0, 0.0, 0.0, -1.0),
    )
    seg.frames[0].position = (10.0, 0.0, 0.0)
    seg.frames[1].position = (-10.0, 0.0, 0.0)
    analysis = OverlapAnalysis(seg)
    assert analysis.logical_positions() == [[1], [0]]
    assert analysis.non_overlapping_groups() == [[1, 2]]


def test_tolerance_override():
    seg = make_segmentation([(0.0, 1, [(0, 0)]), (0.2, 2, [(0, 0)])])
    assert OverlapAnalysis(seg).non_overlapping_groups() == [[1, 2]]
    assert OverlapAnalysis(seg, tolerance=0.5).non_overlapping_groups() == [[1], [2]]


def test_no_source():
    with pytest.raises(ValueError):
        OverlapAnalysis().overlap_matrix()


def test_debug_logging_dumps_results(three_segments_two_positions, caplog):
    with caplog.at_level(logging.DEBUG, logger="segoverlap"):
        OverlapAnalysis(three_segments_two_positions).non_overlapping_groups()
    assert "Overlap matrix:" in caplog.text
    assert "Group #1: 3" in caplog.text
    assert "Logical frame #1: (2,2),(3,3)" in caplog.text


def test_negative_segment_reference_fails():
    seg = make_segmentation([(0.0, 1, [(0, 0)]), (0.0, -1, [(0, 0)])], number_of_segments=2)
    analysis = OverlapAnalysis(seg)
    with pytest.raises(ValidationError):
        analysis.overlap_matrix()
    with pytest.raises(InvalidReference):
        analysis.non_overlapping_groups()


def test_empty_segmentation():
    seg = make_segmentation([], number_of_segments=0)
    seg.orientation = None
    analysis = OverlapAnalysis(seg)
    assert analysis.logical_positions() == []
    assert analysis.segments_by_position() == []
    assert analysis.overlap_matrix().shape == (0, 0)
    assert analysis.non_overlapping_groups() == []
    with pytest.raises(MetadataNotFound):
        analysis.image_orientation()
