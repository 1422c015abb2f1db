import numpy as np
import pytest

from city_layout_gen.core import _trace
from city_layout_gen.districts.models import Boundary, District
from city_layout_gen.partition.voronoi import BORDER, RegionMap, partition
from city_layout_gen.roads.border_tracer import (
    BorderTracer,
    NoStartPointError,
    SplitKind,
    branch_points,
    classify,
    find_start_point,
    trace_map,
)


def always_open(_):
    return True


def never_open(_):
    return False


def test_straight_border_is_one_edge(two_seed_map):
    region_map, _ = two_seed_map
    tracer = BorderTracer(region_map, 10)

    borders = tracer.trace(find_start_point(region_map))

    assert len(borders) == 1
    edge = borders[0]
    assert edge.start == (50, 1)
    assert edge.end == (50, 99)
    assert edge.samples == [(50, y) for y in range(11, 100, 10)]
    assert tracer.visited == region_map.border_pixels()


def test_plus_shaped_border_visits_every_pixel_once():
    labels = np.zeros((11, 11), dtype=np.int32)
    labels[5, :] = BORDER
    labels[:, 5] = BORDER
    region_map = RegionMap(labels=labels, center=(5.0, 5.0), radius=20.0)
    tracer = BorderTracer(region_map, 3)

    borders = tracer.trace((5, 0))

    assert tracer.visited == region_map.border_pixels()
    assert len(borders) == 5
    assert {b.end for b in borders} == {(4, 5), (0, 5), (5, 6), (5, 10), (10, 5)}
    assert sum(b.steps for b in borders) + 1 == len(region_map.border_pixels())


def test_sweep_picks_up_disconnected_fragments(two_seed_map):
    region_map, _ = two_seed_map
    region_map.labels[70:73, 20] = BORDER
    tracer = BorderTracer(region_map, 10)

    tracer.trace(find_start_point(region_map))

    assert tracer.visited == region_map.border_pixels()


def test_full_partition_trace_covers_all_border_pixels():
    boundary = Boundary(center=(40.0, 40.0), radius=38.0)
    districts = [District(0, 0, (25.0, 30.0)), District(1, 1, (55.0, 45.0)), District(2, 2, (38.0, 60.0))]
    region_map, _ = partition(80, districts, boundary, 0)
    tracer = BorderTracer(region_map, 6)

    borders = tracer.trace(find_start_point(region_map))

    border_pixels = region_map.border_pixels()
    assert borders
    assert tracer.visited == border_pixels
    for b in borders:
        assert b.end in border_pixels
        assert set(b.samples) <= border_pixels


def test_no_start_point_raises_and_pipeline_reports(context):
    labels = np.zeros((6, 6), dtype=np.int32)
    labels[:, 3] = BORDER
    region_map = RegionMap(labels=labels, center=(3.0, 3.0), radius=10.0)

    with pytest.raises(NoStartPointError):
        trace_map(region_map, 5)
    assert _trace({}, region_map, context) == []
    assert context.issues_for("tracer")


def test_classify_counts():
    assert classify([], always_open) is SplitKind.DEAD_END
    assert classify([(0, 1)], always_open) is SplitKind.NOT_A_SPLIT
    assert classify([(0, 1), (1, 0), (0, -1), (-1, 0)], always_open) is SplitKind.CROSSING


def test_classify_three_needs_an_isolated_neighbour():
    assert classify([(0, 1), (1, 0), (-1, 0)], always_open) is SplitKind.NOT_A_SPLIT
    assert classify([(0, 1), (1, 1), (0, -1)], always_open) is SplitKind.FORK


def test_classify_two_apart_unless_dead_end():
    assert classify([(0, 1), (0, -1)], always_open) is SplitKind.BRANCH
    assert classify([(0, 1), (0, -1)], never_open) is SplitKind.NOT_A_SPLIT
    assert classify([(0, 1), (1, 1)], always_open) is SplitKind.NOT_A_SPLIT


def test_branch_points_per_kind():
    assert branch_points(SplitKind.FORK, [(0, 1), (1, 1), (0, -1)]) == [(0, -1), (0, 1)]
    assert branch_points(SplitKind.BRANCH, [(0, 1), (0, -1)]) == [(0, 1), (0, -1)]
    pairs = [(0, 1), (1, 1), (0, -1), (-1, -1)]
    assert branch_points(SplitKind.CROSSING, pairs) == [(0, 1), (0, -1)]
    ring = [(0, 1), (1, 0), (0, -1), (-1, 0)]
    assert branch_points(SplitKind.CROSSING, ring) == []
    assert branch_points(SplitKind.NOT_A_SPLIT, [(0, 1)]) == []


def test_segment_length_must_be_positive(two_seed_map):
    region_map, _ = two_seed_map
    with pytest.raises(ValueError):
        BorderTracer(region_map, 0)
