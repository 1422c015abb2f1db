import random

import numpy as np

from city_layout_gen.districts.models import Boundary, District
from city_layout_gen.partition.voronoi import BORDER, OUTSIDE, nearest_label, partition


def _inside_count(size, cx, cy, r):
    return sum(1 for y in range(size) for x in range(size) if (x - cx) ** 2 + (y - cy) ** 2 < r * r)


def test_two_seeds_give_single_border_column(two_seed_map):
    region_map, regions = two_seed_map
    border = region_map.border_pixels()

    assert border == {(50, y) for y in range(1, 100)}
    total = regions[0].size + regions[1].size + len(border)
    assert total == _inside_count(100, 50, 50, 50)
    assert int(np.count_nonzero(region_map.labels == OUTSIDE)) == 100 * 100 - total


def test_region_pixels_exclude_borders(two_seed_map):
    region_map, regions = two_seed_map
    for region in regions.values():
        for x, y in region.pixels:
            assert region_map.label_at(x, y) == region.id


def test_outer_ring_marks_pixels_next_to_outside():
    boundary = Boundary(center=(50.0, 50.0), radius=50.0)
    districts = [District(0, 0, (25.0, 50.0)), District(1, 1, (75.0, 50.0))]
    region_map, regions = partition(100, districts, boundary, 0, outer_ring=True)
    labels = region_map.labels

    for y in range(100):
        for x in range(100):
            if labels[y, x] < 0:
                continue
            for dx, dy in ((1, 0), (-1, 0), (0, 1), (0, -1)):
                nx, ny = x + dx, y + dy
                assert 0 <= nx < 100 and 0 <= ny < 100
                assert labels[ny, nx] != OUTSIDE
    total = regions[0].size + regions[1].size + len(region_map.border_pixels())
    assert total == _inside_count(100, 50, 50, 50)


def test_labels_match_nearest_seed_with_distortion():
    boundary = Boundary(center=(30.0, 30.0), radius=28.0)
    districts = [District(0, 0, (20.0, 20.0)), District(1, 1, (40.0, 25.0)), District(2, 0, (28.0, 45.0))]
    region_map, _ = partition(60, districts, boundary, 10, random.Random(5), outer_ring=False)

    assert len(region_map.seeds) > len(districts)
    assert {label for _, _, label in region_map.seeds} <= {0, 1, 2}
    labels = region_map.labels
    for y in range(60):
        for x in range(60):
            if labels[y, x] >= 0:
                assert labels[y, x] == nearest_label(x, y, region_map.seeds)


def test_partition_is_repeatable():
    boundary = Boundary(center=(30.0, 30.0), radius=28.0)
    districts = [District(0, 0, (20.0, 20.0)), District(1, 1, (40.0, 25.0))]
    first, _ = partition(60, districts, boundary, 8, random.Random(9))
    second, _ = partition(60, districts, boundary, 8, random.Random(9))
    assert np.array_equal(first.labels, second.labels)


def test_parallel_rows_match_serial():
    boundary = Boundary(center=(40.0, 40.0), radius=38.0)
    districts = [District(0, 0, (20.0, 30.0)), District(1, 1, (55.0, 50.0)), District(2, 2, (40.0, 15.0))]
    serial, _ = partition(80, districts, boundary, 0, workers=1)
    fanned, _ = partition(80, districts, boundary, 0, workers=3)
    assert np.array_equal(serial.labels, fanned.labels)


def test_mark_border_skips_outside(two_seed_map):
    region_map, _ = two_seed_map
    changed = region_map.mark_border([(0, 0), (30, 50), (30, 50), (500, 500)])
    assert changed == 1
    assert region_map.label_at(0, 0) == OUTSIDE
    assert region_map.label_at(30, 50) == BORDER
