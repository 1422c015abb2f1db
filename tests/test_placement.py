import random
from collections import Counter

import pytest

from city_layout_gen.districts.models import Boundary, District, DistrictType, DistrictTypeRegistry
from city_layout_gen.districts.placement import (
    build_queues,
    neighbour_score,
    place,
    position_score,
    validate_district_count,
)
from city_layout_gen.districts.sampler import sample_district_candidates


def test_three_types_one_slot_each(context):
    registry = DistrictTypeRegistry()
    registry.register(DistrictType("a", (1, 1, 1), 0, 1, 1))
    registry.register(DistrictType("b", (2, 2, 2), 5, 1, 2))
    registry.register(DistrictType("c", (3, 3, 3), 9, 1, 1))
    boundary = Boundary(center=(500.0, 500.0), radius=450.0)
    candidates = sample_district_candidates(boundary, 3, 30, random.Random(2), context)

    districts, by_id = place(candidates, registry, boundary, 3, context=context)

    assert len(districts) == 3
    assert Counter(d.type_id for d in districts) == {0: 1, 1: 1, 2: 1}
    assert set(by_id) == {d.id for d in districts}
    assert [d.id for d in districts] == [0, 1, 2]


def test_target_is_clamped_and_counts_stay_in_range(three_type_registry, context):
    boundary = Boundary(center=(0.0, 0.0), radius=100.0)
    candidates = [(float(i * 10), 0.0) for i in range(10)]

    districts, _ = place(candidates, three_type_registry, boundary, 10, context=context)

    assert len(districts) == three_type_registry.max_total == 4
    counts = Counter(d.type_id for d in districts)
    for t in three_type_registry:
        assert t.min_placements <= counts[t.id] <= t.max_placements
    assert len(candidates) == 6
    assert context.issues_for("placement")


def test_candidates_consumed_in_order(three_type_registry, context):
    boundary = Boundary(center=(0.0, 0.0), radius=100.0)
    candidates = [(0.0, 0.0), (50.0, 0.0), (0.0, 90.0), (10.0, 10.0), (80.0, 0.0)]
    expected = list(candidates[:3])

    districts, _ = place(candidates, three_type_registry, boundary, 3, context=context)

    assert [d.position for d in districts] == expected
    assert candidates == [(10.0, 10.0), (80.0, 0.0)]


def test_validate_district_count_reports_low_values(three_type_registry, context):
    assert validate_district_count(1, three_type_registry, context) == 3
    assert validate_district_count(3, three_type_registry, context) == 3
    assert len(context.issues_for("placement")) == 1


def test_build_queues_min_first():
    registry = DistrictTypeRegistry()
    registry.register(DistrictType("a", (1, 1, 1), 0, 2, 3))
    registry.register(DistrictType("b", (2, 2, 2), 0, 1, 1))
    min_q, rest_q = build_queues(registry)
    assert [t.name for t in min_q] == ["a", "a", "b"]
    assert [t.name for t in rest_q] == ["a"]


def test_position_score_is_coarse():
    boundary = Boundary(center=(0.0, 0.0), radius=100.0)
    loc = (50.0, 0.0)  # scaled distance 5
    assert position_score(DistrictType("x", (1, 1, 1), 5), loc, boundary) == 10.0
    assert position_score(DistrictType("x", (1, 1, 1), 7), loc, boundary) == 5.0
    assert position_score(DistrictType("x", (1, 1, 1), 3), loc, boundary) == 0.0


def test_neighbour_score_survives_coincident_points(three_type_registry):
    boundary = Boundary(center=(0.0, 0.0), radius=100.0)
    placed = [District(0, 0, (10.0, 10.0))]
    score = neighbour_score(1, (10.0, 10.0), placed, three_type_registry, boundary)
    assert score == pytest.approx(6 / 0.01)


def test_neighbour_score_uses_scaled_distance(three_type_registry):
    boundary = Boundary(center=(0.0, 0.0), radius=100.0)
    placed = [District(0, 1, (0.0, 0.0))]
    # works -> homes: repulsion 8 at scaled distance 5
    assert neighbour_score(2, (50.0, 0.0), placed, three_type_registry, boundary) == pytest.approx(-8 / 5)
    # no relation declared in this direction
    assert neighbour_score(0, (50.0, 0.0), placed, three_type_registry, boundary) == 0.0


def test_neighbour_score_uses_relation_weight():
    registry = DistrictTypeRegistry()
    registry.register(DistrictType("a", (1, 1, 1), 0))
    registry.register(DistrictType("b", (2, 2, 2), 0))
    registry.set_relation(0, 1, attraction=6, repulsion=2)
    boundary = Boundary(center=(0.0, 0.0), radius=100.0)
    placed = [District(0, 1, (20.0, 0.0))]

    assert registry.relation(0, 1).weight == 4
    # scaled distance 2 between (0, 0) and (20, 0)
    assert neighbour_score(0, (0.0, 0.0), placed, registry, boundary) == pytest.approx(2.0)
    assert neighbour_score(1, (0.0, 0.0), placed, registry, boundary) == 0.0


def test_distance_from_center_must_be_on_the_ten_point_scale():
    with pytest.raises(ValueError):
        DistrictType("far", (1, 1, 1), 10.5)
    with pytest.raises(ValueError):
        DistrictType("neg", (1, 1, 1), -1)
    assert DistrictType("edge", (1, 1, 1), 10).distance_from_center == 10
