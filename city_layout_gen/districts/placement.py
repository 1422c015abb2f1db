"""
Suitability placement: decide which district type goes on each candidate.

Placement is sequential; every score depends on the districts placed so far.
"""

from __future__ import annotations

import logging
import math
from typing import Sequence

from .models import Boundary, District, DistrictType, DistrictTypeRegistry, Point

log = logging.getLogger(__name__)

STAGE = "placement"

# floor for the neighbour-score denominator (0..10 scale); coincident points
# count as very close instead of dividing by zero
MIN_SCALED_DISTANCE = 0.01

POSITION_EQUAL = 10.0
POSITION_LOWER = 5.0
POSITION_HIGHER = 0.0


def validate_district_count(target: int, registry: DistrictTypeRegistry, context=None) -> int:
    """Clamp ``target`` into [sum of minimums, sum of maximums]."""
    low, high = registry.min_total, registry.max_total
    clamped = max(low, min(high, int(target)))
    if clamped != target and context is not None:
        context.report(
            STAGE,
            "district count outside the range the types allow, clamping",
            requested=target,
            minimum=low,
            maximum=high,
            used=clamped,
        )
    return clamped


def build_queues(registry: DistrictTypeRegistry) -> tuple[list[DistrictType], list[DistrictType]]:
    """One slot per required placement, then one per optional placement."""
    min_queue: list[DistrictType] = []
    rest_queue: list[DistrictType] = []
    for t in registry:
        min_queue.extend([t] * t.min_placements)
        rest_queue.extend([t] * (t.max_placements - t.min_placements))
    return min_queue, rest_queue


def neighbour_score(
    type_id: int,
    location: Point,
    placed: Sequence[District],
    registry: DistrictTypeRegistry,
    boundary: Boundary,
) -> float:
    score = 0.0
    x, y = location
    for d in placed:
        weight = registry.relation(type_id, d.type_id).weight
        if weight == 0:
            continue
        dist = math.hypot(x - d.position[0], y - d.position[1])
        scaled = max(boundary.scaled_distance(dist), MIN_SCALED_DISTANCE)
        score += weight / scaled
    return score


def position_score(district_type: DistrictType, location: Point, boundary: Boundary) -> float:
    """Coarse preference curve: 10 on the preferred ring, 5 inside it, 0 outside."""
    scaled = boundary.scaled_distance(boundary.distance_to_center(*location))
    preferred = district_type.distance_from_center
    if math.isclose(scaled, preferred, rel_tol=1e-6, abs_tol=1e-6):
        return POSITION_EQUAL
    if scaled < preferred:
        return POSITION_LOWER
    return POSITION_HIGHER


def suitability(
    district_type: DistrictType,
    location: Point,
    placed: Sequence[District],
    registry: DistrictTypeRegistry,
    boundary: Boundary,
    *,
    neighbour_weight: float,
    center_weight: float,
) -> float:
    return neighbour_weight * neighbour_score(
        district_type.id, location, placed, registry, boundary
    ) + center_weight * position_score(district_type, location, boundary)


def _best_slot(queue, location, placed, registry, boundary, neighbour_weight, center_weight) -> int:
    best_index = -1
    best_score = -math.inf
    for i, t in enumerate(queue):
        s = suitability(
            t,
            location,
            placed,
            registry,
            boundary,
            neighbour_weight=neighbour_weight,
            center_weight=center_weight,
        )
        if s > best_score:
            best_index, best_score = i, s
    return best_index


def place(
    candidates: list[Point],
    registry: DistrictTypeRegistry,
    boundary: Boundary,
    target: int,
    *,
    neighbour_weight: float = 0.4,
    center_weight: float = 0.3,
    context=None,
) -> tuple[list[District], dict[int, District]]:
    """Assign a district type to candidates in order until ``target`` are placed.

    Consumed candidates are removed from ``candidates``. Minimum slots are
    filled before any optional slot is considered.
    """
    if context is None:
        from ..context import GenerationContext

        context = GenerationContext()
    target = validate_district_count(target, registry, context)
    min_queue, rest_queue = build_queues(registry)

    placed: list[District] = []
    while candidates and len(placed) < target:
        queue = min_queue if min_queue else rest_queue
        if not queue:
            break
        location = candidates.pop(0)
        slot = _best_slot(queue, location, placed, registry, boundary, neighbour_weight, center_weight)
        chosen = queue.pop(slot)
        district = District(id=context.next_id(), type_id=chosen.id, position=location)
        placed.append(district)
        log.debug(
            "placement: district %d -> %s at (%.1f, %.1f)",
            district.id,
            chosen.name,
            location[0],
            location[1],
        )

    if len(placed) < target:
        context.report(
            STAGE,
            "ran out of candidate points before reaching the district count",
            placed=len(placed),
            target=target,
        )
    context.mark_initialized("districts")
    log.info("placement: %d districts placed", len(placed))
    return placed, {d.id: d for d in placed}
