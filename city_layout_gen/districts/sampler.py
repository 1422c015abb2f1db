"""
Blue-noise candidate points inside the city boundary.

Dart throwing over a uniform acceleration grid: good spread for district
seeds, not exact Poisson-disk statistics.
"""

from __future__ import annotations

import logging
import math
import random

from .models import Boundary, Point

log = logging.getLogger(__name__)

STAGE = "sampling"


def sample(
    boundary: Boundary,
    min_separation: float,
    rejection_attempts: int = 30,
    rng: random.Random | None = None,
    max_points: int | None = None,
) -> list[Point]:
    """Return points strictly inside ``boundary``, pairwise >= ``min_separation`` apart.

    The active list starts at the boundary centre, which seeds the search but
    is not itself part of the result. Generation stops when the active list
    runs dry or ``max_points`` points have been accepted.
    """
    if min_separation <= 0:
        raise ValueError(f"min_separation must be positive, got {min_separation!r}")
    rng = rng or random.Random()
    cell = min_separation / math.sqrt(2)
    cx, cy = boundary.center
    ox, oy = cx - boundary.radius, cy - boundary.radius
    cols = int(math.ceil(2 * boundary.radius / cell)) + 1
    grid: list[list[int]] = [[-1] * cols for _ in range(cols)]

    def cell_of(x: float, y: float) -> tuple[int, int]:
        return int((x - ox) / cell), int((y - oy) / cell)

    points: list[Point] = []
    active: list[Point] = [boundary.center]
    min_sq = min_separation * min_separation

    def fits(x: float, y: float) -> bool:
        if not boundary.contains(x, y):
            return False
        gx, gy = cell_of(x, y)
        for j in range(max(0, gy - 2), min(cols, gy + 3)):
            row = grid[j]
            for i in range(max(0, gx - 2), min(cols, gx + 3)):
                idx = row[i]
                if idx < 0:
                    continue
                px, py = points[idx]
                if (px - x) ** 2 + (py - y) ** 2 < min_sq:
                    return False
        return True

    while active:
        if max_points is not None and len(points) >= max_points:
            break
        pick = rng.randrange(len(active))
        ax, ay = active[pick]
        for _ in range(rejection_attempts):
            angle = rng.uniform(0.0, 2 * math.pi)
            dist = rng.uniform(min_separation, 2 * min_separation)
            x = ax + math.cos(angle) * dist
            y = ay + math.sin(angle) * dist
            if fits(x, y):
                gx, gy = cell_of(x, y)
                grid[gy][gx] = len(points)
                points.append((x, y))
                active.append((x, y))
                break
        else:
            active.pop(pick)

    log.debug("sampler: %d points at separation %.2f", len(points), min_separation)
    return points


def packing_radius(boundary: Boundary, target: int) -> float:
    """Separation that lets roughly ``target`` discs share the city area."""
    if target <= 0:
        raise ValueError(f"target district count must be positive, got {target!r}")
    area_per_district = boundary.area / target * 2
    return math.sqrt(area_per_district / math.pi)


def sample_district_candidates(
    boundary: Boundary,
    target: int,
    rejection_attempts: int = 30,
    rng: random.Random | None = None,
    context=None,
    retry_rounds: int = 8,
) -> list[Point]:
    """Sample at most ``target`` well-spread candidates for district seeds.

    The packing radius is derived from the city area. When the disk can't
    hold ``target`` points at that radius, the radius shrinks by 10% and the
    draw is repeated, up to ``retry_rounds`` times.
    """
    if target <= 0:
        if context is not None:
            context.report(STAGE, "no districts requested; nothing to sample", target=target)
        return []
    rng = rng or random.Random()
    radius = packing_radius(boundary, target)
    points: list[Point] = []
    for attempt in range(retry_rounds + 1):
        points = sample(boundary, radius, rejection_attempts, rng, max_points=target)
        if len(points) >= target:
            break
        if attempt < retry_rounds:
            if context is not None:
                context.report(
                    STAGE,
                    "too few candidate points, shrinking packing radius",
                    got=len(points),
                    target=target,
                    radius=round(radius, 3),
                )
            radius *= 0.9

    if not points and context is not None:
        context.report(STAGE, "no candidate points available", target=target, radius=round(radius, 3))
    log.info("sampler: %d/%d district candidates", len(points), target)
    return points
