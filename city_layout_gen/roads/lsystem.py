"""
L-system street strokes.

A two-symbol grammar is expanded a few times and played back as a turtle
program; every forward stroke is rasterised with Bresenham, clipped to the
region and widened into a road.
"""

from __future__ import annotations

import logging
from typing import Iterable

from .patterns import bresenham_line, normalize_angle, step_from, widen

log = logging.getLogger(__name__)

RULES = {
    "A": "A+B++B-A--AA-B+",
    "B": "-A+BB++B+A--A-B",
}
FORWARD = frozenset("AB")

# default for roads.secondary.max_iterations; the symbol string grows 15x per step
DEFAULT_MAX_ITERATIONS = 6


def expand(axiom: str, iterations: int, rules: dict[str, str] = RULES) -> str:
    """Rewrite ``axiom`` ``iterations`` times; unknown symbols pass through."""
    s = axiom
    for _ in range(max(0, iterations)):
        s = "".join(rules.get(ch, ch) for ch in s)
    return s


def calculate_iterations(
    axiom: str, segment_length: int, region_size: int, max_iterations: int | None = None
) -> int:
    """Smallest k with len(axiom) * 4**k * segment_length >= region_size.

    ``max_iterations`` clamps the result; ``None`` leaves it unbounded.
    """
    if not axiom or segment_length <= 0:
        return 0
    k = 0
    while len(axiom) * 4 ** k * segment_length < region_size:
        k += 1
    if max_iterations is not None:
        k = min(k, max(0, max_iterations))
    return k


def is_capped(axiom: str, segment_length: int, region_size: int, max_iterations: int | None) -> bool:
    """True when ``max_iterations`` stops short of the iterations the region needs."""
    if max_iterations is None:
        return False
    return calculate_iterations(axiom, segment_length, region_size) > max_iterations


def _bounds(pixels: Iterable[tuple[int, int]]) -> tuple[int, int, int, int]:
    xs, ys = zip(*pixels)
    return min(xs), min(ys), max(xs), max(ys)


def generate(
    region_pixels,
    axiom: str,
    angle: float,
    segment_length: int,
    start_point: tuple[int, int],
    road_width: int,
    *,
    grid_size: int | None = None,
    max_iterations: int | None = None,
) -> set[tuple[int, int]]:
    """Pixels to turn into road for one region.

    Returns an empty set when the region is too small for a single
    expansion (zero iterations).
    """
    region = region_pixels if isinstance(region_pixels, (set, frozenset)) else set(region_pixels)
    if not region:
        return set()
    iterations = calculate_iterations(axiom, segment_length, len(region), max_iterations)
    if iterations == 0:
        return set()

    program = expand(axiom, iterations)
    min_x, min_y, max_x, max_y = _bounds(region)
    x, y = start_point
    heading = 0.0
    stroke: set[tuple[int, int]] = set()
    strokes = 0

    for ch in program:
        if ch == "+":
            heading = normalize_angle(heading + angle)
        elif ch == "-":
            heading = normalize_angle(heading - angle)
        elif ch in FORWARD:
            nx, ny = step_from(x, y, heading, segment_length)
            # skip lines that can't touch the region at all
            if not (max(x, nx) < min_x or min(x, nx) > max_x or max(y, ny) < min_y or min(y, ny) > max_y):
                stroke.update(p for p in bresenham_line(x, y, nx, ny) if p in region)
                strokes += 1
            x, y = nx, ny

    out = widen(stroke, road_width, grid_size)
    log.debug(
        "lsystem: %d iterations, %d strokes in region, %d pixels", iterations, strokes, len(out)
    )
    return out
