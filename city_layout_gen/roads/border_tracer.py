"""
Border graph tracer.

Turns the loose set of border pixels in a ``RegionMap`` into a graph of
polyline edges. Each edge runs from one junction ("split mark") to the next
and carries sample points spaced ``segment_length`` steps apart; those
polylines are what a street-mesh builder consumes.

The walk for one edge is a FIFO flood over unvisited 8-connected border
pixels. At every pixel the still-unvisited neighbours are classified; a
junction ends the edge and the branches leaving it are queued as new edges.
Edges are expanded breadth-first starting from the outer ring.
"""

from __future__ import annotations

import logging
import math
from collections import deque
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Sequence

import numpy as np

from ..partition.voronoi import BORDER, OUTSIDE, RegionMap
from .patterns import NEIGHBOURS_8

log = logging.getLogger(__name__)

Pixel = tuple[int, int]


class NoStartPointError(RuntimeError):
    """The partition has no border pixel touching the outside of the boundary."""


class SplitKind(Enum):
    NOT_A_SPLIT = "not_a_split"
    CROSSING = "crossing"  # four or more ways on
    FORK = "fork"  # three ways on, at least one standing apart
    BRANCH = "branch"  # two separate ways on, neither a dead end
    DEAD_END = "dead_end"  # nothing left to walk from here

    @property
    def is_junction(self) -> bool:
        return self in (SplitKind.CROSSING, SplitKind.FORK, SplitKind.BRANCH)


@dataclass(frozen=True, slots=True)
class BorderToTrace:
    start: Pixel
    next_point: Pixel | None


@dataclass(slots=True)
class Border:
    start: Pixel
    end: Pixel
    samples: list[Pixel] = field(default_factory=list)
    steps: int = 0

    def polyline(self) -> list[Pixel]:
        return [self.start, *self.samples, self.end]

    def as_dict(self) -> dict:
        return {
            "start": list(self.start),
            "samples": [list(p) for p in self.samples],
            "end": list(self.end),
            "steps": self.steps,
        }


def adjacent(a: Pixel, b: Pixel) -> bool:
    """8-adjacency (diagonals included), distinct pixels only."""
    return a != b and abs(a[0] - b[0]) <= 1 and abs(a[1] - b[1]) <= 1


def neighbour_counts(points: Sequence[Pixel]) -> list[int]:
    return [sum(1 for q in points if adjacent(p, q)) for p in points]


def is_dead_end(point: Pixel, remaining: Sequence[Pixel], is_open: Callable[[Pixel], bool]) -> bool:
    taken = set(remaining)
    for dx, dy in NEIGHBOURS_8:
        q = (point[0] + dx, point[1] + dy)
        if q not in taken and is_open(q):
            return False
    return True


def classify(remaining: Sequence[Pixel], is_open: Callable[[Pixel], bool]) -> SplitKind:
    """Classify a walker position by its remaining unvisited border neighbours."""
    n = len(remaining)
    if n == 0:
        return SplitKind.DEAD_END
    if n >= 4:
        return SplitKind.CROSSING
    if n == 3:
        if 0 in neighbour_counts(remaining):
            return SplitKind.FORK
        return SplitKind.NOT_A_SPLIT
    if n == 2:
        a, b = remaining
        if not adjacent(a, b) and not is_dead_end(a, remaining, is_open) and not is_dead_end(b, remaining, is_open):
            return SplitKind.BRANCH
    return SplitKind.NOT_A_SPLIT


def branch_points(kind: SplitKind, remaining: Sequence[Pixel]) -> list[Pixel]:
    """Directions to continue from a junction of the given kind."""
    remaining = list(remaining)
    if kind is SplitKind.CROSSING:
        counts = neighbour_counts(remaining)
        if all(c == 1 for c in counts):
            # every neighbour pairs up with exactly one other: one branch per pair
            out, paired = [], set()
            for p in remaining:
                if p in paired:
                    continue
                partner = next(q for q in remaining if adjacent(p, q))
                paired.update((p, partner))
                out.append(p)
            return out
        return [p for p, c in zip(remaining, counts) if c == 1]
    if kind is SplitKind.FORK:
        counts = neighbour_counts(remaining)
        isolated = remaining[counts.index(0)]
        rest = [p for p in remaining if p != isolated]
        return [isolated, rest[0]]
    if kind is SplitKind.BRANCH:
        return remaining
    return []


def find_start_point(region_map: RegionMap) -> Pixel:
    """First border pixel (row-major) with a 4-neighbour outside the boundary."""
    labels = region_map.labels
    outside = np.pad(labels == OUTSIDE, 1, constant_values=False)
    touches = outside[:-2, 1:-1] | outside[2:, 1:-1] | outside[1:-1, :-2] | outside[1:-1, 2:]
    ys, xs = np.nonzero((labels == BORDER) & touches)
    if len(xs):
        return (int(xs[0]), int(ys[0]))
    raise NoStartPointError(
        f"No border pixel touches the outside of the boundary "
        f"(grid {labels.shape[1]}x{labels.shape[0]}, radius {region_map.radius})"
    )


class BorderTracer:
    """Stateful tracer over one ``RegionMap``; ``visited`` spans every edge traced."""

    def __init__(self, region_map: RegionMap, segment_length: int):
        if segment_length <= 0:
            raise ValueError(f"segment_length must be positive, got {segment_length!r}")
        self.region_map = region_map
        self.segment_length = int(segment_length)
        self.visited: set[Pixel] = set()
        self.split_marks: list[Pixel] = []

    def is_open(self, p: Pixel) -> bool:
        return p not in self.visited and self.region_map.is_border(p[0], p[1])

    def remaining_neighbours(self, p: Pixel) -> list[Pixel]:
        out = []
        for dx, dy in NEIGHBOURS_8:
            q = (p[0] + dx, p[1] + dy)
            if self.is_open(q):
                out.append(q)
        return out

    def first_step(self, start: Pixel) -> Pixel | None:
        """Open neighbour of ``start`` heading inward, else any open neighbour."""
        cx, cy = self.region_map.center
        here = math.hypot(start[0] - cx, start[1] - cy)
        options = self.remaining_neighbours(start)
        for q in options:
            if math.hypot(q[0] - cx, q[1] - cy) < here:
                return q
        return options[0] if options else None

    def walk(self, item: BorderToTrace) -> tuple[Border | None, list[BorderToTrace]]:
        """Follow one edge until a junction or until the frontier runs dry."""
        frontier: deque[Pixel] = deque([item.next_point])
        queued = {item.next_point}
        samples: list[Pixel] = []
        steps = 0
        split: Pixel | None = None
        kind = SplitKind.NOT_A_SPLIT
        remaining: list[Pixel] = []

        while frontier:
            current = frontier.popleft()
            queued.discard(current)
            if current in self.visited:
                continue
            self.visited.add(current)
            steps += 1

            remaining = self.remaining_neighbours(current)
            for q in remaining:
                if q not in queued:
                    frontier.append(q)
                    queued.add(q)

            kind = classify(remaining, self.is_open)
            if kind.is_junction or not frontier:
                split = current
                break
            if steps % self.segment_length == 0:
                samples.append(current)

        if split is None:
            return None, []

        self.split_marks.append(split)
        border = Border(start=item.start, end=split, samples=samples, steps=steps)
        branches = branch_points(kind, remaining)
        if not branches and remaining:
            # nothing the junction rules can pair up; keep every way on open
            branches = list(remaining)
        log.debug("tracer: edge %s -> %s (%s, %d branches)", item.start, split, kind.value, len(branches))
        return border, [BorderToTrace(split, b) for b in branches]

    def trace(self, start: Pixel, *, sweep: bool = True) -> list[Border]:
        """Breadth-first expansion of edges from ``start``.

        With ``sweep`` the tracer keeps going after the queue drains: border
        pixels still unvisited (fragments cut off behind a junction, or not
        connected to ``start`` at all) seed further traces until none remain.
        """
        borders: list[Border] = []
        self.visited.add(start)
        queue: deque[BorderToTrace] = deque()
        first = self.first_step(start)
        if first is not None:
            queue.append(BorderToTrace(start, first))
        self._drain(queue, borders)

        if sweep:
            for p in sorted(self.region_map.border_pixels(), key=lambda q: (q[1], q[0])):
                if p in self.visited:
                    continue
                anchor = next(
                    (
                        (p[0] + dx, p[1] + dy)
                        for dx, dy in NEIGHBOURS_8
                        if (p[0] + dx, p[1] + dy) in self.visited
                    ),
                    None,
                )
                if anchor is not None:
                    queue.append(BorderToTrace(anchor, p))
                else:
                    self.visited.add(p)
                    nxt = self.first_step(p)
                    if nxt is None:
                        continue
                    queue.append(BorderToTrace(p, nxt))
                self._drain(queue, borders)

        log.info("tracer: %d edges, %d junctions, %d pixels", len(borders), len(self.split_marks), len(self.visited))
        return borders

    def _drain(self, queue: deque, borders: list[Border]) -> None:
        while queue:
            item = queue.popleft()
            if item.next_point is None:
                continue
            border, follow_ups = self.walk(item)
            if border is None:
                continue
            borders.append(border)
            queue.extend(f for f in follow_ups if f.next_point is not None)


def trace(region_map: RegionMap, start_point: Pixel, segment_length: int, *, sweep: bool = True) -> list[Border]:
    return BorderTracer(region_map, segment_length).trace(start_point, sweep=sweep)


def trace_map(region_map: RegionMap, segment_length: int, *, sweep: bool = True) -> list[Border]:
    """Trace from the default entry point on the outer ring.

    Raises ``NoStartPointError`` when no border pixel touches the outside.
    """
    return trace(region_map, find_start_point(region_map), segment_length, sweep=sweep)
