"""
Nearest-seed raster partition of the city disk.

Labels live in a numpy ``int32`` array indexed ``[y, x]``: a district id for
interior pixels, ``BORDER`` for road pixels and ``OUTSIDE`` beyond the
boundary disk.
"""

from __future__ import annotations

import logging
import math
import random
from dataclasses import dataclass, field
from typing import Sequence

import numpy as np

from ..districts.models import Boundary, District
from ..utils.parallel import run_process_map, split_range

log = logging.getLogger(__name__)

OUTSIDE = -1
BORDER = -2

# (x, y, owning district id)
Seed = tuple[float, float, int]
Pixel = tuple[int, int]


@dataclass
class RegionMap:
    labels: np.ndarray
    center: tuple[float, float]
    radius: float
    seeds: list[Seed] = field(default_factory=list)

    @property
    def size(self) -> int:
        return int(self.labels.shape[0])

    def in_bounds(self, x: int, y: int) -> bool:
        return 0 <= x < self.size and 0 <= y < self.size

    def label_at(self, x: int, y: int) -> int:
        return int(self.labels[y, x])

    def is_border(self, x: int, y: int) -> bool:
        return self.in_bounds(x, y) and self.labels[y, x] == BORDER

    def border_pixels(self) -> set[Pixel]:
        ys, xs = np.nonzero(self.labels == BORDER)
        return set(zip(xs.tolist(), ys.tolist()))

    def mark_border(self, pixels) -> int:
        """Turn non-outside pixels into border; returns how many changed."""
        pts = sorted({(x, y) for x, y in pixels if self.in_bounds(x, y)})
        if not pts:
            return 0
        xs = np.fromiter((p[0] for p in pts), dtype=np.intp, count=len(pts))
        ys = np.fromiter((p[1] for p in pts), dtype=np.intp, count=len(pts))
        current = self.labels[ys, xs]
        hit = current >= 0
        self.labels[ys[hit], xs[hit]] = BORDER
        return int(np.count_nonzero(hit))


@dataclass(slots=True)
class Region:
    id: int
    label: int
    pixels: list[Pixel] = field(default_factory=list)

    @property
    def size(self) -> int:
        return len(self.pixels)

    def bounds(self) -> tuple[int, int, int, int]:
        """(min_x, min_y, max_x, max_y), inclusive."""
        xs = [p[0] for p in self.pixels]
        ys = [p[1] for p in self.pixels]
        return min(xs), min(ys), max(xs), max(ys)


def nearest_label(x: float, y: float, seeds: Sequence[Seed]) -> int:
    """Label of the nearest seed; ties go to the seed listed first."""
    best = OUTSIDE
    best_d = math.inf
    for sx, sy, label in seeds:
        d = (x - sx) ** 2 + (y - sy) ** 2
        if d < best_d:
            best, best_d = label, d
    return best


def _label_rows(y0: int, y1: int, size: int, cx: float, cy: float, radius: float, seeds: list) -> np.ndarray:
    """Worker: nearest-seed labels for rows [y0, y1)."""
    xs = np.arange(size, dtype=np.float64)
    ys = np.arange(y0, y1, dtype=np.float64)
    gx, gy = np.meshgrid(xs, ys)
    inside = (gx - cx) ** 2 + (gy - cy) ** 2 < radius * radius

    best_d = np.full(gx.shape, np.inf)
    best_l = np.full(gx.shape, OUTSIDE, dtype=np.int32)
    for sx, sy, label in seeds:
        d = (gx - sx) ** 2 + (gy - sy) ** 2
        closer = d < best_d
        best_d = np.where(closer, d, best_d)
        best_l = np.where(closer, np.int32(label), best_l)

    out = np.full(gx.shape, OUTSIDE, dtype=np.int32)
    out[inside] = best_l[inside]
    return out


def label_pixels(size: int, boundary: Boundary, seeds: Sequence[Seed], workers: int = 1) -> np.ndarray:
    cx, cy = boundary.center
    chunks = split_range(size, max(1, workers))
    parts = run_process_map(
        _label_rows,
        [(a, b, size, cx, cy, boundary.radius, list(seeds)) for a, b in chunks],
        max_workers=workers,
    )
    if not parts:
        return np.full((0, 0), OUTSIDE, dtype=np.int32)
    return np.vstack(parts).astype(np.int32, copy=False)


def border_mask(labels: np.ndarray, outer_ring: bool = True) -> np.ndarray:
    """Interior pixels that become border.

    Between two districts only the pixel on the low side (-x or -y) of each
    differing pair is marked, which keeps district borders one pixel wide.
    """
    interior = labels >= 0
    mask = np.zeros(labels.shape, dtype=bool)

    right_diff = interior[:, :-1] & interior[:, 1:] & (labels[:, :-1] != labels[:, 1:])
    mask[:, :-1] |= right_diff
    down_diff = interior[:-1, :] & interior[1:, :] & (labels[:-1, :] != labels[1:, :])
    mask[:-1, :] |= down_diff

    if outer_ring:
        # grid edges count as outside
        padded = np.pad(interior, 1, constant_values=False)
        touches_outside = (
            ~padded[:-2, 1:-1] | ~padded[2:, 1:-1] | ~padded[1:-1, :-2] | ~padded[1:-1, 2:]
        )
        mask |= interior & touches_outside
    return mask


def collect_regions(labels: np.ndarray, ids: Sequence[int]) -> dict[int, Region]:
    regions: dict[int, Region] = {}
    for rid in ids:
        ys, xs = np.nonzero(labels == rid)
        regions[rid] = Region(id=rid, label=rid, pixels=list(zip(xs.tolist(), ys.tolist())))
    return regions


def refresh_regions(region_map: RegionMap, ids: Sequence[int] | None = None) -> dict[int, Region]:
    """Rebuild the id-keyed region pixel lists from the current labels."""
    if ids is None:
        ids = sorted(int(v) for v in np.unique(region_map.labels) if v >= 0)
    return collect_regions(region_map.labels, ids)


def _distortion_seeds(
    count: int, boundary: Boundary, undistorted: np.ndarray, rng: random.Random
) -> list[Seed]:
    size = undistorted.shape[0]
    cx, cy = boundary.center
    seeds: list[Seed] = []
    for _ in range(count):
        r = boundary.radius * math.sqrt(rng.random())
        a = rng.uniform(0.0, 2 * math.pi)
        x = cx + math.cos(a) * r
        y = cy + math.sin(a) * r
        px, py = int(math.floor(x)), int(math.floor(y))
        if not (0 <= px < size and 0 <= py < size):
            continue
        label = int(undistorted[py, px])
        if label < 0:
            continue
        seeds.append((x, y, label))
    return seeds


def partition(
    size: int,
    districts: Sequence[District],
    boundary: Boundary,
    distortion_point_count: int = 0,
    rng: random.Random | None = None,
    *,
    workers: int = 1,
    outer_ring: bool = True,
) -> tuple[RegionMap, dict[int, Region]]:
    """Label every pixel with its nearest district, then mark borders.

    With ``distortion_point_count > 0`` a second pass adds extra seeds drawn
    inside the disk; each inherits the district of the first-pass cell it
    lands in, which roughens the cell outlines without moving ownership.
    """
    if size <= 0:
        raise ValueError(f"Partition size must be positive, got {size!r}")
    seeds: list[Seed] = [(d.position[0], d.position[1], d.id) for d in districts]
    labels = label_pixels(size, boundary, seeds, workers)

    if distortion_point_count > 0 and seeds:
        rng = rng or random.Random()
        extra = _distortion_seeds(distortion_point_count, boundary, labels, rng)
        log.debug("voronoi: %d/%d distortion seeds kept", len(extra), distortion_point_count)
        seeds = seeds + extra
        labels = label_pixels(size, boundary, seeds, workers)

    labels[border_mask(labels, outer_ring)] = BORDER
    region_map = RegionMap(labels=labels, center=boundary.center, radius=boundary.radius, seeds=seeds)
    regions = collect_regions(labels, [d.id for d in districts])
    log.info(
        "voronoi: %dx%d grid, %d seeds, %d border pixels",
        size,
        size,
        len(seeds),
        int(np.count_nonzero(labels == BORDER)),
    )
    return region_map, regions
