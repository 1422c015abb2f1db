"""
Connected components of the partition raster.

Road generation asks for components with no inset; lot preparation asks for
an inset so blocks keep clear of the streets.
"""

from __future__ import annotations

import logging

import numpy as np

from .voronoi import Region, RegionMap

log = logging.getLogger(__name__)


def suppression_mask(labels: np.ndarray, inset: int) -> np.ndarray:
    """True where a pixel lies within ``inset`` (Chebyshev) of border/outside or the grid edge."""
    blocked = labels < 0
    if inset <= 0:
        return blocked
    h, w = labels.shape
    padded = np.pad(blocked, inset, constant_values=True)
    near = np.zeros_like(blocked)
    for dy in range(-inset, inset + 1):
        for dx in range(-inset, inset + 1):
            near |= padded[inset + dy:inset + dy + h, inset + dx:inset + dx + w]
    return near


def extract(region_map: RegionMap, inset: int = 0) -> list[Region]:
    """4-connected components of same-label interior pixels, in row-major discovery order."""
    h, w = region_map.labels.shape
    # plain lists are much cheaper than numpy scalars inside the fill loop
    labels = region_map.labels.tolist()
    visited = suppression_mask(region_map.labels, inset).tolist()
    regions: list[Region] = []

    for y in range(h):
        row_visited = visited[y]
        for x in range(w):
            if row_visited[x]:
                continue
            label = labels[y][x]
            pixels: list[tuple[int, int]] = []
            stack = [(x, y)]
            row_visited[x] = True
            while stack:
                px, py = stack.pop()
                pixels.append((px, py))
                for nx, ny in ((px + 1, py), (px - 1, py), (px, py + 1), (px, py - 1)):
                    if 0 <= nx < w and 0 <= ny < h and not visited[ny][nx] and labels[ny][nx] == label:
                        visited[ny][nx] = True
                        stack.append((nx, ny))
            regions.append(Region(id=len(regions), label=label, pixels=pixels))

    log.debug("regions: %d components at inset %d", len(regions), inset)
    return regions
