"""
Secondary streets: one L-system run per region, fanned out over processes.
"""

from __future__ import annotations

import logging
import random
from typing import Sequence

import numpy as np

from ..partition.voronoi import BORDER, Region, RegionMap
from ..utils.parallel import run_process_map
from . import lsystem

log = logging.getLogger(__name__)

STAGE = "secondary_roads"


def choose_start_point(region: Region, labels: np.ndarray, rng: random.Random) -> tuple[int, int]:
    """A border pixel touching the region, so new streets hook onto existing ones."""
    xs = np.fromiter((p[0] for p in region.pixels), dtype=np.intp, count=len(region.pixels))
    ys = np.fromiter((p[1] for p in region.pixels), dtype=np.intp, count=len(region.pixels))
    inside = np.zeros(labels.shape, dtype=bool)
    inside[ys, xs] = True

    padded = np.pad(inside, 1, constant_values=False)
    touching = padded[:-2, 1:-1] | padded[2:, 1:-1] | padded[1:-1, :-2] | padded[1:-1, 2:]
    cy, cx = np.nonzero(touching & (labels == BORDER) & ~inside)
    if len(cx) == 0:
        return region.pixels[0]
    candidates = list(zip(cx.tolist(), cy.tolist()))
    return candidates[rng.randrange(len(candidates))]


def _region_worker(pixels, axiom, angle, segment_length, start, road_width, grid_size, max_iterations):
    return lsystem.generate(
        pixels,
        axiom,
        angle,
        segment_length,
        start,
        road_width,
        grid_size=grid_size,
        max_iterations=max_iterations,
    )


def generate_secondary_roads(
    region_map: RegionMap,
    regions: Sequence[Region],
    *,
    axiom: str = "A",
    angle: float = 90.0,
    segment_length: int = 30,
    road_width: int = 1,
    rng: random.Random | None = None,
    context=None,
    workers: int = 1,
    max_iterations: int | None = lsystem.DEFAULT_MAX_ITERATIONS,
) -> set[tuple[int, int]]:
    """Draw L-system streets into every region and merge them into the map as border.

    A region whose generation fails is reported and left untouched; its
    siblings still get their streets. Regions that need more than
    ``max_iterations`` expansions are drawn at the cap and reported.
    """
    rng = rng or random.Random()
    todo = [r for r in regions if r.pixels]
    starts = [choose_start_point(r, region_map.labels, rng) for r in todo]
    args = [
        (r.pixels, axiom, angle, segment_length, start, road_width, region_map.size, max_iterations)
        for r, start in zip(todo, starts)
    ]
    for r in todo:
        if context is not None and lsystem.is_capped(axiom, segment_length, len(r.pixels), max_iterations):
            context.report(
                STAGE,
                "region needs more L-system iterations than allowed, drawing at the cap",
                region=r.id,
                district=r.label,
                needed=lsystem.calculate_iterations(axiom, segment_length, len(r.pixels)),
                cap=max_iterations,
            )
    results = run_process_map(_region_worker, args, max_workers=workers, return_exceptions=True)

    drawn: set[tuple[int, int]] = set()
    failed = 0
    for region, start, result in zip(todo, starts, results):
        if isinstance(result, Exception):
            failed += 1
            if context is not None:
                context.report(
                    STAGE,
                    "street generation failed for region",
                    region=region.id,
                    district=region.label,
                    start=start,
                    error=repr(result),
                )
            else:
                log.warning("secondary roads: region %d failed: %r", region.id, result)
            continue
        drawn |= result

    changed = region_map.mark_border(drawn)
    log.info(
        "secondary roads: %d regions, %d failed, %d new border pixels",
        len(todo),
        failed,
        changed,
    )
    return drawn
