from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Mapping

from ..districts.models import District, DistrictTypeRegistry
from ..partition.regions import extract
from ..partition.voronoi import Region, RegionMap

log = logging.getLogger(__name__)

STAGE = "lots"

Pixel = tuple[int, int]


@dataclass(slots=True)
class Lot:
    pixels: list[Pixel]
    valid: bool = True
    district_id: int | None = None
    merged_blocks: int = 0

    @property
    def area(self) -> int:
        return len(self.pixels)

    def bounds(self) -> tuple[int, int, int, int]:
        xs = [p[0] for p in self.pixels]
        ys = [p[1] for p in self.pixels]
        return min(xs), min(ys), max(xs), max(ys)

    def centroid(self) -> tuple[float, float]:
        n = len(self.pixels)
        return sum(p[0] for p in self.pixels) / n, sum(p[1] for p in self.pixels) / n

    def as_dict(self) -> dict:
        min_x, min_y, max_x, max_y = self.bounds()
        return {
            "district": self.district_id,
            "valid": self.valid,
            "area": self.area,
            "merged_blocks": self.merged_blocks,
            "bounds": [min_x, min_y, max_x, max_y],
        }


def _touches(lot_pixels: set[Pixel], block: list[Pixel]) -> bool:
    for x, y in block:
        if (x + 1, y) in lot_pixels or (x - 1, y) in lot_pixels or (x, y + 1) in lot_pixels or (x, y - 1) in lot_pixels:
            return True
    return False


def bin_blocks(region: Region, min_block_size: int) -> list[list[Pixel]]:
    """Grid-bin the region's bounding box; non-empty bins sorted by lower-left corner."""
    min_x, min_y, max_x, max_y = region.bounds()
    width = max_x - min_x + 1
    height = max_y - min_y + 1
    cols = math.ceil(width / min_block_size)
    rows = math.ceil(height / min_block_size)
    cell_w = width / cols
    cell_h = height / rows

    bins: dict[tuple[int, int], list[Pixel]] = {}
    for x, y in region.pixels:
        gx = min(cols - 1, int((x - min_x) / cell_w))
        gy = min(rows - 1, int((y - min_y) / cell_h))
        bins.setdefault((gx, gy), []).append((x, y))
    return sorted(bins.values(), key=min)


def subdivide(
    region: Region,
    min_block_size: int,
    min_lot_area: int,
    district_id: int | None = None,
) -> list[Lot]:
    """Split a region into lots of at least ``min_lot_area`` pixels.

    Undersized blocks are folded into the first accepted lot they touch.
    Blocks nothing can absorb come back with ``valid=False`` after the
    valid lots.
    """
    if min_block_size <= 0:
        raise ValueError(f"min_block_size must be positive, got {min_block_size!r}")
    if not region.pixels:
        return []

    accepted: list[tuple[Lot, set[Pixel]]] = []
    unmerged: list[Lot] = []
    for block in bin_blocks(region, min_block_size):
        if len(block) >= min_lot_area:
            accepted.append((Lot(sorted(block), True, district_id), set(block)))
            continue
        for lot, members in accepted:
            if lot.area + len(block) >= min_lot_area and _touches(members, block):
                lot.pixels.extend(block)
                lot.pixels.sort()
                members.update(block)
                lot.merged_blocks += 1
                break
        else:
            unmerged.append(Lot(sorted(block), False, district_id))

    return [lot for lot, _ in accepted] + unmerged


def generate_lots(
    region_map: RegionMap,
    district_map: Mapping[int, District],
    registry: DistrictTypeRegistry,
    *,
    min_block_size: int,
    inset: int = 0,
    default_min_lot_area: int = 1,
    context=None,
) -> dict[int, list[Lot]]:
    """Lots for every inset region of the map, keyed by owning district id."""
    out: dict[int, list[Lot]] = {}
    unmerged = 0
    for area in extract(region_map, inset):
        district = district_map.get(area.label)
        if district is None:
            continue
        dtype = registry.get(district.type_id)
        min_area = dtype.min_lot_area if dtype.min_lot_area is not None else default_min_lot_area
        lots = subdivide(area, min_block_size, min_area, district_id=district.id)
        unmerged += sum(1 for lot in lots if not lot.valid)
        out.setdefault(district.id, []).extend(lots)

    if unmerged and context is not None:
        context.report(
            STAGE,
            "undersized blocks left unmerged",
            count=unmerged,
            min_block_size=min_block_size,
        )
    log.info(
        "lots: %d valid lots over %d districts",
        sum(1 for lots in out.values() for lot in lots if lot.valid),
        len(out),
    )
    return out
