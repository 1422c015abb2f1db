# city_layout_gen/render.py
"""
Pixel buffers and preview overlays for a generated layout.

``render_partition`` is the buffer handed to whatever displays the city;
the PIL overlays are only for previews.
"""

from __future__ import annotations

from typing import Mapping, Sequence

import numpy as np
from PIL import Image, ImageDraw

from .districts.models import District, DistrictTypeRegistry
from .lots.subdivider import Lot
from .partition.voronoi import BORDER, OUTSIDE, RegionMap
from .roads.border_tracer import Border
from .utils import colors


def render_partition(
    region_map: RegionMap,
    district_map: Mapping[int, District],
    registry: DistrictTypeRegistry,
) -> np.ndarray:
    """RGBA buffer (size x size x 4, uint8): district colour, black borders, clear outside."""
    labels = region_map.labels
    out = np.zeros(labels.shape + (4,), dtype=np.uint8)
    out[labels == OUTSIDE] = colors.OUTSIDE_RGBA
    out[labels == BORDER] = colors.BORDER_RGBA
    for district_id, district in district_map.items():
        rgb = registry.get(district.type_id).color
        out[labels == district_id] = (*rgb, colors.DISTRICT_ALPHA)
    return out


def partition_image(buffer: np.ndarray) -> Image.Image:
    return Image.fromarray(buffer)


def draw_lots(size: int, lots_by_district: Mapping[int, Sequence[Lot]]) -> Image.Image:
    img = Image.new("RGBA", (size, size), (0, 0, 0, 0))
    px = img.load()
    index = 0
    for lots in lots_by_district.values():
        for lot in lots:
            fill = colors.lot_tint(index) if lot.valid else colors.UNMERGED_LOT
            index += 1
            for x, y in lot.pixels:
                px[x, y] = fill
    return img


def draw_borders(size: int, borders: Sequence[Border], sample_radius: int = 1) -> Image.Image:
    img = Image.new("RGBA", (size, size), (0, 0, 0, 0))
    draw = ImageDraw.Draw(img)
    for border in borders:
        line = border.polyline()
        if len(line) > 1:
            draw.line(line, fill=colors.BORDER_LINE, width=1)
        for x, y in border.samples:
            draw.ellipse(
                [x - sample_radius, y - sample_radius, x + sample_radius, y + sample_radius],
                fill=colors.SAMPLE_POINT,
            )
    return img


def compose_preview(
    buffer: np.ndarray,
    lots_by_district: Mapping[int, Sequence[Lot]] | None = None,
    borders: Sequence[Border] | None = None,
) -> Image.Image:
    base = Image.new("RGBA", (buffer.shape[1], buffer.shape[0]), (255, 255, 255, 255))
    base.alpha_composite(partition_image(buffer))
    size = buffer.shape[0]
    if lots_by_district:
        base.alpha_composite(draw_lots(size, lots_by_district))
    if borders:
        base.alpha_composite(draw_borders(size, borders))
    return base
