from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field
from typing import Mapping, Sequence

from ..districts.models import District, DistrictTypeRegistry
from .subdivider import Lot

log = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class BuildingAsset:
    name: str
    category: str
    width: int
    height: int
    stories: int = 1
    metadata: Mapping[str, str | int] = field(default_factory=dict)

    @property
    def footprint(self) -> tuple[int, int]:
        return self.width, self.height


@dataclass(slots=True)
class BuildingPlacement:
    x: int
    y: int
    width: int
    height: int
    district_id: int
    category: str
    asset_name: str
    stories: int

    def as_conf_entry(self) -> dict[str, str | int]:
        return {
            "x": self.x,
            "y": self.y,
            "width": self.width,
            "height": self.height,
            "district": self.district_id,
            "category": self.category,
            "asset": self.asset_name,
            "stories": self.stories,
        }


def catalog_from_config(entries: Mapping[str, Sequence[Mapping]]) -> dict[str, list[BuildingAsset]]:
    """
    Build the per-district-type asset lists from the ``buildings.catalog``
    config section (district type name -> list of footprints).
    """
    catalog: dict[str, list[BuildingAsset]] = {}
    for category, items in (entries or {}).items():
        assets = []
        for item in items:
            extra = {k: v for k, v in item.items() if k not in ("name", "width", "height", "stories")}
            assets.append(
                BuildingAsset(
                    name=str(item.get("name", category)),
                    category=category,
                    width=int(item["width"]),
                    height=int(item["height"]),
                    stories=int(item.get("stories", 1)),
                    metadata=extra,
                )
            )
        catalog[category] = assets
    return catalog


def asset_fits_lot(asset: BuildingAsset, lot: Lot) -> bool:
    """The lot's bounding box must be strictly larger than the footprint."""
    min_x, min_y, max_x, max_y = lot.bounds()
    return (max_x - min_x) > asset.width and (max_y - min_y) > asset.height


def _place_on_lot(asset: BuildingAsset, lot: Lot) -> tuple[int, int]:
    min_x, min_y, max_x, max_y = lot.bounds()
    cx, cy = lot.centroid()
    x = int(round(cx - asset.width / 2))
    y = int(round(cy - asset.height / 2))
    x = max(min_x, min(x, max_x - asset.width + 1))
    y = max(min_y, min(y, max_y - asset.height + 1))
    return x, y


def plan_buildings(
    lots_by_district: Mapping[int, Sequence[Lot]],
    district_map: Mapping[int, District],
    registry: DistrictTypeRegistry,
    catalog: Mapping[str, Sequence[BuildingAsset]],
    rng: random.Random | None = None,
) -> list[BuildingPlacement]:
    """One building per valid lot, picked from the catalog of the lot's district type."""
    rng = rng or random.Random()
    placements: list[BuildingPlacement] = []
    skipped = 0
    for district_id, lots in lots_by_district.items():
        district = district_map.get(district_id)
        if district is None:
            continue
        category = registry.name_of(district.type_id)
        pool = catalog.get(category) or []
        for lot in lots:
            if not lot.valid:
                continue
            fitting = [a for a in pool if asset_fits_lot(a, lot)]
            if not fitting:
                skipped += 1
                continue
            asset = rng.choice(fitting)
            x, y = _place_on_lot(asset, lot)
            placements.append(
                BuildingPlacement(
                    x=x,
                    y=y,
                    width=asset.width,
                    height=asset.height,
                    district_id=district_id,
                    category=category,
                    asset_name=asset.name,
                    stories=asset.stories,
                )
            )
    log.info("buildings: %d placed, %d lots without a fitting asset", len(placements), skipped)
    return placements
