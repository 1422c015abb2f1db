"""
Lot subdivision and building planning.

Regions are cut into grid blocks, undersized blocks are folded into their
neighbours, and each valid lot can be handed a building footprint from the
catalog of its district type.
"""

from .catalog import BuildingAsset, BuildingPlacement, catalog_from_config, plan_buildings
from .subdivider import Lot, generate_lots, subdivide

__all__ = [
    "BuildingAsset",
    "BuildingPlacement",
    "Lot",
    "catalog_from_config",
    "generate_lots",
    "plan_buildings",
    "subdivide",
]
