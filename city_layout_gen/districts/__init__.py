"""
District types, candidate sampling and suitability placement.

The sampler spreads candidate points over the boundary disk; the placement
engine walks those candidates in order and hands each one the district type
that scores best against the districts already placed.
"""

from .models import (
    Boundary,
    District,
    DistrictRelation,
    DistrictType,
    DistrictTypeRegistry,
    registry_from_config,
)
from .placement import place, validate_district_count
from .sampler import sample, sample_district_candidates

__all__ = [
    "Boundary",
    "District",
    "DistrictRelation",
    "DistrictType",
    "DistrictTypeRegistry",
    "registry_from_config",
    "place",
    "validate_district_count",
    "sample",
    "sample_district_candidates",
]
