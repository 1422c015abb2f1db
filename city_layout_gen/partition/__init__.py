from .regions import extract
from .voronoi import BORDER, OUTSIDE, Region, RegionMap, partition, refresh_regions

__all__ = ["BORDER", "OUTSIDE", "Region", "RegionMap", "extract", "partition", "refresh_regions"]
