import pytest

from city_layout_gen import config as cfg
from city_layout_gen.context import GenerationContext
from city_layout_gen.districts.models import Boundary, District, DistrictType, DistrictTypeRegistry
from city_layout_gen.partition.voronoi import partition


@pytest.fixture
def context():
    return GenerationContext(seed=7)


@pytest.fixture
def three_type_registry():
    registry = DistrictTypeRegistry()
    registry.register(DistrictType("core", (200, 0, 0), 0, 1, 1, min_lot_area=40))
    registry.register(DistrictType("homes", (0, 200, 0), 5, 1, 2, min_lot_area=30))
    registry.register(DistrictType("works", (0, 0, 200), 9, 1, 1, min_lot_area=50))
    registry.set_relation(1, 0, attraction=6)
    registry.set_relation(2, 1, repulsion=8)
    return registry


@pytest.fixture
def two_seed_map():
    """100x100 grid, two districts at (25, 50) and (75, 50), no ring road."""
    boundary = Boundary(center=(50.0, 50.0), radius=50.0)
    districts = [District(0, 0, (25.0, 50.0)), District(1, 1, (75.0, 50.0))]
    region_map, regions = partition(100, districts, boundary, 0, outer_ring=False)
    return region_map, regions


@pytest.fixture
def small_conf(tmp_path):
    conf = cfg.default_config()
    conf.update({"seed": 99, "output_dir": str(tmp_path / "out"), "workers": 1})
    conf["boundary"] = {"center": [60.0, 60.0], "radius": 55.0}
    conf["districts"]["number_of_districts"] = 4
    conf["districts"]["types"] = [
        {"name": "downtown", "color": [200, 60, 60], "distance_from_center": 0, "min": 1, "max": 1,
         "min_lot_area": 40, "relations": {"residential": {"attraction": 6}}},
        {"name": "residential", "color": [60, 200, 60], "distance_from_center": 6, "min": 1, "max": 2,
         "min_lot_area": 30},
        {"name": "industrial", "color": [60, 60, 200], "distance_from_center": 9, "min": 1, "max": 1,
         "min_lot_area": 50, "relations": {"residential": {"repulsion": 9}}},
    ]
    conf["voronoi"].update({"size": 120, "distortion_points": 5})
    conf["roads"]["trace_segment_length"] = 5
    conf["roads"]["secondary"].update({"segment_length": 12, "road_width": 0})
    conf["lots"].update({"min_block_size": 10, "inset": 1})
    conf["export"]["enabled"] = False
    return conf
