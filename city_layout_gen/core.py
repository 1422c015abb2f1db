# city_layout_gen/core.py
from __future__ import annotations

import logging
from dataclasses import dataclass, field

import numpy as np

from . import render
from .context import GenerationContext, Issue
from .districts import placement, sampler
from .districts.models import Boundary, District, DistrictTypeRegistry, registry_from_config
from .export import writer
from .lots.catalog import BuildingPlacement, catalog_from_config, plan_buildings
from .lots.subdivider import Lot, generate_lots
from .partition.regions import extract
from .partition.voronoi import Region, RegionMap, partition, refresh_regions
from .roads import lsystem
from .roads.border_tracer import Border, NoStartPointError, trace_map
from .roads.secondary import generate_secondary_roads
from .utils.parallel import resolve_workers

log = logging.getLogger(__name__)


@dataclass
class CityLayout:
    seed: int
    boundary: Boundary
    registry: DistrictTypeRegistry
    districts: list[District] = field(default_factory=list)
    district_map: dict[int, District] = field(default_factory=dict)
    region_map: RegionMap | None = None
    regions: dict[int, Region] = field(default_factory=dict)
    borders: list[Border] = field(default_factory=list)
    lots: dict[int, list[Lot]] = field(default_factory=dict)
    buildings: list[BuildingPlacement] = field(default_factory=list)
    issues: list[Issue] = field(default_factory=list)

    def pixels(self) -> np.ndarray:
        """RGBA buffer of the partition for display."""
        return render.render_partition(self.region_map, self.district_map, self.registry)


def boundary_from_config(conf: dict) -> Boundary:
    b = conf.get("boundary", {})
    center = b.get("center")
    if center is None:
        half = int(conf.get("voronoi", {}).get("size", 500)) / 2
        center = (half, half)
    return Boundary(center=(float(center[0]), float(center[1])), radius=float(b.get("radius", 225.0)))


def _trace(conf: dict, region_map: RegionMap, context: GenerationContext) -> list[Border]:
    seg = int(conf.get("roads", {}).get("trace_segment_length", 10))
    try:
        return trace_map(region_map, seg)
    except NoStartPointError as exc:
        context.report("tracer", "no start point for border tracing, skipping", error=str(exc))
        return []


def generate_layout(conf: dict, context: GenerationContext | None = None) -> CityLayout:
    """Run every enabled stage in order and return the in-memory result."""
    context = context or GenerationContext(seed=int(conf.get("seed", 0)))
    workers = resolve_workers(conf.get("workers"))
    registry = registry_from_config(conf.get("districts", {}).get("types", []))
    boundary = boundary_from_config(conf)
    layout = CityLayout(seed=context.seed, boundary=boundary, registry=registry, issues=context.issues)

    dconf = conf.get("districts", {})
    if dconf.get("enabled", True) and len(registry):
        sconf = conf.get("sampling", {})
        target = placement.validate_district_count(
            int(dconf.get("number_of_districts", registry.min_total)), registry, context
        )
        candidates = sampler.sample_district_candidates(
            boundary,
            target,
            int(sconf.get("rejection_samples", 30)),
            rng=context.rng("sampling"),
            context=context,
            retry_rounds=int(sconf.get("retry_rounds", 8)),
        )
        layout.districts, layout.district_map = placement.place(
            candidates,
            registry,
            boundary,
            target,
            neighbour_weight=float(dconf.get("importance_of_neighbours", 0.4)),
            center_weight=float(dconf.get("importance_of_center_distance", 0.3)),
            context=context,
        )
    if not layout.districts:
        context.report("pipeline", "no districts placed, stopping after placement")
        return layout

    context.require("districts", "partition")
    vconf = conf.get("voronoi", {})
    region_map, layout.regions = partition(
        int(vconf.get("size", 500)),
        layout.districts,
        boundary,
        int(vconf.get("distortion_points", 0)),
        context.rng("voronoi"),
        workers=workers,
        outer_ring=bool(vconf.get("outer_ring", True)),
    )
    layout.region_map = region_map
    context.mark_initialized("partition")

    rconf = conf.get("roads", {})
    trace_enabled = rconf.get("trace_enabled", True)
    trace_late = rconf.get("trace_after_secondary", False)
    if trace_enabled and not trace_late:
        layout.borders = _trace(conf, region_map, context)

    secondary = rconf.get("secondary", {})
    if secondary.get("enabled", True):
        cap = secondary.get("max_iterations", lsystem.DEFAULT_MAX_ITERATIONS)
        generate_secondary_roads(
            region_map,
            extract(region_map, 0),
            axiom=str(secondary.get("axiom", "A")),
            angle=float(secondary.get("angle", 90.0)),
            segment_length=int(secondary.get("segment_length", 30)),
            road_width=int(secondary.get("road_width", 1)),
            rng=context.rng("secondary_roads"),
            context=context,
            workers=workers,
            max_iterations=None if cap is None else int(cap),
        )
        layout.regions = refresh_regions(region_map, list(layout.district_map))

    if trace_enabled and trace_late:
        layout.borders = _trace(conf, region_map, context)

    lconf = conf.get("lots", {})
    if lconf.get("enabled", True):
        context.require("partition", "lots")
        layout.lots = generate_lots(
            region_map,
            layout.district_map,
            registry,
            min_block_size=int(lconf.get("min_block_size", 20)),
            inset=int(lconf.get("inset", 0)),
            default_min_lot_area=int(lconf.get("min_lot_area", 1)),
            context=context,
        )

        bconf = conf.get("buildings", {})
        if bconf.get("enabled", True):
            layout.buildings = plan_buildings(
                layout.lots,
                layout.district_map,
                registry,
                catalog_from_config(bconf.get("catalog", {})),
                rng=context.rng("buildings"),
            )
    return layout


def generate_from_config(conf: dict) -> CityLayout:
    layout = generate_layout(conf)
    if conf.get("export", {}).get("enabled", True):
        writer.save_all(conf, layout)
    if layout.issues:
        log.info("generation finished with %d reported issue(s)", len(layout.issues))
    return layout
