from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Iterator, Mapping, Sequence

from ..utils import colors

Point = tuple[float, float]

RELATION_MIN = 0.0
RELATION_MAX = 10.0
# scaled distances live on a 0..10 scale, like relation weights
SCALE = 10.0


@dataclass(frozen=True, slots=True)
class Boundary:
    center: Point
    radius: float

    def __post_init__(self):
        if not self.radius > 0:
            raise ValueError(f"Boundary radius must be positive, got {self.radius!r}")
        object.__setattr__(self, "center", (float(self.center[0]), float(self.center[1])))

    def distance_to_center(self, x: float, y: float) -> float:
        return math.hypot(x - self.center[0], y - self.center[1])

    def contains(self, x: float, y: float) -> bool:
        return self.distance_to_center(x, y) < self.radius

    def scaled_distance(self, distance: float) -> float:
        """Linearly remap [0, radius] onto [0, 10]."""
        return distance / self.radius * SCALE

    @property
    def area(self) -> float:
        return math.pi * self.radius * self.radius


@dataclass(frozen=True, slots=True)
class DistrictRelation:
    other_type_id: int
    attraction: float = 0.0
    repulsion: float = 0.0

    def __post_init__(self):
        for label, value in (("attraction", self.attraction), ("repulsion", self.repulsion)):
            if not RELATION_MIN <= value <= RELATION_MAX:
                raise ValueError(f"Relation {label} must be within [0, 10], got {value!r}")

    @property
    def weight(self) -> float:
        return self.attraction - self.repulsion


@dataclass(slots=True)
class DistrictType:
    name: str
    color: tuple[int, int, int]
    distance_from_center: float
    min_placements: int = 1
    max_placements: int = 1
    min_lot_area: int | None = None
    id: int = -1

    def __post_init__(self):
        if not 0.0 <= self.distance_from_center <= SCALE:
            raise ValueError(
                f"District type {self.name!r}: distance_from_center must be within [0, 10], "
                f"got {self.distance_from_center!r}"
            )
        if self.min_placements < 1 or self.max_placements < 1:
            raise ValueError(f"District type {self.name!r}: placement counts must be >= 1")
        if self.min_placements > self.max_placements:
            raise ValueError(
                f"District type {self.name!r}: min placements ({self.min_placements}) "
                f"exceeds max ({self.max_placements})"
            )


@dataclass(frozen=True, slots=True)
class District:
    id: int
    type_id: int
    position: Point


@dataclass
class DistrictTypeRegistry:
    """District types plus their per-direction relation table, both keyed by id."""

    _types: dict[int, DistrictType] = field(default_factory=dict)
    _relations: dict[tuple[int, int], DistrictRelation] = field(default_factory=dict)

    def register(self, district_type: DistrictType) -> DistrictType:
        if self.by_name(district_type.name) is not None:
            raise ValueError(f"District type {district_type.name!r} registered twice")
        district_type.id = len(self._types)
        self._types[district_type.id] = district_type
        return district_type

    def set_relation(self, type_id: int, other_type_id: int, attraction: float = 0.0, repulsion: float = 0.0):
        for tid in (type_id, other_type_id):
            if tid not in self._types:
                raise ValueError(f"Unknown district type id {tid}")
        self._relations[(type_id, other_type_id)] = DistrictRelation(
            other_type_id, float(attraction), float(repulsion)
        )

    def relation(self, type_id: int, other_type_id: int) -> DistrictRelation:
        rel = self._relations.get((type_id, other_type_id))
        return rel if rel is not None else DistrictRelation(other_type_id)

    def get(self, type_id: int) -> DistrictType:
        return self._types[type_id]

    def by_name(self, name: str) -> DistrictType | None:
        for t in self._types.values():
            if t.name == name:
                return t
        return None

    def name_of(self, type_id: int) -> str:
        t = self._types.get(type_id)
        return t.name if t is not None else f"type-{type_id}"

    @property
    def min_total(self) -> int:
        return sum(t.min_placements for t in self._types.values())

    @property
    def max_total(self) -> int:
        return sum(t.max_placements for t in self._types.values())

    def __iter__(self) -> Iterator[DistrictType]:
        return iter(self._types.values())

    def __len__(self) -> int:
        return len(self._types)


def registry_from_config(entries: Sequence[Mapping]) -> DistrictTypeRegistry:
    """Build a registry from the ``districts.types`` config list.

    Relations are declared by type name and resolved to ids once every type
    is registered.
    """
    registry = DistrictTypeRegistry()
    for index, entry in enumerate(entries):
        registry.register(
            DistrictType(
                name=str(entry["name"]),
                color=colors.district_color(entry.get("color"), index),
                distance_from_center=float(entry.get("distance_from_center", 0)),
                min_placements=int(entry.get("min", 1)),
                max_placements=int(entry.get("max", 1)),
                min_lot_area=int(entry["min_lot_area"]) if entry.get("min_lot_area") is not None else None,
            )
        )
    for entry in entries:
        source = registry.by_name(str(entry["name"]))
        for other_name, rel in (entry.get("relations") or {}).items():
            other = registry.by_name(other_name)
            if other is None:
                raise ValueError(f"District type {source.name!r} relates to unknown type {other_name!r}")
            registry.set_relation(
                source.id,
                other.id,
                attraction=rel.get("attraction", 0.0),
                repulsion=rel.get("repulsion", 0.0),
            )
    return registry
