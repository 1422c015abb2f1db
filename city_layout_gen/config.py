# city_layout_gen/config.py
import copy
import json
from pathlib import Path


def default_config() -> dict:
    return {
        "seed": 12345,
        "output_dir": "output",
        # 0 -> one worker per core (capped); 1 -> run everything in-process
        "workers": 0,
        "logging": {"level": "INFO"},
        "boundary": {
            "center": [250.0, 250.0],
            "radius": 225.0,
        },
        "districts": {
            "enabled": True,
            "number_of_districts": 9,
            "importance_of_neighbours": 0.4,
            "importance_of_center_distance": 0.3,
            "types": [
                {
                    "name": "downtown",
                    "color": [214, 69, 65],
                    "distance_from_center": 0,
                    "min": 1,
                    "max": 1,
                    "min_lot_area": 120,
                    "relations": {
                        "commercial": {"attraction": 8, "repulsion": 0},
                        "industrial": {"attraction": 0, "repulsion": 7},
                    },
                },
                {
                    "name": "commercial",
                    "color": [244, 179, 80],
                    "distance_from_center": 3,
                    "min": 1,
                    "max": 3,
                    "min_lot_area": 100,
                    "relations": {
                        "downtown": {"attraction": 8, "repulsion": 0},
                        "residential": {"attraction": 5, "repulsion": 1},
                    },
                },
                {
                    "name": "residential",
                    "color": [52, 168, 83],
                    "distance_from_center": 6,
                    "min": 2,
                    "max": 5,
                    "min_lot_area": 60,
                    "relations": {
                        "park": {"attraction": 7, "repulsion": 0},
                        "industrial": {"attraction": 0, "repulsion": 9},
                    },
                },
                {
                    "name": "industrial",
                    "color": [127, 140, 141],
                    "distance_from_center": 9,
                    "min": 1,
                    "max": 2,
                    "min_lot_area": 200,
                    "relations": {
                        "residential": {"attraction": 0, "repulsion": 9},
                        "downtown": {"attraction": 0, "repulsion": 5},
                    },
                },
                {
                    "name": "park",
                    "color": [26, 188, 156],
                    "distance_from_center": 5,
                    "min": 1,
                    "max": 2,
                    "min_lot_area": 300,
                    "relations": {
                        "residential": {"attraction": 6, "repulsion": 0},
                    },
                },
            ],
        },
        "sampling": {
            "rejection_samples": 30,
            # shrink-and-retry rounds when the disk can't fit the target count
            "retry_rounds": 8,
        },
        "voronoi": {
            "size": 500,
            "distortion_points": 40,
            "outer_ring": True,
        },
        "roads": {
            "trace_enabled": True,
            # trace after secondary roads instead of the bare district partition
            "trace_after_secondary": False,
            "trace_segment_length": 10,
            "secondary": {
                "enabled": True,
                "road_width": 1,
                "axiom": "A",
                "angle": 90.0,
                "segment_length": 30,
                # cap on L-system expansions per region; null removes it
                "max_iterations": 6,
            },
        },
        "lots": {
            "enabled": True,
            "min_block_size": 20,
            "inset": 2,
            # used for district types that don't define their own
            "min_lot_area": 80,
        },
        "buildings": {
            "enabled": True,
            "catalog": {
                "downtown": [
                    {"name": "tower", "width": 12, "height": 12, "stories": 12},
                    {"name": "office", "width": 9, "height": 7, "stories": 6},
                ],
                "commercial": [
                    {"name": "store", "width": 8, "height": 6, "stories": 2},
                    {"name": "kiosk", "width": 4, "height": 4, "stories": 1},
                ],
                "residential": [
                    {"name": "house", "width": 6, "height": 5, "stories": 2},
                    {"name": "bungalow", "width": 5, "height": 4, "stories": 1},
                ],
                "industrial": [
                    {"name": "warehouse", "width": 14, "height": 10, "stories": 1},
                ],
            },
        },
        "export": {
            "enabled": True,
            "partition_png": "partition.png",
            "preview_png": "preview.png",
            "layout_json": "layout.json",
            "preview_max_dim": 768,
        },
    }


def merge_config(base: dict, overrides: dict) -> dict:
    """Recursively lay ``overrides`` over a deep copy of ``base``."""
    out = copy.deepcopy(base)
    for key, value in (overrides or {}).items():
        if isinstance(value, dict) and isinstance(out.get(key), dict):
            out[key] = merge_config(out[key], value)
        else:
            out[key] = copy.deepcopy(value)
    return out


def load_config(path: str | Path) -> dict:
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")
    with path.open("r", encoding="utf-8") as f:
        data = json.load(f)
    return merge_config(default_config(), data)


def save_config(conf: dict, path: str | Path) -> None:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as f:
        json.dump(conf, f, indent=2)
