# city_layout_gen/export/writer.py
import json
import logging
from pathlib import Path

from .. import render

log = logging.getLogger(__name__)


def _name(exp: dict, key: str, default: str) -> str:
    v = exp.get(key)
    return v if isinstance(v, str) and v.strip() else default


def layout_summary(layout) -> dict:
    """JSON-ready view of one generation pass."""
    registry = layout.registry
    return {
        "seed": layout.seed,
        "size": layout.region_map.size if layout.region_map is not None else 0,
        "boundary": {"center": list(layout.boundary.center), "radius": layout.boundary.radius},
        "districts": [
            {
                "id": d.id,
                "type": registry.name_of(d.type_id),
                "position": [round(d.position[0], 3), round(d.position[1], 3)],
            }
            for d in layout.districts
        ],
        "borders": [b.as_dict() for b in layout.borders],
        "lots": [lot.as_dict() for lots in layout.lots.values() for lot in lots],
        "buildings": [b.as_conf_entry() for b in layout.buildings],
        "issues": [i.as_dict() for i in layout.issues],
    }


def save_all(conf: dict, layout) -> dict[str, Path]:
    out_dir = Path(conf.get("output_dir", "output"))
    out_dir.mkdir(parents=True, exist_ok=True)

    exp = conf.get("export", {})

    # Filenames (allow config override, fall back to sensible defaults)
    name_partition = _name(exp, "partition_png", "partition.png")
    name_preview = _name(exp, "preview_png", "preview.png")
    name_layout = _name(exp, "layout_json", "layout.json")
    preview_max_dim = int(exp.get("preview_max_dim", 768))

    written: dict[str, Path] = {}
    if layout.region_map is not None:
        buffer = layout.pixels()
        render.partition_image(buffer).save(out_dir / name_partition)
        written["partition"] = out_dir / name_partition

        prev = render.compose_preview(buffer, layout.lots, layout.borders)
        # downscale prior to saving to keep preview files small
        w, h = prev.size
        if max(w, h) > preview_max_dim:
            scale = preview_max_dim / float(max(w, h))
            prev = prev.resize((max(1, int(w * scale)), max(1, int(h * scale))))
        prev.save(out_dir / name_preview)
        written["preview"] = out_dir / name_preview

    with (out_dir / name_layout).open("w", encoding="utf-8") as f:
        json.dump(layout_summary(layout), f, indent=2)
    written["layout"] = out_dir / name_layout

    log.info("export: wrote %s to %s", ", ".join(sorted(written)), out_dir)
    return written
