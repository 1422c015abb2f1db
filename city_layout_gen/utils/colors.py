# city_layout_gen/utils/colors.py

"""
Colour definitions for the partition raster and preview overlays.
"""

import re

# ---- Raster colours ----
# Border (roads)   | 0 0 0
# Outside boundary | transparent
BORDER_RGBA = (0, 0, 0, 255)
OUTSIDE_RGBA = (0, 0, 0, 0)

# district fill is drawn semi-transparent so it can sit over a base map
DISTRICT_ALPHA = 51

# fallback district colours when a type has none configured
DEFAULT_DISTRICT_PALETTE = [
    (214, 69, 65),
    (244, 179, 80),
    (66, 133, 244),
    (52, 168, 83),
    (155, 89, 182),
    (26, 188, 156),
    (230, 126, 34),
    (127, 140, 141),
]

UNMERGED_LOT = (200, 40, 40, 200)

BORDER_LINE = (255, 215, 0, 255)
SAMPLE_POINT = (255, 255, 255, 255)

# added to every channel of a colour that collides with the border colour
BORDER_NUDGE = 26


def _normalize_rgb(value):
    if value is None:
        return None
    if isinstance(value, str):
        text = value.strip()
        if text.startswith("#") and len(text) == 7:
            try:
                return tuple(int(text[i:i + 2], 16) for i in (1, 3, 5))
            except ValueError:
                return None
        parts = re.split(r"[,\s]+", text)
    else:
        try:
            parts = list(value)
        except TypeError:
            return None
    if len(parts) < 3:
        return None
    try:
        r = int(parts[0])
        g = int(parts[1])
        b = int(parts[2])
    except (TypeError, ValueError):
        return None
    return (
        max(0, min(255, r)),
        max(0, min(255, g)),
        max(0, min(255, b)),
    )


def avoid_border_color(rgb: tuple[int, int, int]) -> tuple[int, int, int]:
    """District colours must stay distinguishable from road pixels."""
    if tuple(rgb[:3]) == BORDER_RGBA[:3]:
        return tuple(min(255, c + BORDER_NUDGE) for c in rgb[:3])
    return tuple(rgb[:3])


def district_color(value, index: int) -> tuple[int, int, int]:
    rgb = _normalize_rgb(value)
    if rgb is None:
        rgb = DEFAULT_DISTRICT_PALETTE[index % len(DEFAULT_DISTRICT_PALETTE)]
    return avoid_border_color(rgb)


def lot_tint(index: int, alpha: int = 160) -> tuple[int, int, int, int]:
    """Cheap deterministic per-lot colour so neighbouring lots read apart."""
    r = (index * 97) % 200 + 40
    g = (index * 57) % 200 + 40
    b = (index * 131) % 200 + 40
    return (r, g, b, alpha)
