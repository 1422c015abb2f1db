"""
Angle / raster helpers shared by the road stages.
"""

import math

# walk order used by the tracer: 4-neighbours first, then diagonals
NEIGHBOURS_8 = (
    (0, 1),
    (1, 0),
    (0, -1),
    (-1, 0),
    (-1, 1),
    (1, 1),
    (1, -1),
    (-1, -1),
)


def normalize_angle(angle: float) -> float:
    return angle % 360


def step_from(x: float, y: float, angle_deg: float, length: float) -> tuple[int, int]:
    """Integer end point of a ``length`` step from (x, y) along ``angle_deg``."""
    rad = math.radians(angle_deg)
    return int(round(x + math.cos(rad) * length)), int(round(y + math.sin(rad) * length))


def bresenham_line(x0: int, y0: int, x1: int, y1: int) -> list[tuple[int, int]]:
    """All pixels on the line from (x0, y0) to (x1, y1), both ends included."""
    points = []
    dx = abs(x1 - x0)
    dy = -abs(y1 - y0)
    sx = 1 if x0 < x1 else -1
    sy = 1 if y0 < y1 else -1
    err = dx + dy
    while True:
        points.append((x0, y0))
        if x0 == x1 and y0 == y1:
            break
        e2 = 2 * err
        if e2 >= dy:
            err += dy
            x0 += sx
        if e2 <= dx:
            err += dx
            y0 += sy
    return points


def widen(pixels, width: int, size: int | None = None) -> set[tuple[int, int]]:
    """Every pixel within Chebyshev ``width`` of ``pixels``, clipped to a size x size grid."""
    out: set[tuple[int, int]] = set()
    if width <= 0:
        out.update(pixels)
    else:
        offsets = [(dx, dy) for dy in range(-width, width + 1) for dx in range(-width, width + 1)]
        for x, y in pixels:
            for dx, dy in offsets:
                out.add((x + dx, y + dy))
    if size is not None:
        out = {(x, y) for x, y in out if 0 <= x < size and 0 <= y < size}
    return out


def chebyshev(a: tuple[int, int], b: tuple[int, int]) -> int:
    return max(abs(a[0] - b[0]), abs(a[1] - b[1]))
