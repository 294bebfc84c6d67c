# Hold Outline — polygons drawn around a route's holds or a hold cluster.
# All coordinates are normalized canonical space (0-1).
#
# Convex hull: Andrew's monotone chain, counter-clockwise in a y-up frame
# (clockwise as drawn on a y-down screen).

import math
from typing import List, Optional, Sequence

from .config_loader import EngineConfig
from .primitives import Vec2, as_vec2, cross, distance

_DEFAULT_CONFIG = EngineConfig()


def _center(hold) -> Vec2:
    if hasattr(hold, "x") and hasattr(hold, "y"):
        return Vec2(float(hold.x), float(hold.y))
    return as_vec2(hold)


def _cluster_of(hold):
    if isinstance(hold, dict):
        return hold.get("clusterId", hold.get("cluster_id"))
    return getattr(hold, "cluster_id", None)


# ─────────────────────────────────────────────────────────────────────────────
# Convex hull
# ─────────────────────────────────────────────────────────────────────────────

def convex_hull(points: Sequence[Vec2]) -> List[Vec2]:
    """
    Convex hull vertices in counter-clockwise order.

    Duplicates are merged and collinear boundary points dropped, so fewer than
    3 vertices come back when every point lies on one line.
    """
    pts = sorted({(p.x, p.y) for p in (as_vec2(q) for q in points)})
    pts = [Vec2(x, y) for x, y in pts]
    if len(pts) <= 2:
        return pts

    lower: List[Vec2] = []
    for p in pts:
        while len(lower) >= 2 and cross(lower[-2], lower[-1], p) <= 0:
            lower.pop()
        lower.append(p)

    upper: List[Vec2] = []
    for p in reversed(pts):
        while len(upper) >= 2 and cross(upper[-2], upper[-1], p) <= 0:
            upper.pop()
        upper.append(p)

    # last point of each chain is the first point of the other
    return lower[:-1] + upper[:-1]


def polygon_area(points: Sequence[Vec2]) -> float:
    """Signed shoelace area; positive for counter-clockwise (y-up) winding."""
    n = len(points)
    if n < 3:
        return 0.0
    s = 0.0
    for i in range(n):
        a = points[i]
        b = points[(i + 1) % n]
        s += a.x * b.y - b.x * a.y
    return s / 2.0


# ─────────────────────────────────────────────────────────────────────────────
# Degenerate outlines
# ─────────────────────────────────────────────────────────────────────────────

def circle_outline(center: Vec2, radius: float, segments: int = 12) -> List[Vec2]:
    """Regular polygon approximating a circle."""
    return [
        Vec2(center.x + radius * math.cos(2 * math.pi * i / segments),
             center.y + radius * math.sin(2 * math.pi * i / segments))
        for i in range(segments)
    ]


def strip_outline(p1: Vec2, p2: Vec2, thickness: float) -> List[Vec2]:
    """Thin rectangle along p1-p2, offset by thickness on each side."""
    length = distance(p1, p2)
    nx = -(p2.y - p1.y) / length * thickness
    ny = (p2.x - p1.x) / length * thickness
    return [
        Vec2(p1.x + nx, p1.y + ny),
        Vec2(p2.x + nx, p2.y + ny),
        Vec2(p2.x - nx, p2.y - ny),
        Vec2(p1.x - nx, p1.y - ny),
    ]


def create_hold_outline(holds: Sequence, config: Optional[EngineConfig] = None) -> List[Vec2]:
    """
    Renderable outline around a set of holds.

    0 holds → []
    1 hold → circle of hull_point_radius
    2 holds → strip of half-width two_point_thickness
    3+ holds → convex hull of the centers
    Coincident or collinear sets fall back to the circle / strip shapes.
    """
    config = config or _DEFAULT_CONFIG
    points = [_center(h) for h in holds]
    if not points:
        return []

    hull = convex_hull(points)
    if len(hull) >= 3:
        return hull

    if len(hull) == 1:
        return circle_outline(hull[0], config.hull_point_radius, config.circle_segments)

    if len(points) == 2:
        # keep caller's order for the strip direction
        return strip_outline(points[0], points[1], config.two_point_thickness)
    return strip_outline(hull[0], hull[1], config.two_point_thickness)


def create_cluster_outline(holds: Sequence, cluster_id: str,
                           config: Optional[EngineConfig] = None) -> List[Vec2]:
    return create_hold_outline([h for h in holds if _cluster_of(h) == cluster_id], config)


def create_all_holds_outline(holds: Sequence, config: Optional[EngineConfig] = None) -> List[Vec2]:
    return create_hold_outline(holds, config)
