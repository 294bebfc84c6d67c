"""
Vec2 / Matrix3x3 Primitives

Plain value types and 3x3 matrix algebra shared by the coordinate mapper,
homography engine, outline builder and hit tester.

Matrices are 9-element row-major sequences:
    [m0, m1, m2,
     m3, m4, m5,
     m6, m7, m8]

All functions are pure: no I/O, no side effects.
"""

import math
from dataclasses import dataclass
from typing import Iterable, List, Mapping, Sequence

from .errors import GeometryError

# |det| relative to the product of row norms (Hadamard bound) below which
# a 3x3 matrix is treated as singular
SINGULAR_EPS = 1e-10


@dataclass(frozen=True)
class Vec2:
    """A point in screen-pixel or canonical space (context decides which)."""
    x: float
    y: float

    def __add__(self, other: 'Vec2') -> 'Vec2':
        return Vec2(self.x + other.x, self.y + other.y)

    def __sub__(self, other: 'Vec2') -> 'Vec2':
        return Vec2(self.x - other.x, self.y - other.y)

    def __mul__(self, k: float) -> 'Vec2':
        return Vec2(self.x * k, self.y * k)

    __rmul__ = __mul__

    def length(self) -> float:
        return math.hypot(self.x, self.y)

    def to_dict(self) -> dict:
        return {"x": self.x, "y": self.y}

    @classmethod
    def from_dict(cls, data: Mapping) -> 'Vec2':
        return cls(float(data["x"]), float(data["y"]))


@dataclass(frozen=True)
class Size:
    """Width/height pair for containers and content."""
    width: float
    height: float

    @property
    def is_empty(self) -> bool:
        return self.width <= 0 or self.height <= 0

    def to_dict(self) -> dict:
        return {"width": self.width, "height": self.height}


def as_vec2(p) -> Vec2:
    """Accept a Vec2, an {x, y} mapping or an (x, y) pair."""
    if isinstance(p, Vec2):
        return p
    if isinstance(p, Mapping):
        return Vec2.from_dict(p)
    x, y = p
    return Vec2(float(x), float(y))


def as_size(s) -> Size:
    """Accept a Size, a {width, height} / {w, h} mapping or a (w, h) pair."""
    if isinstance(s, Size):
        return s
    if isinstance(s, Mapping):
        if "width" in s:
            return Size(float(s["width"]), float(s["height"]))
        return Size(float(s["w"]), float(s["h"]))
    w, h = s
    return Size(float(w), float(h))


# ─────────────────────────────────────────────────────────────────────────────
# Matrix3x3
# ─────────────────────────────────────────────────────────────────────────────

def identity_matrix() -> List[float]:
    return [1.0, 0.0, 0.0,
            0.0, 1.0, 0.0,
            0.0, 0.0, 1.0]


def multiply_matrix(a: Sequence[float], b: Sequence[float]) -> List[float]:
    """Row-major product a @ b."""
    return [
        a[0] * b[0] + a[1] * b[3] + a[2] * b[6],
        a[0] * b[1] + a[1] * b[4] + a[2] * b[7],
        a[0] * b[2] + a[1] * b[5] + a[2] * b[8],
        a[3] * b[0] + a[4] * b[3] + a[5] * b[6],
        a[3] * b[1] + a[4] * b[4] + a[5] * b[7],
        a[3] * b[2] + a[4] * b[5] + a[5] * b[8],
        a[6] * b[0] + a[7] * b[3] + a[8] * b[6],
        a[6] * b[1] + a[7] * b[4] + a[8] * b[7],
        a[6] * b[2] + a[7] * b[5] + a[8] * b[8],
    ]


def determinant(m: Sequence[float]) -> float:
    return (m[0] * (m[4] * m[8] - m[5] * m[7])
            - m[1] * (m[3] * m[8] - m[5] * m[6])
            + m[2] * (m[3] * m[7] - m[4] * m[6]))


def is_singular(m: Sequence[float], eps: float = SINGULAR_EPS) -> bool:
    """Scale-independent singularity test: |det| <= eps * prod(row norms)."""
    bound = 1.0
    for r in range(3):
        bound *= math.sqrt(m[3 * r] ** 2 + m[3 * r + 1] ** 2 + m[3 * r + 2] ** 2)
    return abs(determinant(m)) <= eps * bound


def invert_matrix(m: Sequence[float]) -> List[float]:
    """Invert a 3x3 matrix using Cramer's rule.

    Args:
        m: 9-element row-major matrix
    Returns:
        Inverted 9-element row-major matrix
    Raises:
        GeometryError: if the matrix is singular
    """
    a, b, c = m[0], m[1], m[2]
    d, e, f = m[3], m[4], m[5]
    g, h, i = m[6], m[7], m[8]

    det = determinant(m)

    if is_singular(m):
        raise GeometryError(f"Matrix is singular and cannot be inverted (det={det:.3e})")

    inv_det = 1.0 / det

    return [
        (e * i - f * h) * inv_det, (c * h - b * i) * inv_det, (b * f - c * e) * inv_det,
        (f * g - d * i) * inv_det, (a * i - c * g) * inv_det, (c * d - a * f) * inv_det,
        (d * h - e * g) * inv_det, (b * g - a * h) * inv_det, (a * e - b * d) * inv_det,
    ]


def transform_point(m: Sequence[float], p: Vec2, eps: float = 1e-12) -> Vec2:
    """Apply a projective 3x3 matrix to a point.

    Raises:
        GeometryError: if the homogeneous coordinate is zero (point at infinity)
    """
    w = m[6] * p.x + m[7] * p.y + m[8]
    if abs(w) < eps:
        raise GeometryError(f"Point ({p.x}, {p.y}) maps to infinity (w={w:.3e})")
    return Vec2(
        (m[0] * p.x + m[1] * p.y + m[2]) / w,
        (m[3] * p.x + m[4] * p.y + m[5]) / w,
    )


# ─────────────────────────────────────────────────────────────────────────────
# Geometry helpers
# ─────────────────────────────────────────────────────────────────────────────

def distance(p1: Vec2, p2: Vec2) -> float:
    return math.hypot(p2.x - p1.x, p2.y - p1.y)


def centroid(points: Iterable[Vec2]) -> Vec2:
    """Mean of the points; the origin for an empty set."""
    pts = list(points)
    if not pts:
        return Vec2(0.0, 0.0)
    return Vec2(sum(p.x for p in pts) / len(pts), sum(p.y for p in pts) / len(pts))


def cross(o: Vec2, a: Vec2, b: Vec2) -> float:
    """Z of (a - o) x (b - o). Positive for a counter-clockwise turn."""
    return (a.x - o.x) * (b.y - o.y) - (a.y - o.y) * (b.x - o.x)


def is_point_in_circle(point: Vec2, center: Vec2, radius: float) -> bool:
    return distance(point, center) <= radius


def is_point_in_rect(point: Vec2, x: float, y: float, width: float, height: float) -> bool:
    return x <= point.x <= x + width and y <= point.y <= y + height


def is_point_on_line(point: Vec2, start: Vec2, end: Vec2, tolerance: float = 0.01) -> bool:
    """True if point lies on the segment start-end (triangle-inequality test)."""
    d1 = distance(point, start)
    d2 = distance(point, end)
    return abs(d1 + d2 - distance(start, end)) < tolerance


def clamp(value: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, value))


def clamp01(value: float) -> float:
    return clamp(value, 0.0, 1.0)
