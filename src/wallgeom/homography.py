"""
Homography Engine

Computes, applies and inverts 3x3 projective transforms mapping one planar
quadrilateral onto another. Used to rectify a photographed wall (four picked
corners) onto a canonical axis-aligned rectangle.

The solve is the standard Direct Linear Transform: two rows per
correspondence stacked into an 8x9 system A·h = 0, with h taken as the
right singular vector of the smallest singular value.
"""

import logging
from dataclasses import dataclass
from itertools import combinations
from typing import List, Sequence, Tuple

import numpy as np

from .errors import GeometryError, InputContractError
from .primitives import (
    Vec2,
    as_vec2,
    determinant,
    distance,
    identity_matrix,
    invert_matrix,
    is_singular,
    multiply_matrix,
    transform_point,
)

logger = logging.getLogger(__name__)

# |h8| below this normalizes by Frobenius norm instead
H8_EPS = 1e-12
# Relative triangle area below which three points count as collinear
COLLINEAR_EPS = 1e-9
# Smallest computed singular value relative to the largest below which the
# null space is not 1-D (rank-deficient system)
NULLSPACE_EPS = 1e-9


@dataclass(frozen=True)
class Homography:
    """Row-major 3x3 projective transform [h0..h8]."""
    values: Tuple[float, ...]

    def __post_init__(self):
        if len(self.values) != 9:
            raise InputContractError(f"Homography needs 9 values, got {len(self.values)}")

    @classmethod
    def identity(cls) -> 'Homography':
        return cls(tuple(identity_matrix()))

    @classmethod
    def from_matrix(cls, m) -> 'Homography':
        """Build from a 3x3 nested list / ndarray or a flat 9-sequence."""
        flat = np.asarray(m, dtype=float).reshape(-1)
        return cls(tuple(float(v) for v in flat))

    @property
    def matrix(self) -> np.ndarray:
        return np.array(self.values, dtype=float).reshape(3, 3)

    def determinant(self) -> float:
        return determinant(self.values)

    def to_list(self) -> List[float]:
        return list(self.values)

    def to_nested(self) -> List[List[float]]:
        v = self.values
        return [list(v[0:3]), list(v[3:6]), list(v[6:9])]

    def __getitem__(self, i: int) -> float:
        return self.values[i]


def identity_homography() -> Homography:
    return Homography.identity()


def canonical_rectangle_corners(width: float, height: float) -> List[Vec2]:
    """Target corners in TL, TR, BR, BL order."""
    return [
        Vec2(0.0, 0.0),
        Vec2(float(width), 0.0),
        Vec2(float(width), float(height)),
        Vec2(0.0, float(height)),
    ]


def _check_general_position(points: Sequence[Vec2], label: str) -> None:
    """Raise GeometryError if any 3 of the points are collinear or coincident."""
    extent = max(distance(a, b) for a, b in combinations(points, 2))
    if extent == 0:
        raise GeometryError(f"All {label} points coincide")

    for a, b, c in combinations(points, 3):
        area2 = abs((b.x - a.x) * (c.y - a.y) - (b.y - a.y) * (c.x - a.x))
        if area2 <= COLLINEAR_EPS * extent * extent:
            raise GeometryError(
                f"Degenerate {label} points: ({a.x}, {a.y}), ({b.x}, {b.y}), "
                f"({c.x}, {c.y}) are collinear or coincident")


def _build_dlt_system(src: Sequence[Vec2], dst: Sequence[Vec2]) -> np.ndarray:
    rows = []
    for s, d in zip(src, dst):
        rows.append([-s.x, -s.y, -1.0, 0.0, 0.0, 0.0, s.x * d.x, s.y * d.x, d.x])
        rows.append([0.0, 0.0, 0.0, -s.x, -s.y, -1.0, s.x * d.y, s.y * d.y, d.y])
    return np.array(rows, dtype=float)


def compute_homography(src, dst) -> Homography:
    """
    Find H with dst_i ~ H·src_i for exactly 4 correspondences.

    Args:
        src: 4 source points (Vec2, {x, y} or (x, y))
        dst: 4 destination points

    Returns:
        Homography normalized so h8 == 1 (or unit Frobenius norm if h8 ≈ 0)

    Raises:
        InputContractError: if either side does not have exactly 4 points
        GeometryError: if either quad is degenerate (3 collinear / coincident)
    """
    src = [as_vec2(p) for p in src]
    dst = [as_vec2(p) for p in dst]
    if len(src) != 4 or len(dst) != 4:
        raise InputContractError(
            f"Need exactly 4 source and 4 destination points, got {len(src)} and {len(dst)}")

    _check_general_position(src, "source")
    _check_general_position(dst, "destination")

    # Hartley normalization keeps the system well conditioned for pixel-sized inputs
    t_src = _normalizing_matrix(src)
    t_dst = _normalizing_matrix(dst)
    src_n = [transform_point(t_src, p) for p in src]
    dst_n = [transform_point(t_dst, p) for p in dst]

    A = _build_dlt_system(src_n, dst_n)
    # full_matrices gives the 9th right singular vector for the 8x9 system
    _, sigma, vt = np.linalg.svd(A, full_matrices=True)
    if sigma[-1] < NULLSPACE_EPS * sigma[0]:
        raise GeometryError("Correspondences do not determine a unique homography")

    h_n = vt[-1]
    # Undo normalization: H = T_dst^-1 · H_n · T_src
    h = multiply_matrix(multiply_matrix(invert_matrix(t_dst), list(h_n)), t_src)

    H = _normalize(h)
    if is_singular(H.values):
        raise GeometryError("Computed homography is singular")

    logger.debug(f"[Homography] Computed {H.to_list()}")
    return H


def _normalizing_matrix(points: Sequence[Vec2]) -> List[float]:
    """Similarity moving the centroid to the origin with mean distance sqrt(2)."""
    cx = sum(p.x for p in points) / len(points)
    cy = sum(p.y for p in points) / len(points)
    mean_dist = sum(distance(p, Vec2(cx, cy)) for p in points) / len(points)
    k = np.sqrt(2.0) / mean_dist
    return [k, 0.0, -k * cx,
            0.0, k, -k * cy,
            0.0, 0.0, 1.0]


def _normalize(h: Sequence[float]) -> Homography:
    h = np.asarray(h, dtype=float)
    if abs(h[8]) > H8_EPS:
        h = h / h[8]
    else:
        h = h / np.linalg.norm(h)
    return Homography(tuple(float(v) for v in h))


def apply_homography(H: Homography, p) -> Vec2:
    """
    Map a point through H.

    Raises:
        GeometryError: if the point maps to infinity (w == 0)
    """
    return transform_point(H.values, as_vec2(p))


def apply_many(H: Homography, points) -> List[Vec2]:
    return [apply_homography(H, p) for p in points]


def invert_homography(H: Homography) -> Homography:
    """Adjugate / determinant inverse, renormalized like compute_homography."""
    return _normalize(invert_matrix(H.values))


def compose(a: Homography, b: Homography) -> Homography:
    """Homography applying b first, then a."""
    return _normalize(multiply_matrix(a.values, b.values))


def reprojection_error(H: Homography, src, dst) -> float:
    """Largest distance between H·src_i and dst_i."""
    src = [as_vec2(p) for p in src]
    dst = [as_vec2(p) for p in dst]
    return max(distance(apply_homography(H, s), d) for s, d in zip(src, dst))


def create_rectify_homography(corners, width: float, height: float) -> Homography:
    """
    Homography un-warping a photographed wall onto a width x height rectangle.

    Args:
        corners: 4 photo-space corners in TL, TR, BR, BL order
        width: canonical width
        height: canonical height
    """
    if width <= 0 or height <= 0:
        raise InputContractError(f"Canonical size must be positive, got {width}x{height}")
    return compute_homography(corners, canonical_rectangle_corners(width, height))
