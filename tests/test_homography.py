"""
Unit Tests for the Homography Engine

Tests:
- 4-point DLT solve (scale, identity, perspective quads)
- apply / invert / compose
- degenerate-input and point-at-infinity errors
- wall rectification
"""

import sys
import os
import unittest

import numpy as np

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from wallgeom.errors import GeometryError, InputContractError
from wallgeom.homography import (
    Homography,
    apply_homography,
    apply_many,
    canonical_rectangle_corners,
    compose,
    compute_homography,
    create_rectify_homography,
    identity_homography,
    invert_homography,
    reprojection_error,
)
from wallgeom.primitives import Vec2

# Check for OpenCV availability (used only as a cross-check)
try:
    import cv2
    HAS_CV2 = True
except ImportError:
    HAS_CV2 = False


UNIT_SQUARE = [Vec2(0, 0), Vec2(1, 0), Vec2(1, 1), Vec2(0, 1)]
# Wall photographed from below-left: a skewed quad in photo pixels
PHOTO_QUAD = [Vec2(112, 84), Vec2(1830, 40), Vec2(1710, 1390), Vec2(190, 1205)]


class TestComputeHomography(unittest.TestCase):
    """Test compute_homography."""

    def assertVecAlmostEqual(self, a, b, places=7):
        self.assertAlmostEqual(a.x, b.x, places=places)
        self.assertAlmostEqual(a.y, b.y, places=places)

    def test_uniform_scale_scenario(self):
        """Unit square → 2x square maps center (0.5, 0.5) to (1, 1)."""
        dst = [Vec2(0, 0), Vec2(2, 0), Vec2(2, 2), Vec2(0, 2)]
        H = compute_homography(UNIT_SQUARE, dst)

        self.assertVecAlmostEqual(apply_homography(H, Vec2(0.5, 0.5)), Vec2(1, 1))

    def test_same_quad_gives_identity(self):
        for quad in (UNIT_SQUARE, PHOTO_QUAD):
            H = compute_homography(quad, quad)
            np.testing.assert_allclose(H.matrix, np.eye(3), atol=1e-9)

    def test_correspondences_are_reproduced(self):
        dst = canonical_rectangle_corners(1000, 800)
        H = compute_homography(PHOTO_QUAD, dst)

        for s, d in zip(PHOTO_QUAD, dst):
            self.assertVecAlmostEqual(apply_homography(H, s), d, places=6)
        self.assertLess(reprojection_error(H, PHOTO_QUAD, dst), 1e-6)

    def test_normalized_by_h8(self):
        H = compute_homography(PHOTO_QUAD, canonical_rectangle_corners(1, 1))
        self.assertAlmostEqual(H[8], 1.0)

    def test_accepts_dicts_and_tuples(self):
        src = [{"x": 0, "y": 0}, {"x": 1, "y": 0}, {"x": 1, "y": 1}, {"x": 0, "y": 1}]
        dst = [(0, 0), (3, 0), (3, 3), (0, 3)]
        H = compute_homography(src, dst)
        self.assertVecAlmostEqual(apply_homography(H, (1, 1)), Vec2(3, 3))

    def test_small_unit_destination(self):
        """Rectifying into micro-units must not be rejected as singular."""
        dst = [Vec2(0, 0), Vec2(1e-6, 0), Vec2(1e-6, 1e-6), Vec2(0, 1e-6)]
        H = compute_homography(UNIT_SQUARE, dst)

        np.testing.assert_allclose(H.matrix, np.diag([1e-6, 1e-6, 1.0]), rtol=1e-6, atol=1e-12)
        self.assertAlmostEqual(invert_homography(H)[0], 1e6, delta=1e-2)

    def test_wrong_point_count(self):
        with self.assertRaises(InputContractError):
            compute_homography(UNIT_SQUARE[:3], UNIT_SQUARE[:3])
        with self.assertRaises(InputContractError):
            compute_homography(UNIT_SQUARE, UNIT_SQUARE + [Vec2(2, 2)])

    def test_collinear_source_rejected(self):
        src = [Vec2(0, 0), Vec2(1, 1), Vec2(2, 2), Vec2(0, 1)]
        with self.assertRaises(GeometryError):
            compute_homography(src, UNIT_SQUARE)

    def test_coincident_destination_rejected(self):
        dst = [Vec2(5, 5)] * 4
        with self.assertRaises(GeometryError):
            compute_homography(UNIT_SQUARE, dst)

    def test_repeated_point_rejected(self):
        src = [Vec2(0, 0), Vec2(0, 0), Vec2(1, 1), Vec2(0, 1)]
        with self.assertRaises(GeometryError):
            compute_homography(src, UNIT_SQUARE)

    @unittest.skipUnless(HAS_CV2, "OpenCV not available")
    def test_matches_opencv(self):
        dst = canonical_rectangle_corners(1000, 800)
        H = compute_homography(PHOTO_QUAD, dst)

        src_np = np.array([[p.x, p.y] for p in PHOTO_QUAD], dtype=np.float32)
        dst_np = np.array([[p.x, p.y] for p in dst], dtype=np.float32)
        expected = cv2.getPerspectiveTransform(src_np, dst_np)

        np.testing.assert_allclose(H.matrix, expected / expected[2, 2], rtol=1e-5, atol=1e-8)


class TestApplyInvert(unittest.TestCase):
    """Test apply / invert / compose."""

    @classmethod
    def setUpClass(cls):
        cls.H = create_rectify_homography(PHOTO_QUAD, 1.0, 1.0)

    def test_inverse_roundtrip(self):
        H_inv = invert_homography(self.H)
        for p in (Vec2(500, 600), Vec2(150, 100), Vec2(1800, 1300)):
            back = apply_homography(H_inv, apply_homography(self.H, p))
            self.assertAlmostEqual(back.x, p.x, places=6)
            self.assertAlmostEqual(back.y, p.y, places=6)

    def test_compose_with_inverse_is_identity(self):
        I = compose(self.H, invert_homography(self.H))
        np.testing.assert_allclose(I.matrix, np.eye(3), atol=1e-9)

    def test_compose_order(self):
        scale2 = Homography((2, 0, 0, 0, 2, 0, 0, 0, 1))
        shift = Homography((1, 0, 10, 0, 1, 0, 0, 0, 1))
        # shift first, then scale
        p = apply_homography(compose(scale2, shift), Vec2(1, 1))
        self.assertAlmostEqual(p.x, 22.0)
        self.assertAlmostEqual(p.y, 2.0)

    def test_point_at_infinity(self):
        H = Homography((1, 0, 0, 0, 1, 0, 1, 0, 0))
        with self.assertRaises(GeometryError):
            apply_homography(H, Vec2(0, 5))

    def test_invert_small_scale(self):
        """Tiny uniform scale is well conditioned, not singular."""
        H = Homography((1e-6, 0, 0, 0, 1e-6, 0, 0, 0, 1))
        H_inv = invert_homography(H)
        np.testing.assert_allclose(H_inv.matrix, np.diag([1e6, 1e6, 1.0]), rtol=1e-12)

        p = apply_homography(H_inv, apply_homography(H, Vec2(250, -40)))
        self.assertAlmostEqual(p.x, 250.0, places=6)
        self.assertAlmostEqual(p.y, -40.0, places=6)

    def test_invert_singular(self):
        H = Homography((1, 2, 3, 2, 4, 6, 0, 0, 1))
        with self.assertRaises(GeometryError):
            invert_homography(H)

    def test_apply_many(self):
        corners = apply_many(self.H, PHOTO_QUAD)
        self.assertEqual(len(corners), 4)
        self.assertAlmostEqual(corners[2].x, 1.0, places=6)
        self.assertAlmostEqual(corners[2].y, 1.0, places=6)


class TestHomographyValue(unittest.TestCase):
    """Test the Homography value type."""

    def test_identity(self):
        H = identity_homography()
        self.assertEqual(H.to_list(), [1.0, 0.0, 0.0, 0.0, 1.0, 0.0, 0.0, 0.0, 1.0])
        self.assertEqual(H.determinant(), 1.0)

    def test_from_nested_matrix(self):
        nested = [[1, 2, 3], [4, 5, 6], [7, 8, 10]]
        H = Homography.from_matrix(nested)
        self.assertEqual(H.to_nested(), [[1.0, 2.0, 3.0], [4.0, 5.0, 6.0], [7.0, 8.0, 10.0]])
        self.assertEqual(H.matrix.shape, (3, 3))

    def test_wrong_length(self):
        with self.assertRaises(InputContractError):
            Homography((1, 0, 0, 0, 1, 0, 0, 0))


class TestRectify(unittest.TestCase):
    """Test create_rectify_homography."""

    def test_corners_map_to_rectangle(self):
        H = create_rectify_homography(PHOTO_QUAD, 1200, 900)
        expected = [(0, 0), (1200, 0), (1200, 900), (0, 900)]
        for corner, (ex, ey) in zip(PHOTO_QUAD, expected):
            p = apply_homography(H, corner)
            self.assertAlmostEqual(p.x, ex, places=5)
            self.assertAlmostEqual(p.y, ey, places=5)

    def test_invalid_size(self):
        with self.assertRaises(InputContractError):
            create_rectify_homography(PHOTO_QUAD, 0, 900)

    def test_canonical_rectangle_order(self):
        corners = canonical_rectangle_corners(4, 3)
        self.assertEqual(corners, [Vec2(0, 0), Vec2(4, 0), Vec2(4, 3), Vec2(0, 3)])


if __name__ == '__main__':
    unittest.main(verbosity=2)
