import unittest

import numpy as np

from cfdmesh.errors import DegenerateCellError
from cfdmesh.geometry import (
    as_point,
    as_points,
    centroid,
    cross,
    dot,
    norm,
    normalize,
    polygon_area_vector,
    rotation_matrix,
    signed_tetrahedron_volume,
    tetrahedron_volume,
    transform_points,
    triangle_normal,
)


class TestVectorOps(unittest.TestCase):
    def test_as_point_promotes_2d(self):
        np.testing.assert_array_equal(as_point([1, 2]), [1.0, 2.0, 0.0])

    def test_as_point_rejects_bad_size(self):
        with self.assertRaises(ValueError):
            as_point([1, 2, 3, 4])

    def test_as_points_shape(self):
        self.assertEqual(as_points([[0, 0], [1, 1]]).shape, (2, 3))
        self.assertEqual(as_points([]).shape, (0, 3))

    def test_dot_cross_norm(self):
        self.assertEqual(dot([1, 2, 3], [4, 5, 6]), 32.0)
        np.testing.assert_array_equal(cross([1, 0, 0], [0, 1, 0]), [0, 0, 1])
        self.assertAlmostEqual(norm([3, 4, 0]), 5.0)

    def test_normalize(self):
        np.testing.assert_allclose(normalize([0, 0, 2]), [0, 0, 1])
        with self.assertRaises(ValueError):
            normalize([0, 0, 0])

    def test_centroid(self):
        np.testing.assert_allclose(centroid([[0, 0], [2, 0], [2, 2], [0, 2]]), [1, 1, 0])


class TestShapes(unittest.TestCase):
    def test_unit_triangle_normal(self):
        np.testing.assert_allclose(triangle_normal([0, 0, 0], [1, 0, 0], [0, 1, 0]), [0, 0, 1])

    def test_collinear_triangle_normal_raises(self):
        with self.assertRaises(DegenerateCellError) as ctx:
            triangle_normal([0, 0, 0], [1, 0, 0], [2, 0, 0])
        self.assertEqual(ctx.exception.quantity, "normal")
        self.assertEqual(ctx.exception.value, 0.0)

    def test_polygon_area_vector_square(self):
        square = [[0, 0, 0], [2, 0, 0], [2, 2, 0], [0, 2, 0]]
        np.testing.assert_allclose(polygon_area_vector(square), [0, 0, 4])
        np.testing.assert_allclose(polygon_area_vector(square[::-1]), [0, 0, -4])

    def test_polygon_area_vector_matches_triangle(self):
        tri = np.array([[0.3, 0.1, 0.2], [1.4, 0.2, -0.1], [0.5, 1.7, 0.4]])
        expected = 0.5 * np.cross(tri[1] - tri[0], tri[2] - tri[0])
        np.testing.assert_allclose(polygon_area_vector(tri), expected)

    def test_polygon_area_vector_concave(self):
        # L-shape with area 3
        l_shape = [[0, 0], [2, 0], [2, 1], [1, 1], [1, 2], [0, 2]]
        np.testing.assert_allclose(polygon_area_vector(l_shape), [0, 0, 3])

    def test_tetrahedron_volume(self):
        corners = ([0, 0, 0], [1, 0, 0], [0, 1, 0], [0, 0, 1])
        self.assertAlmostEqual(signed_tetrahedron_volume(*corners), 1.0 / 6.0)
        swapped = (corners[0], corners[2], corners[1], corners[3])
        self.assertAlmostEqual(signed_tetrahedron_volume(*swapped), -1.0 / 6.0)
        self.assertAlmostEqual(tetrahedron_volume(*swapped), 1.0 / 6.0)


class TestTransforms(unittest.TestCase):
    def test_rotation_matrix_is_orthonormal(self):
        r = rotation_matrix([1, 2, 3], 0.7)
        np.testing.assert_allclose(r @ r.T, np.eye(3), atol=1e-12)
        self.assertAlmostEqual(np.linalg.det(r), 1.0)

    def test_quarter_turn_about_z(self):
        r = rotation_matrix([0, 0, 1], np.pi / 2)
        np.testing.assert_allclose(r @ [1, 0, 0], [0, 1, 0], atol=1e-12)

    def test_transform_points(self):
        moved = transform_points([[1, 0, 0]], rotation_matrix([0, 0, 1], np.pi), [1, 1, 1])
        np.testing.assert_allclose(moved, [[0, 1, 1]], atol=1e-12)


if __name__ == "__main__":
    unittest.main()
