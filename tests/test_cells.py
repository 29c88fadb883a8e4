import unittest

import numpy as np

from cfdmesh.errors import DegenerateCellError, InvalidTopologyError, UnsupportedCellShapeError
from cfdmesh.polymesh import Cell, CellKind, VertexPool


class TestCellKind(unittest.TestCase):
    def test_arity_and_dimension(self):
        self.assertEqual(CellKind.TRIANGLE.arity, 3)
        self.assertIsNone(CellKind.POLYGON.arity)
        self.assertEqual(CellKind.TETRAHEDRON.arity, 4)
        self.assertEqual(CellKind.POLYGON.dimension, 2)
        self.assertEqual(CellKind.TETRAHEDRON.dimension, 3)

    def test_accepts(self):
        self.assertTrue(CellKind.POLYGON.accepts(7))
        self.assertFalse(CellKind.POLYGON.accepts(2))
        self.assertFalse(CellKind.TRIANGLE.accepts(4))


class TestCellCreate(unittest.TestCase):
    def test_wrong_arity(self):
        with self.assertRaises(InvalidTopologyError) as ctx:
            Cell.create(CellKind.TETRAHEDRON, [0, 1, 2], cell_id=4)
        self.assertEqual(ctx.exception.cell_id, 4)

    def test_repeated_index(self):
        with self.assertRaises(InvalidTopologyError):
            Cell.create(CellKind.POLYGON, [0, 1, 1, 2])

    def test_out_of_range_index(self):
        with self.assertRaises(InvalidTopologyError) as ctx:
            Cell.create(CellKind.TRIANGLE, [0, 1, 5], cell_id=0, n_vertices=3)
        self.assertIn("5", str(ctx.exception))

    def test_fractional_index(self):
        with self.assertRaises(InvalidTopologyError) as ctx:
            Cell.create(CellKind.TRIANGLE, [0, 1.9, 2], cell_id=6)
        self.assertEqual(ctx.exception.cell_id, 6)
        self.assertIn("1.9", str(ctx.exception))

    def test_integral_indices_are_accepted(self):
        cell = Cell.create(CellKind.TRIANGLE, [np.int64(0), 1.0, np.uint32(2)])
        self.assertEqual(cell.vertices, (0, 1, 2))
        self.assertTrue(all(type(v) is int for v in cell.vertices))

    def test_equality_ignores_cell_id(self):
        a = Cell.create(CellKind.TRIANGLE, [0, 1, 2], cell_id=0)
        b = Cell.create(CellKind.TRIANGLE, [0, 1, 2], cell_id=9)
        self.assertEqual(a, b)


class TestCellGeometry(unittest.TestCase):
    def setUp(self):
        self.pool = VertexPool(
            [[0, 0, 0], [1, 0, 0], [0, 1, 0], [0, 0, 1], [1, 1, 0], [2, 0, 0]]
        )

    def test_unit_triangle(self):
        tri = Cell.create(CellKind.TRIANGLE, [0, 1, 2])
        self.assertAlmostEqual(tri.measure(self.pool), 0.5)
        np.testing.assert_allclose(tri.normal(self.pool), [0, 0, 1])
        np.testing.assert_allclose(tri.centroid(self.pool), [1 / 3, 1 / 3, 0])

    def test_clockwise_triangle_flips_normal(self):
        tri = Cell.create(CellKind.TRIANGLE, [0, 2, 1])
        np.testing.assert_allclose(tri.normal(self.pool), [0, 0, -1])

    def test_unit_square_polygon(self):
        quad = Cell.create(CellKind.POLYGON, [0, 1, 4, 2])
        self.assertAlmostEqual(quad.measure(self.pool), 1.0)
        np.testing.assert_allclose(quad.normal(self.pool), [0, 0, 1])
        self.assertEqual(quad.edges(), [(0, 1), (1, 4), (4, 2), (2, 0)])

    def test_unit_tetrahedron(self):
        tet = Cell.create(CellKind.TETRAHEDRON, [0, 1, 2, 3])
        self.assertAlmostEqual(tet.measure(self.pool), 1.0 / 6.0)
        self.assertGreater(tet.signed_volume(self.pool), 0.0)
        self.assertEqual(len(tet.edges()), 6)
        self.assertEqual(len(tet.facets()), 4)

    def test_tetrahedron_facets_point_outward(self):
        tet = Cell.create(CellKind.TETRAHEDRON, [0, 1, 2, 3])
        center = tet.centroid(self.pool)
        for face in tet.facets():
            p = self.pool.coords[list(face)]
            n = np.cross(p[1] - p[0], p[2] - p[0])
            self.assertGreater(np.dot(n, p.mean(axis=0) - center), 0.0)

    def test_tetrahedron_has_no_normal(self):
        tet = Cell.create(CellKind.TETRAHEDRON, [0, 1, 2, 3], cell_id=2)
        with self.assertRaises(UnsupportedCellShapeError) as ctx:
            tet.normal(self.pool)
        self.assertEqual(ctx.exception.cell_id, 2)
        self.assertIs(ctx.exception.kind, CellKind.TETRAHEDRON)

    def test_degenerate_triangle(self):
        tri = Cell.create(CellKind.TRIANGLE, [0, 1, 5], cell_id=7)
        with self.assertRaises(DegenerateCellError) as ctx:
            tri.measure(self.pool)
        self.assertEqual(ctx.exception.cell_id, 7)
        self.assertIs(ctx.exception.kind, CellKind.TRIANGLE)
        self.assertEqual(ctx.exception.value, 0.0)
        with self.assertRaises(DegenerateCellError):
            tri.normal(self.pool)

    def test_measure_invariant_under_rotation_of_start_vertex(self):
        a = Cell.create(CellKind.POLYGON, [0, 1, 4, 2])
        b = Cell.create(CellKind.POLYGON, [4, 2, 0, 1])
        self.assertAlmostEqual(a.measure(self.pool), b.measure(self.pool))
        np.testing.assert_allclose(a.normal(self.pool), b.normal(self.pool))


class TestNonPlanarPolygon(unittest.TestCase):
    def setUp(self):
        # Unit square with one corner lifted out of the plane
        self.pool = VertexPool([[0, 0, 0], [1, 0, 0], [1, 1, 0.3], [0, 1, 0]])

    def _newell_vector(self, order):
        p = self.pool.coords[order]
        c = p.mean(axis=0)
        return 0.5 * sum(np.cross(p[k] - c, p[(k + 1) % len(p)] - c) for k in range(len(p)))

    def test_normal_is_newell_best_fit(self):
        quad = Cell.create(CellKind.POLYGON, [0, 1, 2, 3])
        area_vec = self._newell_vector([0, 1, 2, 3])
        np.testing.assert_allclose(area_vec, [-0.15, -0.15, 1.0], atol=1e-12)
        np.testing.assert_allclose(quad.normal(self.pool), area_vec / np.linalg.norm(area_vec))
        self.assertAlmostEqual(quad.measure(self.pool), np.sqrt(1.045))

    def test_cyclic_rotation_gives_same_result(self):
        base = Cell.create(CellKind.POLYGON, [0, 1, 2, 3])
        for start in range(1, 4):
            order = [(start + k) % 4 for k in range(4)]
            with self.subTest(order=order):
                rotated = Cell.create(CellKind.POLYGON, order)
                np.testing.assert_allclose(
                    rotated.normal(self.pool), base.normal(self.pool), atol=1e-12
                )
                self.assertAlmostEqual(rotated.measure(self.pool), base.measure(self.pool))

    def test_reversed_order_flips_normal(self):
        quad = Cell.create(CellKind.POLYGON, [0, 1, 2, 3])
        flipped = Cell.create(CellKind.POLYGON, [3, 2, 1, 0])
        np.testing.assert_allclose(flipped.normal(self.pool), -quad.normal(self.pool))


class TestNonFiniteGeometry(unittest.TestCase):
    def test_nan_measure_is_degenerate(self):
        pool = VertexPool([[0, 0, 0], [1, 0, 0], [np.nan, 1, 0]])
        tri = Cell.create(CellKind.TRIANGLE, [0, 1, 2], cell_id=3)
        with self.assertRaises(DegenerateCellError) as ctx:
            tri.measure(pool)
        self.assertEqual(ctx.exception.cell_id, 3)
        with self.assertRaises(DegenerateCellError):
            tri.normal(pool)


if __name__ == "__main__":
    unittest.main()
