import unittest

import numpy as np

from cfdmesh.polymesh import PolygonMesh, TetrahedralMesh, renumber_cells, renumber_vertices
from tests.common_meshes import create_2x2_quad_mesh_fixture, create_cube_tet_mesh


def _bandwidth(mesh) -> int:
    return max((abs(a - b) for a, nbrs in enumerate(mesh.adjacency_lists()) for b in nbrs), default=0)


class TestRenumberCells(unittest.TestCase):
    """
    Tests for the renumber_cells function with various strategies.
    """

    def setUp(self):
        self.mesh = create_2x2_quad_mesh_fixture()

    def test_renumber_cells_preserves_mesh(self):
        """Check that reordering produces a valid permutation of the original cells."""
        for strategy in ["rcm", "spatial_x", "spatial_y", "spatial_z", "reverse", "random"]:
            with self.subTest(strategy=strategy):
                new_mesh = renumber_cells(self.mesh, strategy=strategy, seed=3)
                self.assertIsInstance(new_mesh, PolygonMesh)
                self.assertIsNot(new_mesh, self.mesh)
                self.assertEqual(self.mesh.n_cells, new_mesh.n_cells)

                original = {tuple(c) for c in self.mesh.cell_connectivity}
                renumbered = {tuple(c) for c in new_mesh.cell_connectivity}
                self.assertEqual(original, renumbered)
                self.assertTrue(new_mesh.is_consistently_oriented())

    def test_input_mesh_is_unchanged(self):
        before = self.mesh.cell_connectivity
        renumber_cells(self.mesh, strategy="reverse")
        self.assertEqual(self.mesh.cell_connectivity, before)

    def test_renumber_cells_spatial_x(self):
        """Centroids are at x=0.5, 1.5, 0.5, 1.5, so cells 0 and 2 come first."""
        new_mesh = renumber_cells(self.mesh, strategy="spatial_x")
        first_two = {tuple(c) for c in new_mesh.cell_connectivity[:2]}
        self.assertEqual(
            first_two,
            {tuple(self.mesh.cell_connectivity[0]), tuple(self.mesh.cell_connectivity[2])},
        )
        np.testing.assert_allclose(new_mesh.cell_centroids[:, 0], [0.5, 0.5, 1.5, 1.5])

    def test_renumber_cells_reverse(self):
        new_mesh = renumber_cells(self.mesh, strategy="reverse")
        self.assertEqual(new_mesh.cell_connectivity, self.mesh.cell_connectivity[::-1])

    def test_random_is_reproducible_with_seed(self):
        a = renumber_cells(self.mesh, strategy="random", seed=7)
        b = renumber_cells(self.mesh, strategy="random", seed=7)
        self.assertEqual(a.cell_connectivity, b.cell_connectivity)

    def test_rcm_does_not_increase_bandwidth_of_shuffled_mesh(self):
        mesh = PolygonMesh.create_structured_quad_mesh(6, 6)
        shuffled = renumber_cells(mesh, strategy="random", seed=1)
        reordered = renumber_cells(shuffled, strategy="rcm")
        self.assertLessEqual(_bandwidth(reordered), _bandwidth(shuffled))

    def test_tetrahedral_mesh(self):
        mesh = create_cube_tet_mesh(1)
        new_mesh = renumber_cells(mesh, strategy="rcm")
        self.assertIsInstance(new_mesh, TetrahedralMesh)
        self.assertAlmostEqual(new_mesh.total_volume(), 1.0)

    def test_unknown_strategy(self):
        with self.assertRaises(NotImplementedError):
            renumber_cells(self.mesh, strategy="sloan")


class TestRenumberVertices(unittest.TestCase):
    """
    Tests for the renumber_vertices function.
    """

    def setUp(self):
        self.mesh = create_2x2_quad_mesh_fixture()

    def test_renumber_vertices_preserves_geometry(self):
        """Check that reordering vertices preserves the corner positions of every cell."""
        for strategy in ["rcm", "reverse", "spatial_x", "spatial_y", "random"]:
            with self.subTest(strategy=strategy):
                new_mesh = renumber_vertices(self.mesh, strategy=strategy, seed=5)
                self.assertEqual(self.mesh.n_vertices, new_mesh.n_vertices)
                for old_cell, new_cell in zip(self.mesh.cell_connectivity, new_mesh.cell_connectivity):
                    np.testing.assert_allclose(
                        self.mesh.vertex_coords[old_cell], new_mesh.vertex_coords[new_cell]
                    )
                np.testing.assert_allclose(new_mesh.cell_centroids, self.mesh.cell_centroids)

    def test_renumber_vertices_spatial_x(self):
        """Vertices 0,3,6 have x=0, vertices 1,4,7 have x=1 and 2,5,8 have x=2."""
        new_mesh = renumber_vertices(self.mesh, strategy="spatial_x")
        expected_x_coords = [0.0, 0.0, 0.0, 1.0, 1.0, 1.0, 2.0, 2.0, 2.0]
        np.testing.assert_array_equal(new_mesh.vertex_coords[:, 0], expected_x_coords)

    def test_unknown_strategy(self):
        with self.assertRaises(NotImplementedError):
            renumber_vertices(self.mesh, strategy="sequential")


if __name__ == "__main__":
    unittest.main()
