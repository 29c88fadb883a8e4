import unittest

import numpy as np

from cfdmesh.discretization import Discretizer, DofLocation, Scheme
from cfdmesh.errors import IllConditionedMeshError, UnsupportedCellShapeError
from cfdmesh.geometry import rotation_matrix, transform_points
from cfdmesh.polymesh import CellKind, TriangleMesh
from tests.common_meshes import (
    create_cube_tet_mesh,
    create_mixed_polygon_mesh,
    create_unit_tet_mesh,
    create_unit_triangle_mesh,
    random_rigid_motion,
)


def _fe(operator="diffusion", **options):
    return Discretizer({"scheme": "finite_element", "operator": operator, "options": options})


class TestFiniteElementTriangles(unittest.TestCase):
    def test_unit_triangle_stiffness(self):
        system = _fe().assemble(create_unit_triangle_mesh())
        expected = 0.5 * np.array([[2, -1, -1], [-1, 1, 0], [-1, 0, 1]], dtype=float)
        np.testing.assert_allclose(system.operator.toarray(), expected, atol=1e-12)

    def test_unit_triangle_mass(self):
        system = _fe().assemble(create_unit_triangle_mesh())
        expected = 0.5 / 12.0 * np.array([[2, 1, 1], [1, 2, 1], [1, 1, 2]], dtype=float)
        np.testing.assert_allclose(system.mass.toarray(), expected, atol=1e-12)

    def test_structured_mesh(self):
        mesh = TriangleMesh.create_structured_triangle_mesh(2, 2)
        system = _fe().assemble(mesh)
        self.assertIs(system.scheme, Scheme.FINITE_ELEMENT)
        self.assertIs(system.dof_map.location, DofLocation.VERTEX)
        self.assertEqual(system.n_dofs, 9)

        k = system.operator.toarray()
        np.testing.assert_allclose(k, k.T, atol=1e-12)
        np.testing.assert_allclose(k.sum(axis=1), 0.0, atol=1e-12)
        self.assertAlmostEqual(system.mass.sum(), 4.0)
        # Every vertex except the centre one lies on the boundary
        np.testing.assert_array_equal(system.boundary_dofs, [0, 1, 2, 3, 5, 6, 7, 8])

    def test_stiffness_is_positive_semidefinite(self):
        system = _fe().assemble(TriangleMesh.create_structured_triangle_mesh(3, 2))
        eigenvalues = np.linalg.eigvalsh(system.operator.toarray())
        self.assertGreater(eigenvalues.min(), -1e-10)

    def test_invariant_under_rigid_motion(self):
        mesh = TriangleMesh.create_structured_triangle_mesh(2, 3, dx=0.5, dy=0.7)
        axis, angle, translation = random_rigid_motion(seed=11)
        moved = mesh.with_vertex_coords(
            transform_points(mesh.vertex_coords, rotation_matrix(axis, angle), translation)
        )
        a = _fe().assemble(mesh)
        b = _fe().assemble(moved)
        np.testing.assert_allclose(b.operator.toarray(), a.operator.toarray(), atol=1e-10)
        np.testing.assert_allclose(b.mass.toarray(), a.mass.toarray(), atol=1e-12)

    def test_unused_vertex_has_no_dof(self):
        mesh = TriangleMesh([[0, 0], [1, 0], [0, 1], [5, 5]], [[0, 1, 2]])
        system = _fe().assemble(mesh)
        self.assertEqual(system.n_dofs, 3)
        self.assertEqual(system.dof_map.entity_to_dof[3], -1)
        with self.assertRaises(KeyError):
            system.dof_map.dof(3)

    def test_advection_rows_sum_to_zero(self):
        mesh = TriangleMesh.create_structured_triangle_mesh(2, 2)
        system = _fe("advection", velocity=[1.0, 0.5]).assemble(mesh)
        np.testing.assert_allclose(system.operator.sum(axis=1), 0.0, atol=1e-12)

    def test_advection_unit_triangle(self):
        system = _fe("advection", velocity=[1.0, 0.0]).assemble(create_unit_triangle_mesh())
        # grad(phi) = (-1, -1), (1, 0), (0, 1); each row is |e| / 3 * v . grad(phi_j)
        row = 0.5 / 3.0 * np.array([-1.0, 1.0, 0.0])
        np.testing.assert_allclose(system.operator.toarray(), np.tile(row, (3, 1)), atol=1e-12)


class TestFiniteElementTetrahedra(unittest.TestCase):
    def test_unit_tetrahedron(self):
        system = _fe().assemble(create_unit_tet_mesh())
        k = system.operator.toarray()
        expected = np.array(
            [[3, -1, -1, -1], [-1, 1, 0, 0], [-1, 0, 1, 0], [-1, 0, 0, 1]], dtype=float
        ) / 6.0
        np.testing.assert_allclose(k, expected, atol=1e-12)
        self.assertAlmostEqual(system.mass.sum(), 1.0 / 6.0)
        self.assertAlmostEqual(system.mass[0, 0], 1.0 / 60.0)

    def test_cube_block(self):
        system = _fe().assemble(create_cube_tet_mesh(2))
        k = system.operator.toarray()
        np.testing.assert_allclose(k, k.T, atol=1e-12)
        np.testing.assert_allclose(k.sum(axis=1), 0.0, atol=1e-10)
        self.assertAlmostEqual(system.mass.sum(), 8.0)
        self.assertEqual(system.n_dofs, 27)
        self.assertEqual(len(system.boundary_dofs), 26)


class TestFiniteElementFailures(unittest.TestCase):
    def test_polygons_are_unsupported(self):
        with self.assertRaises(UnsupportedCellShapeError) as ctx:
            _fe().assemble(create_mixed_polygon_mesh())
        self.assertIs(ctx.exception.kind, CellKind.POLYGON)
        self.assertEqual(ctx.exception.cell_id, 0)

    def test_degenerate_triangle(self):
        mesh = TriangleMesh([[0, 0], [1, 0], [2, 0]], [[0, 1, 2]])
        with self.assertRaises(IllConditionedMeshError):
            _fe().assemble(mesh)


if __name__ == "__main__":
    unittest.main()
