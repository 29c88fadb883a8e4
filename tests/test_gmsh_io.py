import os
import unittest

try:
    import gmsh  # noqa: F401

    HAS_GMSH = True
except (ImportError, OSError):
    HAS_GMSH = False

from cfdmesh.errors import MeshFormatError
from cfdmesh.polymesh import TetrahedralMesh, TriangleMesh
from tests.common_meshes import DATA_DIR


@unittest.skipIf(not HAS_GMSH, "gmsh is not available")
class TestReadGmsh(unittest.TestCase):
    def test_read_triangles(self):
        from cfdmesh.io.gmsh_io import read_gmsh

        coords, cells = read_gmsh(os.path.join(DATA_DIR, "unit_square_tri.msh"))
        self.assertEqual(coords.shape, (4, 3))
        self.assertEqual(len(cells), 2)
        self.assertTrue(all(len(c) == 3 for c in cells))

    def test_read_lower_dimension(self):
        from cfdmesh.io.gmsh_io import read_gmsh

        _, cells = read_gmsh(os.path.join(DATA_DIR, "unit_square_tri.msh"), dimension=1)
        self.assertEqual(len(cells), 4)

    def test_missing_dimension(self):
        from cfdmesh.io.gmsh_io import read_gmsh

        with self.assertRaises(MeshFormatError):
            read_gmsh(os.path.join(DATA_DIR, "unit_square_tri.msh"), dimension=3)

    def test_triangle_mesh_from_gmsh(self):
        mesh = TriangleMesh.from_gmsh(os.path.join(DATA_DIR, "unit_square_tri.msh"))
        self.assertAlmostEqual(mesh.surface_area(), 1.0)
        self.assertEqual(len(mesh.interior_faces()), 1)

    def test_tet_mesh_from_gmsh(self):
        mesh = TetrahedralMesh.from_gmsh(os.path.join(DATA_DIR, "unit_tet.msh"))
        self.assertEqual(mesh.n_cells, 1)
        self.assertAlmostEqual(mesh.total_volume(), 1.0 / 6.0)


if __name__ == "__main__":
    unittest.main()
