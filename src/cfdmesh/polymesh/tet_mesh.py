# -*- coding: utf-8 -*-
"""
Tetrahedral volume meshes.

`TetrahedralMesh` applies the `CoreMesh` contract one dimension up: cells are
tetrahedra and facets are their triangular faces. A face shared by two
tetrahedra is interior, a face used by one is on the boundary, and a face
used by three or more makes the input invalid.
"""

from __future__ import annotations

from itertools import permutations
from typing import List, Tuple

import numpy as np

from ..geometry.primitives import signed_tetrahedron_volume
from .cells import CellKind
from .core_mesh import CoreMesh


class TetrahedralMesh(CoreMesh):
    """
    A volume mesh of tetrahedra.

    Attributes:
        dimension (int): Always 3; facets are triangular faces.
    """

    dimension = 3
    facet_name = "face"

    def _cell_kind(self, cell_id: int, count: int) -> CellKind:
        return CellKind.TETRAHEDRON

    @classmethod
    def from_gmsh(cls, msh_file: str, gmsh_verbose: int = 0, **kwargs) -> "TetrahedralMesh":
        """Creates a mesh from the 3D elements of a Gmsh .msh file."""
        from ..io.gmsh_io import read_gmsh

        coords, cells = read_gmsh(msh_file, dimension=3, gmsh_verbose=gmsh_verbose)
        return cls(coords, cells, **kwargs)

    @classmethod
    def create_structured_tet_mesh(
        cls, nx: int, ny: int, nz: int, h: float = 1.0
    ) -> "TetrahedralMesh":
        """
        Creates a conforming tetrahedral mesh of an nx x ny x nz block of cubes.

        Each cube is split into the six Kuhn tetrahedra that share its main
        diagonal, so neighboring cubes agree on their shared faces. Corners
        are ordered to give every tetrahedron a positive signed volume.
        """
        if nx < 1 or ny < 1 or nz < 1:
            raise ValueError("nx, ny and nz must be positive.")

        def node(i: int, j: int, k: int) -> int:
            return (k * (ny + 1) + j) * (nx + 1) + i

        coords = np.array(
            [
                [i * h, j * h, k * h]
                for k in range(nz + 1)
                for j in range(ny + 1)
                for i in range(nx + 1)
            ],
            dtype=np.float64,
        )

        tets: List[List[int]] = []
        for k in range(nz):
            for j in range(ny):
                for i in range(nx):
                    for path in _kuhn_paths():
                        corners = [node(i + a, j + b, k + c) for a, b, c in path]
                        if signed_tetrahedron_volume(*coords[corners]) < 0:
                            corners[1], corners[2] = corners[2], corners[1]
                        tets.append(corners)
        return cls(coords, tets)

    def signed_volumes(self) -> np.ndarray:
        return np.array([c.signed_volume(self.pool) for c in self.cells()])

    def inverted_cells(self) -> List[int]:
        """Ids of tetrahedra with negative signed volume."""
        return [int(i) for i in np.flatnonzero(self.signed_volumes() < 0)]

    def total_volume(self) -> float:
        return float(np.sum(self.cell_measures()))


def _kuhn_paths() -> List[Tuple[Tuple[int, int, int], ...]]:
    """Corner offsets of the six tetrahedra along the (0,0,0)-(1,1,1) diagonal."""
    paths = []
    for order in permutations(range(3)):
        corner = [0, 0, 0]
        path = [tuple(corner)]
        for axis in order:
            corner[axis] = 1
            path.append(tuple(corner))
        paths.append(tuple(path))
    return paths
