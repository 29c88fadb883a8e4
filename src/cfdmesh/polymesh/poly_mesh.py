# -*- coding: utf-8 -*-
"""
This module defines the surface mesh classes `PolygonMesh` and `TriangleMesh`.

A `PolygonMesh` holds n-gon faces (n >= 3) over a shared vertex pool; every
3-vertex face is stored as a TRIANGLE cell and larger faces as POLYGON cells.
`TriangleMesh` is the same class restricted to 3-vertex faces, so triangle
meshes reuse the polygon code path instead of duplicating it.

Adjacency is edge-based: two faces are neighbors when they share an edge,
and an edge used by a single face is a boundary edge. Faces are expected to
be oriented consistently (each interior edge traversed in opposite directions
by its two faces); `inconsistent_edges` reports where they are not.
"""

from __future__ import annotations

from collections import Counter
from typing import Dict, Iterable, List, Optional, Tuple

import numpy as np

from ..errors import InvalidTopologyError
from ..io.obj_io import read_obj, write_obj
from .cells import CellKind
from .core_mesh import CoreMesh


class PolygonMesh(CoreMesh):
    """
    A surface mesh of polygonal faces.

    Attributes:
        dimension (int): Always 2; cells are faces and facets are edges.
    """

    dimension = 2
    facet_name = "edge"

    def _cell_kind(self, cell_id: int, count: int) -> CellKind:
        return CellKind.TRIANGLE if count == 3 else CellKind.POLYGON

    # =========================================================================
    # Factories
    # =========================================================================

    @classmethod
    def from_obj(cls, filename: str, **kwargs) -> "PolygonMesh":
        """Creates a mesh from a Wavefront OBJ file."""
        coords, faces = read_obj(filename)
        return cls(coords, faces, **kwargs)

    @classmethod
    def from_gmsh(cls, msh_file: str, gmsh_verbose: int = 0, **kwargs) -> "PolygonMesh":
        """Creates a mesh from the 2D elements of a Gmsh .msh file."""
        from ..io.gmsh_io import read_gmsh

        coords, cells = read_gmsh(msh_file, dimension=2, gmsh_verbose=gmsh_verbose)
        return cls(coords, cells, **kwargs)

    @classmethod
    def create_structured_quad_mesh(
        cls, nx: int, ny: int, dx: float = 1.0, dy: float = 1.0
    ) -> "PolygonMesh":
        """
        Creates a structured nx x ny quadrilateral mesh in the z = 0 plane.

        Nodes are numbered row by row; every quad is counter-clockwise, so all
        face normals point in +z.
        """
        coords, quads = _structured_grid(nx, ny, dx, dy)
        return cls(coords, quads)

    def write_obj(self, filename: str) -> int:
        """Writes the mesh to an OBJ file and returns the number of bytes written."""
        return write_obj(self.vertex_coords, self.cell_connectivity, filename)

    # =========================================================================
    # Surface geometry
    # =========================================================================

    def normal(self, cell_id: int) -> np.ndarray:
        """
        Unit normal of a face (Newell convention for non-planar polygons).

        Raises:
            DegenerateCellError: If the face has near-zero area.
        """
        return self.cell(cell_id).normal(self.pool, self.tolerance)

    def face_normals(self) -> np.ndarray:
        """Unit normals of all faces, shape ``(n_cells, 3)``."""
        if self.n_cells == 0:
            return np.zeros((0, 3))
        return np.array([c.normal(self.pool, self.tolerance) for c in self.cells()])

    def surface_area(self) -> float:
        return float(np.sum(self.cell_measures()))

    # =========================================================================
    # Orientation
    # =========================================================================

    def inconsistent_edges(self) -> List[Tuple[int, int]]:
        """
        Interior edges whose two faces traverse them in the same direction.

        Returns:
            Sorted vertex pairs of every offending edge.
        """
        directed: Dict[Tuple[int, int], int] = Counter(
            e for cell in self.cells() for e in cell.edges()
        )
        bad = {tuple(sorted(e)) for e, count in directed.items() if count > 1}
        return sorted(bad)

    def is_consistently_oriented(self) -> bool:
        return not self.inconsistent_edges()

    def boundary_half_edges(
        self, cell_ids: Optional[Iterable[int]] = None
    ) -> List[Tuple[int, int]]:
        """
        Directed edges on the boundary of a region of faces.

        An edge is on the region boundary when exactly one face of the region
        uses it. The edges keep the direction of that face, so for a
        consistently oriented region they chain into closed loops.

        Args:
            cell_ids: Faces of the region; defaults to the whole mesh.
        """
        ids = range(self.n_cells) if cell_ids is None else sorted(set(cell_ids))
        uses: Dict[Tuple[int, int], List[Tuple[int, int]]] = {}
        for ci in ids:
            for edge in self.cell(ci).edges():
                uses.setdefault(tuple(sorted(edge)), []).append(edge)
        return [edges[0] for edges in uses.values() if len(edges) == 1]

    # =========================================================================
    # Derived meshes
    # =========================================================================

    def to_triangle_mesh(self) -> "TriangleMesh":
        """
        Triangulates every face into a `TriangleMesh`.

        Triangles are copied unchanged. A polygon with n > 3 vertices gains a
        new vertex at its centroid and is split into the n triangles
        ``(c, v_i, v_i+1)``, which keeps the face orientation.
        """
        coords = [p for p in self.vertex_coords]
        triangles: List[List[int]] = []
        for cell in self.cells():
            v = cell.vertices
            if cell.kind is CellKind.TRIANGLE:
                triangles.append(list(v))
            elif cell.kind is CellKind.POLYGON:
                center = len(coords)
                coords.append(self.cell_centroids[cell.cell_id])
                triangles.extend([center, v[i], v[(i + 1) % len(v)]] for i in range(len(v)))
            else:
                raise InvalidTopologyError(cell.cell_id, f"unexpected {cell.kind.value} cell")
        return TriangleMesh(
            np.array(coords).reshape(-1, 3),
            triangles,
            merge_tolerance=self.merge_tolerance,
            tolerance=self.tolerance,
        )


class TriangleMesh(PolygonMesh):
    """
    A surface mesh whose faces are all triangles.

    Construction fails with `InvalidTopologyError` for any index group that
    does not have exactly three vertices.
    """

    def _cell_kind(self, cell_id: int, count: int) -> CellKind:
        return CellKind.TRIANGLE

    @classmethod
    def create_structured_triangle_mesh(
        cls, nx: int, ny: int, dx: float = 1.0, dy: float = 1.0
    ) -> "TriangleMesh":
        """
        Creates a structured mesh of 2 * nx * ny right triangles in z = 0.

        Each grid quad ``(n0, n1, n2, n3)`` is split along its ``n0-n2``
        diagonal into ``(n0, n1, n2)`` and ``(n0, n2, n3)``.
        """
        coords, quads = _structured_grid(nx, ny, dx, dy)
        triangles = []
        for n0, n1, n2, n3 in quads:
            triangles.append([n0, n1, n2])
            triangles.append([n0, n2, n3])
        return cls(coords, triangles)

    def to_triangle_mesh(self) -> "TriangleMesh":
        return self


def _structured_grid(
    nx: int, ny: int, dx: float, dy: float
) -> Tuple[np.ndarray, List[List[int]]]:
    """Node coordinates and counter-clockwise quads of an nx x ny grid."""
    if nx < 1 or ny < 1:
        raise ValueError("nx and ny must be positive.")
    num_nodes_x = nx + 1
    num_nodes_y = ny + 1

    node_coords = []
    for j in range(num_nodes_y):
        for i in range(num_nodes_x):
            node_coords.append([i * dx, j * dy, 0.0])

    cell_connectivity = []
    for j in range(ny):
        for i in range(nx):
            n0 = j * num_nodes_x + i
            n1 = j * num_nodes_x + (i + 1)
            n2 = (j + 1) * num_nodes_x + (i + 1)
            n3 = (j + 1) * num_nodes_x + i
            cell_connectivity.append([n0, n1, n2, n3])
    return np.array(node_coords), cell_connectivity
