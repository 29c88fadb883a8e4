# -*- coding: utf-8 -*-
"""
This package provides the mesh model: cells over a shared vertex pool, the
facet adjacency between them, and the per-cell and per-facet geometry used
by discretization schemes.

Key modules:
- cells:       The closed set of cell kinds and their per-kind geometry.
- vertex_pool: Deduplicated, read-only vertex coordinates.
- core_mesh:   Construction, validation and adjacency shared by all meshes.
- poly_mesh:   Polygon and triangle surface meshes.
- tet_mesh:    Tetrahedral volume meshes.
- cell_mesh:   The read-only protocol discretizers program against.
- reorder:     Cell and vertex renumbering to reduce matrix bandwidth.
- quality:     Mesh quality metrics.
"""

from .cells import Cell, CellKind
from .vertex_pool import VertexPool
from .core_mesh import CoreMesh, Facet
from .poly_mesh import PolygonMesh, TriangleMesh
from .tet_mesh import TetrahedralMesh
from .cell_mesh import CellMesh
from .quality import MeshQuality
from .reorder import renumber_cells, renumber_vertices

__all__ = [
    "Cell",
    "CellKind",
    "VertexPool",
    "CoreMesh",
    "Facet",
    "PolygonMesh",
    "TriangleMesh",
    "TetrahedralMesh",
    "CellMesh",
    "MeshQuality",
    "renumber_cells",
    "renumber_vertices",
]
