# -*- coding: utf-8 -*-
"""Capability interface that discretizers and solvers are written against."""

from typing import List, Protocol, Sequence, Set, runtime_checkable

import numpy as np

from .cells import Cell
from .core_mesh import Facet


@runtime_checkable
class CellMesh(Protocol):
    r"""
    Protocol defining the queries a mesh must answer to be discretized.

    Any object that provides these members can be handed to a discretizer,
    whatever its concrete cell shapes. `PolygonMesh`, `TriangleMesh` and
    `TetrahedralMesh` all satisfy it structurally; new cell shapes plug in
    here without changes to solver code.

    Facet normals returned by ``facet_normal`` point out of the facet's
    ``owner`` cell, so for a boundary facet they are the outward normal of
    the domain.
    """

    dimension: int

    @property
    def n_cells(self) -> int: ...

    @property
    def n_vertices(self) -> int: ...

    @property
    def vertex_coords(self) -> np.ndarray: ...

    def cells(self) -> Sequence[Cell]: ...

    def cell(self, cell_id: int) -> Cell: ...

    def measure(self, cell_id: int) -> float: ...

    def centroid(self, cell_id: int) -> np.ndarray: ...

    def neighbors(self, cell_id: int) -> Set[int]: ...

    def cell_facets(self, cell_id: int) -> List[Facet]: ...

    def interior_faces(self) -> List[Facet]: ...

    def boundary_faces(self) -> List[Facet]: ...

    def facet_measure(self, facet: Facet) -> float: ...

    def facet_centroid(self, facet: Facet) -> np.ndarray: ...

    def facet_normal(self, facet: Facet) -> np.ndarray: ...
