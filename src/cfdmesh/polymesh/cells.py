# -*- coding: utf-8 -*-
"""
Cell types for unstructured meshes.

A `Cell` is a closed tagged variant: its `CellKind` is one of TRIANGLE,
POLYGON or TETRAHEDRON, and every geometric operation dispatches on the kind
explicitly. Unknown kinds are rejected rather than given a default behaviour.

Cells never own coordinates. They hold an ordered tuple of vertex indices
into a shared vertex pool, and every geometric query takes that pool as an
argument.

Conventions:
- TRIANGLE / POLYGON vertices are counter-clockwise seen from the tip of the
  positive normal.
- TETRAHEDRON corners are positively oriented when
  ``det([v1 - v0, v2 - v0, v3 - v0]) > 0``; the facet templates below then
  produce outward-facing faces.
- The normal and measure of a polygon come from its area vector about the
  vertex mean (Newell best fit), which is well defined for non-planar
  polygons and reduces to ``cross(v1 - v0, v2 - v0) / 2`` for triangles.

Classes:
    CellKind: Enumeration of supported cell shapes.
    Cell: Immutable cell referencing vertices by index.

Functions:
    vertex_index: Converts one raw vertex index to an int.
"""

import numbers
import operator
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Sequence, Tuple

import numpy as np

from ..errors import DegenerateCellError, InvalidTopologyError, UnsupportedCellShapeError
from ..geometry.primitives import (
    GEOMETRY_TOLERANCE,
    polygon_area_vector,
    signed_tetrahedron_volume,
)


def vertex_index(value, cell_id: Optional[int] = None) -> int:
    """
    Converts a raw vertex index to an int without truncating it.

    Integer types are accepted as-is; floats are accepted only when they hold
    an integral value.

    Raises:
        InvalidTopologyError: For a fractional, non-finite or non-numeric index.
    """
    try:
        return operator.index(value)
    except TypeError:
        pass
    if isinstance(value, numbers.Real) and np.isfinite(value) and float(value).is_integer():
        return int(value)
    raise InvalidTopologyError(cell_id, f"vertex index {value!r} is not an integer")


class CellKind(Enum):
    """Closed set of cell shapes."""

    TRIANGLE = "triangle"
    POLYGON = "polygon"
    TETRAHEDRON = "tetrahedron"

    @property
    def dimension(self) -> int:
        """Topological dimension of the cell (2 for faces, 3 for volumes)."""
        if self is CellKind.TRIANGLE or self is CellKind.POLYGON:
            return 2
        if self is CellKind.TETRAHEDRON:
            return 3
        raise UnsupportedCellShapeError(None, self, "CellKind.dimension")

    @property
    def arity(self) -> Optional[int]:
        """Exact vertex count of the kind, or None for n-gons."""
        if self is CellKind.TRIANGLE:
            return 3
        if self is CellKind.POLYGON:
            return None
        if self is CellKind.TETRAHEDRON:
            return 4
        raise UnsupportedCellShapeError(None, self, "CellKind.arity")

    def accepts(self, count: int) -> bool:
        """Returns True if a cell of this kind may have ``count`` vertices."""
        expected = self.arity
        return count >= 3 if expected is None else count == expected


# Faces of a positively oriented tetrahedron; face k is opposite corner k.
TETRAHEDRON_FACES: Tuple[Tuple[int, int, int], ...] = (
    (1, 2, 3),
    (0, 3, 2),
    (0, 1, 3),
    (0, 2, 1),
)

TETRAHEDRON_EDGES: Tuple[Tuple[int, int], ...] = (
    (0, 1),
    (1, 2),
    (2, 0),
    (0, 3),
    (1, 3),
    (2, 3),
)


def _pool_array(pool) -> np.ndarray:
    return np.asarray(getattr(pool, "coords", pool), dtype=np.float64)


@dataclass(frozen=True)
class Cell:
    """
    A single mesh element referencing vertices of a shared pool.

    Attributes:
        kind (CellKind): The shape of the cell.
        vertices (Tuple[int, ...]): Vertex indices in orientation order.
        cell_id (int, optional): Position of the cell in its mesh, used for
            error reporting. Not part of equality.
    """

    kind: CellKind
    vertices: Tuple[int, ...]
    cell_id: Optional[int] = field(default=None, compare=False)

    @classmethod
    def create(
        cls,
        kind: CellKind,
        indices: Sequence[int],
        cell_id: Optional[int] = None,
        n_vertices: Optional[int] = None,
    ) -> "Cell":
        """
        Builds a cell after checking arity, repeated and out-of-range indices.

        Args:
            kind: The cell kind.
            indices: Vertex indices in orientation order.
            cell_id: Cell position used in error messages.
            n_vertices: Size of the vertex pool; range is checked when given.

        Raises:
            InvalidTopologyError: If any cell invariant is violated.
        """
        verts = tuple(vertex_index(i, cell_id) for i in indices)
        if not kind.accepts(len(verts)):
            expected = kind.arity if kind.arity is not None else ">= 3"
            raise InvalidTopologyError(
                cell_id,
                f"{kind.value} needs {expected} vertices, got {len(verts)}",
            )
        if n_vertices is not None:
            bad = [v for v in verts if v < 0 or v >= n_vertices]
            if bad:
                raise InvalidTopologyError(
                    cell_id,
                    f"vertex index {bad[0]} is out of range for a pool of "
                    f"{n_vertices} vertices",
                )
        if len(set(verts)) != len(verts):
            raise InvalidTopologyError(cell_id, f"repeated vertex index in {verts}")
        return cls(kind, verts, cell_id)

    # -------------------------------------------------------------------------
    # Topology
    # -------------------------------------------------------------------------

    def vertex_indices(self) -> Tuple[int, ...]:
        return self.vertices

    def arity(self) -> int:
        return len(self.vertices)

    @property
    def dimension(self) -> int:
        return self.kind.dimension

    def edges(self) -> List[Tuple[int, int]]:
        """Returns the directed edges of the cell as vertex index pairs."""
        v = self.vertices
        if self.kind is CellKind.TRIANGLE or self.kind is CellKind.POLYGON:
            n = len(v)
            return [(v[i], v[(i + 1) % n]) for i in range(n)]
        if self.kind is CellKind.TETRAHEDRON:
            return [(v[a], v[b]) for a, b in TETRAHEDRON_EDGES]
        raise UnsupportedCellShapeError(self.cell_id, self.kind, "Cell.edges")

    def facets(self) -> List[Tuple[int, ...]]:
        """
        Returns the (d-1)-dimensional facets that join the cell to neighbors.

        Edges for surface cells, triangular faces for tetrahedra, ordered so
        that a positively oriented cell yields outward-facing facets.
        """
        if self.kind is CellKind.TRIANGLE or self.kind is CellKind.POLYGON:
            return self.edges()
        if self.kind is CellKind.TETRAHEDRON:
            v = self.vertices
            return [tuple(v[i] for i in face) for face in TETRAHEDRON_FACES]
        raise UnsupportedCellShapeError(self.cell_id, self.kind, "Cell.facets")

    # -------------------------------------------------------------------------
    # Geometry
    # -------------------------------------------------------------------------

    def coordinates(self, pool) -> np.ndarray:
        """Returns the corner coordinates, shape ``(arity, 3)``."""
        return _pool_array(pool)[list(self.vertices)]

    def area_vector(self, pool) -> np.ndarray:
        """Area vector of a surface cell (normal scaled by area)."""
        if self.kind is CellKind.TRIANGLE or self.kind is CellKind.POLYGON:
            return polygon_area_vector(self.coordinates(pool))
        raise UnsupportedCellShapeError(self.cell_id, self.kind, "Cell.area_vector")

    def signed_volume(self, pool) -> float:
        """Signed tetrahedron volume; negative for an inverted corner ordering."""
        if self.kind is CellKind.TETRAHEDRON:
            return signed_tetrahedron_volume(*self.coordinates(pool))
        raise UnsupportedCellShapeError(self.cell_id, self.kind, "Cell.signed_volume")

    def raw_measure(self, pool) -> float:
        """Area or volume without the degeneracy check."""
        if self.kind is CellKind.TRIANGLE or self.kind is CellKind.POLYGON:
            return float(np.linalg.norm(self.area_vector(pool)))
        if self.kind is CellKind.TETRAHEDRON:
            return abs(self.signed_volume(pool))
        raise UnsupportedCellShapeError(self.cell_id, self.kind, "Cell.measure")

    def measure(self, pool, tolerance: float = GEOMETRY_TOLERANCE) -> float:
        """
        Area (surface cells) or volume (tetrahedra) of the cell.

        Raises:
            DegenerateCellError: If the measure is below ``tolerance``.
        """
        value = self.raw_measure(pool)
        if not value >= tolerance:
            raise DegenerateCellError(self.cell_id, self.kind, value)
        return value

    def normal(self, pool, tolerance: float = GEOMETRY_TOLERANCE) -> np.ndarray:
        """
        Unit normal of a surface cell.

        Raises:
            DegenerateCellError: If the area vector is below ``tolerance``.
            UnsupportedCellShapeError: For volume cells.
        """
        if self.kind is CellKind.TRIANGLE or self.kind is CellKind.POLYGON:
            area_vec = self.area_vector(pool)
            length = float(np.linalg.norm(area_vec))
            if not length >= tolerance:
                raise DegenerateCellError(self.cell_id, self.kind, length, quantity="normal")
            return area_vec / length
        raise UnsupportedCellShapeError(self.cell_id, self.kind, "Cell.normal")

    def centroid(self, pool) -> np.ndarray:
        """Arithmetic mean of the corner positions."""
        return np.mean(self.coordinates(pool), axis=0)
