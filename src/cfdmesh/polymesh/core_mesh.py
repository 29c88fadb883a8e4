# -*- coding: utf-8 -*-
"""
Core data structures for unstructured meshes.

This module defines the `CoreMesh` class, the skeleton shared by every mesh
type. It owns a deduplicated `VertexPool` and an ordered tuple of `Cell`
objects, and derives the facet adjacency index (facet -> incident cells)
used by all neighbor and boundary queries.

Key Features:
- Construction from raw coordinate and index-group arrays, as produced by an
  importer, with fail-fast validation of every cell and of facet manifoldness.
- Facet adjacency: edges for surface meshes, triangular faces for volume
  meshes, keyed by the sorted vertex tuple so orientation does not matter.
- Per-cell and per-facet geometry (measure, centroid, outward normal) for
  discretization code.

A mesh is immutable once built. Operations that change vertices or cells
return a new, fully revalidated mesh.
"""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass
from typing import Dict, Iterator, List, Optional, Sequence, Set, Tuple

import numpy as np

from ..errors import DegenerateCellError, InvalidTopologyError
from ..geometry.primitives import GEOMETRY_TOLERANCE, triangle_area_vector
from .cells import Cell, CellKind, vertex_index
from .vertex_pool import MERGE_TOLERANCE, VertexPool

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Facet:
    """
    A facet (edge or face) as seen from one of its cells.

    Attributes:
        vertices (Tuple[int, ...]): Vertex indices ordered as traversed by
            the owner cell.
        owner (int): Id of the cell the facet was taken from.
        local_index (int): Position of the facet within the owner's facets.
        neighbor (int, optional): Id of the cell on the other side, or None
            for a boundary facet.
    """

    vertices: Tuple[int, ...]
    owner: int
    local_index: int
    neighbor: Optional[int] = None

    @property
    def key(self) -> Tuple[int, ...]:
        """Orientation-independent identifier of the facet."""
        return tuple(sorted(self.vertices))

    @property
    def is_boundary(self) -> bool:
        return self.neighbor is None


class CoreMesh:
    """
    Represents the core mesh information for unstructured meshes.

    Subclasses decide which `CellKind` a raw index group becomes and so which
    facets the adjacency index is built from.

    Attributes:
        dimension (int): Topological dimension of the cells (2 for surface
            meshes, 3 for volume meshes).
        pool (VertexPool): The shared, deduplicated vertex coordinates.
        tolerance (float): Threshold below which measures are degenerate.
        merge_tolerance (float): Distance below which input vertices merge.
    """

    dimension: int = 0
    facet_name: str = "facet"

    def __init__(
        self,
        coords,
        cells: Sequence[Sequence[int]],
        merge_tolerance: float = MERGE_TOLERANCE,
        tolerance: float = GEOMETRY_TOLERANCE,
    ) -> None:
        """
        Builds and validates a mesh from raw arrays.

        Args:
            coords: Vertex coordinates, shape ``(n, 2)`` or ``(n, 3)``.
            cells: One group of 0-based vertex indices per cell.
            merge_tolerance: Vertices closer than this are merged.
            tolerance: Degeneracy threshold for areas and volumes.

        Raises:
            InvalidTopologyError: If any index is out of range or repeated,
                a cell has the wrong arity, or a facet is shared by more than
                two cells. No partial mesh is produced.
        """
        self.tolerance = tolerance
        self.merge_tolerance = merge_tolerance
        self.pool, remap = VertexPool.from_points(coords, merge_tolerance)
        self._cells: Tuple[Cell, ...] = self._build_cells(cells, remap)

        # Derived adjacency
        self._facet_to_cells: Dict[Tuple[int, ...], List[int]] = {}
        self._cell_facets: List[List[Facet]] = []
        self._vertex_to_cells: List[List[int]] = []
        self._build_adjacency()

        # Derived geometry
        self.cell_centroids: np.ndarray = np.array([])
        self._raw_measures: np.ndarray = np.array([])
        self._compute_cell_geometry()

        logger.debug(
            "Built %s: %d vertices, %d cells, %d boundary %ss.",
            type(self).__name__,
            self.n_vertices,
            self.n_cells,
            len(self.boundary_faces()),
            self.facet_name,
        )

    # =========================================================================
    # Construction
    # =========================================================================

    def _cell_kind(self, cell_id: int, count: int) -> CellKind:
        """Returns the cell kind for an index group of ``count`` vertices."""
        raise NotImplementedError("Subclasses must implement this method.")

    def _build_cells(self, groups: Sequence[Sequence[int]], remap: np.ndarray) -> Tuple[Cell, ...]:
        n_raw = remap.shape[0]
        built: List[Cell] = []
        for cell_id, group in enumerate(groups):
            raw = [vertex_index(i, cell_id) for i in group]
            bad = [i for i in raw if i < 0 or i >= n_raw]
            if bad:
                raise InvalidTopologyError(
                    cell_id,
                    f"vertex index {bad[0]} is out of range for {n_raw} input vertices",
                )
            kind = self._cell_kind(cell_id, len(raw))
            built.append(
                Cell.create(kind, [int(remap[i]) for i in raw], cell_id, len(self.pool))
            )
        return tuple(built)

    def _build_adjacency(self) -> None:
        """
        Builds the facet -> cells map and per-cell facet lists.

        Raises:
            InvalidTopologyError: If a facet is shared by more than two cells.
        """
        facet_map: Dict[Tuple[int, ...], List[int]] = {}
        for cell in self._cells:
            for facet in cell.facets():
                key = tuple(sorted(facet))
                shared = facet_map.setdefault(key, [])
                if cell.cell_id in shared:
                    raise InvalidTopologyError(
                        cell.cell_id, f"{self.facet_name} {key} appears twice in the cell"
                    )
                if len(shared) == 2:
                    raise InvalidTopologyError(
                        cell.cell_id,
                        f"non-manifold {self.facet_name} {key} is shared by cells "
                        f"{shared[0]}, {shared[1]} and {cell.cell_id}",
                    )
                shared.append(cell.cell_id)

        cell_facets: List[List[Facet]] = []
        for cell in self._cells:
            facets = []
            for local_index, facet in enumerate(cell.facets()):
                shared = facet_map[tuple(sorted(facet))]
                neighbor = None
                if len(shared) == 2:
                    neighbor = shared[0] if shared[1] == cell.cell_id else shared[1]
                facets.append(Facet(tuple(facet), cell.cell_id, local_index, neighbor))
            cell_facets.append(facets)

        vertex_to_cells: List[List[int]] = [[] for _ in range(self.n_vertices)]
        for cell in self._cells:
            for v in cell.vertices:
                vertex_to_cells[v].append(cell.cell_id)

        self._facet_to_cells = facet_map
        self._cell_facets = cell_facets
        self._vertex_to_cells = vertex_to_cells

    def _compute_cell_geometry(self) -> None:
        """Computes centroids and unchecked measures of every cell."""
        coords = self.pool.coords
        if self.n_cells == 0:
            self.cell_centroids = np.zeros((0, 3))
            self._raw_measures = np.zeros(0)
        else:
            self.cell_centroids = np.array([c.centroid(coords) for c in self._cells])
            self._raw_measures = np.array([c.raw_measure(coords) for c in self._cells])
        self.cell_centroids.flags.writeable = False
        self._raw_measures.flags.writeable = False

    # =========================================================================
    # Cell queries
    # =========================================================================

    @property
    def n_vertices(self) -> int:
        return len(self.pool)

    @property
    def n_cells(self) -> int:
        return len(self._cells)

    @property
    def vertex_coords(self) -> np.ndarray:
        return self.pool.coords

    @property
    def cell_connectivity(self) -> List[List[int]]:
        """Vertex indices of every cell, in orientation order."""
        return [list(c.vertices) for c in self._cells]

    @property
    def cell_kinds(self) -> List[CellKind]:
        return [c.kind for c in self._cells]

    def cells(self) -> Tuple[Cell, ...]:
        """Returns the cells in id order; the tuple is read-only."""
        return self._cells

    def __iter__(self) -> Iterator[Cell]:
        return iter(self._cells)

    def __len__(self) -> int:
        return self.n_cells

    def cell(self, cell_id: int) -> Cell:
        if cell_id < 0 or cell_id >= self.n_cells:
            raise IndexError(f"Cell id {cell_id} is out of range for {self.n_cells} cells.")
        return self._cells[cell_id]

    def measure(self, cell_id: int) -> float:
        """
        Area or volume of a cell.

        Raises:
            DegenerateCellError: If the measure is below the mesh tolerance.
        """
        cell = self.cell(cell_id)
        value = float(self._raw_measures[cell_id])
        if not value >= self.tolerance:
            raise DegenerateCellError(cell_id, cell.kind, value)
        return value

    def centroid(self, cell_id: int) -> np.ndarray:
        self.cell(cell_id)
        return self.cell_centroids[cell_id]

    def cell_measures(self) -> np.ndarray:
        """
        Measures of all cells.

        Raises:
            DegenerateCellError: For the first cell below tolerance.
        """
        self.validate_geometry()
        return self._raw_measures

    def validate_geometry(self) -> None:
        """Raises DegenerateCellError for the first degenerate cell, if any."""
        bad = self.degenerate_cells()
        if bad:
            cell = self._cells[bad[0]]
            raise DegenerateCellError(cell.cell_id, cell.kind, float(self._raw_measures[bad[0]]))

    def degenerate_cells(self) -> List[int]:
        return [int(i) for i in np.flatnonzero(~(self._raw_measures >= self.tolerance))]

    # =========================================================================
    # Adjacency queries
    # =========================================================================

    def neighbors(self, cell_id: int) -> Set[int]:
        """Ids of the cells sharing a facet with ``cell_id``."""
        self.cell(cell_id)
        return {f.neighbor for f in self._cell_facets[cell_id] if f.neighbor is not None}

    def cell_facets(self, cell_id: int) -> List[Facet]:
        self.cell(cell_id)
        return list(self._cell_facets[cell_id])

    def facet_cells(self, facet_vertices: Sequence[int]) -> List[int]:
        """Ids of the cells incident to a facet, in any vertex order."""
        return list(self._facet_to_cells.get(tuple(sorted(facet_vertices)), []))

    def vertex_cells(self, vertex_id: int) -> List[int]:
        if vertex_id < 0 or vertex_id >= self.n_vertices:
            raise IndexError(f"Vertex id {vertex_id} is out of range.")
        return list(self._vertex_to_cells[vertex_id])

    def facets(self) -> List[Facet]:
        """Every unique facet once, seen from its lowest-id cell."""
        unique = []
        for facets in self._cell_facets:
            for f in facets:
                if f.neighbor is None or f.owner < f.neighbor:
                    unique.append(f)
        return unique

    def interior_faces(self) -> List[Facet]:
        return [f for f in self.facets() if f.neighbor is not None]

    def boundary_faces(self) -> List[Facet]:
        """Facets that belong to exactly one cell."""
        return [f for f in self.facets() if f.neighbor is None]

    def boundary_cells(self) -> List[int]:
        """Ids of cells with at least one boundary facet."""
        return [
            ci
            for ci, facets in enumerate(self._cell_facets)
            if any(f.neighbor is None for f in facets)
        ]

    def is_closed(self) -> bool:
        """True if the mesh has no boundary facets."""
        return not self.boundary_faces()

    def adjacency_lists(self) -> List[List[int]]:
        """Sorted neighbor ids of every cell."""
        return [sorted(self.neighbors(ci)) for ci in range(self.n_cells)]

    # =========================================================================
    # Facet geometry
    # =========================================================================

    def facet_centroid(self, facet: Facet) -> np.ndarray:
        return np.mean(self.pool.coords[list(facet.vertices)], axis=0)

    def facet_measure(self, facet: Facet) -> float:
        """Length of an edge facet or area of a face facet."""
        nodes = self.pool.coords[list(facet.vertices)]
        if self.dimension == 2:
            return float(np.linalg.norm(nodes[1] - nodes[0]))
        if self.dimension == 3:
            return float(np.linalg.norm(triangle_area_vector(*nodes)))
        raise NotImplementedError(f"Facet measure is undefined for dimension {self.dimension}.")

    def facet_normal(self, facet: Facet) -> np.ndarray:
        """
        Unit normal of a facet pointing out of its owner cell.

        For surface meshes the normal lies in the owner's tangent plane,
        perpendicular to the edge. For volume meshes it is the face normal
        flipped, if needed, to point away from the owner's centroid.

        Raises:
            DegenerateCellError: If the facet or its owner is degenerate.
        """
        nodes = self.pool.coords[list(facet.vertices)]
        if self.dimension == 2:
            owner_normal = self._cells[facet.owner].normal(self.pool, self.tolerance)
            n = np.cross(nodes[1] - nodes[0], owner_normal)
        elif self.dimension == 3:
            n = triangle_area_vector(*nodes)
        else:
            raise NotImplementedError(f"Facet normal is undefined for dimension {self.dimension}.")

        length = float(np.linalg.norm(n))
        if not length >= self.tolerance:
            raise DegenerateCellError(
                facet.owner, self._cells[facet.owner].kind, length, quantity=f"{self.facet_name} normal"
            )
        n = n / length
        if self.dimension == 3 and np.dot(
            n, self.facet_centroid(facet) - self.cell_centroids[facet.owner]
        ) < 0:
            n = -n
        return n

    # =========================================================================
    # Derived meshes
    # =========================================================================

    def with_vertex_coords(self, coords) -> "CoreMesh":
        """
        Returns a new mesh with the same cells over moved vertex positions.

        Raises:
            InvalidTopologyError: If the coordinate count does not match or
                the motion collapses vertices of a cell together.
        """
        coords = np.asarray(coords, dtype=np.float64)
        if coords.shape[0] != self.n_vertices:
            raise InvalidTopologyError(
                None,
                f"expected {self.n_vertices} vertex positions, got {coords.shape[0]}",
            )
        return self._rebuild(coords, self.cell_connectivity)

    def _rebuild(self, coords, cells) -> "CoreMesh":
        return type(self)(
            coords, cells, merge_tolerance=self.merge_tolerance, tolerance=self.tolerance
        )

    # =========================================================================
    # Reporting
    # =========================================================================

    def print_summary(self) -> None:
        """Prints a formatted summary report of the mesh."""
        from .quality import MeshQuality
        from .reporting import format_quality_summary

        print("\n" + "=" * 80)
        print(f"{'Mesh Analysis Report':^80}")
        print("=" * 80)
        self._print_general_info()
        self._print_geometric_properties()
        self._print_cell_geometry()
        print(format_quality_summary(MeshQuality.from_mesh(self)))
        print("\n" + "=" * 80)

    def _print_general_info(self) -> None:
        print(f"\n{'--- General Information ---':^80}\n")
        print(f"  {'Mesh Type:':<25} {type(self).__name__}")
        print(f"  {'Dimension:':<25} {self.dimension}D")
        print(f"  {'Number of Vertices:':<25} {self.n_vertices}")
        print(f"  {'Number of Cells:':<25} {self.n_cells}")
        print(f"  {'Boundary ' + self.facet_name.title() + 's:':<25} {len(self.boundary_faces())}")

    def _print_geometric_properties(self) -> None:
        if self.n_vertices == 0:
            return
        min_coords, max_coords = self.pool.bounding_box()
        print(f"\n{'--- Geometric Bounding Box ---':^80}\n")
        print(f"  {'X Range:':<25} {min_coords[0]:.4f} to {max_coords[0]:.4f}")
        print(f"  {'Y Range:':<25} {min_coords[1]:.4f} to {max_coords[1]:.4f}")
        print(f"  {'Z Range:':<25} {min_coords[2]:.4f} to {max_coords[2]:.4f}")

    def _print_cell_geometry(self) -> None:
        if self.n_cells == 0:
            return
        print(f"\n{'--- Cell Geometry ---':^80}\n")
        print("  Cell Type Distribution:")
        for kind, count in sorted(Counter(self.cell_kinds).items(), key=lambda kv: kv[0].value):
            print(f"    - {kind.value + ':':<20} {count}")
        valid = self._raw_measures[self._raw_measures > 0]
        if valid.size:
            print(f"\n  {'Metric':<20} {'Min':>15} {'Max':>15} {'Average':>15}")
            print(f"  {'-'*19} {'-'*15} {'-'*15} {'-'*15}")
            print(
                f"  {'Cell Measure':<20} {np.min(valid):>15.4e} "
                f"{np.max(valid):>15.4e} {np.mean(valid):>15.4e}"
            )
