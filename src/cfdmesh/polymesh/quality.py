# -*- coding: utf-8 -*-
"""
Computes and stores mesh quality metrics for a mesh object.

This module provides the `MeshQuality` class, which calculates various metrics
to assess the quality of a mesh. These metrics are crucial for ensuring the
stability and accuracy of numerical simulations.

Key Features:
- Calculation of geometric metrics like volume ratio, skewness, and aspect ratio.
- Computation of non-orthogonality between centroid links and shared facets.
- Topological checks for unreferenced vertices, duplicate cells, orientation
  conflicts, inverted tetrahedra and degenerate cells.

Classes:
    MeshQuality: A class for computing and storing mesh quality metrics.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, List, Tuple

import numpy as np

from ..errors import DegenerateCellError, UnsupportedCellShapeError
from ..geometry.primitives import GEOMETRY_TOLERANCE
from .cells import Cell, CellKind

if TYPE_CHECKING:
    from .core_mesh import CoreMesh


@dataclass(frozen=True)
class MeshQuality:
    """
    Stores mesh quality metrics for a mesh.

    Instances of this class are created via the `from_mesh` class method.

    Attributes:
        min_max_volume_ratio (float): Ratio of the smallest to the largest cell measure.
        cell_skewness_values (np.ndarray): Skewness in [0, 1] for each cell.
        cell_non_orthogonality_values (np.ndarray): Maximum non-orthogonality
            (in degrees) over the interior facets of each cell.
        cell_aspect_ratio_values (np.ndarray): Longest over shortest edge for each cell.
        connectivity_issues (List[str]): Descriptions of topological issues found.
    """

    min_max_volume_ratio: float
    cell_skewness_values: np.ndarray
    cell_non_orthogonality_values: np.ndarray
    cell_aspect_ratio_values: np.ndarray
    connectivity_issues: List[str]

    @classmethod
    def from_mesh(cls, mesh: "CoreMesh") -> "MeshQuality":
        """
        Computes all mesh quality metrics from a mesh and returns a new instance.
        """
        if mesh.n_cells == 0:
            return cls(
                min_max_volume_ratio=0.0,
                cell_skewness_values=np.array([]),
                cell_non_orthogonality_values=np.array([]),
                cell_aspect_ratio_values=np.array([]),
                connectivity_issues=[],
            )

        skewness, aspect_ratio = cls._compute_geometric_metrics(mesh)
        return cls(
            min_max_volume_ratio=cls._compute_volume_ratio(mesh),
            cell_skewness_values=skewness,
            cell_non_orthogonality_values=cls._compute_non_orthogonality(mesh),
            cell_aspect_ratio_values=aspect_ratio,
            connectivity_issues=cls._check_connectivity(mesh),
        )

    @staticmethod
    def _compute_volume_ratio(mesh: "CoreMesh") -> float:
        """Calculates the ratio of the smallest to the largest cell measure."""
        measures = np.array([c.raw_measure(mesh.pool) for c in mesh.cells()])
        min_vol = np.min(measures)
        max_vol = np.max(measures)
        return float(min_vol / max_vol) if max_vol > GEOMETRY_TOLERANCE else 0.0

    @staticmethod
    def _compute_geometric_metrics(mesh: "CoreMesh") -> Tuple[np.ndarray, np.ndarray]:
        """Computes skewness and aspect ratio for every cell."""
        skewness = np.zeros(mesh.n_cells)
        aspect_ratio = np.zeros(mesh.n_cells)
        for i, cell in enumerate(mesh.cells()):
            skewness[i], aspect_ratio[i] = MeshQuality._cell_metrics(cell, mesh.pool)
        return skewness, aspect_ratio

    @staticmethod
    def _cell_metrics(cell: Cell, pool) -> Tuple[float, float]:
        nodes = cell.coordinates(pool)
        lengths = np.array([np.linalg.norm(pool[b] - pool[a]) for a, b in cell.edges()])
        if np.min(lengths) < GEOMETRY_TOLERANCE:
            return 1.0, np.inf
        aspect_ratio = float(np.max(lengths) / np.min(lengths))

        if cell.kind is CellKind.TRIANGLE or cell.kind is CellKind.POLYGON:
            return MeshQuality._polygon_skewness(nodes), aspect_ratio
        if cell.kind is CellKind.TETRAHEDRON:
            return MeshQuality._tetrahedron_skewness(nodes, lengths), aspect_ratio
        raise UnsupportedCellShapeError(cell.cell_id, cell.kind, "MeshQuality")

    @staticmethod
    def _polygon_skewness(nodes: np.ndarray) -> float:
        """Angle-based skewness relative to the regular n-gon angle."""
        n = len(nodes)
        ideal = 180.0 * (n - 2) / n
        angles = []
        for i in range(n):
            a = nodes[(i - 1) % n] - nodes[i]
            b = nodes[(i + 1) % n] - nodes[i]
            cos_angle = np.dot(a, b) / (np.linalg.norm(a) * np.linalg.norm(b))
            angles.append(np.degrees(np.arccos(np.clip(cos_angle, -1.0, 1.0))))
        angles = np.array(angles)
        worst = max(np.max(angles) - ideal, ideal - np.min(angles))
        return float(np.clip(worst / max(ideal, 180.0 - ideal), 0.0, 1.0))

    @staticmethod
    def _tetrahedron_skewness(nodes: np.ndarray, lengths: np.ndarray) -> float:
        """One minus the volume relative to a regular tetrahedron of the same RMS edge."""
        rms = np.sqrt(np.mean(lengths**2))
        ideal = rms**3 / (6.0 * np.sqrt(2.0))
        volume = abs(np.linalg.det(nodes[1:] - nodes[0])) / 6.0
        return float(np.clip(1.0 - volume / ideal, 0.0, 1.0))

    @staticmethod
    def _compute_non_orthogonality(mesh: "CoreMesh") -> np.ndarray:
        """
        Computes the maximum angle between the centroid link and the facet
        normal over the interior facets of each cell.
        """
        non_orthogonality = np.zeros(mesh.n_cells)
        for facet in mesh.interior_faces():
            link = mesh.cell_centroids[facet.neighbor] - mesh.cell_centroids[facet.owner]
            norm_link = np.linalg.norm(link)
            if norm_link < GEOMETRY_TOLERANCE:
                continue
            try:
                normal = mesh.facet_normal(facet)
            except DegenerateCellError:
                continue  # reported by _check_connectivity
            cos_angle = np.clip(np.dot(link, normal) / norm_link, -1.0, 1.0)
            angle_deg = float(np.degrees(np.arccos(cos_angle)))
            for ci in (facet.owner, facet.neighbor):
                non_orthogonality[ci] = max(non_orthogonality[ci], angle_deg)
        return non_orthogonality

    @staticmethod
    def _check_connectivity(mesh: "CoreMesh") -> List[str]:
        """Checks for topological and orientation issues."""
        issues = []
        referenced = {v for cell in mesh.cells() for v in cell.vertices}
        if len(referenced) < mesh.n_vertices:
            issues.append(f"Found {mesh.n_vertices - len(referenced)} unreferenced vertices.")

        unique_cells = {tuple(sorted(c.vertices)) for c in mesh.cells()}
        if len(unique_cells) < mesh.n_cells:
            issues.append("Found duplicate cells.")

        degenerate = mesh.degenerate_cells()
        if degenerate:
            issues.append(f"Found {len(degenerate)} degenerate cells: {degenerate[:10]}.")

        inconsistent = getattr(mesh, "inconsistent_edges", None)
        if inconsistent is not None:
            edges = inconsistent()
            if edges:
                issues.append(f"Found {len(edges)} edges with inconsistent face orientation.")

        inverted = getattr(mesh, "inverted_cells", None)
        if inverted is not None:
            cells = inverted()
            if cells:
                issues.append(f"Found {len(cells)} inverted tetrahedra: {cells[:10]}.")
        return issues
