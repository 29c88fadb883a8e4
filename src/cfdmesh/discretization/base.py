# -*- coding: utf-8 -*-
"""
Shared pieces of the scheme assemblers.

A scheme assembler is a strategy object: `Discretizer` picks one from its
registry by `Scheme` and calls `assemble`. Assemblers only use the queries
of the `CellMesh` protocol and never modify the mesh.
"""

from __future__ import annotations

import warnings
from typing import List

import numpy as np
from scipy.sparse import csr_matrix

from ..errors import DegenerateCellError, IllConditionedMeshError
from ..geometry.primitives import GEOMETRY_TOLERANCE
from ..polymesh.cell_mesh import CellMesh
from .config import DiscretizerConfig
from .dofs import DiscreteSystem


class SchemeAssembler:
    """
    Abstract base class for scheme assemblers.

    Subclasses must implement `assemble`, which builds a `DiscreteSystem`
    for a mesh.
    """

    def __init__(self, config: DiscretizerConfig) -> None:
        self.config = config

    def assemble(self, mesh: CellMesh) -> DiscreteSystem:
        raise NotImplementedError("Subclasses must implement this method.")


class _Triplets:
    """Accumulates (row, col, value) entries of a sparse matrix; duplicates are summed."""

    def __init__(self) -> None:
        self.rows: List[int] = []
        self.cols: List[int] = []
        self.values: List[float] = []

    def add(self, row: int, col: int, value: float) -> None:
        self.rows.append(row)
        self.cols.append(col)
        self.values.append(value)

    def add_block(self, dofs: np.ndarray, block: np.ndarray) -> None:
        n = len(dofs)
        self.rows.extend(np.repeat(dofs, n).tolist())
        self.cols.extend(np.tile(dofs, n).tolist())
        self.values.extend(np.asarray(block, dtype=np.float64).ravel().tolist())

    def to_csr(self, n: int) -> csr_matrix:
        matrix = csr_matrix(
            (
                np.array(self.values, dtype=np.float64),
                (np.array(self.rows, dtype=int), np.array(self.cols, dtype=int)),
            ),
            shape=(n, n),
        )
        matrix.sum_duplicates()
        return matrix


def mesh_tolerance(mesh: CellMesh) -> float:
    return float(getattr(mesh, "tolerance", GEOMETRY_TOLERANCE))


def checked_measure(mesh: CellMesh, cell_id: int) -> float:
    """
    Measure of a cell that a scheme requires to be strictly positive.

    Raises:
        IllConditionedMeshError: If the cell is degenerate.
    """
    try:
        return mesh.measure(cell_id)
    except DegenerateCellError as e:
        raise IllConditionedMeshError("cell", cell_id, e.quantity, e.value) from e


def warn_if_inconsistently_oriented(mesh: CellMesh) -> None:
    """Warns when a surface mesh has faces with conflicting orientation."""
    inconsistent = getattr(mesh, "inconsistent_edges", None)
    if inconsistent is None:
        return
    edges = inconsistent()
    if edges:
        warnings.warn(
            f"Mesh has {len(edges)} edges with inconsistent face orientation; "
            f"facet normals across those edges may point the wrong way."
        )
