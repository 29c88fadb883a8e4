# -*- coding: utf-8 -*-
"""
Cell-centred finite-volume assembly.

Each cell carries one unknown at its centroid. Fluxes are exchanged across
interior facets only:

- Diffusion uses the two-point flux approximation. For a facet ``f``
  between cells ``a`` and ``b`` the transmissibility is
  ``T = k * |f| / |c_b - c_a|`` and the flux ``T * (u_a - u_b)`` leaves
  ``a`` and enters ``b``.
- Advection uses the volumetric flux ``F = (v . n_f) |f|`` through the
  facet, with ``n_f`` pointing from ``a`` to ``b``. The face value is the
  upwind cell value or, with ``upwind=False``, the mean of both cells.

Rows of the assembled operator are cell balances (outflow minus inflow), so
the diffusion rows and the advection columns sum to zero. Boundary facets
contribute nothing.
"""

from __future__ import annotations

import logging
from typing import Tuple

import numpy as np
from scipy.sparse import csr_matrix

from ..errors import DegenerateCellError, IllConditionedMeshError, UnsupportedCellShapeError
from ..polymesh.cell_mesh import CellMesh
from ..polymesh.core_mesh import Facet
from .base import (
    SchemeAssembler,
    _Triplets,
    checked_measure,
    mesh_tolerance,
    warn_if_inconsistently_oriented,
)
from .dofs import DiscreteSystem, DofLocation, DofMap

logger = logging.getLogger(__name__)


class FiniteVolumeAssembler(SchemeAssembler):
    """Assembles the cell-centred finite-volume system."""

    def assemble(self, mesh: CellMesh) -> DiscreteSystem:
        self._check_cell_shapes(mesh)
        warn_if_inconsistently_oriented(mesh)

        n = mesh.n_cells
        dof_map = DofMap.from_entities(DofLocation.CELL, n, range(n))
        tolerance = mesh_tolerance(mesh)
        measures = np.array([checked_measure(mesh, ci) for ci in range(n)], dtype=np.float64)

        operator_kind = self.config.operator
        diffusivity = self.config.option("diffusivity")
        velocity = np.asarray(self.config.option("velocity"), dtype=np.float64)
        upwind = self.config.option("upwind")

        triplets = _Triplets()
        for facet in mesh.interior_faces():
            area, normal, distance = self._facet_geometry(mesh, facet, tolerance)
            a, b = facet.owner, facet.neighbor
            if operator_kind.has_diffusion:
                t = diffusivity * area / distance
                triplets.add(a, a, t)
                triplets.add(a, b, -t)
                triplets.add(b, b, t)
                triplets.add(b, a, -t)
            if operator_kind.has_advection:
                _add_advective_flux(triplets, a, b, float(np.dot(velocity, normal)) * area, upwind)

        operator = triplets.to_csr(n)
        cells = np.arange(n)
        mass = csr_matrix((measures, (cells, cells)), shape=(n, n))
        boundary = sorted({f.owner for f in mesh.boundary_faces()})

        logger.info(
            "Assembled finite-volume %s operator: %d cells, %d non-zeros.",
            operator_kind.value,
            n,
            operator.nnz,
        )
        return DiscreteSystem(
            operator=operator,
            mass=mass,
            dof_map=dof_map,
            scheme=self.config.scheme,
            operator_kind=operator_kind,
            boundary_dofs=np.array(boundary, dtype=int),
        )

    def _check_cell_shapes(self, mesh: CellMesh) -> None:
        allowed = self.config.option("cell_shapes")
        for cell in mesh.cells():
            if cell.kind not in allowed:
                raise UnsupportedCellShapeError(cell.cell_id, cell.kind, "finite_volume scheme")

    @staticmethod
    def _facet_geometry(
        mesh: CellMesh, facet: Facet, tolerance: float
    ) -> Tuple[float, np.ndarray, float]:
        """
        Measure, unit normal and centroid distance of an interior facet.

        Raises:
            IllConditionedMeshError: If any of them is too small to divide by.
        """
        area = mesh.facet_measure(facet)
        if not area >= tolerance:
            raise IllConditionedMeshError("facet", facet.key, "measure", area)
        distance = float(np.linalg.norm(mesh.centroid(facet.neighbor) - mesh.centroid(facet.owner)))
        if not distance >= tolerance:
            raise IllConditionedMeshError("facet", facet.key, "centroid distance", distance)
        try:
            normal = mesh.facet_normal(facet)
        except DegenerateCellError as e:
            raise IllConditionedMeshError("facet", facet.key, e.quantity, e.value) from e
        return area, normal, distance


def _add_advective_flux(triplets: _Triplets, a: int, b: int, flux: float, upwind: bool) -> None:
    """Adds the advective exchange of ``flux`` (positive from a to b)."""
    if upwind:
        donor = a if flux >= 0.0 else b
        triplets.add(a, donor, flux)
        triplets.add(b, donor, -flux)
    else:
        half = 0.5 * flux
        triplets.add(a, a, half)
        triplets.add(a, b, half)
        triplets.add(b, a, -half)
        triplets.add(b, b, -half)
