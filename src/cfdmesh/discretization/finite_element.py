# -*- coding: utf-8 -*-
"""
Linear (P1) Lagrange finite-element assembly on triangles and tetrahedra.

Unknowns live on the vertices used by at least one cell. For a simplex with
corners ``x_0 .. x_d`` the Jacobian ``J`` has the edge vectors
``x_i - x_0`` as columns and the reference gradients of the hat functions
are ``B = [-1 | I]``. With ``G = J^T J`` the physical gradients are
``J G^-1 B``, which also covers triangles embedded in 3D.

Element matrices:
- stiffness ``K = |e| * k * B^T G^-1 B``
- consistent mass ``M_ij = |e| (1 + delta_ij) / ((d + 1)(d + 2))``
- advection ``C_ij = |e| / (d + 1) * v . grad(phi_j)``

POLYGON cells have no P1 element and are rejected.
"""

from __future__ import annotations

import logging
from typing import Tuple

import numpy as np

from ..errors import UnsupportedCellShapeError
from ..polymesh.cell_mesh import CellMesh
from ..polymesh.cells import Cell, CellKind
from .base import SchemeAssembler, _Triplets, checked_measure, warn_if_inconsistently_oriented
from .dofs import DiscreteSystem, DofLocation, DofMap

logger = logging.getLogger(__name__)


class FiniteElementAssembler(SchemeAssembler):
    """Assembles the P1 finite-element system."""

    def assemble(self, mesh: CellMesh) -> DiscreteSystem:
        for cell in mesh.cells():
            if cell.kind is not CellKind.TRIANGLE and cell.kind is not CellKind.TETRAHEDRON:
                raise UnsupportedCellShapeError(cell.cell_id, cell.kind, "finite_element scheme")
        warn_if_inconsistently_oriented(mesh)

        dof_map = DofMap.from_entities(
            DofLocation.VERTEX,
            mesh.n_vertices,
            (v for cell in mesh.cells() for v in cell.vertices),
        )
        coords = mesh.vertex_coords

        operator_kind = self.config.operator
        diffusivity = self.config.option("diffusivity")
        velocity = np.asarray(self.config.option("velocity"), dtype=np.float64)

        operator = _Triplets()
        mass = _Triplets()
        for cell in mesh.cells():
            measure = checked_measure(mesh, cell.cell_id)
            gradients, reference = _element_gradients(cell, coords)
            dofs = dof_map.entity_to_dof[list(cell.vertices)]

            block = np.zeros((len(dofs), len(dofs)))
            if operator_kind.has_diffusion:
                block += diffusivity * measure * reference
            if operator_kind.has_advection:
                block += measure / len(dofs) * np.tile(velocity @ gradients, (len(dofs), 1))
            operator.add_block(dofs, block)
            mass.add_block(dofs, _element_mass(measure, len(dofs)))

        boundary = {
            dof_map.dof(v) for facet in mesh.boundary_faces() for v in facet.vertices
        }
        n = dof_map.n_dofs
        system = DiscreteSystem(
            operator=operator.to_csr(n),
            mass=mass.to_csr(n),
            dof_map=dof_map,
            scheme=self.config.scheme,
            operator_kind=operator_kind,
            boundary_dofs=np.array(sorted(boundary), dtype=int),
        )
        logger.info(
            "Assembled finite-element %s operator: %d vertex dofs, %d non-zeros.",
            operator_kind.value,
            n,
            system.operator.nnz,
        )
        return system


def _element_gradients(cell: Cell, coords: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
    """
    Hat-function gradients of a simplex.

    Returns:
        ``(gradients, reference)`` where ``gradients`` is the ``3 x (d + 1)``
        matrix of physical gradients and ``reference`` is ``B^T G^-1 B``.
    """
    nodes = coords[list(cell.vertices)]
    jacobian = (nodes[1:] - nodes[0]).T
    d = jacobian.shape[1]
    b = np.hstack([-np.ones((d, 1)), np.eye(d)])
    g_inv_b = np.linalg.solve(jacobian.T @ jacobian, b)
    return jacobian @ g_inv_b, b.T @ g_inv_b


def _element_mass(measure: float, n_nodes: int) -> np.ndarray:
    """Consistent P1 mass matrix of a simplex with ``n_nodes`` corners."""
    return measure * (np.ones((n_nodes, n_nodes)) + np.eye(n_nodes)) / (n_nodes * (n_nodes + 1))
