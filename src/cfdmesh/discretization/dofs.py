# -*- coding: utf-8 -*-
"""
Degree-of-freedom maps and the assembled discrete system.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterable

import numpy as np
from scipy.sparse import csr_matrix

from .config import Operator, Scheme


class DofLocation(Enum):
    """Mesh entity that carries the unknowns."""

    CELL = "cell"
    VERTEX = "vertex"


@dataclass(frozen=True)
class DofMap:
    """
    Bidirectional mapping between mesh entities and unknowns.

    Attributes:
        location (DofLocation): Entity type the unknowns live on.
        entity_to_dof (np.ndarray): Dof of every entity, or -1 if the entity
            carries none (e.g. a vertex used by no cell).
        dof_to_entity (np.ndarray): Entity id of every dof, in dof order.
    """

    location: DofLocation
    entity_to_dof: np.ndarray
    dof_to_entity: np.ndarray

    @classmethod
    def from_entities(
        cls, location: DofLocation, n_entities: int, entities: Iterable[int]
    ) -> "DofMap":
        """Numbers the given entities consecutively in ascending id order."""
        dof_to_entity = np.array(sorted(set(int(e) for e in entities)), dtype=int)
        entity_to_dof = np.full(n_entities, -1, dtype=int)
        entity_to_dof[dof_to_entity] = np.arange(dof_to_entity.size, dtype=int)
        entity_to_dof.flags.writeable = False
        dof_to_entity.flags.writeable = False
        return cls(location, entity_to_dof, dof_to_entity)

    @property
    def n_dofs(self) -> int:
        return int(self.dof_to_entity.size)

    def dof(self, entity_id: int) -> int:
        """
        Returns the dof of an entity.

        Raises:
            KeyError: If the entity carries no dof.
        """
        dof = int(self.entity_to_dof[entity_id])
        if dof < 0:
            raise KeyError(f"{self.location.value} {entity_id} has no degree of freedom.")
        return dof

    def entity(self, dof: int) -> int:
        return int(self.dof_to_entity[dof])


@dataclass(frozen=True)
class DiscreteSystem:
    """
    Sparse operator assembled over a mesh, ready for an external solver.

    The operator is the discrete form of ``-div(k grad u) + div(v u)`` (the
    terms selected by `operator_kind`) without any boundary contribution.
    Boundary conditions are left to the solver, which finds the affected
    unknowns in `boundary_dofs`.

    Attributes:
        operator (csr_matrix): Square operator matrix, ``n_dofs x n_dofs``.
        mass (csr_matrix): Mass matrix on the same dofs.
        dof_map (DofMap): Entity <-> dof mapping.
        scheme (Scheme): Scheme that produced the system.
        operator_kind (Operator): Governing operator that was assembled.
        boundary_dofs (np.ndarray): Sorted dofs on the mesh boundary.
    """

    operator: csr_matrix
    mass: csr_matrix
    dof_map: DofMap
    scheme: Scheme
    operator_kind: Operator
    boundary_dofs: np.ndarray

    @property
    def n_dofs(self) -> int:
        return self.dof_map.n_dofs
