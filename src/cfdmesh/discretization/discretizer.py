# -*- coding: utf-8 -*-
"""
The `Discretizer` turns a mesh and a governing operator into a sparse system.

Key Features:
- Scheme selection from a closed registry, resolved when the discretizer is
  created so configuration mistakes surface before assembly.
- Assembly against the `CellMesh` protocol only; the mesh is borrowed and
  never modified.
- No solving, time stepping or boundary-condition enforcement.

Classes:
    Discretizer: Configured entry point for assembly.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Mapping, Type, Union

from ..errors import ConfigurationError
from ..polymesh.cell_mesh import CellMesh
from .base import SchemeAssembler
from .config import DiscretizerConfig, Scheme
from .dofs import DiscreteSystem
from .finite_element import FiniteElementAssembler
from .finite_volume import FiniteVolumeAssembler

logger = logging.getLogger(__name__)

SCHEME_ASSEMBLERS: Dict[Scheme, Type[SchemeAssembler]] = {
    Scheme.FINITE_VOLUME: FiniteVolumeAssembler,
    Scheme.FINITE_ELEMENT: FiniteElementAssembler,
}


class Discretizer:
    """
    Assembles the discrete operator of a configured scheme over a mesh.

    Example::

        disc = Discretizer({"scheme": "finite_volume", "operator": "diffusion"})
        system = disc.assemble(TriangleMesh.create_structured_triangle_mesh(4, 4))

    Attributes:
        config (DiscretizerConfig): The validated configuration.
    """

    def __init__(self, config: Union[DiscretizerConfig, Mapping[str, Any]]) -> None:
        """
        Args:
            config: A `DiscretizerConfig` or a mapping accepted by
                `DiscretizerConfig.from_dict`.

        Raises:
            ConfigurationError: If the configuration is invalid.
        """
        if isinstance(config, Mapping):
            config = DiscretizerConfig.from_dict(config)
        elif not isinstance(config, DiscretizerConfig):
            raise ConfigurationError(
                f"Expected a DiscretizerConfig or mapping, got {type(config).__name__}."
            )
        if config.scheme not in SCHEME_ASSEMBLERS:
            raise ConfigurationError(f"Scheme '{config.scheme.value}' has no assembler.")
        self.config = config
        self._assembler = SCHEME_ASSEMBLERS[config.scheme](config)

    @property
    def scheme(self) -> Scheme:
        return self.config.scheme

    def assemble(self, mesh: CellMesh) -> DiscreteSystem:
        """
        Builds the operator and mass matrices for a mesh.

        Raises:
            TypeError: If ``mesh`` does not provide the `CellMesh` queries.
            UnsupportedCellShapeError: If the scheme cannot handle a cell kind
                present in the mesh.
            IllConditionedMeshError: If a measure, facet measure or centroid
                distance the scheme divides by is below tolerance.
        """
        if not isinstance(mesh, CellMesh):
            raise TypeError(f"{type(mesh).__name__} does not implement the CellMesh interface.")
        logger.debug(
            "Assembling %s/%s over %d cells.",
            self.config.scheme.value,
            self.config.operator.value,
            mesh.n_cells,
        )
        return self._assembler.assemble(mesh)
