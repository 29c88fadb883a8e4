# -*- coding: utf-8 -*-
"""
This package assembles sparse discrete operators over meshes.

Key modules:
- config:          Scheme/operator identifiers and validated options.
- dofs:            Degree-of-freedom maps and the assembled system.
- discretizer:     The configured entry point and scheme registry.
- finite_volume:   Cell-centred two-point-flux assembly.
- finite_element:  P1 Lagrange assembly on simplices.
"""

from .config import DiscretizerConfig, Operator, Scheme
from .dofs import DiscreteSystem, DofLocation, DofMap
from .discretizer import Discretizer

__all__ = [
    "Discretizer",
    "DiscretizerConfig",
    "DiscreteSystem",
    "DofLocation",
    "DofMap",
    "Operator",
    "Scheme",
]
