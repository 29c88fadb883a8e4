# -*- coding: utf-8 -*-
"""
Exception types raised by mesh construction, geometry and discretization.

Every error carries the context needed to diagnose it (offending cell id,
cell kind, computed value) as attributes, so callers never have to re-derive
mesh state from a message string.

Classes:
    MeshError: Base class for all errors raised by this package.
    DegenerateCellError: A cell has a near-zero measure or normal.
    InvalidTopologyError: Raw construction input violates a mesh invariant.
    UnsupportedCellShapeError: An operation does not handle a cell kind.
    IllConditionedMeshError: Geometry is numerically unsafe to discretize.
    MeshFormatError: An interchange file could not be parsed.
    ConfigurationError: A discretizer configuration is not recognized.
"""

from __future__ import annotations

from typing import Any, Optional


class MeshError(Exception):
    """Base class for all mesh errors."""


class DegenerateCellError(MeshError):
    """Raised when a cell's area, volume or normal is below tolerance."""

    def __init__(
        self,
        cell_id: Optional[int],
        kind: Any,
        value: float,
        quantity: str = "measure",
    ) -> None:
        self.cell_id = cell_id
        self.kind = kind
        self.value = value
        self.quantity = quantity
        where = "cell" if cell_id is None else f"cell {cell_id}"
        super().__init__(
            f"Degenerate {where} ({_kind_name(kind)}): {quantity} {value:.3e} "
            "is below tolerance."
        )


class InvalidTopologyError(MeshError):
    """Raised when construction input violates a topological invariant."""

    def __init__(self, cell_id: Optional[int], reason: str) -> None:
        self.cell_id = cell_id
        self.reason = reason
        if cell_id is None:
            super().__init__(f"Invalid mesh topology: {reason}")
        else:
            super().__init__(f"Invalid mesh topology at cell {cell_id}: {reason}")


class UnsupportedCellShapeError(MeshError):
    """Raised when a scheme or operation cannot handle a cell kind."""

    def __init__(self, cell_id: Optional[int], kind: Any, context: str) -> None:
        self.cell_id = cell_id
        self.kind = kind
        self.context = context
        where = "" if cell_id is None else f" (cell {cell_id})"
        super().__init__(
            f"{context} does not support {_kind_name(kind)} cells{where}."
        )


class IllConditionedMeshError(MeshError):
    """Raised when a quantity the scheme requires to be positive is near zero."""

    def __init__(self, entity: str, entity_id: Any, quantity: str, value: float) -> None:
        self.entity = entity
        self.entity_id = entity_id
        self.quantity = quantity
        self.value = value
        super().__init__(
            f"Ill-conditioned mesh: {entity} {entity_id} has {quantity} "
            f"{value:.3e}, which is too small to discretize."
        )


class MeshFormatError(MeshError):
    """Raised when an interchange file contains a malformed record."""

    def __init__(self, message: str, line_number: Optional[int] = None) -> None:
        self.line_number = line_number
        if line_number is not None:
            message = f"Line {line_number}: {message}"
        super().__init__(message)


class ConfigurationError(MeshError, ValueError):
    """Raised when a discretizer configuration is not recognized."""


def _kind_name(kind: Any) -> str:
    return getattr(kind, "value", str(kind))
