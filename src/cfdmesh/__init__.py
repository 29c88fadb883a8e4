"""
cfdmesh

A Python package for unstructured surface and volume meshes and their
finite-volume and finite-element discretization.
"""

import logging

from . import discretization
from . import geometry
from . import io
from . import polymesh
from .errors import (
    ConfigurationError,
    DegenerateCellError,
    IllConditionedMeshError,
    InvalidTopologyError,
    MeshError,
    MeshFormatError,
    UnsupportedCellShapeError,
)
from .logging_config import setup_logging

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "discretization",
    "geometry",
    "io",
    "polymesh",
    "setup_logging",
    "MeshError",
    "DegenerateCellError",
    "InvalidTopologyError",
    "UnsupportedCellShapeError",
    "IllConditionedMeshError",
    "MeshFormatError",
    "ConfigurationError",
]
