"""
Importer adapters that turn interchange files into raw vertex/cell arrays.

The Gmsh reader lives in :mod:`cfdmesh.io.gmsh_io` and is imported on
demand, since it loads the Gmsh shared library.
"""

from .obj_io import read_obj, write_obj

__all__ = ["read_obj", "write_obj"]
