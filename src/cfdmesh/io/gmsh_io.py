# -*- coding: utf-8 -*-
"""
Reads raw mesh arrays from Gmsh .msh files through the Gmsh Python API.

Node tags are remapped to 0-based positions in the returned coordinate
array. Only elements of one dimension are returned (the highest present
unless requested otherwise), and for higher-order elements only the corner
(primary) nodes are kept.
"""

import logging
from typing import List, Optional, Tuple

import gmsh
import numpy as np

from ..errors import MeshFormatError

logger = logging.getLogger(__name__)


def read_gmsh(
    msh_file: str, dimension: Optional[int] = None, gmsh_verbose: int = 0
) -> Tuple[np.ndarray, List[List[int]]]:
    """
    Reads node coordinates and cell connectivity from a .msh file.

    Args:
        msh_file: Path to the .msh file.
        dimension: Element dimension to read; defaults to the highest one.
        gmsh_verbose: Verbosity level passed to the Gmsh API.

    Returns:
        A tuple ``(coords, cells)`` of an ``(n, 3)`` float array and a list of
        0-based corner index lists.

    Raises:
        MeshFormatError: If the file has no elements of the requested
            dimension or references an unknown node tag.
    """
    gmsh.initialize()
    gmsh.option.setNumber("General.Verbosity", gmsh_verbose)
    try:
        gmsh.open(msh_file)
        coords, tag_to_index = _read_nodes()
        cells = _read_elements(tag_to_index, dimension)
    finally:
        gmsh.finalize()

    logger.info("Read %d nodes and %d cells from %s", coords.shape[0], len(cells), msh_file)
    return coords, cells


def _read_nodes() -> Tuple[np.ndarray, dict]:
    """Reads node coordinates and creates the node tag-to-index map."""
    raw_tags, raw_coords, _ = gmsh.model.mesh.getNodes()
    coords = np.array(raw_coords, dtype=np.float64).reshape(-1, 3)
    tag_to_index = {int(t): i for i, t in enumerate(raw_tags)}
    return coords, tag_to_index


def _read_elements(tag_to_index: dict, dimension: Optional[int]) -> List[List[int]]:
    """Reads the corner connectivity of all elements of one dimension."""
    elem_types, _, connectivity_list = gmsh.model.mesh.getElements()
    props_by_type = {int(et): gmsh.model.mesh.getElementProperties(int(et)) for et in elem_types}
    if dimension is None:
        dimension = max((int(p[1]) for p in props_by_type.values()), default=0)

    cells: List[List[int]] = []
    for i, et in enumerate(elem_types):
        props = props_by_type[int(et)]
        if int(props[1]) != dimension:
            continue  # Skip elements not of the requested dimension
        n_nodes, n_corners = int(props[3]), int(props[5])
        raw_conn = np.array(connectivity_list[i], dtype=np.int64).reshape(-1, n_nodes)
        for element in raw_conn[:, :n_corners]:
            try:
                cells.append([tag_to_index[int(t)] for t in element])
            except KeyError as e:
                raise MeshFormatError(f"Element references unknown node tag {e}.") from e

    if not cells:
        raise MeshFormatError(f"No {dimension}D elements found in the mesh file.")
    return cells
