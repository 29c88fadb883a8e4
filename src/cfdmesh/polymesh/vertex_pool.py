# -*- coding: utf-8 -*-
"""
Shared, deduplicated vertex storage.

The `VertexPool` owns the coordinates of a mesh as a read-only ``(N, 3)``
float64 array. Insertion order is the canonical vertex index. Coordinates
closer than a merge tolerance are collapsed onto their first occurrence when
the pool is built, and the returned remap array translates raw input indices
to pool indices.

Duplicate detection uses a k-d tree pair query; the pairs form a graph whose
connected components are the duplicate clusters, so chains of near-coincident
points collapse onto a single survivor.
"""

import logging
from typing import Tuple

import numpy as np
from scipy.sparse import coo_matrix
from scipy.sparse.csgraph import connected_components
from scipy.spatial import cKDTree

from ..errors import InvalidTopologyError
from ..geometry.primitives import as_points

logger = logging.getLogger(__name__)

MERGE_TOLERANCE = 1e-10


def _cluster_labels(pairs: np.ndarray, n_points: int) -> np.ndarray:
    """
    Labels each point with the smallest index of its duplicate cluster.

    Args:
        pairs: Shape ``(n_pairs, 2)``; each row joins two points.
        n_points: Total number of points.

    Returns:
        Shape ``(n_points,)``; ``labels[i]`` is the representative of point i.
    """
    pairs = np.asarray(pairs, dtype=int).reshape(-1, 2)
    graph = coo_matrix(
        (np.ones(pairs.shape[0]), (pairs[:, 0], pairs[:, 1])), shape=(n_points, n_points)
    ).tocsr()
    n_components, component = connected_components(graph, directed=False)

    representative = np.full(n_components, n_points, dtype=int)
    np.minimum.at(representative, component, np.arange(n_points))
    return representative[component]


def _check_finite(points: np.ndarray) -> None:
    bad = np.flatnonzero(~np.all(np.isfinite(points), axis=1))
    if bad.size:
        raise InvalidTopologyError(
            None,
            f"vertex {int(bad[0])} has non-finite coordinates {points[bad[0]].tolist()}",
        )


class VertexPool:
    """
    Immutable pool of 3D vertex coordinates.

    Attributes:
        coords (np.ndarray): Read-only vertex coordinates.
            - Shape: `(n_vertices, 3)`
            - `dtype`: `float64`
        merge_tolerance (float): Distance below which input points were merged.
    """

    def __init__(self, coords, merge_tolerance: float = 0.0) -> None:
        arr = np.array(as_points(coords), dtype=np.float64, copy=True)
        arr.flags.writeable = False
        self.coords: np.ndarray = arr
        self.merge_tolerance = merge_tolerance

    @classmethod
    def from_points(
        cls, points, merge_tolerance: float = MERGE_TOLERANCE
    ) -> Tuple["VertexPool", np.ndarray]:
        """
        Builds a pool from raw points, merging near-identical coordinates.

        Args:
            points: Raw coordinates, shape ``(n, 2)`` or ``(n, 3)``.
            merge_tolerance: Points within this distance are merged onto the
                earliest one. A value of 0 disables merging.

        Returns:
            A tuple ``(pool, remap)`` where ``remap[i]`` is the pool index of
            raw point ``i``.

        Raises:
            InvalidTopologyError: If a point has a NaN or infinite coordinate.
        """
        raw = as_points(points)
        _check_finite(raw)
        n_raw = raw.shape[0]
        if n_raw == 0 or merge_tolerance <= 0.0:
            return cls(raw, merge_tolerance), np.arange(n_raw, dtype=int)

        pairs = cKDTree(raw).query_pairs(r=merge_tolerance, output_type="ndarray")
        labels = _cluster_labels(pairs, n_raw)

        survivors = np.unique(labels)
        new_index = -np.ones(n_raw, dtype=int)
        new_index[survivors] = np.arange(survivors.size)
        remap = new_index[labels]

        n_merged = n_raw - survivors.size
        if n_merged:
            logger.debug(
                "Merged %d duplicate vertices (tolerance %.1e).", n_merged, merge_tolerance
            )
        return cls(raw[survivors], merge_tolerance), remap

    def __len__(self) -> int:
        return self.coords.shape[0]

    def __getitem__(self, idx):
        return self.coords[idx]

    def __array__(self, dtype=None, copy=None):
        if dtype is None:
            return self.coords
        return self.coords.astype(dtype)

    def bounding_box(self) -> Tuple[np.ndarray, np.ndarray]:
        """Returns the (min, max) corners of the pool's bounding box."""
        if len(self) == 0:
            return np.zeros(3), np.zeros(3)
        return np.min(self.coords, axis=0), np.max(self.coords, axis=0)
