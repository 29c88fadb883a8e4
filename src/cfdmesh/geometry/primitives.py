# -*- coding: utf-8 -*-
"""
Point and vector primitives for 3D mesh geometry.

All quantities are float64 numpy arrays of shape ``(3,)`` (or ``(n, 3)`` for
point sets). 2D input is promoted to 3D with ``z = 0`` so that planar and
surface meshes share the same code path.
"""

from typing import Sequence

import numpy as np

from ..errors import DegenerateCellError

# --- Constants for magic numbers ---
GEOMETRY_TOLERANCE = 1e-12


def as_point(p: Sequence[float]) -> np.ndarray:
    """Converts a 2D or 3D coordinate to a float64 array of shape (3,)."""
    arr = np.asarray(p, dtype=np.float64).reshape(-1)
    if arr.size == 2:
        arr = np.append(arr, 0.0)
    if arr.size != 3:
        raise ValueError(f"Expected a 2D or 3D coordinate, got {arr.size} components.")
    return arr


def as_points(points) -> np.ndarray:
    """Converts a sequence of coordinates to a float64 array of shape (n, 3)."""
    arr = np.asarray(points, dtype=np.float64)
    if arr.size == 0:
        return np.zeros((0, 3), dtype=np.float64)
    if arr.ndim != 2 or arr.shape[1] not in (2, 3):
        raise ValueError(f"Expected coordinates of shape (n, 2) or (n, 3), got {arr.shape}.")
    if arr.shape[1] == 2:
        arr = np.hstack([arr, np.zeros((arr.shape[0], 1))])
    return arr


def add(a, b) -> np.ndarray:
    return as_point(a) + as_point(b)


def sub(a, b) -> np.ndarray:
    return as_point(a) - as_point(b)


def scale(a, s: float) -> np.ndarray:
    return as_point(a) * float(s)


def dot(a, b) -> float:
    return float(np.dot(as_point(a), as_point(b)))


def cross(a, b) -> np.ndarray:
    return np.cross(as_point(a), as_point(b))


def norm(a) -> float:
    return float(np.linalg.norm(as_point(a)))


def normalize(a, tolerance: float = GEOMETRY_TOLERANCE) -> np.ndarray:
    """Returns the unit vector along ``a``; raises ValueError for a zero vector."""
    v = as_point(a)
    length = np.linalg.norm(v)
    if not length >= tolerance:
        raise ValueError("Cannot normalize a zero-length vector.")
    return v / length


def centroid(points) -> np.ndarray:
    """Arithmetic mean of the given corner positions."""
    pts = as_points(points)
    if pts.shape[0] == 0:
        raise ValueError("Centroid of an empty point set is undefined.")
    return np.mean(pts, axis=0)


def triangle_area_vector(v0, v1, v2) -> np.ndarray:
    """Returns ``cross(v1 - v0, v2 - v0) / 2``; its length is the triangle area."""
    return 0.5 * np.cross(as_point(v1) - as_point(v0), as_point(v2) - as_point(v0))


def triangle_normal(v0, v1, v2, tolerance: float = GEOMETRY_TOLERANCE) -> np.ndarray:
    """
    Computes the unit normal of a planar triangle.

    The normal is ``cross(v1 - v0, v2 - v0)`` normalized, so counter-clockwise
    corners (seen from the tip of the normal) produce a positive orientation.

    Raises:
        DegenerateCellError: If the corners are collinear.
    """
    n = 2.0 * triangle_area_vector(v0, v1, v2)
    length = np.linalg.norm(n)
    if not length >= tolerance:
        raise DegenerateCellError(None, "triangle", float(length), quantity="normal")
    return n / length


def polygon_area_vector(points) -> np.ndarray:
    """
    Computes the area vector of a (possibly non-planar) polygon.

    The vector is ``1/2 * sum((p_k - c) x (p_k+1 - c))`` around the vertex mean
    ``c``. For a planar polygon its length is the polygon area and its
    direction the right-handed normal; for a non-planar polygon it is the
    Newell best-fit normal scaled by the projected area.
    """
    pts = as_points(points)
    c = np.mean(pts, axis=0)
    rel = pts - c
    return 0.5 * np.sum(np.cross(rel, np.roll(rel, -1, axis=0)), axis=0)


def signed_tetrahedron_volume(v0, v1, v2, v3) -> float:
    """Returns ``det([v1 - v0, v2 - v0, v3 - v0]) / 6``."""
    p0 = as_point(v0)
    m = np.array([as_point(v1) - p0, as_point(v2) - p0, as_point(v3) - p0])
    return float(np.linalg.det(m)) / 6.0


def tetrahedron_volume(v0, v1, v2, v3) -> float:
    """Returns ``|det([v1 - v0, v2 - v0, v3 - v0])| / 6``."""
    return abs(signed_tetrahedron_volume(v0, v1, v2, v3))


def rotation_matrix(axis, angle: float) -> np.ndarray:
    """Rodrigues rotation matrix about ``axis`` by ``angle`` radians."""
    k = normalize(axis)
    kx = np.array([[0.0, -k[2], k[1]], [k[2], 0.0, -k[0]], [-k[1], k[0], 0.0]])
    return np.eye(3) + np.sin(angle) * kx + (1.0 - np.cos(angle)) * (kx @ kx)


def transform_points(points, matrix=None, translation=None) -> np.ndarray:
    """Applies ``x -> matrix @ x + translation`` to every point."""
    pts = as_points(points)
    if matrix is not None:
        pts = pts @ np.asarray(matrix, dtype=np.float64).T
    if translation is not None:
        pts = pts + as_point(translation)
    return pts
