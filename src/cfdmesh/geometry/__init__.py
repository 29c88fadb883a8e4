"""
Geometry primitives: points, vectors and the affine operations on them.
"""

from .primitives import (
    GEOMETRY_TOLERANCE,
    add,
    as_point,
    as_points,
    centroid,
    cross,
    dot,
    norm,
    normalize,
    polygon_area_vector,
    rotation_matrix,
    scale,
    signed_tetrahedron_volume,
    sub,
    tetrahedron_volume,
    transform_points,
    triangle_area_vector,
    triangle_normal,
)

__all__ = [
    "GEOMETRY_TOLERANCE",
    "add",
    "as_point",
    "as_points",
    "centroid",
    "cross",
    "dot",
    "norm",
    "normalize",
    "polygon_area_vector",
    "rotation_matrix",
    "scale",
    "signed_tetrahedron_volume",
    "sub",
    "tetrahedron_volume",
    "transform_points",
    "triangle_area_vector",
    "triangle_normal",
]
