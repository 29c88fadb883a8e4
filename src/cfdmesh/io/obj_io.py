# -*- coding: utf-8 -*-
"""
Wavefront OBJ import and export.

Only geometry records are interpreted: ``v x y z`` vertices and
``f i j k ...`` faces. Face indices are 1-based in the file (negative values
count back from the last vertex read) and are returned 0-based. Texture,
normal, grouping and material records are skipped; any other record is a
format error.
"""

import logging
from typing import List, Sequence, Tuple

import numpy as np

from ..errors import MeshFormatError

logger = logging.getLogger(__name__)

IGNORED_RECORDS = frozenset({"vt", "vn", "vp", "g", "o", "s", "usemtl", "mtllib", "l"})


def read_obj(filename: str) -> Tuple[np.ndarray, List[List[int]]]:
    """
    Reads vertices and faces from an OBJ file.

    Args:
        filename: Path to the .obj file.

    Returns:
        A tuple ``(coords, faces)``: an ``(n, 3)`` float array and one list
        of 0-based vertex indices per face.

    Raises:
        MeshFormatError: For a line that is not UTF-8, an unknown record, an
            unparsable number, a face with fewer than three vertices or an
            out-of-range index.
        OSError: If the file cannot be opened.
    """
    vertices: List[List[float]] = []
    faces: List[List[int]] = []

    with open(filename, "rb") as fh:
        for line_number, raw in enumerate(fh, start=1):
            try:
                stripped = raw.decode("utf-8").strip()
            except UnicodeDecodeError as e:
                raise MeshFormatError(f"Line is not valid UTF-8: {e}", line_number) from e
            if not stripped or stripped.startswith("#"):
                continue
            tokens = stripped.split()
            record = tokens[0]
            if record == "v":
                vertices.append(_parse_vertex(tokens[1:], line_number))
            elif record == "f":
                faces.append(_parse_face(tokens[1:], len(vertices), line_number))
            elif record in IGNORED_RECORDS:
                continue
            else:
                raise MeshFormatError(f"Invalid record '{record}'.", line_number)

    logger.info("Read %d vertices and %d faces from %s", len(vertices), len(faces), filename)
    coords = np.array(vertices, dtype=np.float64).reshape(-1, 3)
    return coords, faces


def _parse_vertex(tokens: Sequence[str], line_number: int) -> List[float]:
    if len(tokens) < 3:
        raise MeshFormatError("Vertex record needs three coordinates.", line_number)
    try:
        return [float(t) for t in tokens[:3]]
    except ValueError as e:
        raise MeshFormatError(f"Failed to parse float: {e}", line_number) from e


def _parse_face(tokens: Sequence[str], n_vertices: int, line_number: int) -> List[int]:
    face = []
    for token in tokens:
        try:
            index = int(token.split("/")[0])
        except ValueError as e:
            raise MeshFormatError(f"Failed to parse integer: {e}", line_number) from e
        if index > 0:
            resolved = index - 1
        elif index < 0:
            resolved = n_vertices + index
        else:
            raise MeshFormatError("Face index 0 is not valid in OBJ files.", line_number)
        if resolved < 0 or resolved >= n_vertices:
            raise MeshFormatError(
                f"Face index {index} refers to a vertex not defined before it.", line_number
            )
        face.append(resolved)
    if len(face) < 3:
        raise MeshFormatError("Face does not have enough vertices.", line_number)
    return face


def write_obj(coords, cells: Sequence[Sequence[int]], filename: str) -> int:
    """
    Writes vertices and faces to an OBJ file with 1-based face indices.

    Returns:
        The number of bytes written.
    """
    lines = ["v {} {} {}".format(*(float(x) for x in p)) for p in np.asarray(coords)]
    lines += ["f " + " ".join(str(int(i) + 1) for i in cell) for cell in cells]
    text = "".join(line + "\n" for line in lines)
    with open(filename, "w", encoding="utf-8", newline="\n") as fh:
        fh.write(text)
    return len(text.encode("utf-8"))
