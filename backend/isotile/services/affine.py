"""
Affine helpers for the tiling engine.

Every piece of derived tiling geometry (tiling vertices, aspect
transforms, translation vectors) is stored as rows of coefficients.
Each row holds one coefficient per tiling parameter followed by a
trailing affine bias term, so evaluating a row is a dot product with
the parameter vector plus the bias.  The functions here turn such rows
into 2D points and 3×3 homogeneous matrices using numpy.

Matrices follow the usual column-vector convention: a point ``p`` is
transformed as ``M @ (p.x, p.y, 1)`` and the translation part lives in
``M[0:2, 2]``.
"""

from __future__ import annotations

from typing import Sequence

import numpy as np


def dot_coeffs(coeffs: Sequence[float], params: Sequence[float]) -> float:
    """Evaluate one coefficient row against a parameter vector.

    ``coeffs`` must hold ``len(params) + 1`` values; the final value is
    the affine bias.
    """
    n = len(params)
    total = 0.0
    for idx in range(n):
        total += coeffs[idx] * params[idx]
    # Affine term.
    return total + coeffs[n]


def fill_vector(coeffs: Sequence[float], params: Sequence[float]) -> np.ndarray:
    """Evaluate two consecutive coefficient rows into a 2D vector."""
    stride = len(params) + 1
    return np.array(
        [
            dot_coeffs(coeffs[0:stride], params),
            dot_coeffs(coeffs[stride : 2 * stride], params),
        ],
        dtype=float,
    )


def fill_matrix(coeffs: Sequence[float], params: Sequence[float]) -> np.ndarray:
    """Evaluate six consecutive coefficient rows into a 3×3 affine matrix.

    The rows are consumed in reading order: the three entries of the
    first matrix row, then the three entries of the second.  The last
    row is always ``(0, 0, 1)``.
    """
    stride = len(params) + 1
    M = np.eye(3, dtype=float)
    offset = 0
    for row in range(2):
        for col in range(3):
            M[row, col] = dot_coeffs(coeffs[offset : offset + stride], params)
            offset += stride
    return M


def match_segment(p: Sequence[float], q: Sequence[float]) -> np.ndarray:
    """Return the similarity carrying (0,0)→p and (1,0)→q."""
    dx = q[0] - p[0]
    dy = q[1] - p[1]
    return np.array(
        [
            [dx, -dy, p[0]],
            [dy, dx, p[1]],
            [0.0, 0.0, 1.0],
        ],
        dtype=float,
    )


def make_affine(a: float, b: float, c: float, d: float, e: float, f: float) -> np.ndarray:
    """Build ``[[a, b, c], [d, e, f], [0, 0, 1]]``."""
    return np.array([[a, b, c], [d, e, f], [0.0, 0.0, 1.0]], dtype=float)


# Orientation fix-ups applied after ``match_segment``, indexed by
# ``2 * flip + rotate``.  Each keeps the unit segment on itself.
IDENTITY = make_affine(1.0, 0.0, 0.0, 0.0, 1.0, 0.0)
ROTATE = make_affine(-1.0, 0.0, 1.0, 0.0, -1.0, 0.0)
FLIP = make_affine(-1.0, 0.0, 1.0, 0.0, 1.0, 0.0)
ROTATE_FLIP = make_affine(1.0, 0.0, 0.0, 0.0, -1.0, 0.0)

ORIENTATIONS = (IDENTITY, ROTATE, FLIP, ROTATE_FLIP)


def orientation_matrix(flip: bool, rotate: bool) -> np.ndarray:
    return ORIENTATIONS[2 * int(flip) + int(rotate)]


def apply_transform(M: np.ndarray, point: Sequence[float]) -> np.ndarray:
    """Apply a homogeneous 3×3 matrix to a 2D point."""
    return np.array(
        [
            M[0, 0] * point[0] + M[0, 1] * point[1] + M[0, 2],
            M[1, 0] * point[0] + M[1, 1] * point[1] + M[1, 2],
        ],
        dtype=float,
    )


def translated(M: np.ndarray, dx: float, dy: float) -> np.ndarray:
    """Return a copy of ``M`` with ``(dx, dy)`` added to its translation column."""
    out = np.array(M, dtype=float, copy=True)
    out[0, 2] += dx
    out[1, 2] += dy
    return out


__all__ = [
    "dot_coeffs",
    "fill_vector",
    "fill_matrix",
    "match_segment",
    "make_affine",
    "IDENTITY",
    "ROTATE",
    "FLIP",
    "ROTATE_FLIP",
    "ORIENTATIONS",
    "orientation_matrix",
    "apply_transform",
    "translated",
]
