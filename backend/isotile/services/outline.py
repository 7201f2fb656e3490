"""
Tile outlines built from caller-supplied edge curves.

The tiling engine only knows how to place the canonical segment
(0,0)→(1,0) along each tiling edge; the actual curve for every edge
shape id is supplied by the caller as a list of control points starting
at (0,0) and ending at (1,0).  This module turns those curves into a
closed outline for one tile, either through whole edges
(``outline_from_shape``) or through half-edge parts
(``outline_from_parts``), and provides the edge-curve helpers used by
the API: straight default edges, random symmetric Bézier edges and
random parameter perturbation, plus small editing operations that keep
each curve consistent with its symmetry class.

When curves are used with ``outline_from_parts`` the list for a U or S
shape describes only the first half of the edge, running from (0,0) to
the midpoint; the midpoint of a U half sits on the line x=1 and that of
an S half is (1,0).
"""

from __future__ import annotations

import logging
from typing import List, Optional, Sequence, Tuple

import numpy as np

from .affine import apply_transform
from .tiling import IsohedralTiling
from .tiling_types import EdgeShape

logger = logging.getLogger(__name__)

Point = Tuple[float, float]
EdgeCurves = List[List[Point]]

# Sage green and off-white palette for coloured fills.
PALETTE: Tuple[Tuple[int, int, int], ...] = (
    (145, 170, 157),
    (209, 219, 189),
    (252, 255, 245),
)


class EdgeCurveError(ValueError):
    """Raised when edge curves do not match a tiling's edge shapes."""


def colour_rgb(colour: int) -> Tuple[int, int, int]:
    return PALETTE[colour % len(PALETTE)]


def default_edges(tiling: IsohedralTiling) -> EdgeCurves:
    """One straight segment per edge shape id."""
    return [[(0.0, 0.0), (1.0, 0.0)] for _ in range(tiling.num_edge_shapes())]


def random_edges(
    tiling: IsohedralTiling, rng: Optional[np.random.Generator] = None
) -> EdgeCurves:
    """Random cubic Bézier edges obeying each shape's symmetry class.

    Each curve has four control points.  U curves are mirrored about
    x=0.5, S curves are point-symmetric about (0.5, 0) and I curves are
    flattened onto the x axis.
    """
    rng = rng or np.random.default_rng()
    edges: EdgeCurves = []
    for idx in range(tiling.num_edge_shapes()):
        c1 = [float(rng.random()) * 0.75, float(rng.random()) * 0.6 - 0.3]
        c2 = [float(rng.random()) * 0.75 + 0.25, float(rng.random()) * 0.6 - 0.3]

        shape = tiling.get_edge_shape(idx)
        if shape == EdgeShape.U:
            c2 = [1.0 - c1[0], c1[1]]
        elif shape == EdgeShape.S:
            c2 = [1.0 - c1[0], -c1[1]]
        elif shape == EdgeShape.I:
            c1[1] = 0.0
            c2[1] = 0.0

        edges.append([(0.0, 0.0), (c1[0], c1[1]), (c2[0], c2[1]), (1.0, 0.0)])
    return edges


def perturb_parameters(
    tiling: IsohedralTiling,
    amount: float = 0.1,
    rng: Optional[np.random.Generator] = None,
) -> List[float]:
    """Nudge every parameter by up to ``amount`` and apply the result."""
    rng = rng or np.random.default_rng()
    params = [p + float(rng.random()) * 2.0 * amount - amount for p in tiling.get_parameters()]
    tiling.set_parameters(params)
    return params


def _as_point(point: Sequence[float], where: str) -> Point:
    if len(point) != 2:
        raise EdgeCurveError(f"{where} must be an [x, y] pair, got {len(point)} values")
    x, y = float(point[0]), float(point[1])
    if not (np.isfinite(x) and np.isfinite(y)):
        raise EdgeCurveError(f"{where} must have finite coordinates")
    return x, y


def _check_edges(tiling: IsohedralTiling, edges: Sequence[Sequence[Point]]) -> None:
    if len(edges) != tiling.num_edge_shapes():
        raise EdgeCurveError(
            f"IH{tiling.get_tiling_type()} needs {tiling.num_edge_shapes()} edge curves, "
            f"got {len(edges)}"
        )
    for idx, curve in enumerate(edges):
        if len(curve) < 2:
            raise EdgeCurveError(f"edge curve {idx} needs at least two points")
        for jdx, point in enumerate(curve):
            _as_point(point, f"point {jdx} of edge curve {idx}")


def outline_from_shape(
    tiling: IsohedralTiling, edges: Sequence[Sequence[Point]]
) -> List[np.ndarray]:
    """Closed outline from whole-edge curves.

    The first point of each curve is dropped because it coincides with
    the last point of the previous edge; the outline therefore starts
    just after tiling vertex 0 and ends on it.
    """
    _check_edges(tiling, edges)
    outline: List[np.ndarray] = []
    for edge in tiling.shape():
        curve = edges[edge.id]
        if edge.reversed:
            points = [curve[len(curve) - 1 - idx] for idx in range(1, len(curve))]
        else:
            points = list(curve[1:])
        outline.extend(apply_transform(edge.transform, p) for p in points)
    return outline


def outline_from_parts(
    tiling: IsohedralTiling, edges: Sequence[Sequence[Point]]
) -> List[np.ndarray]:
    """Closed outline from half-edge curves, one vertex per control point."""
    _check_edges(tiling, edges)
    outline: List[np.ndarray] = []
    for part in tiling.parts():
        curve = edges[part.id]
        cur = len(curve) - 2 if part.reversed else 1
        inc = -1 if part.reversed else 1
        for _ in range(len(curve) - 1):
            outline.append(apply_transform(part.transform, curve[cur]))
            cur += inc
    return outline


def place_outline(outline: Sequence[np.ndarray], transform: np.ndarray) -> List[np.ndarray]:
    return [apply_transform(transform, p) for p in outline]


def outline_bounds(outline: Sequence[np.ndarray]) -> Tuple[float, float, float, float]:
    pts = np.asarray(outline, dtype=float)
    return (
        float(pts[:, 0].min()),
        float(pts[:, 1].min()),
        float(pts[:, 0].max()),
        float(pts[:, 1].max()),
    )


# ---------------------------------------------------------------------------
# Editing half-edge curves


def _editable_curve(tiling: IsohedralTiling, edges: EdgeCurves, shape_id: int) -> List[Point]:
    if not 0 <= shape_id < len(edges):
        raise EdgeCurveError(f"edge shape id {shape_id} out of range")
    if tiling.get_edge_shape(shape_id) == EdgeShape.I:
        raise EdgeCurveError(f"edge shape {shape_id} is straight and cannot be edited")
    return edges[shape_id]


def insert_control_point(
    tiling: IsohedralTiling, edges: EdgeCurves, shape_id: int, index: int, point: Point
) -> None:
    """Insert ``point`` before ``index``; the endpoints stay fixed."""
    curve = _editable_curve(tiling, edges, shape_id)
    if not 1 <= index <= len(curve) - 1:
        raise EdgeCurveError(f"cannot insert at index {index}")
    curve.insert(index, _as_point(point, "inserted point"))


def move_control_point(
    tiling: IsohedralTiling, edges: EdgeCurves, shape_id: int, index: int, point: Point
) -> Point:
    """Move an interior control point.

    The last point of a U half-curve is the edge midpoint; it may slide
    along x=1 only.  Every other endpoint is fixed.
    """
    curve = _editable_curve(tiling, edges, shape_id)
    last = len(curve) - 1
    x, y = _as_point(point, "moved point")
    if index == last and tiling.get_edge_shape(shape_id) == EdgeShape.U:
        x = 1.0
    elif not 1 <= index < last:
        raise EdgeCurveError(f"control point {index} of edge {shape_id} is fixed")
    curve[index] = (x, y)
    return curve[index]


def remove_control_point(
    tiling: IsohedralTiling, edges: EdgeCurves, shape_id: int, index: int
) -> None:
    curve = _editable_curve(tiling, edges, shape_id)
    if not 1 <= index < len(curve) - 1:
        raise EdgeCurveError(f"control point {index} of edge {shape_id} is fixed")
    del curve[index]


__all__ = [
    "PALETTE",
    "EdgeCurveError",
    "colour_rgb",
    "default_edges",
    "random_edges",
    "perturb_parameters",
    "outline_from_shape",
    "outline_from_parts",
    "place_outline",
    "outline_bounds",
    "insert_control_point",
    "move_control_point",
    "remove_control_point",
]
