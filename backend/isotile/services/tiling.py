"""
Isohedral tiling engine.

``IsohedralTiling`` owns the selected tiling type and its parameter
vector.  Every mutation (``set_type`` / ``reset`` or
``set_parameters``) recomputes all derived geometry as a unit:

* tiling vertex positions,
* one similarity transform and reversal flag per tiling edge, carrying
  the canonical unit segment (0,0)→(1,0) onto the edge,
* one 3×3 affine matrix per aspect,
* the two lattice translation vectors ``t1`` and ``t2``.

Derived geometry is never patched incrementally, so it is always a
pure function of (type, parameters).  Shape traversals and fill
iterators keep a reference to the tiling rather than a copy and read
the current state whenever they are dereferenced; mutating a tiling
while one of its iterators is still being consumed is unsupported.

Parameter-vector length is a caller contract.  ``set_parameters``
stores a copy of whatever it is given and does not check its length.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import List, Optional, Sequence

import numpy as np

from .affine import fill_matrix, fill_vector, match_segment, orientation_matrix
from .fill import FillAlgorithm
from .shape import TileParts, TileShape
from .tiling_types import (
    EdgeShape,
    TilingTypeDescriptor,
    get_descriptor,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EdgeTransform:
    """Placement of one tiling edge in tile coordinates."""

    transform: np.ndarray
    reversed: bool


class IsohedralTiling:
    def __init__(self, tiling_type: int) -> None:
        self._descriptor: TilingTypeDescriptor = get_descriptor(tiling_type)
        self._params: List[float] = list(self._descriptor.default_params)
        self._vertices: List[np.ndarray] = []
        self._edges: List[EdgeTransform] = []
        self._aspects: List[np.ndarray] = []
        self._t1 = np.zeros(2)
        self._t2 = np.zeros(2)
        self._recompute()

    # ------------------------------------------------------------------
    # Type and parameters

    def reset(self, tiling_type: int) -> None:
        """Switch to ``tiling_type`` and restore its default parameters."""
        descriptor = get_descriptor(tiling_type)
        self._descriptor = descriptor
        self._params = list(descriptor.default_params)
        self._recompute()

    set_type = reset

    def get_tiling_type(self) -> int:
        return self._descriptor.number

    @property
    def descriptor(self) -> TilingTypeDescriptor:
        return self._descriptor

    def num_parameters(self) -> int:
        return self._descriptor.num_params

    def set_parameters(self, params: Sequence[float]) -> None:
        self._params = [float(p) for p in params]
        self._recompute()

    def get_parameters(self) -> List[float]:
        return list(self._params)

    # ------------------------------------------------------------------
    # Recompute pipeline

    def _recompute(self) -> None:
        d = self._descriptor
        params = self._params
        row = d.num_params + 1

        vertices: List[np.ndarray] = []
        for idx in range(d.num_vertices):
            start = 2 * row * idx
            vertices.append(fill_vector(d.tiling_vertex_coeffs[start : start + 2 * row], params))

        edges: List[EdgeTransform] = []
        for idx in range(d.num_vertices):
            flip, rotate = d.edge_orientations[idx]
            M = match_segment(vertices[idx], vertices[(idx + 1) % d.num_vertices])
            edges.append(
                EdgeTransform(
                    transform=M @ orientation_matrix(flip, rotate),
                    reversed=bool(flip) != bool(rotate),
                )
            )

        aspects: List[np.ndarray] = []
        for idx in range(d.num_aspects):
            start = 6 * row * idx
            aspects.append(fill_matrix(d.aspect_xform_coeffs[start : start + 6 * row], params))

        self._vertices = vertices
        self._edges = edges
        self._aspects = aspects
        self._t1 = fill_vector(d.translation_vector_coeffs[0 : 2 * row], params)
        self._t2 = fill_vector(d.translation_vector_coeffs[2 * row : 4 * row], params)

        if os.getenv("TILING_DEBUG"):
            logger.debug(
                "IH%d recomputed: params=%s t1=%s t2=%s",
                d.number,
                params,
                self._t1.tolist(),
                self._t2.tolist(),
            )

    # ------------------------------------------------------------------
    # Derived geometry

    def num_vertices(self) -> int:
        return self._descriptor.num_vertices

    def get_vertex(self, idx: int) -> np.ndarray:
        return self._vertices[idx]

    def vertices(self) -> List[np.ndarray]:
        """Current tiling vertices, in boundary order."""
        return list(self._vertices)

    def num_edge_shapes(self) -> int:
        return self._descriptor.num_edge_shapes

    def get_edge_shape(self, shape_id: int) -> EdgeShape:
        return self._descriptor.edge_shapes[shape_id]

    def get_edge_shape_id(self, edge_idx: int) -> int:
        return self._descriptor.edge_shape_ids[edge_idx]

    def get_edge(self, edge_idx: int) -> EdgeTransform:
        return self._edges[edge_idx]

    def num_aspects(self) -> int:
        return self._descriptor.num_aspects

    def get_aspect_transform(self, idx: int) -> np.ndarray:
        return self._aspects[idx]

    @property
    def t1(self) -> np.ndarray:
        return self._t1

    @property
    def t2(self) -> np.ndarray:
        return self._t2

    # ------------------------------------------------------------------
    # Colouring

    def num_colours(self) -> int:
        return self._descriptor.num_colours

    def get_colour(self, t1: int, t2: int, aspect: int) -> int:
        """Colour of the copy at lattice position ``(t1, t2)`` with ``aspect``.

        Translating by one step along ``t1`` (or ``t2``) permutes colours
        by the type's t1 (or t2) permutation, applied after the aspect's
        base colour.
        """
        colouring = self._descriptor.colouring
        nc = colouring[18]

        # Python modulo already lands in [0, nc) for negative counts.
        mt1 = t1 % nc
        mt2 = t2 % nc

        col = colouring[aspect]
        for _ in range(mt1):
            col = colouring[12 + col]
        for _ in range(mt2):
            col = colouring[15 + col]
        return col

    # ------------------------------------------------------------------
    # Traversal and fill

    def shape(self) -> TileShape:
        return TileShape(self)

    def parts(self) -> TileParts:
        return TileParts(self)

    def fill_region_bounds(
        self,
        xmin: float,
        ymin: float,
        xmax: float,
        ymax: float,
        debug: Optional[bool] = None,
    ) -> FillAlgorithm:
        """Fill an axis-aligned box given by its two extreme corners."""
        return self.fill_region_quad(
            (xmin, ymin), (xmax, ymin), (xmax, ymax), (xmin, ymax), debug=debug
        )

    def fill_region_quad(
        self,
        A: Sequence[float],
        B: Sequence[float],
        C: Sequence[float],
        D: Sequence[float],
        debug: Optional[bool] = None,
    ) -> FillAlgorithm:
        """Fill an arbitrary convex quadrilateral with corners ``A``–``D``."""
        return FillAlgorithm(self, (A, B, C, D), debug=debug)

    def __repr__(self) -> str:
        return f"IsohedralTiling(IH{self._descriptor.number}, params={self._params})"



__all__ = ["EdgeTransform", "IsohedralTiling"]
