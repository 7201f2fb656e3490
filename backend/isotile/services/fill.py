"""
Region filling: enumerate every copy of the tile that covers a region.

``FillAlgorithm`` maps the four corners of a convex quadrilateral into
lattice coordinates (the coordinate system spanned by the tiling's
``t1`` and ``t2``) and cuts the result into at most three trapezoidal
slabs whose bottom and top edges are horizontal in lattice space.  Each
slab stores its y range and the x-intercept and slope of its left and
right boundaries.  Slabs are computed once, from the lattice vectors in
effect at construction time, and never change afterwards.

A middle slab whose bottom and top coincide covers no lattice rows and is
dropped; its boundary slopes would otherwise divide by zero.

``FillRegionIterator`` walks the slabs row by row.  A row runs from the
slab boundaries sampled at the row, widened to the x-range the mapped
quadrilateral occupies within that unit-high row, so every cell the
region overlaps with positive area is visited even where a slanted
boundary crosses the row.  Each step yields one (lattice x, lattice y,
aspect) triple; the placement transform for that triple is the aspect
transform translated by ``x*t1 + y*t2``, and both are read from the
tiling when the transform is requested, not when the slabs were built.

Setting the ``TILING_DEBUG`` environment variable (or passing
``debug=True``) logs the mapped corners and every emitted slab at DEBUG
level.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Iterator, List, Optional, Sequence, Tuple

import numpy as np

from .affine import translated

logger = logging.getLogger(__name__)

EPSILON = 1e-7


@dataclass(frozen=True)
class Slab:
    """One trapezoidal band of lattice space, ``ymin <= y < ymax``."""

    xlo: float
    dxlo: float
    xhi: float
    dxhi: float
    ymin: float
    ymax: float


def _floor(value: float) -> float:
    # np.floor keeps NaN/inf from degenerate slabs instead of raising.
    return float(np.floor(value))


def _slope(dx: float, dy: float) -> float:
    with np.errstate(divide="ignore", invalid="ignore"):
        return float(np.float64(dx) / np.float64(dy))


def _sample_at_height(P: np.ndarray, Q: np.ndarray, y: float) -> np.ndarray:
    with np.errstate(divide="ignore", invalid="ignore"):
        t = np.float64(y - P[1]) / np.float64(Q[1] - P[1])
    return np.array([(1.0 - t) * P[0] + t * Q[0], y], dtype=float)


class FillAlgorithm:
    """Slab decomposition of one convex quadrilateral.

    ``tiling`` only needs ``t1``, ``t2``, ``num_aspects()`` and
    ``get_aspect_transform(idx)``.
    """

    def __init__(
        self,
        tiling,
        corners: Sequence[Sequence[float]],
        debug: Optional[bool] = None,
    ) -> None:
        if len(corners) != 4:
            raise ValueError("fill region needs exactly four corners")
        self.tiling = tiling
        self.debug = bool(os.getenv("TILING_DEBUG")) if debug is None else bool(debug)
        self._slabs: List[Slab] = []
        self._build([np.asarray(c, dtype=float) for c in corners])
        self.slabs: Tuple[Slab, ...] = tuple(self._slabs)

    # ------------------------------------------------------------------
    # Slab construction

    def _build(self, corners: List[np.ndarray]) -> None:
        t1 = np.asarray(self.tiling.t1, dtype=float)
        t2 = np.asarray(self.tiling.t2, dtype=float)

        with np.errstate(divide="ignore", invalid="ignore"):
            det = np.float64(1.0) / np.float64(t1[0] * t2[1] - t2[0] * t1[1])
            Mbc = np.array(
                [
                    [t2[1] * det, -t2[0] * det],
                    [-t1[1] * det, t1[0] * det],
                ]
            )
            pts = [Mbc @ c for c in corners]

        if det < 0.0:
            pts[1], pts[3] = pts[3], pts[1]
        self.quad: Tuple[np.ndarray, ...] = tuple(pts)

        if self.debug:
            for idx, p in enumerate(pts):
                logger.debug("pts[%d] = %s, %s", idx, p[0], p[1])

        if abs(pts[0][1] - pts[1][1]) < EPSILON:
            self._fill_fix_y(pts[0], pts[1], pts[2], pts[3], True)
        elif abs(pts[1][1] - pts[2][1]) < EPSILON:
            self._fill_fix_y(pts[1], pts[2], pts[3], pts[0], True)
        else:
            lowest = 0
            for idx in range(1, 4):
                if pts[idx][1] < pts[lowest][1]:
                    lowest = idx

            bottom = pts[lowest]
            left = pts[(lowest + 1) % 4]
            top = pts[(lowest + 2) % 4]
            right = pts[(lowest + 3) % 4]

            if self.debug:
                logger.debug("bottom = %s, %s", bottom[0], bottom[1])
                logger.debug("left = %s, %s", left[0], left[1])
                logger.debug("top = %s, %s", top[0], top[1])
                logger.debug("right = %s, %s", right[0], right[1])

            if left[0] > right[0]:
                left, right = right, left

            if left[1] < right[1]:
                r1 = _sample_at_height(bottom, right, left[1])
                l2 = _sample_at_height(left, top, right[1])
                self._fill_fix_x(bottom, bottom, r1, left, False)
                self._fill_fix_x(left, r1, right, l2, False)
                self._fill_fix_x(l2, right, top, top, True)
            else:
                l1 = _sample_at_height(bottom, left, right[1])
                r2 = _sample_at_height(right, top, left[1])
                self._fill_fix_x(bottom, bottom, right, l1, False)
                self._fill_fix_x(l1, right, r2, left, False)
                self._fill_fix_x(left, r2, top, top, True)

    def _do_fill(self, A, B, C, D, do_top: bool) -> None:
        flat = abs(C[1] - A[1]) < EPSILON
        if flat and not do_top:
            if self.debug:
                logger.debug("Fill[%d]: skipping zero-height slab at y=%s", len(self._slabs), A[1])
            return
        # A flat top slab is a single row, so its boundaries never move.
        slab = Slab(
            xlo=float(A[0]),
            dxlo=0.0 if flat else _slope(D[0] - A[0], D[1] - A[1]),
            xhi=float(B[0]),
            dxhi=0.0 if flat else _slope(C[0] - B[0], C[1] - B[1]),
            ymin=float(A[1]),
            ymax=float(C[1]) + (1.0 if do_top else 0.0),
        )
        if self.debug:
            logger.debug(
                "Fill[%d]: A=%s B=%s C=%s D=%s -> %s",
                len(self._slabs),
                A.tolist(),
                B.tolist(),
                C.tolist(),
                D.tolist(),
                slab,
            )
        self._slabs.append(slab)

    def _fill_fix_x(self, A, B, C, D, do_top: bool) -> None:
        if A[0] > B[0]:
            self._do_fill(B, A, D, C, do_top)
        else:
            self._do_fill(A, B, C, D, do_top)

    def _fill_fix_y(self, A, B, C, D, do_top: bool) -> None:
        if A[1] > C[1]:
            self._do_fill(C, D, A, B, do_top)
        else:
            self._do_fill(A, B, C, D, do_top)

    # ------------------------------------------------------------------
    # Iteration

    @property
    def degenerate(self) -> bool:
        """True when ``t1`` and ``t2`` do not span the plane."""
        return not all(np.isfinite(p).all() for p in self.quad)

    def row_extent(self, y: float) -> Optional[Tuple[float, float]]:
        """X range of the mapped region within the lattice row ``y <= v <= y + 1``."""
        top = y + 1.0
        xs: List[float] = []
        for idx, P in enumerate(self.quad):
            Q = self.quad[(idx + 1) % len(self.quad)]
            if y <= P[1] <= top:
                xs.append(float(P[0]))
            for level in (y, top):
                if min(P[1], Q[1]) < level < max(P[1], Q[1]):
                    xs.append(float(_sample_at_height(P, Q, level)[0]))
        if not xs:
            return None
        return min(xs), max(xs)

    def begin(self) -> "FillRegionIterator":
        if not self.slabs:
            return FillRegionIterator(self)
        first = self.slabs[0]
        return FillRegionIterator(self, _floor(first.ymin), first.xlo, first.xhi)

    def end(self) -> "FillRegionIterator":
        return FillRegionIterator(self)

    def __iter__(self) -> "FillRegionIterator":
        return self.begin()

    def step_bound(self) -> int:
        """Upper bound on the number of positions the iterator can yield."""
        if self.degenerate:
            raise ValueError("fill lattice is degenerate")
        xs = [float(p[0]) for p in self.quad]
        total = 0
        aspects = self.tiling.num_aspects()
        for slab in self.slabs:
            # Every slab emits at least one row and every row one column.
            rows = max(1, int(_floor(slab.ymax) - _floor(slab.ymin)))
            last = rows - 1
            los = [slab.xlo, min(xs)]
            his = [slab.xhi, max(xs)]
            if last:
                los.append(slab.xlo + slab.dxlo * last)
                his.append(slab.xhi + slab.dxhi * last)
            width = max(v for v in his if np.isfinite(v)) - min(v for v in los if np.isfinite(v))
            cols = max(1, int(np.ceil(width)) + 3)
            total += rows * cols * aspects
        return total


@dataclass(frozen=True)
class FillPlacement:
    """One placed copy; ``transform`` is evaluated against the live tiling."""

    tiling: object
    t1: int
    t2: int
    aspect: int

    @property
    def transform(self) -> np.ndarray:
        T1 = np.asarray(self.tiling.t1, dtype=float)
        T2 = np.asarray(self.tiling.t2, dtype=float)
        return translated(
            self.tiling.get_aspect_transform(self.aspect),
            self.t1 * T1[0] + self.t2 * T2[0],
            self.t1 * T1[1] + self.t2 * T2[1],
        )

    def colour(self) -> int:
        return self.tiling.get_colour(self.t1, self.t2, self.aspect)


class FillRegionIterator:
    """Explicit cursor over (slab, row, column, aspect)."""

    def __init__(
        self,
        algo: FillAlgorithm,
        y: Optional[float] = None,
        xlo: Optional[float] = None,
        xhi: Optional[float] = None,
    ) -> None:
        self.algo = algo
        self.slab_idx = 0
        if y is None:
            self.done = True
            self.x = self.y = self.xlo = self.xhi = self.x_end = 0.0
        else:
            self.done = False
            self.y = y
            self.xlo = xlo
            self.xhi = xhi
            self._start_row()
        self.aspect = 0

    def _start_row(self) -> None:
        lo, hi = self.xlo, self.xhi
        extent = self.algo.row_extent(self.y)
        if extent is not None:
            lo = min(lo, extent[0])
            hi = max(hi, extent[1])
        self.x = _floor(lo)
        self.x_end = hi

    # ------------------------------------------------------------------
    # Cursor state

    def advance(self) -> None:
        if self.done:
            return
        algo = self.algo

        self.aspect += 1
        if self.aspect < algo.tiling.num_aspects():
            return

        self.aspect = 0
        self.x += 1.0
        if self.x < self.x_end + EPSILON:
            return

        slab = algo.slabs[self.slab_idx]
        self.xlo += slab.dxlo
        self.xhi += slab.dxhi
        self.y += 1.0
        if _floor(self.y) < _floor(slab.ymax):
            self._start_row()
            return

        self.slab_idx += 1
        if self.slab_idx < len(algo.slabs):
            slab = algo.slabs[self.slab_idx]
            self.xlo = slab.xlo
            self.xhi = slab.xhi
            self.y = max(self.y, _floor(slab.ymin))
            self._start_row()
            return

        self.done = True

    @property
    def t1(self) -> int:
        return int(_floor(self.x))

    @property
    def t2(self) -> int:
        return int(_floor(self.y))

    def transform(self) -> np.ndarray:
        return self.placement().transform

    def placement(self) -> FillPlacement:
        if self.done:
            raise IndexError("fill iterator is exhausted")
        return FillPlacement(self.algo.tiling, self.t1, self.t2, self.aspect)

    def dbg(self) -> None:
        if self.done:
            logger.debug("[done]")
        else:
            logger.debug(
                "[slab_idx = %d; x = %s; y = %s; xlo = %s; xhi = %s; asp = %d]",
                self.slab_idx,
                self.x,
                self.y,
                self.xlo,
                self.xhi,
                self.aspect,
            )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, FillRegionIterator):
            return NotImplemented
        if self.algo is not other.algo:
            return False
        if self.done != other.done:
            return False
        if self.done:
            return True
        return (
            self.slab_idx == other.slab_idx
            and abs(self.x - other.x) < EPSILON
            and abs(self.y - other.y) < EPSILON
            and self.aspect == other.aspect
        )

    # ------------------------------------------------------------------
    # Python iteration

    def __iter__(self) -> Iterator[FillPlacement]:
        return self

    def __next__(self) -> FillPlacement:
        if self.done:
            raise StopIteration
        if self.algo.debug:
            self.dbg()
        placement = self.placement()
        self.advance()
        return placement


__all__ = [
    "EPSILON",
    "Slab",
    "FillAlgorithm",
    "FillPlacement",
    "FillRegionIterator",
]
