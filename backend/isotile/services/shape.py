"""
Boundary traversal for a single tile.

Two views over the edges of the current tile:

``TileShape``
    One entry per tiling edge: the edge shape id, its symmetry class,
    the transform carrying the canonical (0,0)→(1,0) curve onto the
    edge, and whether the curve is traversed backwards.

``TileParts``
    Half-edge granularity.  J and I edges contribute one part equal to
    the whole edge.  U and S edges contribute two parts that both draw
    the *first half* of the caller's curve (the local span from x=0 to
    x=1): part 0 shrinks it onto [0, 0.5] of the edge and part 1 maps
    it onto [0.5, 1] with the mirror (U) or point reflection (S) that
    the symmetry class demands.  Part 1 is reported as reversed so its
    traversal starts at the shared midpoint, and when the parent edge is
    itself reversed the two half transforms are swapped.

Both views hold the tiling itself rather than a copy.  Each cursor reads
the tiling's current edge transforms at the moment it produces an
entry, so iterating after a parameter change reflects the new state.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Iterator

import numpy as np

from .affine import make_affine
from .tiling_types import EdgeShape

if TYPE_CHECKING:
    from .tiling import IsohedralTiling


# Half transforms indexed by part (after the reversal swap).
HALF_U = (
    make_affine(0.5, 0.0, 0.0, 0.0, 0.5, 0.0),
    make_affine(-0.5, 0.0, 1.0, 0.0, 0.5, 0.0),
)
HALF_S = (
    make_affine(0.5, 0.0, 0.0, 0.0, 0.5, 0.0),
    make_affine(-0.5, 0.0, 1.0, 0.0, -0.5, 0.0),
)


@dataclass(frozen=True)
class EdgeView:
    edge_index: int
    id: int
    shape: EdgeShape
    transform: np.ndarray
    reversed: bool


@dataclass(frozen=True)
class PartView:
    edge_index: int
    id: int
    shape: EdgeShape
    transform: np.ndarray
    reversed: bool
    second_part: bool


class TileShapeCursor:
    """Explicit cursor over whole edges; ``done`` once past the last edge."""

    def __init__(self, tiling: "IsohedralTiling", edge_num: int = 0) -> None:
        self._tiling = tiling
        self.edge_num = edge_num

    @property
    def done(self) -> bool:
        return self.edge_num >= self._tiling.num_vertices()

    def current(self) -> EdgeView:
        if self.done:
            raise IndexError("shape cursor is past the last edge")
        idx = self.edge_num
        shape_id = self._tiling.get_edge_shape_id(idx)
        edge = self._tiling.get_edge(idx)
        return EdgeView(
            edge_index=idx,
            id=shape_id,
            shape=self._tiling.get_edge_shape(shape_id),
            transform=edge.transform,
            reversed=edge.reversed,
        )

    def advance(self) -> None:
        self.edge_num += 1

    def retreat(self) -> None:
        self.edge_num -= 1

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TileShapeCursor):
            return NotImplemented
        return self._tiling is other._tiling and self.edge_num == other.edge_num

    def __iter__(self) -> Iterator[EdgeView]:
        return self

    def __next__(self) -> EdgeView:
        if self.done:
            raise StopIteration
        view = self.current()
        self.advance()
        return view


class TilePartCursor:
    """Explicit cursor over half-edge parts."""

    def __init__(self, tiling: "IsohedralTiling", edge_num: int = 0) -> None:
        self._tiling = tiling
        self.edge_num = edge_num
        self.part = 0

    @property
    def done(self) -> bool:
        return self.edge_num >= self._tiling.num_vertices()

    def _shape(self) -> EdgeShape:
        return self._tiling.get_edge_shape(self._tiling.get_edge_shape_id(self.edge_num))

    def current(self) -> PartView:
        if self.done:
            raise IndexError("part cursor is past the last edge")
        idx = self.edge_num
        shape_id = self._tiling.get_edge_shape_id(idx)
        shape = self._tiling.get_edge_shape(shape_id)
        edge = self._tiling.get_edge(idx)

        if shape in (EdgeShape.J, EdgeShape.I):
            transform = edge.transform
            rev = edge.reversed
        else:
            rev = self.part == 1
            index = 1 - self.part if edge.reversed else self.part
            halves = HALF_U if shape == EdgeShape.U else HALF_S
            transform = edge.transform @ halves[index]

        return PartView(
            edge_index=idx,
            id=shape_id,
            shape=shape,
            transform=transform,
            reversed=rev,
            second_part=self.part == 1,
        )

    def advance(self) -> None:
        if self.part == 1 or self._shape() in (EdgeShape.J, EdgeShape.I):
            self.part = 0
            self.edge_num += 1
        else:
            self.part += 1

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TilePartCursor):
            return NotImplemented
        return (
            self._tiling is other._tiling
            and self.edge_num == other.edge_num
            and self.part == other.part
        )

    def __iter__(self) -> Iterator[PartView]:
        return self

    def __next__(self) -> PartView:
        if self.done:
            raise StopIteration
        view = self.current()
        self.advance()
        return view


class TileShape:
    """Restartable iterable of ``EdgeView`` entries."""

    def __init__(self, tiling: "IsohedralTiling") -> None:
        self._tiling = tiling

    def __iter__(self) -> TileShapeCursor:
        return TileShapeCursor(self._tiling)

    def __len__(self) -> int:
        return self._tiling.num_vertices()

    def begin(self) -> TileShapeCursor:
        return TileShapeCursor(self._tiling)

    def end(self) -> TileShapeCursor:
        return TileShapeCursor(self._tiling, self._tiling.num_vertices())


class TileParts:
    """Restartable iterable of ``PartView`` entries."""

    def __init__(self, tiling: "IsohedralTiling") -> None:
        self._tiling = tiling

    def __iter__(self) -> TilePartCursor:
        return TilePartCursor(self._tiling)

    def __len__(self) -> int:
        total = 0
        for idx in range(self._tiling.num_vertices()):
            shape = self._tiling.get_edge_shape(self._tiling.get_edge_shape_id(idx))
            total += 1 if shape in (EdgeShape.J, EdgeShape.I) else 2
        return total

    def begin(self) -> TilePartCursor:
        return TilePartCursor(self._tiling)

    def end(self) -> TilePartCursor:
        return TilePartCursor(self._tiling, self._tiling.num_vertices())


__all__ = [
    "HALF_U",
    "HALF_S",
    "EdgeView",
    "PartView",
    "TileShapeCursor",
    "TilePartCursor",
    "TileShape",
    "TileParts",
]
