"""
Immutable table of the 81 isohedral tiling types.

A ``TilingTypeDescriptor`` carries everything the engine needs to
evaluate one type: structural counts, the edge shape assignment and
orientation flags for every tiling edge, default parameters, and three
coefficient tables (vertices, aspect transforms, translation vectors).
Each coefficient row holds ``num_params`` coefficients followed by an
affine bias, so the engine never needs type-specific logic.

The numbers themselves come from the published isohedral tables shipped
with the ``tactile`` package and are converted into descriptors once at
import time.

Types are selected by their isohedral number (``TILING_TYPES`` lists the
81 valid numbers in ascending order); ``get_descriptor`` raises
``UnknownTilingTypeError`` for anything else.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Tuple

from tactile.tiling_data import TilingTypeData, tiling_types

logger = logging.getLogger(__name__)


class EdgeShape(str, Enum):
    """Symmetry class of an edge shape."""

    J = "J"  # no symmetry
    U = "U"  # mirror-symmetric about the perpendicular bisector
    S = "S"  # point-symmetric about the midpoint
    I = "I"  # straight segment  # noqa: E741


class UnknownTilingTypeError(IndexError):
    """Raised when a tiling type number is not one of the 81 known types."""


@dataclass(frozen=True)
class TilingTypeDescriptor:
    number: int
    num_params: int
    num_aspects: int
    num_vertices: int
    num_edge_shapes: int
    edge_shapes: Tuple[EdgeShape, ...]
    # Two flags per tiling edge: (flip, rotate).
    edge_orientations: Tuple[Tuple[bool, bool], ...]
    edge_shape_ids: Tuple[int, ...]
    default_params: Tuple[float, ...]
    tiling_vertex_coeffs: Tuple[float, ...]
    translation_vector_coeffs: Tuple[float, ...]
    aspect_xform_coeffs: Tuple[float, ...]
    # 12 base colours, t1 permutation, t2 permutation, colour count.
    colouring: Tuple[int, ...]

    @property
    def num_colours(self) -> int:
        return self.colouring[18]


def _floats(values) -> Tuple[float, ...]:
    return tuple(float(v) for v in values)


def _build_descriptor(number: int, data) -> TilingTypeDescriptor:
    flags = [bool(f) for f in data.edge_orientations]
    descriptor = TilingTypeDescriptor(
        number=number,
        num_params=int(data.num_params),
        num_aspects=int(data.num_aspects),
        num_vertices=int(data.num_vertices),
        num_edge_shapes=int(data.num_edge_shapes),
        edge_shapes=tuple(EdgeShape(shape.name) for shape in data.edge_shapes),
        edge_orientations=tuple(zip(flags[0::2], flags[1::2])),
        edge_shape_ids=tuple(int(i) for i in data.edge_shape_ids),
        default_params=_floats(data.default_params),
        tiling_vertex_coeffs=_floats(data.vertex_coeffs),
        translation_vector_coeffs=_floats(data.translation_coeffs),
        aspect_xform_coeffs=_floats(data.aspect_coeffs),
        colouring=tuple(int(c) for c in data.coloring),
    )
    _check_sizes(descriptor)
    return descriptor


def _check_sizes(d: TilingTypeDescriptor) -> None:
    row = d.num_params + 1
    expected = {
        "edge_shapes": (len(d.edge_shapes), d.num_edge_shapes),
        "edge_orientations": (len(d.edge_orientations), d.num_vertices),
        "edge_shape_ids": (len(d.edge_shape_ids), d.num_vertices),
        "default_params": (len(d.default_params), d.num_params),
        "tiling_vertex_coeffs": (len(d.tiling_vertex_coeffs), 2 * row * d.num_vertices),
        "translation_vector_coeffs": (len(d.translation_vector_coeffs), 4 * row),
        "aspect_xform_coeffs": (len(d.aspect_xform_coeffs), 6 * row * d.num_aspects),
        "colouring": (len(d.colouring), 19),
    }
    for name, (actual, wanted) in expected.items():
        if actual != wanted:
            raise ValueError(f"IH{d.number}: {name} has {actual} entries, expected {wanted}")


def _build_table() -> Dict[int, TilingTypeDescriptor]:
    table: Dict[int, TilingTypeDescriptor] = {}
    for number in tiling_types:
        table[int(number)] = _build_descriptor(int(number), TilingTypeData.get_data(number))
    logger.debug("Loaded %d isohedral tiling descriptors", len(table))
    return table


_DESCRIPTORS: Dict[int, TilingTypeDescriptor] = _build_table()

TILING_TYPES: Tuple[int, ...] = tuple(sorted(_DESCRIPTORS))
NUM_TYPES = len(TILING_TYPES)


def get_descriptor(number: int) -> TilingTypeDescriptor:
    """Look up the descriptor for isohedral type ``number``."""
    try:
        return _DESCRIPTORS[int(number)]
    except KeyError:
        raise UnknownTilingTypeError(f"IH{number} is not a known isohedral type") from None


def iter_descriptors() -> List[TilingTypeDescriptor]:
    return [_DESCRIPTORS[n] for n in TILING_TYPES]


def type_index(number: int) -> int:
    """Ordinal position of ``number`` within ``TILING_TYPES``."""
    get_descriptor(number)
    return TILING_TYPES.index(int(number))


__all__ = [
    "EdgeShape",
    "UnknownTilingTypeError",
    "TilingTypeDescriptor",
    "TILING_TYPES",
    "NUM_TYPES",
    "get_descriptor",
    "iter_descriptors",
    "type_index",
]
