"""
Tests for whole-edge and half-edge traversal of a tile boundary.

The part traversal must visit the tile boundary as one continuous
chain, the two halves of every U or S edge must meet at the edge
midpoint, and the halves must be related by the mirror (U) or point
reflection (S) that the edge's symmetry class requires.
"""

import sys
from pathlib import Path

import numpy as np
import pytest

sys.path.append(str(Path(__file__).resolve().parents[1]))

from isotile.services.affine import apply_transform  # noqa: E402
from isotile.services.tiling import IsohedralTiling  # noqa: E402
from isotile.services.tiling_types import TILING_TYPES, EdgeShape  # noqa: E402


def endpoints(view):
    start = apply_transform(view.transform, (0.0, 0.0))
    end = apply_transform(view.transform, (1.0, 0.0))
    return (end, start) if view.reversed else (start, end)


def types_with(*shapes):
    out = []
    for number in TILING_TYPES:
        tiling = IsohedralTiling(number)
        if any(tiling.get_edge_shape(i) in shapes for i in range(tiling.num_edge_shapes())):
            out.append(number)
    return out


@pytest.mark.parametrize("number", TILING_TYPES)
def test_shape_traversal_lists_every_edge(number: int) -> None:
    """One entry per tiling edge with its shape id and class."""
    tiling = IsohedralTiling(number)
    views = list(tiling.shape())
    assert len(views) == tiling.num_vertices() == len(tiling.shape())
    for idx, view in enumerate(views):
        assert view.edge_index == idx
        assert view.id == tiling.get_edge_shape_id(idx)
        assert view.shape == tiling.get_edge_shape(view.id)


@pytest.mark.parametrize("number", TILING_TYPES)
def test_parts_form_a_closed_chain(number: int) -> None:
    """Each part starts where the previous one ended, beginning at vertex 0."""
    tiling = IsohedralTiling(number)
    parts = list(tiling.parts())
    assert len(parts) == len(tiling.parts())
    assert np.allclose(endpoints(parts[0])[0], tiling.get_vertex(0))
    for idx, part in enumerate(parts):
        nxt = parts[(idx + 1) % len(parts)]
        assert np.allclose(endpoints(part)[1], endpoints(nxt)[0])


@pytest.mark.parametrize("number", types_with(EdgeShape.U, EdgeShape.S))
def test_half_edges_meet_at_midpoint(number: int) -> None:
    """Both halves map the local midpoint onto the same point."""
    tiling = IsohedralTiling(number)
    parts = list(tiling.parts())
    for idx, part in enumerate(parts):
        if part.shape not in (EdgeShape.U, EdgeShape.S) or part.second_part:
            continue
        second = parts[idx + 1]
        assert second.second_part and second.edge_index == part.edge_index
        assert not part.reversed and second.reversed

        ys = (0.0, 0.2, -0.35) if part.shape == EdgeShape.U else (0.0,)
        for y in ys:
            assert np.allclose(
                apply_transform(part.transform, (1.0, y)),
                apply_transform(second.transform, (1.0, y)),
            )

        a = tiling.get_vertex(part.edge_index)
        b = tiling.get_vertex((part.edge_index + 1) % tiling.num_vertices())
        mid = 0.5 * (a + b)
        assert np.allclose(apply_transform(part.transform, (1.0, 0.0)), mid)


@pytest.mark.parametrize("number", types_with(EdgeShape.U, EdgeShape.S))
def test_half_edges_respect_symmetry(number: int) -> None:
    """S halves are point reflections of each other; U halves are mirror images."""
    tiling = IsohedralTiling(number)
    parts = list(tiling.parts())
    sample = (0.4, 0.3)
    for idx, part in enumerate(parts):
        if part.shape not in (EdgeShape.U, EdgeShape.S) or part.second_part:
            continue
        second = parts[idx + 1]
        p = apply_transform(part.transform, sample)
        q = apply_transform(second.transform, sample)
        a = tiling.get_vertex(part.edge_index)
        b = tiling.get_vertex((part.edge_index + 1) % tiling.num_vertices())
        mid = 0.5 * (a + b)
        if part.shape == EdgeShape.S:
            assert np.allclose(p + q, 2.0 * mid)
        else:
            axis = (b - a) / np.linalg.norm(b - a)
            # Mirror across the perpendicular bisector of the edge.
            assert np.allclose(np.dot(p - mid, axis), -np.dot(q - mid, axis))
            normal = np.array([-axis[1], axis[0]])
            assert np.allclose(np.dot(p - mid, normal), np.dot(q - mid, normal))


def test_whole_edge_parts_match_shape() -> None:
    """For J and I edges the part is identical to the whole edge."""
    tiling = IsohedralTiling(1)
    for edge, part in zip(tiling.shape(), tiling.parts()):
        assert edge.shape == EdgeShape.J
        assert np.allclose(edge.transform, part.transform)
        assert edge.reversed == part.reversed
        assert not part.second_part


def test_cursors_end_and_restart() -> None:
    """Cursors stop at the end state and traversals are restartable."""
    tiling = IsohedralTiling(7)
    shape = tiling.shape()
    cursor = shape.begin()
    steps = 0
    while cursor != shape.end():
        cursor.advance()
        steps += 1
    assert steps == tiling.num_vertices()
    assert cursor.done
    with pytest.raises(IndexError):
        cursor.current()
    cursor.retreat()
    assert cursor.current().edge_index == tiling.num_vertices() - 1

    parts = tiling.parts()
    assert [p.edge_index for p in parts] == [p.edge_index for p in parts]
    assert next(iter(parts)).edge_index == 0


def test_traversal_reads_live_tiling() -> None:
    """A traversal created before a parameter change sees the new geometry."""
    tiling = IsohedralTiling(41)
    shape = tiling.shape()
    tiling.set_parameters([0.5, 2.0])
    third = list(shape)[2]
    assert np.allclose(endpoints(third)[0], [2.05, 8.5])
    assert np.allclose(endpoints(third)[1], [0.0, 1.0])
    assert np.allclose(endpoints(third)[0], tiling.get_vertex(2))
