"""
Tests for the region-fill algorithm and its iterator.

Most checks run against a small stand-in tiling with a chosen lattice
and a single identity aspect, so they exercise the slab decomposition
and the lattice walk independently of the type table.  The remaining
tests fill regions with real tilings and check the live-read behaviour
of placement transforms.
"""

import itertools
import math
import sys
from pathlib import Path

import numpy as np
import pytest

sys.path.append(str(Path(__file__).resolve().parents[1]))

from isotile.services.affine import apply_transform  # noqa: E402
from isotile.services.fill import FillAlgorithm  # noqa: E402
from isotile.services.tiling import IsohedralTiling  # noqa: E402
from isotile.services.tiling_types import TILING_TYPES  # noqa: E402


class LatticeStub:
    """Minimal tiling: a lattice basis plus identity aspects."""

    def __init__(self, t1, t2, aspects: int = 1) -> None:
        self.t1 = np.asarray(t1, dtype=float)
        self.t2 = np.asarray(t2, dtype=float)
        self._aspects = aspects

    def num_aspects(self) -> int:
        return self._aspects

    def get_aspect_transform(self, idx: int) -> np.ndarray:
        return np.eye(3)

    def get_colour(self, t1: int, t2: int, aspect: int) -> int:
        return (t1 + t2) % 2


def to_lattice(stub: LatticeStub, point):
    basis = np.column_stack([stub.t1, stub.t2])
    return np.linalg.solve(basis, np.asarray(point, dtype=float))


def signed_area(poly) -> float:
    total = 0.0
    for idx, p in enumerate(poly):
        q = poly[(idx + 1) % len(poly)]
        total += p[0] * q[1] - q[0] * p[1]
    return 0.5 * total


def side(a, b, p) -> float:
    return (b[0] - a[0]) * (p[1] - a[1]) - (b[1] - a[1]) * (p[0] - a[0])


def overlap_area(cell, quad) -> float:
    """Area of the unit cell ``[a, a+1] x [b, b+1]`` inside a convex quad."""
    a, b = cell
    poly = [(a, b), (a + 1, b), (a + 1, b + 1), (a, b + 1)]
    if signed_area(quad) < 0:
        quad = quad[::-1]
    for idx, start in enumerate(quad):
        stop = quad[(idx + 1) % len(quad)]
        clipped = []
        for jdx, p in enumerate(poly):
            q = poly[(jdx + 1) % len(poly)]
            sp, sq = side(start, stop, p), side(start, stop, q)
            if sp >= 0:
                clipped.append(p)
            if (sp >= 0) != (sq >= 0):
                t = sp / (sp - sq)
                clipped.append((p[0] + t * (q[0] - p[0]), p[1] + t * (q[1] - p[1])))
        poly = clipped
        if len(poly) < 3:
            return 0.0
    return abs(signed_area(poly))


def test_unit_lattice_box_is_row_major() -> None:
    """A 3x2 box on the unit lattice yields 12 positions, row by row."""
    stub = LatticeStub((1.0, 0.0), (0.0, 1.0))
    algo = FillAlgorithm(stub, [(0, 0), (3, 0), (3, 2), (0, 2)])
    assert len(algo.slabs) == 1
    positions = [(p.t1, p.t2) for p in algo]
    assert len(positions) == 12
    assert positions == [(x, y) for y in range(3) for x in range(4)]
    assert len(set(positions)) == 12


def test_left_handed_basis_covers_same_cells() -> None:
    """Swapping the basis vectors changes lattice labels, not coverage."""
    right = LatticeStub((1.0, 0.0), (0.0, 1.0))
    left = LatticeStub((0.0, 1.0), (1.0, 0.0))
    corners = [(0, 0), (3, 0), (3, 2), (0, 2)]

    def origins(stub):
        out = set()
        for p in FillAlgorithm(stub, corners):
            o = p.t1 * stub.t1 + p.t2 * stub.t2
            out.add((round(float(o[0])), round(float(o[1]))))
        return out

    assert origins(left) == origins(right)


def test_iterator_equality_and_end() -> None:
    """Cursors compare by position and the exhausted cursor equals end()."""
    stub = LatticeStub((1.0, 0.0), (0.0, 1.0), aspects=2)
    algo = FillAlgorithm(stub, [(0, 0), (2, 0), (2, 1), (0, 1)])
    a = algo.begin()
    b = algo.begin()
    assert a == b
    assert a != algo.end()
    a.advance()
    assert a != b
    assert (a.t1, a.t2, a.aspect) == (0, 0, 1)
    b.advance()
    assert a == b

    other = FillAlgorithm(stub, [(0, 0), (2, 0), (2, 1), (0, 1)])
    assert other.begin() != algo.begin()

    cursor = algo.begin()
    steps = 0
    while cursor != algo.end():
        cursor.advance()
        steps += 1
    assert steps == 3 * 2 * 2
    assert cursor.done
    with pytest.raises(IndexError):
        cursor.placement()


SHEARED = LatticeStub((1.0, 0.3), (-0.2, 1.0), aspects=2)

REGIONS = [
    [(0, 0), (20, 0), (20, 16), (0, 16)],
    [(10, 0), (20, 10), (10, 20), (0, 10)],
    [(-5, -3), (7, -4), (9, 6), (-4, 8)],
]


@pytest.mark.parametrize("corners", REGIONS)
def test_fill_has_no_duplicates_and_terminates(corners) -> None:
    """Every (x, y, aspect) appears once and the walk stays within its bound."""
    algo = FillAlgorithm(SHEARED, corners)
    assert 1 <= len(algo.slabs) <= 3
    seen = [(p.t1, p.t2, p.aspect) for p in algo]
    assert len(seen) == len(set(seen))
    assert len(seen) <= algo.step_bound()


UNIT = LatticeStub((1.0, 0.0), (0.0, 1.0))

COVER_CASES = [(SHEARED, corners) for corners in REGIONS] + [
    # Left neighbour of the lowest corner lies to the right of the diagonal.
    (UNIT, [(0, 0), (4, 1), (10, 10), (6, 8)]),
    # Clockwise corners.
    (UNIT, [(0, 0), (0, 2), (3, 2), (3, 0)]),
    # Side corners at equal height.
    (UNIT, [(1, 0), (2, 1), (1, 2), (0, 1)]),
    # Top corner level with its left neighbour.
    (UNIT, [(0, 0), (2, 1), (1, 2), (0, 2)]),
    (UNIT, [(0.5, 0.2), (7.5, 0.4), (6.0, 0.9), (1.0, 0.7)]),
]


@pytest.mark.parametrize("stub, corners", COVER_CASES)
def test_fill_covers_every_overlapping_cell(stub, corners) -> None:
    """Every lattice cell the region overlaps with positive area is enumerated."""
    algo = FillAlgorithm(stub, corners)
    seen = [(p.t1, p.t2) for p in algo if p.aspect == 0]
    assert len(seen) == len(set(seen))
    assert len(seen) * stub.num_aspects() <= algo.step_bound()

    quad = [tuple(to_lattice(stub, c)) for c in corners]
    xs = [q[0] for q in quad]
    ys = [q[1] for q in quad]
    covered = 0
    for a, b in itertools.product(
        range(math.floor(min(xs)) - 1, math.ceil(max(xs)) + 1),
        range(math.floor(min(ys)) - 1, math.ceil(max(ys)) + 1),
    ):
        if overlap_area((a, b), quad) > 1e-9:
            covered += 1
            assert (a, b) in set(seen), f"cell {(a, b)} overlaps the region but was skipped"
    assert covered > 0


def test_zero_height_middle_slab_is_dropped() -> None:
    """Side corners at equal height give two finite slabs, not a 0/0 one."""
    algo = FillAlgorithm(UNIT, [(1, 0), (2, 1), (1, 2), (0, 1)])
    assert len(algo.slabs) == 2
    for slab in algo.slabs:
        assert all(math.isfinite(v) for v in (slab.xlo, slab.dxlo, slab.xhi, slab.dxhi))
        assert slab.ymax > slab.ymin
    assert algo.step_bound() >= len(list(algo))


def test_flat_top_slab_has_finite_slopes() -> None:
    """A top corner level with a side corner leaves a one-row top slab."""
    algo = FillAlgorithm(UNIT, [(0, 0), (2, 1), (1, 2), (0, 2)])
    top = algo.slabs[-1]
    assert top.ymin == pytest.approx(2.0)
    assert (top.dxlo, top.dxhi) == (0.0, 0.0)
    for slab in algo.slabs:
        assert all(math.isfinite(v) for v in (slab.xlo, slab.dxlo, slab.xhi, slab.dxhi))
    assert {(p.t1, p.t2) for p in algo if p.t2 == 2} == {(0, 2), (1, 2)}


def test_real_tiling_with_tied_corners_has_a_step_bound() -> None:
    """IH47 maps a box so two corners share a lattice row."""
    tiling = IsohedralTiling(47)
    algo = tiling.fill_region_bounds(-3.0, -3.0, 3.0, 3.0)
    for slab in algo.slabs:
        assert all(math.isfinite(v) for v in (slab.xlo, slab.dxlo, slab.xhi, slab.dxhi))
    assert len(list(algo)) <= algo.step_bound()


def test_parallel_lattice_vectors_are_degenerate() -> None:
    """A collapsed lattice is reported instead of producing a bound."""
    algo = FillAlgorithm(LatticeStub((1.0, 0.0), (2.0, 0.0)), [(0, 0), (1, 0), (1, 1), (0, 1)])
    assert algo.degenerate
    with pytest.raises(ValueError):
        algo.step_bound()
    assert not FillAlgorithm(UNIT, [(0, 0), (1, 0), (1, 1), (0, 1)]).degenerate


def test_slabs_are_frozen_but_transforms_are_live() -> None:
    """Placements read the tiling's current lattice; slabs keep the old one."""
    tiling = IsohedralTiling(41)
    algo = tiling.fill_region_bounds(0.0, 0.0, 3.0, 3.0)
    slabs = algo.slabs
    cursor = algo.begin()
    while cursor.t2 == 0:
        cursor.advance()
    placement = cursor.placement()

    tiling.set_parameters([0.0, 2.0])
    assert np.allclose(tiling.t2, [0.1, 7.5])
    assert algo.slabs is slabs
    assert slabs[0].ymax == pytest.approx(4.0)
    origin = apply_transform(placement.transform, (0.0, 0.0))
    expected = (
        tiling.get_aspect_transform(placement.aspect)[0:2, 2]
        + placement.t1 * tiling.t1
        + placement.t2 * tiling.t2
    )
    assert np.allclose(origin, expected)


@pytest.mark.parametrize("number", TILING_TYPES)
def test_fill_real_tilings(number: int) -> None:
    """Filling a box visits every aspect and stays within the step bound."""
    tiling = IsohedralTiling(number)
    algo = tiling.fill_region_bounds(-3.0, -3.0, 3.0, 3.0)
    placements = list(algo)
    assert 0 < len(placements) <= algo.step_bound()
    keys = [(p.t1, p.t2, p.aspect) for p in placements]
    assert len(keys) == len(set(keys))
    assert {p.aspect for p in placements} == set(range(tiling.num_aspects()))
    for p in placements[:20]:
        T = p.transform
        shift = p.t1 * tiling.t1 + p.t2 * tiling.t2
        assert np.allclose(T[0:2, 2], tiling.get_aspect_transform(p.aspect)[0:2, 2] + shift)
        assert 0 <= p.colour() < tiling.num_colours()
