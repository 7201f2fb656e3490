"""
Routes for inspecting isohedral tiling types and filling regions.

Each request builds a fresh ``IsohedralTiling`` for the requested type,
applies the supplied parameter vector (or keeps the defaults) and reads
the derived geometry back out.  The engine itself does not check the
parameter vector length, so that check happens here and is reported as
a 400 error.  Unknown type numbers map to 404.
"""

from __future__ import annotations

import csv
import io
import logging
from dataclasses import asdict
from typing import List, Optional, Sequence

import numpy as np
from fastapi import APIRouter, HTTPException, Response

from .models import (
    ColourResponse,
    EdgeInfo,
    FillRequest,
    FillResponse,
    GeometryResponse,
    OutlineRequest,
    OutlineResponse,
    ParametersRequest,
    PartInfo,
    PartsResponse,
    Placement,
    RandomTilingRequest,
    RandomTilingResponse,
    SlabInfo,
    TilingTypeInfo,
)
from ..services.fill import FillAlgorithm
from ..services.outline import (
    EdgeCurveError,
    colour_rgb,
    default_edges,
    outline_bounds,
    outline_from_parts,
    outline_from_shape,
    perturb_parameters,
    random_edges,
)
from ..services.tiling import IsohedralTiling
from ..services.tiling_types import (
    TilingTypeDescriptor,
    UnknownTilingTypeError,
    iter_descriptors,
)

logger = logging.getLogger(__name__)

router = APIRouter()

# Fill responses are capped so an oversized region cannot produce an
# unbounded payload.
MAX_PLACEMENTS: int = 20000


def flatten_transform(M: np.ndarray) -> List[float]:
    return [float(M[row, col]) for row in range(2) for col in range(3)]


def describe(d: TilingTypeDescriptor) -> TilingTypeInfo:
    return TilingTypeInfo(
        number=d.number,
        numParameters=d.num_params,
        numVertices=d.num_vertices,
        numAspects=d.num_aspects,
        numEdgeShapes=d.num_edge_shapes,
        numColours=d.num_colours,
        edgeShapes=[s.value for s in d.edge_shapes],
        edgeShapeIds=list(d.edge_shape_ids),
        defaultParameters=list(d.default_params),
    )


def build_tiling(number: int, parameters: Optional[Sequence[float]] = None) -> IsohedralTiling:
    """Create a tiling, translating engine errors into HTTP errors."""
    try:
        tiling = IsohedralTiling(number)
    except UnknownTilingTypeError as exc:
        raise HTTPException(status_code=404, detail=str(exc))
    if parameters is not None:
        if len(parameters) != tiling.num_parameters():
            raise HTTPException(
                status_code=400,
                detail=(
                    f"IH{number} takes {tiling.num_parameters()} parameters, "
                    f"got {len(parameters)}"
                ),
            )
        tiling.set_parameters(parameters)
    return tiling


def region_corners(body: FillRequest) -> List[List[float]]:
    if body.corners is not None:
        if len(body.corners) != 4 or any(len(c) != 2 for c in body.corners):
            raise HTTPException(status_code=400, detail="corners must be four [x, y] points")
        return [list(c) for c in body.corners]
    if body.bounds is not None:
        if len(body.bounds) != 4:
            raise HTTPException(status_code=400, detail="bounds must be [xmin, ymin, xmax, ymax]")
        xmin, ymin, xmax, ymax = body.bounds
        return [[xmin, ymin], [xmax, ymin], [xmax, ymax], [xmin, ymax]]
    raise HTTPException(status_code=400, detail="Provide either bounds or corners")


def region_fill(tiling: IsohedralTiling, body: FillRequest) -> FillAlgorithm:
    A, B, C, D = region_corners(body)
    algo = tiling.fill_region_quad(A, B, C, D, debug=body.debug)
    if algo.degenerate:
        raise HTTPException(
            status_code=400,
            detail=f"IH{tiling.get_tiling_type()} lattice vectors are parallel for these parameters",
        )
    return algo


def collect_placements(algo: FillAlgorithm, limit: int):
    placements: List[Placement] = []
    truncated = False
    for placed in algo:
        if len(placements) >= limit:
            truncated = True
            break
        colour = placed.colour()
        placements.append(
            Placement(
                t1=placed.t1,
                t2=placed.t2,
                aspect=placed.aspect,
                colour=colour,
                rgb=list(colour_rgb(colour)),
                transform=flatten_transform(placed.transform),
            )
        )
    return placements, truncated


@router.get("/tilings", response_model=List[TilingTypeInfo])
async def list_tilings() -> List[TilingTypeInfo]:
    """List all 81 isohedral tiling types."""
    return [describe(d) for d in iter_descriptors()]


@router.get("/tilings/{number}", response_model=TilingTypeInfo)
async def get_tiling(number: int) -> TilingTypeInfo:
    return describe(build_tiling(number).descriptor)


@router.post("/tilings/{number}/geometry", response_model=GeometryResponse)
async def tiling_geometry(number: int, body: ParametersRequest) -> GeometryResponse:
    """Vertices, edge transforms, aspects and lattice vectors."""
    tiling = build_tiling(number, body.parameters)
    edges = [
        EdgeInfo(
            index=edge.edge_index,
            id=edge.id,
            shape=edge.shape.value,
            transform=flatten_transform(edge.transform),
            reversed=edge.reversed,
        )
        for edge in tiling.shape()
    ]
    return GeometryResponse(
        number=number,
        parameters=tiling.get_parameters(),
        vertices=[[float(v[0]), float(v[1])] for v in tiling.vertices()],
        edges=edges,
        aspects=[
            flatten_transform(tiling.get_aspect_transform(idx))
            for idx in range(tiling.num_aspects())
        ],
        t1=[float(x) for x in tiling.t1],
        t2=[float(x) for x in tiling.t2],
    )


@router.post("/tilings/{number}/parts", response_model=PartsResponse)
async def tiling_parts(number: int, body: ParametersRequest) -> PartsResponse:
    tiling = build_tiling(number, body.parameters)
    parts = [
        PartInfo(
            index=part.edge_index,
            id=part.id,
            shape=part.shape.value,
            transform=flatten_transform(part.transform),
            reversed=part.reversed,
            secondPart=part.second_part,
        )
        for part in tiling.parts()
    ]
    return PartsResponse(number=number, parts=parts)


@router.post("/tilings/{number}/outline", response_model=OutlineResponse)
async def tiling_outline(number: int, body: OutlineRequest) -> OutlineResponse:
    """Build the closed outline of one tile from edge curves."""
    tiling = build_tiling(number, body.parameters)
    edges = body.edges if body.edges is not None else default_edges(tiling)
    try:
        if body.useParts:
            points = outline_from_parts(tiling, edges)
        else:
            points = outline_from_shape(tiling, edges)
    except EdgeCurveError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    return OutlineResponse(
        number=number,
        points=[[float(p[0]), float(p[1])] for p in points],
        bbox=list(outline_bounds(points)),
    )


@router.post("/tilings/{number}/fill", response_model=FillResponse)
async def fill_region(number: int, body: FillRequest) -> FillResponse:
    """Enumerate the placed copies covering a region."""
    tiling = build_tiling(number, body.parameters)
    algo = region_fill(tiling, body)
    limit = min(body.maxPlacements or MAX_PLACEMENTS, MAX_PLACEMENTS)
    placements, truncated = collect_placements(algo, limit)
    if truncated:
        logger.info("IH%d fill truncated at %d placements", number, limit)
    return FillResponse(
        number=number,
        slabs=[SlabInfo(**asdict(slab)) for slab in algo.slabs],
        placements=placements,
        truncated=truncated,
    )


@router.post("/tilings/{number}/fill/export")
async def export_fill(number: int, body: FillRequest) -> Response:
    """Export the placements covering a region as CSV."""
    tiling = build_tiling(number, body.parameters)
    algo = region_fill(tiling, body)
    limit = min(body.maxPlacements or MAX_PLACEMENTS, MAX_PLACEMENTS)
    placements, _ = collect_placements(algo, limit)

    output = io.StringIO()
    writer = csv.writer(output, lineterminator="\n")
    writer.writerow(["t1", "t2", "aspect", "colour", "a", "b", "c", "d", "e", "f"])
    for p in placements:
        writer.writerow([p.t1, p.t2, p.aspect, p.colour, *(f"{v:.6f}" for v in p.transform)])
    return Response(content=output.getvalue(), media_type="text/csv")


@router.get("/tilings/{number}/colour", response_model=ColourResponse)
async def tiling_colour(number: int, t1: int, t2: int, aspect: int) -> ColourResponse:
    tiling = build_tiling(number)
    if not 0 <= aspect < tiling.num_aspects():
        raise HTTPException(status_code=400, detail=f"aspect must be below {tiling.num_aspects()}")
    return ColourResponse(t1=t1, t2=t2, aspect=aspect, colour=tiling.get_colour(t1, t2, aspect))


@router.post("/tilings/{number}/random", response_model=RandomTilingResponse)
async def random_tiling(number: int, body: RandomTilingRequest) -> RandomTilingResponse:
    """Perturb the default parameters and generate random edge curves."""
    tiling = build_tiling(number)
    rng = np.random.default_rng(body.seed)
    params = perturb_parameters(tiling, body.amount, rng)
    edges = random_edges(tiling, rng)
    return RandomTilingResponse(
        number=number,
        parameters=params,
        edges=[[list(p) for p in curve] for curve in edges],
    )


__all__ = ["router", "build_tiling", "flatten_transform", "describe", "MAX_PLACEMENTS"]
