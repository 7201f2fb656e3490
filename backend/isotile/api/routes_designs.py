"""
Routes for saving, editing and rendering tile designs.

Designs are stored through ``designs_store``.  Creating a design
validates the parameter vector and edge curves against the tiling type
so that everything later read back from the database can be drawn.
"""

from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, HTTPException, Response

from .models import DesignCreateRequest, DesignEditRequest, DesignInfo, OutlineResponse
from .routes_tilings import build_tiling
from ..services.designs_store import (
    DesignRecord,
    create_design as store_create_design,
    delete_design as store_delete_design,
    get_design as store_get_design,
    list_designs as store_list_designs,
    update_design_edges,
)
from ..services.outline import (
    EdgeCurveError,
    default_edges,
    insert_control_point,
    move_control_point,
    outline_bounds,
    outline_from_parts,
    remove_control_point,
)

router = APIRouter()


def to_info(record: DesignRecord) -> DesignInfo:
    return DesignInfo(
        designId=record.design_id,
        name=record.name,
        tilingType=record.tiling_type,
        parameters=record.parameters,
        edges=record.edges,
        createdAt=record.created_at,
    )


def load_design(design_id: str) -> DesignRecord:
    record = store_get_design(design_id)
    if record is None:
        raise HTTPException(status_code=404, detail="Design not found")
    return record


@router.post("/designs", response_model=DesignInfo, status_code=201)
async def create_design(body: DesignCreateRequest) -> DesignInfo:
    tiling = build_tiling(body.tilingType, body.parameters)
    edges = body.edges if body.edges is not None else default_edges(tiling)
    try:
        # Building the outline checks that the curves fit this type.
        outline_from_parts(tiling, edges)
    except EdgeCurveError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    record = store_create_design(body.name, body.tilingType, tiling.get_parameters(), edges)
    return to_info(record)


@router.get("/designs", response_model=List[DesignInfo])
async def list_designs(tilingType: Optional[int] = None) -> List[DesignInfo]:
    return [to_info(r) for r in store_list_designs(tilingType)]


@router.get("/designs/{design_id}", response_model=DesignInfo)
async def get_design(design_id: str) -> DesignInfo:
    return to_info(load_design(design_id))


@router.delete("/designs/{design_id}", status_code=204)
async def delete_design(design_id: str) -> Response:
    if not store_delete_design(design_id):
        raise HTTPException(status_code=404, detail="Design not found")
    return Response(status_code=204)


@router.post("/designs/{design_id}/edits", response_model=DesignInfo)
async def edit_design(design_id: str, body: DesignEditRequest) -> DesignInfo:
    """Insert, move or remove one control point of a half-edge curve."""
    record = load_design(design_id)
    tiling = build_tiling(record.tiling_type, record.parameters)
    edges = [[(p[0], p[1]) for p in curve] for curve in record.edges]

    op = body.op.strip().lower()
    try:
        if op == "insert":
            if body.point is None:
                raise HTTPException(status_code=400, detail="insert needs a point")
            insert_control_point(tiling, edges, body.shapeId, body.index, tuple(body.point))
        elif op == "move":
            if body.point is None:
                raise HTTPException(status_code=400, detail="move needs a point")
            move_control_point(tiling, edges, body.shapeId, body.index, tuple(body.point))
        elif op == "remove":
            remove_control_point(tiling, edges, body.shapeId, body.index)
        else:
            raise HTTPException(status_code=400, detail=f"Unknown edit operation '{body.op}'")
    except EdgeCurveError as exc:
        raise HTTPException(status_code=400, detail=str(exc))

    updated = update_design_edges(design_id, edges)
    if updated is None:
        raise HTTPException(status_code=404, detail="Design not found")
    return to_info(updated)


@router.get("/designs/{design_id}/outline", response_model=OutlineResponse)
async def design_outline(design_id: str) -> OutlineResponse:
    record = load_design(design_id)
    tiling = build_tiling(record.tiling_type, record.parameters)
    points = outline_from_parts(tiling, record.edges)
    return OutlineResponse(
        number=record.tiling_type,
        points=[[float(p[0]), float(p[1])] for p in points],
        bbox=list(outline_bounds(points)),
    )


__all__ = ["router"]
