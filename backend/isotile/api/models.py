"""
Pydantic data models for the isohedral tiling API.

These models define the shapes of requests and responses used by the
backend.  Geometry is exchanged as plain lists: points as ``[x, y]``
pairs and affine transforms as the first two rows of the 3×3 matrix
flattened in reading order (``[a, b, c, d, e, f]`` for
``x' = a*x + b*y + c``, ``y' = d*x + e*y + f``).
"""

from __future__ import annotations

from typing import Any, List, Optional

from pydantic import BaseModel, Field


class TilingTypeInfo(BaseModel):
    """Structural summary of one isohedral tiling type."""

    number: int = Field(..., description="Isohedral type number (IH1 … IH93)")
    numParameters: int = Field(..., description="Length of the parameter vector")
    numVertices: int = Field(..., description="Number of tiling vertices")
    numAspects: int = Field(..., description="Tiles per translational unit cell")
    numEdgeShapes: int = Field(..., description="Number of distinct edge shapes")
    numColours: int = Field(..., description="Size of the default colouring")
    edgeShapes: List[str] = Field(..., description="Symmetry class (J, U, S or I) per edge shape id")
    edgeShapeIds: List[int] = Field(..., description="Edge shape id per tiling edge")
    defaultParameters: List[float] = Field(..., description="Default parameter vector")


class ParametersRequest(BaseModel):
    """Optional parameter vector; the type's defaults are used when omitted."""

    parameters: Optional[List[float]] = Field(
        default=None, description="Parameter vector for the tiling type"
    )


class EdgeInfo(BaseModel):
    index: int = Field(..., description="Tiling edge index")
    id: int = Field(..., description="Edge shape id")
    shape: str = Field(..., description="Edge symmetry class")
    transform: List[float] = Field(..., description="Affine transform placing the unit segment")
    reversed: bool = Field(..., description="Whether the curve runs backwards along this edge")


class PartInfo(EdgeInfo):
    secondPart: bool = Field(..., description="True for the second half of a U or S edge")


class GeometryResponse(BaseModel):
    """Derived geometry for a tiling type at a given parameter vector."""

    number: int
    parameters: List[float]
    vertices: List[List[float]]
    edges: List[EdgeInfo]
    aspects: List[List[float]]
    t1: List[float]
    t2: List[float]


class PartsResponse(BaseModel):
    number: int
    parts: List[PartInfo]


class OutlineRequest(ParametersRequest):
    edges: Optional[List[List[List[float]]]] = Field(
        default=None,
        description="Control points per edge shape id, each running from (0,0) to (1,0)",
    )
    useParts: bool = Field(
        default=False, description="Treat U and S curves as half-edges and walk parts"
    )


class OutlineResponse(BaseModel):
    number: int
    points: List[List[float]] = Field(..., description="Closed outline of one tile")
    bbox: List[float] = Field(..., description="xmin, ymin, xmax, ymax of the outline")


class FillRequest(ParametersRequest):
    """Viewing region as an axis-aligned box or as four corners."""

    bounds: Optional[List[float]] = Field(
        default=None, description="xmin, ymin, xmax, ymax of an axis-aligned box"
    )
    corners: Optional[List[List[float]]] = Field(
        default=None, description="Four corners of a convex quadrilateral"
    )
    maxPlacements: Optional[int] = Field(
        default=None, description="Cap on returned placements"
    )
    debug: bool = Field(default=False, description="Log slab construction")


class SlabInfo(BaseModel):
    xlo: float
    dxlo: float
    xhi: float
    dxhi: float
    ymin: float
    ymax: float


class Placement(BaseModel):
    t1: int = Field(..., description="Lattice step along the first translation vector")
    t2: int = Field(..., description="Lattice step along the second translation vector")
    aspect: int = Field(..., description="Aspect index within the unit cell")
    colour: int = Field(..., description="Colour label for this copy")
    rgb: List[int] = Field(..., description="Palette colour for the label")
    transform: List[float] = Field(..., description="Affine transform placing the prototile")


class FillResponse(BaseModel):
    number: int
    slabs: List[SlabInfo]
    placements: List[Placement]
    truncated: bool = Field(..., description="True if maxPlacements cut the enumeration short")


class ColourResponse(BaseModel):
    t1: int
    t2: int
    aspect: int
    colour: int


class RandomTilingRequest(BaseModel):
    seed: Optional[int] = Field(default=None, description="Seed for reproducible output")
    amount: float = Field(default=0.1, description="Maximum parameter perturbation")


class RandomTilingResponse(BaseModel):
    number: int
    parameters: List[float]
    edges: List[List[List[float]]]


class DesignCreateRequest(BaseModel):
    name: str = Field(..., description="Human readable design name")
    tilingType: int = Field(..., description="Isohedral type number")
    parameters: Optional[List[float]] = Field(default=None)
    edges: Optional[List[List[List[float]]]] = Field(default=None)


class DesignInfo(BaseModel):
    designId: str
    name: str
    tilingType: int
    parameters: List[float]
    edges: List[List[List[float]]]
    createdAt: Any = Field(..., description="Timestamp of when the design was saved")


class DesignEditRequest(BaseModel):
    """Edit one control point of a half-edge curve."""

    op: str = Field(..., description="insert, move or remove")
    shapeId: int = Field(..., description="Edge shape id to edit")
    index: int = Field(..., description="Control point index")
    point: Optional[List[float]] = Field(default=None, description="New point for insert or move")


__all__ = [
    "TilingTypeInfo",
    "ParametersRequest",
    "EdgeInfo",
    "PartInfo",
    "GeometryResponse",
    "PartsResponse",
    "OutlineRequest",
    "OutlineResponse",
    "FillRequest",
    "SlabInfo",
    "Placement",
    "FillResponse",
    "ColourResponse",
    "RandomTilingRequest",
    "RandomTilingResponse",
    "DesignCreateRequest",
    "DesignInfo",
    "DesignEditRequest",
]
