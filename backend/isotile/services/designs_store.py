"""
Persistence for saved tile designs.

A design is a tiling type together with a parameter vector and the
control points of every edge shape curve, i.e. everything needed to
redraw a tile and fill the plane with it.  Parameters and curves are
stored as JSON text columns since their lengths vary per type.
"""

from __future__ import annotations

import json
import uuid
from datetime import datetime, timezone
from typing import List, Optional

from sqlmodel import Field, SQLModel, select

from .db import create_db_and_tables, get_session


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class DesignRecord(SQLModel, table=True):
    """Database model representing one saved design."""

    design_id: str = Field(primary_key=True)
    name: str
    tiling_type: int = Field(index=True)
    parameters_json: str
    edges_json: str
    created_at: datetime = Field(default_factory=_utcnow)

    @property
    def parameters(self) -> List[float]:
        return json.loads(self.parameters_json)

    @property
    def edges(self) -> List[List[List[float]]]:
        return json.loads(self.edges_json)


def init_db() -> None:
    """Initialise the database schema."""
    create_db_and_tables()


def create_design(
    name: str, tiling_type: int, parameters: List[float], edges: List[List[List[float]]]
) -> DesignRecord:
    record = DesignRecord(
        design_id=uuid.uuid4().hex,
        name=name,
        tiling_type=tiling_type,
        parameters_json=json.dumps([float(p) for p in parameters]),
        edges_json=json.dumps([[[float(x), float(y)] for x, y in curve] for curve in edges]),
    )
    with get_session() as session:
        session.add(record)
        session.commit()
        session.refresh(record)
        return record


def get_design(design_id: str) -> Optional[DesignRecord]:
    with get_session() as session:
        return session.get(DesignRecord, design_id)


def list_designs(tiling_type: Optional[int] = None) -> List[DesignRecord]:
    with get_session() as session:
        statement = select(DesignRecord)
        if tiling_type is not None:
            statement = statement.where(DesignRecord.tiling_type == tiling_type)
        return list(session.exec(statement))


def update_design_edges(design_id: str, edges: List[List[List[float]]]) -> Optional[DesignRecord]:
    with get_session() as session:
        record = session.get(DesignRecord, design_id)
        if record is None:
            return None
        record.edges_json = json.dumps([[[float(x), float(y)] for x, y in curve] for curve in edges])
        session.add(record)
        session.commit()
        session.refresh(record)
        return record


def delete_design(design_id: str) -> bool:
    with get_session() as session:
        record = session.get(DesignRecord, design_id)
        if record is None:
            return False
        session.delete(record)
        session.commit()
        return True


__all__ = [
    "DesignRecord",
    "init_db",
    "create_design",
    "get_design",
    "list_designs",
    "update_design_edges",
    "delete_design",
]
