"""
Point assembly: normalized coordinates merged with display metadata.
"""

import json
from dataclasses import dataclass, replace
from typing import Any, Optional

import numpy as np

from doppelgangers.core.projector import Projection
from doppelgangers.core.records import EmbeddingRecord


@dataclass(frozen=True)
class Point:
    """A render-ready record. All coordinates lie in [0, 1]."""
    x: float
    y: float
    x3d: float
    y3d: float
    z3d: float
    title: str
    url: str
    body: str
    number: Optional[int] = None
    state: Optional[str] = None
    type: Optional[str] = None
    files: Optional[tuple[str, ...]] = None
    embedding: Optional[tuple[float, ...]] = None

    def to_dict(self) -> dict[str, Any]:
        """JSON-ready mapping; absent optional fields are omitted."""
        data = {
            "x": self.x,
            "y": self.y,
            "x3d": self.x3d,
            "y3d": self.y3d,
            "z3d": self.z3d,
            "title": self.title,
            "url": self.url,
            "body": self.body,
        }
        if self.number is not None:
            data["number"] = self.number
        if self.state is not None:
            data["state"] = self.state
        if self.type is not None:
            data["type"] = self.type
        if self.files is not None:
            data["files"] = list(self.files)
        if self.embedding is not None:
            data["embedding"] = list(self.embedding)
        return data


def normalize_axis(values: np.ndarray) -> np.ndarray:
    """
    Scale values into [0, 1].

    A zero range (all values equal) uses a divisor of 1, so every value maps to 0.
    """
    values = np.asarray(values, dtype=np.float64)
    if values.size == 0:
        return values
    low = values.min()
    span = values.max() - low
    if span == 0:
        span = 1.0
    return (values - low) / span


def normalize_coords(coords: np.ndarray) -> np.ndarray:
    """Normalize every column of an (n, k) coordinate array independently."""
    coords = np.asarray(coords, dtype=np.float64)
    if coords.size == 0:
        return coords
    return np.column_stack([normalize_axis(coords[:, axis]) for axis in range(coords.shape[1])])


def assemble_points(
    records: list[EmbeddingRecord],
    projection: Projection,
    include_embedding: bool = False
) -> list[Point]:
    """
    Pair normalized projection coordinates with record metadata.

    Args:
        records: Records in projection order
        projection: Raw 2D/3D coordinates, index-aligned with records
        include_embedding: Attach raw embeddings (needed for in-viewer search)

    Returns:
        One Point per record, same order
    """
    if len(records) != len(projection):
        raise ValueError(
            f"Projection has {len(projection)} coordinates for {len(records)} records"
        )
    if not records:
        return []

    flat = normalize_coords(projection.coords_2d)
    cube = normalize_coords(projection.coords_3d)

    points = []
    for i, record in enumerate(records):
        points.append(Point(
            x=float(flat[i, 0]),
            y=float(flat[i, 1]),
            x3d=float(cube[i, 0]),
            y3d=float(cube[i, 1]),
            z3d=float(cube[i, 2]),
            title=record.title,
            url=record.url,
            body=record.body,
            number=record.number,
            state=record.state,
            type=record.type,
            files=tuple(record.files) if record.files is not None else None,
            embedding=tuple(record.embedding) if include_embedding else None,
        ))
    return points


def without_embeddings(points: list[Point]) -> list[Point]:
    """Copies of points with the raw vectors dropped."""
    return [replace(p, embedding=None) if p.embedding is not None else p for p in points]


def points_to_json(points: list[Point]) -> str:
    """
    Serialize points for inline embedding in an HTML script block.

    "<" is escaped so item text can never close the script element.
    """
    return json.dumps([p.to_dict() for p in points], ensure_ascii=False).replace("<", "\\u003c")
