"""
Core components for Doppelgangers.
"""

from .records import EmbeddingRecord
from .projector import Projection, ProjectionConfig, UMAPProjector, reduce_embeddings
from .projection_cache import ProjectionCache, build_projection, default_cache_path
from .points import Point, assemble_points, normalize_axis, points_to_json, without_embeddings

__all__ = [
    "EmbeddingRecord",
    "Projection",
    "ProjectionConfig",
    "UMAPProjector",
    "reduce_embeddings",
    "ProjectionCache",
    "build_projection",
    "default_cache_path",
    "Point",
    "assemble_points",
    "normalize_axis",
    "points_to_json",
    "without_embeddings",
]
