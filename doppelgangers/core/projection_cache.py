"""
On-disk cache for projection coordinates.
Stores the 2D and 3D layouts together as one JSON document per output path.
"""

import json
import logging
import os
import tempfile
import threading
from pathlib import Path
from typing import Callable, Optional, Sequence

import numpy as np

from doppelgangers.core.projector import Projection, ProjectionConfig, reduce_embeddings
import config

logger = logging.getLogger(__name__)

_PATH_LOCKS: dict[str, threading.Lock] = {}
_PATH_LOCKS_GUARD = threading.Lock()


def _lock_for(path: Path) -> threading.Lock:
    key = str(path.resolve())
    with _PATH_LOCKS_GUARD:
        if key not in _PATH_LOCKS:
            _PATH_LOCKS[key] = threading.Lock()
        return _PATH_LOCKS[key]


def _as_coords(values, width: int) -> np.ndarray:
    coords = np.asarray(values, dtype=np.float32)
    if coords.size == 0:
        return coords.reshape(0, width)
    if coords.ndim != 2 or coords.shape[1] != width:
        raise ValueError(f"expected rows of {width} coordinates, got shape {coords.shape}")
    return coords


def default_cache_path(output_path: Path) -> Path:
    """Projection cache path stored next to a rendered artifact."""
    output_path = Path(output_path)
    return output_path.with_name(output_path.stem + config.PROJECTION_SUFFIX)


class ProjectionCache:
    """
    JSON cache of a projection: {"coords2d": [[x, y], ...], "coords3d": [[x, y, z], ...]}.

    A file that is missing, unreadable, malformed, or sized for a different
    dataset is a cache miss. Writes go through a temp file and os.replace so
    readers never see a partial document.
    """

    def __init__(self, path: Path):
        self.path = Path(path)

    def exists(self) -> bool:
        return self.path.exists()

    def lock(self) -> threading.Lock:
        """Lock serializing projection runs that target this path."""
        return _lock_for(self.path)

    def load(self, expected_count: Optional[int] = None) -> Optional[Projection]:
        """
        Read the cached projection.

        Args:
            expected_count: Number of records the coordinates must cover

        Returns:
            Projection, or None on any kind of miss
        """
        if not self.path.exists():
            return None

        try:
            with self.path.open("r", encoding="utf-8") as f:
                data = json.load(f)
            coords_2d = _as_coords(data["coords2d"], 2)
            coords_3d = _as_coords(data["coords3d"], 3)
        except (OSError, ValueError, KeyError, TypeError) as e:
            logger.warning(f"Ignoring unreadable projection cache {self.path}: {e}")
            return None

        if len(coords_2d) != len(coords_3d):
            logger.warning(
                f"Ignoring projection cache {self.path}: "
                f"{len(coords_2d)} 2D vs {len(coords_3d)} 3D coordinates"
            )
            return None

        if expected_count is not None and len(coords_2d) != expected_count:
            logger.warning(
                f"Ignoring stale projection cache {self.path}: "
                f"{len(coords_2d)} coordinates for {expected_count} records"
            )
            return None

        return Projection(coords_2d=coords_2d, coords_3d=coords_3d)

    def save(self, projection: Projection) -> None:
        """Write the projection atomically."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        payload = {
            "coords2d": projection.coords_2d.astype(float).tolist(),
            "coords3d": projection.coords_3d.astype(float).tolist(),
        }

        fd, tmp_name = tempfile.mkstemp(
            prefix=self.path.name, suffix=".tmp", dir=str(self.path.parent)
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(payload, f)
            os.replace(tmp_name, self.path)
        except BaseException:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise

    def clear(self) -> None:
        """Delete the cache file if present."""
        if self.path.exists():
            self.path.unlink()


def build_projection(
    vectors: Sequence[Sequence[float]],
    cache_path: Path,
    projection_config: Optional[ProjectionConfig] = None,
    force: bool = False,
    progress_callback: Optional[Callable[[str], None]] = None
) -> Projection:
    """
    Return the projection for vectors, reusing the cache at cache_path.

    Runs against the same cache path are serialized.

    Args:
        vectors: Embedding vectors, all the same length
        cache_path: Where the projection is cached
        projection_config: Projection parameters
        force: Recompute even if a valid cache entry exists
        progress_callback: Optional callable(message: str) for progress updates

    Returns:
        Projection index-aligned with vectors
    """
    def log(msg: str):
        if progress_callback:
            progress_callback(msg)
        logger.info(msg)

    cache = ProjectionCache(cache_path)

    with cache.lock():
        if not force:
            cached = cache.load(expected_count=len(vectors))
            if cached is not None:
                log(f"Loaded projection from cache {cache.path}")
                return cached
        else:
            log("Force rebuild requested, recomputing projection...")

        log(f"Projecting {len(vectors)} embeddings...")
        projection = reduce_embeddings(vectors, projection_config)

        cache.save(projection)
        log(f"Saved projection to {cache.path}")

    return projection
