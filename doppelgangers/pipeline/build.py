"""
Build pipeline: embeddings JSONL in, standalone HTML viewer out.
"""

import logging
from pathlib import Path
from typing import Callable, Optional

from doppelgangers.core.points import Point, assemble_points
from doppelgangers.core.projection_cache import build_projection, default_cache_path
from doppelgangers.core.projector import ProjectionConfig
from doppelgangers.loaders.jsonl import EmbeddingsJsonlLoader
from doppelgangers.visualization.html import write_html
import config

logger = logging.getLogger(__name__)


def load_points(
    input_path: Path,
    cache_path: Path,
    projection_config: Optional[ProjectionConfig] = None,
    force: bool = False,
    include_embeddings: bool = False,
    progress_callback: Optional[Callable[[str], None]] = None
) -> list[Point]:
    """
    Load embeddings and turn them into render-ready points.

    Raises:
        FileNotFoundError: If input_path doesn't exist
        VectorLengthMismatchError: If embeddings differ in length
    """
    def log(msg: str):
        if progress_callback:
            progress_callback(msg)
        logger.info(msg)

    loader = EmbeddingsJsonlLoader(input_path)
    records = loader.load()
    log(f"Loaded {len(records)} records from {loader.path}")

    projection = build_projection(
        [r.embedding for r in records],
        cache_path,
        projection_config=projection_config,
        force=force,
        progress_callback=progress_callback,
    )

    return assemble_points(records, projection, include_embedding=include_embeddings)


def build(
    input_path: Path = config.EMBEDDINGS_PATH,
    output_path: Path = config.HTML_PATH,
    projection_config: Optional[ProjectionConfig] = None,
    force: bool = False,
    include_embeddings: bool = False,
    cache_path: Optional[Path] = None,
    title: str = "Doppelgangers",
    progress_callback: Optional[Callable[[str], None]] = None
) -> Path:
    """
    Render the HTML viewer for an embeddings file.

    Args:
        input_path: Embeddings JSONL
        output_path: HTML file to write
        projection_config: Projection parameters
        force: Recompute the projection even if cached
        include_embeddings: Embed raw vectors in the page (enables search)
        cache_path: Projection cache (defaults to next to output_path)
        title: Page title
        progress_callback: Optional callable(message: str) for progress updates

    Returns:
        Path of the written HTML file
    """
    output_path = Path(output_path)
    if cache_path is None:
        cache_path = default_cache_path(output_path)

    points = load_points(
        input_path,
        cache_path,
        projection_config=projection_config,
        force=force,
        include_embeddings=include_embeddings,
        progress_callback=progress_callback,
    )

    written = write_html(points, output_path, title=title)
    if progress_callback:
        progress_callback(f"Wrote {written} ({len(points)} points)")
    return written
