"""
Dimensionality reduction for embedding visualization.
PCA pre-reduction followed by independent 2D and 3D UMAP projections.
"""

import logging
import warnings
from dataclasses import dataclass
from typing import Optional, Sequence

import numpy as np
import umap
from sklearn.decomposition import PCA

from doppelgangers.errors import VectorLengthMismatchError
import config

logger = logging.getLogger(__name__)


@dataclass
class ProjectionConfig:
    """Overridable projection parameters."""
    n_neighbors: int = config.UMAP_N_NEIGHBORS
    min_dist: float = config.UMAP_MIN_DIST
    spread: float = config.UMAP_SPREAD
    metric: str = config.UMAP_METRIC
    pca_components: int = config.PCA_COMPONENTS
    random_state: Optional[int] = None

    def __post_init__(self):
        if self.n_neighbors < 2:
            raise ValueError(f"n_neighbors must be at least 2, got {self.n_neighbors}")
        if self.spread <= 0:
            raise ValueError(f"spread must be positive, got {self.spread}")
        if not 0 <= self.min_dist <= self.spread:
            raise ValueError(
                f"min_dist must be between 0 and spread ({self.spread}), got {self.min_dist}"
            )
        if self.pca_components < 1:
            raise ValueError(f"pca_components must be at least 1, got {self.pca_components}")


@dataclass
class Projection:
    """2D and 3D coordinates, index-aligned with the input vectors."""
    coords_2d: np.ndarray  # (n, 2)
    coords_3d: np.ndarray  # (n, 3)

    def __len__(self) -> int:
        return len(self.coords_2d)


class UMAPProjector:
    """
    UMAP-based manifold projection for embedding visualization.

    Features:
    - Fits UMAP on (pre-reduced) embeddings
    - Clamps n_neighbors for small datasets
    - Falls back to a linear layout when there are too few points to fit
    """

    def __init__(
        self,
        n_components: int = 2,
        n_neighbors: int = config.UMAP_N_NEIGHBORS,
        min_dist: float = config.UMAP_MIN_DIST,
        spread: float = config.UMAP_SPREAD,
        metric: str = config.UMAP_METRIC,
        random_state: Optional[int] = None
    ):
        """
        Initialize UMAP projector.

        Args:
            n_components: Output dimensions (2 or 3)
            n_neighbors: Number of neighbors for local structure (default: 15)
            min_dist: Minimum distance between embedded points (default: 0.1)
            spread: Effective scale of embedded points (default: 1.0)
            metric: Distance metric (default: "cosine")
            random_state: Optional seed; None keeps UMAP stochastic and parallel
        """
        self.n_components = n_components
        self.n_neighbors = n_neighbors
        self.min_dist = min_dist
        self.spread = spread
        self.metric = metric
        self.random_state = random_state

        self._model: Optional[umap.UMAP] = None

    def fit(self, vectors: np.ndarray) -> np.ndarray:
        """
        Fit UMAP on vectors and return projected coordinates.

        Args:
            vectors: Array of shape (n, dim)

        Returns:
            Array of shape (n, n_components)
        """
        n_items = len(vectors)
        if n_items == 0:
            return np.zeros((0, self.n_components), dtype=np.float32)
        if n_items == 1:
            return np.zeros((1, self.n_components), dtype=np.float32)
        if n_items <= self.n_components + 1:
            logger.info(
                f"Only {n_items} points; using a linear {self.n_components}D layout instead of UMAP"
            )
            return linear_layout(vectors, self.n_components)

        n_neighbors = min(self.n_neighbors, n_items - 1)
        # Spectral init needs more eigenvectors than tiny graphs can supply
        init = "spectral" if n_items > 2 * (self.n_components + 1) else "random"

        logger.info(f"Fitting UMAP ({self.n_components}D) on {n_items} embeddings...")

        self._model = umap.UMAP(
            n_components=self.n_components,
            n_neighbors=max(2, n_neighbors),
            min_dist=self.min_dist,
            spread=self.spread,
            metric=self.metric,
            init=init,
            random_state=self.random_state,
        )

        # Suppress spectral initialization warnings (common with large datasets)
        with warnings.catch_warnings():
            warnings.filterwarnings("ignore", message=".*Spectral initialisation failed.*")
            warnings.filterwarnings("ignore", message=".*n_jobs value.*")
            coords = self._model.fit_transform(vectors)

        return np.asarray(coords, dtype=np.float32)

    @property
    def is_fitted(self) -> bool:
        """Check if the model has been fitted."""
        return self._model is not None


def stack_vectors(vectors: Sequence[Sequence[float]]) -> np.ndarray:
    """
    Stack embedding vectors into a matrix.

    Raises:
        VectorLengthMismatchError: If the vectors differ in length
    """
    if len(vectors) == 0:
        return np.zeros((0, 0), dtype=np.float32)

    expected = len(vectors[0])
    offending = [i for i, v in enumerate(vectors) if len(v) != expected]
    if offending:
        raise VectorLengthMismatchError(expected, offending)

    return np.asarray(vectors, dtype=np.float32)


def pre_reduce(matrix: np.ndarray, n_components: int = config.PCA_COMPONENTS) -> np.ndarray:
    """
    Keep the top variance directions of the embeddings with PCA.

    Skipped when the vectors already have no more dimensions than requested.

    Args:
        matrix: Array of shape (n, dim)
        n_components: Target dimensionality

    Returns:
        Array of shape (n, min(n_components, n, dim))
    """
    n_items, n_features = matrix.shape
    target = min(n_components, n_items, n_features)
    if target >= n_features or target < 1:
        return matrix

    logger.info(f"Reducing {n_features} dimensions to {target} with PCA...")
    return PCA(n_components=target).fit_transform(matrix).astype(np.float32)


def linear_layout(matrix: np.ndarray, n_components: int) -> np.ndarray:
    """
    PCA layout zero-padded to n_components columns.

    Used when a dataset is too small for a manifold fit.
    """
    n_items, n_features = matrix.shape
    width = min(n_components, n_items, n_features)
    coords = np.zeros((n_items, n_components), dtype=np.float32)
    if width < 1 or n_items < 2:
        return coords
    coords[:, :width] = PCA(n_components=width).fit_transform(matrix)
    return coords


def reduce_embeddings(
    vectors: Sequence[Sequence[float]],
    projection_config: Optional[ProjectionConfig] = None
) -> Projection:
    """
    Project embeddings to 2D and 3D.

    Args:
        vectors: Embedding vectors, all the same length
        projection_config: Projection parameters (defaults from config)

    Returns:
        Projection with coordinates in input order

    Raises:
        VectorLengthMismatchError: If the vectors differ in length
    """
    cfg = projection_config or ProjectionConfig()
    matrix = stack_vectors(vectors)
    if len(matrix) == 0:
        return Projection(
            coords_2d=np.zeros((0, 2), dtype=np.float32),
            coords_3d=np.zeros((0, 3), dtype=np.float32),
        )

    reduced = pre_reduce(matrix, cfg.pca_components)

    coords = {}
    for n_components in (2, 3):
        projector = UMAPProjector(
            n_components=n_components,
            n_neighbors=cfg.n_neighbors,
            min_dist=cfg.min_dist,
            spread=cfg.spread,
            metric=cfg.metric,
            random_state=cfg.random_state,
        )
        coords[n_components] = projector.fit(reduced)

    return Projection(coords_2d=coords[2], coords_3d=coords[3])
